"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from PIL import Image

from scenecut.project import Project
from scenecut.sequence import AssetLibrary, Sequence, TimelineSettings


def make_png(color: tuple[int, int, int] = (200, 30, 30), size: tuple[int, int] = (8, 8)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    """A tiny valid PNG."""
    return make_png()


@pytest.fixture
def tmp_project(tmp_path: Path) -> Path:
    """Create a temporary project directory with config and empty storyboard."""
    project_dir = tmp_path / "test_project"
    Project(project_dir).create(preset="cinema")
    return project_dir


@pytest.fixture
def sample_config_dict() -> dict:
    """Return a sample configuration dictionary."""
    return {
        "project_name": "test-project",
        "preset": "cinema",
        "llm_backend": "gemini",
        "llm_model": "gemini-2.5-flash",
        "image_backend": "gemini",
        "image_model": "gemini-2.5-flash-image",
        "image_size_pro": "2K",
        "srt_offset_seconds": 3600,
        "scene_defaults": {
            "duration": 3.0,
            "quality": "standard",
            "shot_type": "wide shot",
        },
    }


@pytest.fixture
def sample_sequence() -> Sequence:
    """Three scenes of 4s, 2.5s and 6s at 24fps, 1920x1080."""
    sequence = Sequence(settings=TimelineSettings(fps=24, width=1920, height=1080))
    sequence.add_scene(
        title="Kitchen",
        description="Morning light over a cluttered kitchen table",
        duration=4,
        dialogue="Coffee?",
    )
    sequence.add_scene(
        title="Hallway",
        description="She walks down a narrow hallway",
        duration=2.5,
    )
    sequence.add_scene(
        title="Street",
        description="Wide shot of a rainy street at dusk",
        duration=6,
    )
    return sequence


@pytest.fixture
def empty_library() -> AssetLibrary:
    return AssetLibrary()
