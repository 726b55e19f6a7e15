"""
scenecut.config - YAML config loading, preset merging, validation.

Handles loading scenecut.yaml from the project directory, applying format
preset defaults, and validating all parameters. Scene defaults live here
rather than in the sequence model so the model has no hidden environment.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from scenecut.exceptions import ConfigError

CONFIG_FILENAME = "scenecut.yaml"

IMAGE_MODEL_FLASH = "gemini-2.5-flash-image"
IMAGE_MODEL_PRO = "gemini-3-pro-image-preview"

FPS_OPTIONS = (24, 25, 30, 50, 60)
ASPECT_RATIOS = ("16:9", "9:16", "4:3", "3:4", "1:1")


class SceneDefaults(BaseModel):
    """Values given to every newly created scene."""

    duration: float = Field(default=4.0, ge=0.5)
    quality: str = "standard"
    shot_type: str = ""

    @field_validator("quality")
    @classmethod
    def validate_quality(cls, v: str) -> str:
        valid = {"standard", "high"}
        if v not in valid:
            raise ValueError(f"quality must be one of: {valid}")
        return v


class ScenecutConfig(BaseModel):
    """Resolved configuration for a Scenecut project."""

    project_name: str = "untitled"
    preset: str = "cinema"

    fps: int = Field(default=24, gt=0)
    width: int = Field(default=1920, gt=0)
    height: int = Field(default=1080, gt=0)

    scene_defaults: SceneDefaults = Field(default_factory=SceneDefaults)

    image_backend: str = "gemini"
    image_model: str = IMAGE_MODEL_FLASH
    image_model_pro: str = IMAGE_MODEL_PRO
    image_size_pro: str = "4K"
    image_timeout: int = Field(default=120, gt=0)
    image_max_retries: int = Field(default=3, ge=1)

    llm_backend: str = "gemini"
    llm_model: str = "gemini-2.5-flash"

    srt_offset_seconds: float = Field(default=3600.0, ge=0.0)

    config_path: Path | None = None

    @field_validator("image_backend")
    @classmethod
    def validate_image_backend(cls, v: str) -> str:
        valid = {"gemini"}
        if v not in valid:
            raise ValueError(f"image_backend must be one of: {valid}")
        return v

    @field_validator("llm_backend")
    @classmethod
    def validate_llm_backend(cls, v: str) -> str:
        valid = {"ollama", "lmstudio", "claude", "openai", "gemini"}
        if v not in valid:
            raise ValueError(f"llm_backend must be one of: {valid}")
        return v

    @field_validator("image_size_pro")
    @classmethod
    def validate_image_size(cls, v: str) -> str:
        valid = {"1K", "2K", "4K"}
        if v not in valid:
            raise ValueError(f"image_size_pro must be one of: {valid}")
        return v

    @property
    def aspect_ratio(self) -> str:
        return "9:16" if self.height > self.width else "16:9"


BUILTIN_PRESETS: dict[str, dict[str, Any]] = {
    "cinema": {"fps": 24, "width": 1920, "height": 1080},
    "uhd": {"fps": 24, "width": 3840, "height": 2160},
    "vertical": {"fps": 30, "width": 1080, "height": 1920},
    "square": {"fps": 30, "width": 1080, "height": 1080},
    "dci": {"fps": 24, "width": 4096, "height": 2160},
}


def load_preset(name: str, presets_dir: Path | None = None) -> dict[str, Any]:
    """Load a format preset by name, checking custom presets first."""
    if presets_dir and presets_dir.exists():
        preset_file = presets_dir / f"{name}.yaml"
        if preset_file.exists():
            with open(preset_file) as f:
                return yaml.safe_load(f) or {}
    if name in BUILTIN_PRESETS:
        return BUILTIN_PRESETS[name].copy()
    raise ConfigError(f"Unknown preset: {name}")


def merge_config(project_config: dict[str, Any], preset: dict[str, Any]) -> dict[str, Any]:
    """Merge project config with preset defaults. Project config takes precedence."""
    merged = preset.copy()
    for key, value in project_config.items():
        if key == "scene_defaults" and isinstance(value, dict):
            merged["scene_defaults"] = {**merged.get("scene_defaults", {}), **value}
        elif value is not None:
            merged[key] = value
    return merged


def load_config(project_dir: Path) -> ScenecutConfig:
    """Load and validate configuration from a project directory."""
    config_file = project_dir / CONFIG_FILENAME
    if not config_file.exists():
        raise FileNotFoundError(f"No {CONFIG_FILENAME} found in {project_dir}")

    with open(config_file) as f:
        raw_config = yaml.safe_load(f) or {}

    preset_name = raw_config.get("preset", "cinema")
    presets_dir = project_dir / "presets"
    preset = load_preset(preset_name, presets_dir if presets_dir.exists() else None)

    merged = merge_config(raw_config, preset)
    merged["config_path"] = config_file

    try:
        return ScenecutConfig(**merged)
    except ValidationError as e:
        raise ConfigError(f"Invalid {CONFIG_FILENAME}: {e}") from e


def create_default_config(
    project_name: str, preset: str = "cinema", presets_dir: Path | None = None
) -> dict[str, Any]:
    """Create a default config for a new project.

    Raises:
        ConfigError: If the preset is unknown
    """
    defaults: dict[str, Any] = {
        "project_name": project_name,
        "preset": preset,
        "image_backend": "gemini",
        "image_model": IMAGE_MODEL_FLASH,
        "scene_defaults": SceneDefaults().model_dump(),
    }
    return merge_config(defaults, load_preset(preset, presets_dir))


def write_config(config: dict[str, Any], path: Path) -> None:
    """Write configuration to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)
