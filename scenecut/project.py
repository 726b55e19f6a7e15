"""
scenecut.project - Project directory management.

Handles project creation, directory structure, and storyboard persistence.
The storyboard file holds the sequence (scenes, settings, selection) and the
asset library; image bytes live in the media store next to it.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from scenecut.config import (
    CONFIG_FILENAME,
    ScenecutConfig,
    create_default_config,
    load_config,
    write_config,
)
from scenecut.exceptions import ConfigError, ProjectError
from scenecut.io import read_json, write_json
from scenecut.media import MediaStore
from scenecut.sequence.assets import AssetLibrary
from scenecut.sequence.model import Sequence, TimelineSettings

STORYBOARD_FILENAME = "storyboard.json"


class Project:
    """Represents a Scenecut project directory."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.config_path = path / CONFIG_FILENAME
        self.storyboard_path = path / STORYBOARD_FILENAME
        self.media_store = MediaStore(path)
        self.export_dir = path / "exports"
        self.prompts_dir = path / "prompts"
        self.presets_dir = path / "presets"

    @property
    def media_dir(self) -> Path:
        return self.media_store.media_dir

    def exists(self) -> bool:
        return self.config_path.exists() and self.storyboard_path.exists()

    def create(self, preset: str = "cinema") -> None:
        """Create the project directory structure."""
        self.path.mkdir(parents=True, exist_ok=True)
        self.media_dir.mkdir(exist_ok=True)
        self.export_dir.mkdir(exist_ok=True)
        self.prompts_dir.mkdir(exist_ok=True)
        self.presets_dir.mkdir(exist_ok=True)

        config = create_default_config(self.path.name, preset, self.presets_dir)
        try:
            resolved = ScenecutConfig(**config)
        except ValidationError as e:
            raise ConfigError(f"Invalid preset '{preset}': {e}") from e
        write_config(config, self.config_path)

        sequence = Sequence(
            settings=TimelineSettings(fps=resolved.fps, width=resolved.width, height=resolved.height),
            scene_defaults=resolved.scene_defaults,
        )
        self.save_storyboard(sequence, AssetLibrary(), created=datetime.now())

    def load_config(self) -> ScenecutConfig:
        return load_config(self.path)

    def load_storyboard(self, config: ScenecutConfig | None = None) -> tuple[Sequence, AssetLibrary]:
        """Load the sequence and asset library.

        Raises:
            FileNotFoundError: If the storyboard doesn't exist
            ProjectError: If the storyboard is malformed
        """
        if not self.storyboard_path.exists():
            raise FileNotFoundError(f"Storyboard not found: {self.storyboard_path}")

        try:
            data = read_json(self.storyboard_path)
            sequence = Sequence.model_validate(data.get("sequence", {}))
            library = AssetLibrary(assets=data.get("assets", []))
        except (json.JSONDecodeError, ValidationError) as e:
            raise ProjectError(f"Invalid {STORYBOARD_FILENAME}: {e}") from e

        if config is not None:
            sequence.scene_defaults = config.scene_defaults
        return sequence, library

    def save_storyboard(
        self,
        sequence: Sequence,
        library: AssetLibrary,
        created: datetime | None = None,
    ) -> None:
        """Save the sequence and asset library."""
        data: dict[str, Any] = {}
        if self.storyboard_path.exists():
            data = read_json(self.storyboard_path)

        data["project_name"] = data.get("project_name", self.path.name)
        if created is not None:
            data["created"] = created.isoformat(timespec="seconds")
        data["updated"] = datetime.now().isoformat(timespec="seconds")
        data["sequence"] = sequence.model_dump(mode="json")
        data["assets"] = library.model_dump(mode="json")["assets"]
        write_json(self.storyboard_path, data)
