"""
scenecut.sequence.model - Scene records and the ordered sequence.

The Sequence is the shared substrate for everything else: its order is the
edit order, its settings drive every exporter, and every mutation is a
single synchronous call that leaves the invariants intact. Operations on an
unknown scene id are no-ops because ids can go stale between a user action
and the async callback that refers to it.
"""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, PrivateAttr, ValidationError, field_validator

from scenecut.config import SceneDefaults
from scenecut.exceptions import SequenceError
from scenecut.logging import logger

if TYPE_CHECKING:
    from scenecut.sequence.assets import AssetLibrary

MIN_DURATION = 0.5


def new_scene_id() -> str:
    return uuid.uuid4().hex[:12]


def derive_aspect_ratio(width: int, height: int) -> str:
    """Vertical frames (height > width) map to 9:16, everything else to 16:9."""
    return "9:16" if height > width else "16:9"


def clamp_duration(seconds: float) -> float:
    return max(MIN_DURATION, float(seconds))


class Scene(BaseModel):
    """A single storyboard unit with its own duration and image."""

    id: str = Field(default_factory=new_scene_id)
    title: str = "Scene"
    description: str = ""
    duration: float = 4.0
    image: str | None = None
    image_history: list[str] = Field(default_factory=list)
    shot_type: str = ""
    aspect_ratio: str = "16:9"
    quality: str = "standard"
    dialogue: str = ""
    speech_prompt: str = ""
    music_mood: str = ""
    style_prompt: str = ""
    enhanced_prompt: str = ""
    assigned_asset_ids: list[str] = Field(default_factory=list)

    model_config = {"validate_assignment": True}

    @field_validator("duration")
    @classmethod
    def validate_duration(cls, v: float) -> float:
        if v != v or v in (float("inf"), float("-inf")):
            raise ValueError("duration must be finite")
        return clamp_duration(v)

    @field_validator("quality")
    @classmethod
    def validate_quality(cls, v: str) -> str:
        valid = {"standard", "high"}
        if v not in valid:
            raise ValueError(f"quality must be one of: {valid}")
        return v


class TimelineSettings(BaseModel):
    """Sequence-wide frame rate and frame dimensions."""

    fps: int = Field(default=24, gt=0)
    width: int = Field(default=1920, gt=0)
    height: int = Field(default=1080, gt=0)

    @property
    def is_vertical(self) -> bool:
        return self.height > self.width

    @property
    def aspect_ratio(self) -> str:
        return derive_aspect_ratio(self.width, self.height)


@dataclass(frozen=True)
class GenerationResult:
    """An async generation outcome addressed to a scene by id."""

    scene_id: str
    image: str
    prompt: str = ""


EDITABLE_FIELDS = {
    "title",
    "description",
    "duration",
    "shot_type",
    "aspect_ratio",
    "quality",
    "dialogue",
    "speech_prompt",
    "music_mood",
    "style_prompt",
    "enhanced_prompt",
}


class Sequence(BaseModel):
    """Ordered scenes plus timeline settings and the current selection."""

    scenes: list[Scene] = Field(default_factory=list)
    settings: TimelineSettings = Field(default_factory=TimelineSettings)
    active_scene_id: str | None = None
    scene_defaults: SceneDefaults = Field(default_factory=SceneDefaults, exclude=True)

    _processing: dict[str, int] = PrivateAttr(default_factory=dict)

    # Lookup

    def index_of(self, scene_id: str) -> int | None:
        for i, scene in enumerate(self.scenes):
            if scene.id == scene_id:
                return i
        return None

    def get(self, scene_id: str) -> Scene | None:
        idx = self.index_of(scene_id)
        return self.scenes[idx] if idx is not None else None

    def previous(self, scene_id: str) -> Scene | None:
        """Return the scene immediately before scene_id in edit order."""
        idx = self.index_of(scene_id)
        if idx is None or idx == 0:
            return None
        return self.scenes[idx - 1]

    @property
    def active_scene(self) -> Scene | None:
        return self.get(self.active_scene_id) if self.active_scene_id else None

    def __len__(self) -> int:
        return len(self.scenes)

    def total_duration(self) -> float:
        return sum(scene.duration for scene in self.scenes)

    def _missing(self, op: str, scene_id: str) -> None:
        logger.debug(f"{op}: no scene with id {scene_id}, ignoring")

    # Structure

    def add_scene(self, **fields: Any) -> Scene:
        """Create a scene from the configured defaults, append and select it."""
        values: dict[str, Any] = {
            "title": f"Scene {len(self.scenes) + 1}",
            "duration": self.scene_defaults.duration,
            "quality": self.scene_defaults.quality,
            "shot_type": self.scene_defaults.shot_type,
            "aspect_ratio": self.settings.aspect_ratio,
        }
        values.update({k: v for k, v in fields.items() if v is not None})
        if not str(values.get("title", "")).strip():
            values["title"] = f"Scene {len(self.scenes) + 1}"
        scene = Scene(**values)
        self.append(scene)
        self.active_scene_id = scene.id
        return scene

    def append(self, scene: Scene) -> None:
        if self.index_of(scene.id) is not None:
            raise SequenceError(f"Scene id already in sequence: {scene.id}")
        self.scenes.append(scene)

    def remove(self, scene_id: str) -> Scene | None:
        """Delete a scene.

        Removing the active scene selects the previous scene, else the next,
        else nothing. Sibling scenes are untouched.
        """
        idx = self.index_of(scene_id)
        if idx is None:
            self._missing("remove", scene_id)
            return None

        if self.active_scene_id == scene_id:
            if idx > 0:
                self.active_scene_id = self.scenes[idx - 1].id
            elif idx + 1 < len(self.scenes):
                self.active_scene_id = self.scenes[idx + 1].id
            else:
                self.active_scene_id = None

        self._processing.pop(scene_id, None)
        return self.scenes.pop(idx)

    def reorder(self, from_index: int, to_index: int) -> bool:
        """Move the scene at from_index so it ends up at to_index."""
        count = len(self.scenes)
        if not (0 <= from_index < count and 0 <= to_index < count):
            logger.debug(f"reorder: index out of range ({from_index} -> {to_index})")
            return False
        if from_index == to_index:
            return False
        scene = self.scenes.pop(from_index)
        self.scenes.insert(to_index, scene)
        return True

    def select(self, scene_id: str | None) -> bool:
        if scene_id is not None and self.index_of(scene_id) is None:
            self._missing("select", scene_id)
            return False
        self.active_scene_id = scene_id
        return True

    # Field edits

    def resize_duration(self, scene_id: str, seconds: float) -> float | None:
        scene = self.get(scene_id)
        if scene is None:
            self._missing("resize_duration", scene_id)
            return None
        try:
            scene.duration = seconds
        except ValidationError as e:
            raise SequenceError(f"Invalid duration: {seconds}") from e
        return scene.duration

    def update_scene(self, scene_id: str, **fields: Any) -> Scene | None:
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise SequenceError(f"Not editable: {', '.join(sorted(unknown))}")

        idx = self.index_of(scene_id)
        if idx is None:
            self._missing("update_scene", scene_id)
            return None

        scene = self.scenes[idx]
        updated = scene.model_dump()
        for key, value in fields.items():
            if key == "title" and not str(value).strip():
                value = f"Scene {idx + 1}"
            updated[key] = value
        try:
            self.scenes[idx] = Scene(**updated)
        except ValidationError as e:
            raise SequenceError(f"Invalid scene fields: {e}") from e
        return self.scenes[idx]

    def assign_asset(self, scene_id: str, asset_id: str) -> bool:
        scene = self.get(scene_id)
        if scene is None:
            self._missing("assign_asset", scene_id)
            return False
        if asset_id in scene.assigned_asset_ids:
            return False
        scene.assigned_asset_ids.append(asset_id)
        return True

    def unassign_asset(self, scene_id: str, asset_id: str) -> bool:
        scene = self.get(scene_id)
        if scene is None or asset_id not in scene.assigned_asset_ids:
            return False
        scene.assigned_asset_ids.remove(asset_id)
        return True

    # Images

    def set_image(self, scene_id: str, image: str) -> Scene | None:
        """Make image current and append it to the scene's history."""
        scene = self.get(scene_id)
        if scene is None:
            self._missing("set_image", scene_id)
            return None
        if scene.image is not None and scene.image not in scene.image_history:
            scene.image_history.append(scene.image)
        scene.image_history.append(image)
        scene.image = image
        return scene

    def clear_image(self, scene_id: str) -> bool:
        scene = self.get(scene_id)
        if scene is None or scene.image is None:
            return False
        scene.image = None
        return True

    def step_history(self, scene_id: str, direction: int) -> str | None:
        """Cycle the current image through history; direction is -1 or +1."""
        scene = self.get(scene_id)
        if scene is None or len(scene.image_history) <= 1:
            return None
        history = scene.image_history
        try:
            current = history.index(scene.image) if scene.image else len(history) - 1
        except ValueError:
            current = len(history) - 1
        scene.image = history[(current + (1 if direction > 0 else -1)) % len(history)]
        return scene.image

    # Settings

    def update_settings(
        self,
        fps: int | None = None,
        width: int | None = None,
        height: int | None = None,
        library: AssetLibrary | None = None,
    ) -> TimelineSettings:
        """Change timeline settings and cascade the derived aspect ratio.

        The new settings are validated before anything is touched, so the
        cascade to scenes and assets is all or nothing.
        """
        merged = self.settings.model_dump()
        changes = {"fps": fps, "width": width, "height": height}
        merged.update({k: v for k, v in changes.items() if v is not None})
        try:
            settings = TimelineSettings(**merged)
        except ValidationError as e:
            raise SequenceError(f"Invalid timeline settings: {e}") from e

        ratio = settings.aspect_ratio
        self.settings = settings
        for scene in self.scenes:
            scene.aspect_ratio = ratio
        if library is not None:
            library.apply_aspect_ratio(ratio)
        return settings

    # Async generation bookkeeping

    def begin_processing(self, scene_id: str) -> None:
        self._processing[scene_id] = self._processing.get(scene_id, 0) + 1

    def end_processing(self, scene_id: str) -> None:
        remaining = self._processing.get(scene_id, 0) - 1
        if remaining > 0:
            self._processing[scene_id] = remaining
        else:
            self._processing.pop(scene_id, None)

    def is_processing(self, scene_id: str) -> bool:
        return self._processing.get(scene_id, 0) > 0

    def apply(self, result: GenerationResult) -> bool:
        """Apply a generation result if its scene still exists.

        This is the only path by which async results reach the model.
        """
        if self.set_image(result.scene_id, result.image) is None:
            logger.info(f"Discarding generation result for deleted scene {result.scene_id}")
            return False
        return True

    def snapshot(self) -> Sequence:
        """Return a deep copy for exporters to read."""
        return copy.deepcopy(self)
