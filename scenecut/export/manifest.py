"""
scenecut.export.manifest - Typed export manifest and its canonical encoder.

Exporters never read the sequence directly: build_manifest takes one
snapshot, fixes filenames and frame counts once, and every generator (EDL,
FCPXML, SRT, import script, pack) works from the same records.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from fractions import Fraction

from pydantic import BaseModel, ConfigDict, Field

from scenecut.export.naming import scene_filename
from scenecut.export.timecode import duration_to_frames, to_fraction
from scenecut.sequence.model import Sequence


class ManifestClip(BaseModel):
    """One scene as it appears in every export."""

    model_config = ConfigDict(populate_by_name=True)

    filename: str
    duration_sec: float = Field(alias="durationSec")
    duration_frames: int = Field(alias="durationFrames")
    name: str
    description: str = ""
    dialogue: str = ""
    is_placeholder: bool = Field(default=True, alias="isPlaceholder")

    scene_id: str = Field(default="", exclude=True)
    source_image: str | None = Field(default=None, exclude=True)

    @property
    def duration(self) -> Fraction:
        """Exact duration in seconds."""
        return to_fraction(self.duration_sec)


class ExportManifest(BaseModel):
    """Snapshot of a sequence in export terms."""

    model_config = ConfigDict(populate_by_name=True)

    timeline_name: str = Field(alias="timelineName")
    fps: int
    width: int
    height: int
    clips: list[ManifestClip] = Field(default_factory=list)

    def total_frames(self) -> int:
        return sum(clip.duration_frames for clip in self.clips)

    def frame_spans(self) -> Iterator[tuple[ManifestClip, int, int]]:
        """Yield (clip, record_in, record_out) in frames, back to back."""
        offset = 0
        for clip in self.clips:
            yield clip, offset, offset + clip.duration_frames
            offset += clip.duration_frames

    def second_spans(self) -> Iterator[tuple[ManifestClip, Fraction, Fraction]]:
        """Yield (clip, start, end) in exact seconds, back to back."""
        offset = Fraction(0)
        for clip in self.clips:
            yield clip, offset, offset + clip.duration
            offset += clip.duration


DEFAULT_TIMELINE_NAME = "Scenecut Timeline"


def timeline_name(project_name: str) -> str:
    """Name of the editor timeline built from a project, e.g. "Rainy Day Timeline"."""
    name = " ".join(project_name.split())
    return f"{name} Timeline" if name else DEFAULT_TIMELINE_NAME


def build_manifest(sequence: Sequence, timeline_name: str = DEFAULT_TIMELINE_NAME) -> ExportManifest:
    """Build the export manifest from a snapshot of the sequence."""
    snapshot = sequence.snapshot()
    fps = snapshot.settings.fps

    clips = [
        ManifestClip(
            filename=scene_filename(index, scene.title),
            duration_sec=scene.duration,
            duration_frames=duration_to_frames(scene.duration, fps),
            name=scene.title,
            description=scene.description,
            dialogue=scene.dialogue,
            is_placeholder=scene.image is None,
            scene_id=scene.id,
            source_image=scene.image,
        )
        for index, scene in enumerate(snapshot.scenes)
    ]

    return ExportManifest(
        timeline_name=timeline_name,
        fps=fps,
        width=snapshot.settings.width,
        height=snapshot.settings.height,
        clips=clips,
    )


def encode_manifest(manifest: ExportManifest, indent: int = 2) -> str:
    """Serialize a manifest to JSON. The only encoder exports use."""
    return json.dumps(manifest.model_dump(by_alias=True), indent=indent, ensure_ascii=False)
