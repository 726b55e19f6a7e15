"""
scenecut.export.srt - SRT caption generator.

One caption per scene, timed to the scene's slot on the timeline. Captions
start an hour in by default, matching the 01:00:00:00 timeline start most
editors use and keeping the first cue off literal zero.
"""

from __future__ import annotations

from scenecut.export.edl import collapse_newlines
from scenecut.export.manifest import ExportManifest
from scenecut.export.timecode import Seconds, seconds_to_srt_time

SRT_START_OFFSET_SECONDS = 3600
SRT_FILENAME = "timeline_captions.srt"


def caption_text(dialogue: str, description: str) -> str:
    """Dialogue if present, else description, else empty; single line."""
    return collapse_newlines(dialogue or description or "")


def generate_srt(manifest: ExportManifest, offset_seconds: Seconds = SRT_START_OFFSET_SECONDS) -> str:
    """Generate SRT captions from an export manifest.

    Args:
        manifest: Export manifest built from the sequence
        offset_seconds: Fixed offset added to every timestamp

    Returns:
        SRT content as string (empty for an empty sequence)
    """
    blocks = []
    for i, (clip, start, end) in enumerate(manifest.second_spans(), 1):
        start_tc = seconds_to_srt_time(start, offset_seconds)
        end_tc = seconds_to_srt_time(end, offset_seconds)
        text = caption_text(clip.dialogue, clip.description)
        blocks.append(f"{i}\n{start_tc} --> {end_tc}\n{text}\n\n")

    return "".join(blocks)
