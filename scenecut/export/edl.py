"""
scenecut.export.edl - CMX 3600 EDL generator.

Generates Edit Decision List files for import into DaVinci Resolve,
Premiere Pro, and other NLEs. Stills have no source timecode, so every
event reads from 00:00:00:00 and the record side is laid back to back.
"""

from __future__ import annotations

from scenecut.export.manifest import ExportManifest
from scenecut.export.timecode import frames_to_timecode

REEL_NAME = "AX"
COMMENT_MAX_CHARS = 80
TITLE_MAX_CHARS = 50


def collapse_newlines(text: str) -> str:
    return text.replace("\r\n", " ").replace("\r", " ").replace("\n", " ")


def generate_edl(manifest: ExportManifest, project_name: str) -> str:
    """Generate a CMX 3600 EDL from an export manifest.

    Args:
        manifest: Export manifest built from the sequence
        project_name: Project name for the EDL title

    Returns:
        EDL content as string
    """
    fps = manifest.fps
    title = (project_name or "SCENECUT").upper()[:TITLE_MAX_CHARS]

    lines = [
        f"TITLE: {title}",
        "FCM: NON-DROP FRAME",
        "",
    ]

    src_in_tc = frames_to_timecode(0, fps)

    for i, (clip, rec_in, rec_out) in enumerate(manifest.frame_spans(), 1):
        src_out_tc = frames_to_timecode(clip.duration_frames, fps)
        rec_in_tc = frames_to_timecode(rec_in, fps)
        rec_out_tc = frames_to_timecode(rec_out, fps)

        lines.append(
            f"{i:03d}  {REEL_NAME:<8s} V     C        "
            f"{src_in_tc} {src_out_tc} {rec_in_tc} {rec_out_tc}"
        )
        lines.append(f"* FROM CLIP NAME: {clip.filename}")

        if clip.description:
            comment = collapse_newlines(clip.description)[:COMMENT_MAX_CHARS]
            lines.append(f"* COMMENT: {comment}")

        lines.append("")

    return "\n".join(lines) + "\n"
