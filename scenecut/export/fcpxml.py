"""
scenecut.export.fcpxml - FCPXML 1.9 generator.

Generates Final Cut Pro XML for import into DaVinci Resolve and Final Cut.
Asset sources are relative (./images/<file>) on purpose: the editor marks
them offline and prompts for relinking instead of failing on a foreign
absolute path.
"""

from __future__ import annotations

from fractions import Fraction
from xml.sax.saxutils import escape, quoteattr

from scenecut.export.manifest import ExportManifest
from scenecut.export.naming import IMAGES_DIRNAME

FCPXML_VERSION = "1.9"
FORMAT_ID = "r1"


def seconds_to_fcpxml_time(seconds: Fraction) -> str:
    """Format exact seconds as FCPXML rational time.

    Returns:
        Time string like "4s" or "5/2s"
    """
    seconds = Fraction(seconds)
    if seconds.denominator == 1:
        return f"{seconds.numerator}s"
    return f"{seconds.numerator}/{seconds.denominator}s"


def get_fcpxml_format(fps: int, width: int = 1920, height: int = 1080) -> dict[str, str]:
    """Get FCPXML format attributes for a given frame rate and frame size."""
    return {
        "id": FORMAT_ID,
        "name": f"FFVideoFormat{width}x{height}p{fps}",
        "frameDuration": f"100/{fps * 100}s",
        "width": str(width),
        "height": str(height),
        "colorSpace": "1-1-1 (Rec. 709)",
    }


def frames_to_fcpxml_time(frames: int, fps: int) -> str:
    """Rational time for a whole number of frames, so clips stay on frame boundaries."""
    return seconds_to_fcpxml_time(Fraction(frames, fps))


def asset_src(filename: str) -> str:
    return f"./{IMAGES_DIRNAME}/{filename}"


def generate_fcpxml(manifest: ExportManifest, project_name: str) -> str:
    """Generate FCPXML 1.9 from an export manifest.

    Args:
        manifest: Export manifest built from the sequence
        project_name: Project name

    Returns:
        FCPXML content as string
    """
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        "<!DOCTYPE fcpxml>",
        f'<fcpxml version="{FCPXML_VERSION}">',
        "    <resources>",
    ]

    format_attrs = get_fcpxml_format(manifest.fps, manifest.width, manifest.height)
    format_line = "        <format"
    for key, value in format_attrs.items():
        format_line += f" {key}={quoteattr(value)}"
    format_line += "/>"
    lines.append(format_line)

    fps = manifest.fps
    asset_ids = []
    for i, clip in enumerate(manifest.clips, 1):
        asset_id = f"a{i}"
        asset_ids.append(asset_id)
        lines.append(
            f'        <asset id="{asset_id}" name={quoteattr(clip.filename)} '
            f'uid="{asset_id}" src={quoteattr(asset_src(clip.filename))} '
            f'start="0s" duration="{frames_to_fcpxml_time(clip.duration_frames, fps)}" '
            f'hasVideo="1" format="{FORMAT_ID}"/>'
        )

    total_duration = frames_to_fcpxml_time(manifest.total_frames(), fps)

    lines.extend(
        [
            "    </resources>",
            "    <library>",
            '        <event name="Scenecut Export">',
            f"            <project name={quoteattr(project_name)}>",
            f'                <sequence format="{FORMAT_ID}" duration="{total_duration}" '
            'tcStart="0s" tcFormat="NDF" audioLayout="stereo" audioRate="48k">',
            "                    <spine>",
        ]
    )

    for asset_id, (clip, record_in, _record_out) in zip(asset_ids, manifest.frame_spans()):
        lines.append(
            f"                        <asset-clip name={quoteattr(clip.name)} "
            f'ref="{asset_id}" '
            f'offset="{frames_to_fcpxml_time(record_in, fps)}" '
            f'start="0s" '
            f'duration="{frames_to_fcpxml_time(clip.duration_frames, fps)}" '
            f'lane="0" format="{FORMAT_ID}">'
        )
        lines.append(f"                            <note>{escape(clip.description)}</note>")
        lines.append("                        </asset-clip>")

    lines.extend(
        [
            "                    </spine>",
            "                </sequence>",
            "            </project>",
            "        </event>",
            "    </library>",
            "</fcpxml>",
        ]
    )

    return "\n".join(lines) + "\n"
