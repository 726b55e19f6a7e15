"""
scenecut.export.package - Zipped export pack for editors.

Bundles the scene stills, a black placeholder, every timeline format, the
Resolve import script and the manifest into one archive that can be unzipped
anywhere: all paths inside are relative to the archive root.
"""

from __future__ import annotations

import io
import zipfile
from dataclasses import dataclass, field
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from scenecut.config import ScenecutConfig
from scenecut.exceptions import ExportError, MediaError
from scenecut.export.edl import generate_edl
from scenecut.export.fcpxml import generate_fcpxml
from scenecut.export.manifest import (
    ExportManifest,
    build_manifest,
    encode_manifest,
    timeline_name,
)
from scenecut.export.naming import IMAGES_DIRNAME, PLACEHOLDER_FILENAME, slugify_title
from scenecut.export.resolve_script import RESOLVE_SCRIPT_FILENAME, generate_resolve_script
from scenecut.export.srt import SRT_FILENAME, generate_srt
from scenecut.io import write_bytes
from scenecut.logging import logger
from scenecut.media import MediaStore
from scenecut.sequence.model import Sequence

MANIFEST_FILENAME = "project.json"
README_FILENAME = "README_DAVINCI.txt"

README_TEXT = """\
DAVINCI RESOLVE IMPORT
----------------------
1. Unzip this folder.
2. Open DaVinci Resolve and the project you want the timeline in.
3. Open Workspace > Console and select "Py3".
4. Paste the contents of '{script}' into the console and press Enter,
   or run it from Workspace > Scripts after copying it into your
   Resolve scripts folder.
5. If the script cannot find the '{images}' folder next to itself, a
   folder dialog opens. Select the '{images}' folder from this pack.

Scenes without an image are laid out with '{placeholder}'.
Captions are imported from '{srt}' when present.

Other editors: import '{edl}' (CMX 3600) or '{xml}' (FCPXML 1.9) and
relink the media to the '{images}' folder when prompted.
"""


@dataclass
class PackResult:
    """What went into an export pack."""

    path: Path
    files: list[str] = field(default_factory=list)
    placeholders: int = 0


def export_basename(project_name: str) -> str:
    """Filesystem-safe stem for the timeline files in a pack."""
    stem = slugify_title(project_name.strip()).strip("_")
    return stem or "scenecut"


def placeholder_png(width: int, height: int) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), (0, 0, 0)).save(buf, format="PNG")
    return buf.getvalue()


def as_png(data: bytes, label: str) -> bytes:
    """Return PNG bytes, converting other image formats."""
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return data
    try:
        with Image.open(io.BytesIO(data)) as img:
            buf = io.BytesIO()
            img.save(buf, format="PNG")
            return buf.getvalue()
    except (UnidentifiedImageError, OSError) as e:
        raise ExportError(f"Image for {label} is not a readable image: {e}") from e


def render_readme(base: str) -> str:
    return README_TEXT.format(
        script=RESOLVE_SCRIPT_FILENAME,
        images=IMAGES_DIRNAME,
        placeholder=PLACEHOLDER_FILENAME,
        srt=SRT_FILENAME,
        edl=f"{base}.edl",
        xml=f"{base}.fcpxml",
    )


def pack_entries(
    manifest: ExportManifest,
    store: MediaStore,
    project_name: str,
    config: ScenecutConfig | None = None,
) -> dict[str, bytes]:
    """Build every archive member in memory, keyed by archive path."""
    offset = config.srt_offset_seconds if config is not None else 3600
    base = export_basename(project_name)

    entries: dict[str, bytes] = {
        f"{IMAGES_DIRNAME}/{PLACEHOLDER_FILENAME}": placeholder_png(manifest.width, manifest.height),
    }

    for clip in manifest.clips:
        if clip.is_placeholder or clip.source_image is None:
            continue
        try:
            data = store.read(clip.source_image)
        except MediaError as e:
            raise ExportError(f"Cannot export image for '{clip.name}': {e}") from e
        entries[f"{IMAGES_DIRNAME}/{clip.filename}"] = as_png(data, clip.name)

    entries[f"{base}.edl"] = generate_edl(manifest, project_name).encode("utf-8")
    entries[f"{base}.fcpxml"] = generate_fcpxml(manifest, project_name).encode("utf-8")
    entries[SRT_FILENAME] = generate_srt(manifest, offset).encode("utf-8")
    entries[RESOLVE_SCRIPT_FILENAME] = generate_resolve_script(manifest, project_name).encode("utf-8")
    entries[MANIFEST_FILENAME] = (encode_manifest(manifest) + "\n").encode("utf-8")
    entries[README_FILENAME] = render_readme(base).encode("utf-8")
    return entries


def build_export_pack(
    sequence: Sequence,
    store: MediaStore,
    output_path: Path,
    project_name: str,
    config: ScenecutConfig | None = None,
) -> PackResult:
    """Write the export pack zip for a sequence.

    Works from a snapshot, so the in-memory sequence is never modified even
    when an image turns out to be unreadable half way through.

    Args:
        sequence: Sequence to export
        store: Media store that resolves image references
        output_path: Zip file to write
        project_name: Used for the timeline file names and titles
        config: Project config (SRT offset)

    Returns:
        PackResult listing the archive members

    Raises:
        ExportError: If an image cannot be read or the archive cannot be written
    """
    manifest = build_manifest(sequence, timeline_name(project_name))
    entries = pack_entries(manifest, store, project_name, config)

    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in entries.items():
            zf.writestr(name, data)

    try:
        write_bytes(output_path, buf.getvalue())
    except OSError as e:
        raise ExportError(f"Cannot write export pack {output_path}: {e}") from e

    placeholders = sum(1 for clip in manifest.clips if clip.is_placeholder)
    logger.info(f"Wrote export pack {output_path} ({len(entries)} files, {placeholders} placeholders)")
    return PackResult(path=output_path, files=list(entries), placeholders=placeholders)
