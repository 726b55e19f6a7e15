"""
scenecut.export.resolve_script - DaVinci Resolve console import script.

Renders a self-contained Python script that rebuilds the timeline inside
Resolve: it imports the exported stills, creates a bin and a timeline,
appends each clip at its frame length and imports the SRT captions.
"""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from scenecut import __version__
from scenecut.export.manifest import ExportManifest, encode_manifest
from scenecut.export.naming import IMAGES_DIRNAME, PLACEHOLDER_FILENAME
from scenecut.export.srt import SRT_FILENAME

RESOLVE_SCRIPT_FILENAME = "import_resolve.py"
TEMPLATE_NAME = "resolve_import.py.j2"


class ScriptGenerator:
    """Jinja2 renderer for editor automation scripts."""

    def __init__(self, template_dir: Path | None = None):
        if template_dir is None:
            template_dir = Path(__file__).parent / "templates"

        self.env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=False,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

    def render(self, template_name: str, **variables) -> str:
        template = self.env.get_template(template_name)
        return template.render(**variables)


def generate_resolve_script(
    manifest: ExportManifest,
    project_name: str,
    generator: ScriptGenerator | None = None,
) -> str:
    """Generate the Resolve import script for a manifest.

    The manifest is embedded as a JSON string literal and parsed by the
    script at run time, so titles and descriptions never need escaping
    beyond what repr() provides.

    Args:
        manifest: Export manifest built from the sequence
        project_name: Used for the media pool bin name
        generator: Optional renderer (custom template directory)

    Returns:
        Python source as string
    """
    generator = generator or ScriptGenerator()
    name = " ".join((project_name or "Scenecut").split())

    return generator.render(
        TEMPLATE_NAME,
        project_name=name,
        project_name_literal=repr(name),
        version=__version__,
        fps=int(manifest.fps),
        images_dirname_literal=repr(IMAGES_DIRNAME),
        placeholder_literal=repr(PLACEHOLDER_FILENAME),
        srt_filename_literal=repr(SRT_FILENAME),
        manifest_literal=repr(encode_manifest(manifest)),
    )
