"""
scenecut.export - Timeline export for NLEs.

Supports:
- CMX 3600 EDL (universal)
- FCPXML 1.9 (DaVinci Resolve, Final Cut Pro)
- SRT captions
- DaVinci Resolve console import script
- Zipped export pack bundling all of the above with the stills
"""

from __future__ import annotations

from scenecut.export.edl import generate_edl
from scenecut.export.fcpxml import generate_fcpxml
from scenecut.export.manifest import (
    ExportManifest,
    ManifestClip,
    build_manifest,
    encode_manifest,
    timeline_name,
)
from scenecut.export.package import build_export_pack
from scenecut.export.resolve_script import generate_resolve_script
from scenecut.export.srt import generate_srt

__all__ = [
    "ExportManifest",
    "ManifestClip",
    "build_export_pack",
    "build_manifest",
    "encode_manifest",
    "generate_edl",
    "generate_fcpxml",
    "generate_resolve_script",
    "generate_srt",
    "timeline_name",
]
