"""
scenecut.sequence - Storyboard sequence model.

Ordered scenes, timeline settings and the asset library they reference.
"""

from __future__ import annotations

from scenecut.sequence.assets import Asset, AssetLibrary
from scenecut.sequence.model import (
    GenerationResult,
    Scene,
    Sequence,
    TimelineSettings,
    derive_aspect_ratio,
)

__all__ = [
    "Asset",
    "AssetLibrary",
    "GenerationResult",
    "Scene",
    "Sequence",
    "TimelineSettings",
    "derive_aspect_ratio",
]
