"""
scenecut.export.naming - Exported media filename convention.

Every generator and the packager name scene stills through scene_filename
so that EDL clip names, FCPXML asset paths, the import script manifest and
the files inside the pack can never disagree.
"""

from __future__ import annotations

import re

IMAGES_DIRNAME = "images"
PLACEHOLDER_FILENAME = "Placeholder_Black.png"

_UNSAFE = re.compile(r"[^A-Za-z0-9]")


def slugify_title(title: str) -> str:
    """Replace every character outside [A-Za-z0-9] with an underscore."""
    return _UNSAFE.sub("_", title)


def scene_filename(index: int, title: str) -> str:
    """Filename for the scene at zero-based index.

    >>> scene_filename(0, "Kitchen Scene #1!")
    'Scene_1_Kitchen_Scene__1_.png'
    """
    return f"Scene_{index + 1}_{slugify_title(title)}.png"
