"""
scenecut.generate - Scene image generation.

Composes continuity-aware requests, sends them to the image backend and
applies the results to the sequence.
"""

from __future__ import annotations

from scenecut.generate.client import GeminiImageClient, ImageGenerator, ReferenceImage
from scenecut.generate.composer import GenerationRequest, compose_request
from scenecut.generate.render import RenderOutcome, render_many, render_scene

__all__ = [
    "GeminiImageClient",
    "GenerationRequest",
    "ImageGenerator",
    "ReferenceImage",
    "RenderOutcome",
    "compose_request",
    "render_many",
    "render_scene",
]
