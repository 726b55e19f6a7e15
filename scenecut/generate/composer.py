"""
scenecut.generate.composer - Continuity-aware generation requests.

Builds the prompt and reference image list for one scene from the scene
itself, its predecessor in edit order, and its assigned assets. Reference
order matters to the backend: the previous frame always comes first, then
assets in assignment order.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from scenecut.config import ScenecutConfig
from scenecut.exceptions import GenerationError
from scenecut.sequence.assets import AssetLibrary
from scenecut.sequence.model import Sequence

CONTINUITY_LOCK = (
    "[CONTINUITY LOCK: Strict visual continuity with previous frame. "
    "Same lighting, environment, and film stock. New Action: {prompt}]"
)
SEQUENCE_CONTEXT = "(Sequence Context: Following a shot of {description}). "


@dataclass
class GenerationRequest:
    """Everything the image backend needs for one scene."""

    scene_id: str
    prompt: str
    reference_images: list[str] = field(default_factory=list)
    aspect_ratio: str = "16:9"
    model: str = ""
    image_size: str | None = None


def compose_prompt(base: str, previous_image: str | None, previous_description: str) -> str:
    if previous_image:
        return CONTINUITY_LOCK.format(prompt=base)
    if previous_description.strip():
        return SEQUENCE_CONTEXT.format(description=previous_description.strip()) + base
    return base


def compose_request(
    sequence: Sequence,
    scene_id: str,
    library: AssetLibrary | None = None,
    config: ScenecutConfig | None = None,
) -> GenerationRequest:
    """Compose the generation request for a scene.

    Args:
        sequence: The sequence holding the scene
        scene_id: Scene to render
        library: Asset library for assigned asset images
        config: Project config (models and pro image size)

    Returns:
        GenerationRequest with prompt, ordered references and model choice

    Raises:
        GenerationError: If the scene is unknown or has nothing to render from
    """
    config = config or ScenecutConfig()
    scene = sequence.get(scene_id)
    if scene is None:
        raise GenerationError(f"No scene with id {scene_id}")

    base = (scene.enhanced_prompt or scene.description).strip()
    if not base:
        raise GenerationError(f"Scene '{scene.title}' has no description to render from")

    references: list[str] = []
    previous = sequence.previous(scene_id)
    if previous is not None:
        if previous.image:
            references.append(previous.image)
        prompt = compose_prompt(base, previous.image, previous.description)
    else:
        prompt = base

    if scene.shot_type:
        prompt += f", {scene.shot_type}"
    if scene.style_prompt:
        prompt += f", {scene.style_prompt}"

    if library is not None:
        for asset in library.resolve(scene.assigned_asset_ids):
            if asset.image:
                references.append(asset.image)

    high = scene.quality == "high"
    return GenerationRequest(
        scene_id=scene.id,
        prompt=prompt,
        reference_images=references,
        aspect_ratio=scene.aspect_ratio or sequence.settings.aspect_ratio,
        model=config.image_model_pro if high else config.image_model,
        image_size=config.image_size_pro if high else None,
    )
