"""
scenecut.generate.render - Async render driver.

Runs generation for one or more scenes. The model is only ever touched
synchronously: before the await (marking the scene as processing) and after
it (applying the result through Sequence.apply). A scene deleted while its
request was in flight simply has its result discarded.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from scenecut.config import ScenecutConfig
from scenecut.exceptions import DependencyError, GenerationError, MediaError
from scenecut.generate.client import ImageGenerator, ReferenceImage
from scenecut.generate.composer import GenerationRequest, compose_request
from scenecut.logging import logger
from scenecut.media import MediaStore
from scenecut.sequence.assets import AssetLibrary
from scenecut.sequence.model import GenerationResult, Sequence

APPLIED = "applied"
DISCARDED = "discarded"
FAILED = "failed"


@dataclass
class RenderOutcome:
    """What happened to one render request."""

    scene_id: str
    status: str
    image: str | None = None
    prompt: str = ""
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == APPLIED


def load_references(request: GenerationRequest, store: MediaStore) -> list[ReferenceImage]:
    return [
        ReferenceImage(mime_type=store.mime_type(ref), data=store.read(ref))
        for ref in request.reference_images
    ]


async def render_scene(
    sequence: Sequence,
    scene_id: str,
    generator: ImageGenerator,
    library: AssetLibrary | None,
    store: MediaStore,
    config: ScenecutConfig | None = None,
) -> RenderOutcome:
    """Render one scene and apply the result if the scene still exists.

    Failures (including rate limiting) leave the model unchanged and are
    reported in the outcome rather than raised.
    """
    try:
        request = compose_request(sequence, scene_id, library, config)
        references = load_references(request, store)
    except (GenerationError, MediaError) as e:
        return RenderOutcome(scene_id=scene_id, status=FAILED, message=str(e))

    logger.debug(f"Rendering {scene_id} with {request.model}: {request.prompt}")
    sequence.begin_processing(scene_id)
    try:
        data = await generator.generate(request, references)

        if sequence.get(scene_id) is None:
            logger.info(f"Scene {scene_id} was removed during generation, discarding image")
            return RenderOutcome(scene_id=scene_id, status=DISCARDED, prompt=request.prompt)

        image_ref = store.put(data)
        result = GenerationResult(scene_id=scene_id, image=image_ref, prompt=request.prompt)
        status = APPLIED if sequence.apply(result) else DISCARDED
        return RenderOutcome(scene_id=scene_id, status=status, image=image_ref, prompt=request.prompt)

    except DependencyError as e:
        message = f"{e} ({e.install_hint})" if e.install_hint else str(e)
        logger.warning(f"Generation backend unavailable for {scene_id}: {message}")
        return RenderOutcome(scene_id=scene_id, status=FAILED, prompt=request.prompt, message=message)

    except (GenerationError, MediaError) as e:
        logger.warning(f"Generation failed for {scene_id}: {e}")
        return RenderOutcome(scene_id=scene_id, status=FAILED, prompt=request.prompt, message=str(e))

    finally:
        sequence.end_processing(scene_id)


def continuity_chains(sequence: Sequence, scene_ids: list[str]) -> list[list[int]]:
    """Group request indices into runs that must render in edit order.

    A requested scene whose predecessor is also requested waits for it, so
    it can take the fresh image as its continuity reference. Repeat requests
    for a scene and ids not in the sequence stand alone.
    """
    first: dict[str, int] = {}
    chains: list[list[int]] = []
    for i, scene_id in enumerate(scene_ids):
        if scene_id in first or sequence.get(scene_id) is None:
            chains.append([i])
        else:
            first[scene_id] = i

    current: list[int] = []
    prev_position: int | None = None
    positioned = sorted(first, key=lambda scene_id: sequence.index_of(scene_id))
    for scene_id in positioned:
        position = sequence.index_of(scene_id)
        if current and position == prev_position + 1:
            current.append(first[scene_id])
        else:
            if current:
                chains.append(current)
            current = [first[scene_id]]
        prev_position = position
    if current:
        chains.append(current)
    return chains


async def render_many(
    sequence: Sequence,
    scene_ids: list[str],
    generator: ImageGenerator,
    library: AssetLibrary | None,
    store: MediaStore,
    config: ScenecutConfig | None = None,
) -> list[RenderOutcome]:
    """Render several scenes, returning outcomes in request order.

    Adjacent scenes render one after another so each is composed against
    its predecessor's new image. Separate chains run concurrently.
    """
    outcomes: list[RenderOutcome | None] = [None] * len(scene_ids)

    async def run_chain(indices: list[int]) -> None:
        for i in indices:
            outcomes[i] = await render_scene(sequence, scene_ids[i], generator, library, store, config)

    await asyncio.gather(*(run_chain(chain) for chain in continuity_chains(sequence, scene_ids)))
    return [outcome for outcome in outcomes if outcome is not None]
