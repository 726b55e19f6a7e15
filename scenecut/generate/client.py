"""
scenecut.generate.client - Image generation backend using google-genai.

Sends the composed prompt plus reference images to a Gemini image model and
returns the raw image bytes, with retry and rate-limit backoff.
"""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass
from typing import Any, Protocol

from scenecut.exceptions import DependencyError, GenerationError, RateLimitError
from scenecut.generate.composer import GenerationRequest
from scenecut.logging import logger
from scenecut.utils import is_rate_limited

API_KEY_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY")
REFERENCE_PREFIX = (
    "Using the visual style and subjects from the attached reference images, generate: "
)


@dataclass(frozen=True)
class ReferenceImage:
    mime_type: str
    data: bytes


class ImageGenerator(Protocol):
    """Anything that turns a request into image bytes."""

    async def generate(
        self, request: GenerationRequest, references: list[ReferenceImage]
    ) -> bytes: ...


class GeminiImageClient:
    """Gemini image client with retry logic."""

    def __init__(
        self,
        api_key: str | None = None,
        timeout: int = 120,
        max_retries: int = 3,
        retry_delay: float = 2.0,
    ) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._client: Any = None

    def _get_client(self) -> Any:
        if self._client is not None:
            return self._client

        try:
            from google import genai
        except ImportError as e:
            raise DependencyError(
                "google-genai",
                "not installed",
                install_hint="pip install google-genai",
            ) from e

        api_key = self.api_key or next(
            (os.environ[var] for var in API_KEY_VARS if os.environ.get(var)), None
        )
        if not api_key:
            raise GenerationError(f"Set {' or '.join(API_KEY_VARS)} to generate images")

        self._client = genai.Client(api_key=api_key)
        return self._client

    def _build_contents(self, request: GenerationRequest, references: list[ReferenceImage]) -> list[Any]:
        from google.genai import types

        if not references:
            return [request.prompt]
        parts: list[Any] = [
            types.Part.from_bytes(data=ref.data, mime_type=ref.mime_type) for ref in references
        ]
        parts.append(REFERENCE_PREFIX + request.prompt)
        return parts

    def _build_config(self, request: GenerationRequest) -> Any:
        from google.genai import types

        image_config: dict[str, Any] = {"aspect_ratio": request.aspect_ratio}
        if request.image_size:
            image_config["image_size"] = request.image_size
        return types.GenerateContentConfig(
            response_modalities=["IMAGE"],
            image_config=types.ImageConfig(**image_config),
        )

    @staticmethod
    def _extract_image(response: Any) -> bytes:
        candidates = getattr(response, "candidates", None) or []
        if candidates and candidates[0].content and candidates[0].content.parts:
            for part in candidates[0].content.parts:
                inline = getattr(part, "inline_data", None)
                if inline is not None and inline.data:
                    return inline.data
        raise GenerationError("No image data returned from Gemini")

    async def generate(self, request: GenerationRequest, references: list[ReferenceImage]) -> bytes:
        """Generate one image.

        Args:
            request: Composed generation request
            references: Reference images, previous frame first

        Returns:
            Raw image bytes

        Raises:
            RateLimitError: If still rate limited after all retries
            GenerationError: If generation fails after all retries
        """
        client = self._get_client()
        contents = self._build_contents(request, references)
        config = self._build_config(request)
        last_error: Exception | None = None

        for attempt in range(self.max_retries):
            if attempt > 0:
                logger.info(f"Retry {attempt + 1}/{self.max_retries} for scene {request.scene_id}")

            try:
                response = await asyncio.wait_for(
                    client.aio.models.generate_content(
                        model=request.model,
                        contents=contents,
                        config=config,
                    ),
                    timeout=self.timeout,
                )
                return self._extract_image(response)

            except GenerationError:
                raise
            except Exception as e:
                last_error = e
                if is_rate_limited(e):
                    logger.warning(f"Rate limited by image backend: {e}")
                    if attempt < self.max_retries - 1:
                        await asyncio.sleep(self.retry_delay * 2)
                        continue
                    raise RateLimitError(
                        f"Too many requests, rate limited after {self.max_retries} attempts"
                    ) from e

                logger.warning(f"Image generation attempt {attempt + 1} failed: {e}")
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(self.retry_delay)

        raise GenerationError(
            f"Image generation failed after {self.max_retries} retries: {last_error}"
        ) from last_error


def create_image_client_from_config(config: Any) -> GeminiImageClient:
    """Create image client from ScenecutConfig."""
    return GeminiImageClient(
        timeout=config.image_timeout,
        max_retries=config.image_max_retries,
    )
