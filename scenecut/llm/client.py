"""
scenecut.llm.client - Text model backend using litellm.

Backs the prompt helpers (description polishing and voice direction). Image
generation goes through scenecut.generate.client instead.
"""

from __future__ import annotations

import time
from typing import Any

from scenecut.exceptions import LLMError, LLMResponseError
from scenecut.logging import logger
from scenecut.utils import is_rate_limited

# litellm routes on a provider prefix; LM Studio speaks the OpenAI protocol.
MODEL_PREFIXES = {
    "gemini": "gemini/",
    "ollama": "ollama/",
    "lmstudio": "openai/",
    "claude": "claude-",
}

LOCAL_API_BASES = {
    "ollama": "http://localhost:11434",
    "lmstudio": "http://localhost:1234/v1",
}


class LLMClient:
    """Single-turn completion client with retries and token accounting."""

    def __init__(
        self,
        backend: str = "gemini",
        model: str = "gemini-2.5-flash",
        timeout: int = 120,
        max_retries: int = 3,
        retry_delay: float = 2.0,
    ) -> None:
        self.backend = backend
        self.model = model
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._token_usage = {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0}

    def _get_model_string(self) -> str:
        return MODEL_PREFIXES.get(self.backend, "") + self.model

    def _record_usage(self, response: Any) -> None:
        usage = getattr(response, "usage", None)
        if usage is None:
            return
        for key in self._token_usage:
            self._token_usage[key] += getattr(usage, key, 0) or 0

    @staticmethod
    def _content(response: Any) -> str:
        choices = getattr(response, "choices", None)
        if not choices:
            raise LLMResponseError("Empty response from LLM")
        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if content is None:
            raise LLMResponseError("No content in LLM message")
        return content

    def complete(
        self,
        prompt: str,
        system: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.7,
        console=None,
    ) -> str:
        """Send a prompt and return the completion text.

        Args:
            prompt: User prompt
            system: Optional system instruction
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature
            console: Optional rich console for retry notices

        Raises:
            LLMResponseError: If the backend answered without usable text
            LLMError: If the request fails after all retries
        """
        try:
            import litellm
        except ImportError as e:
            raise LLMError("litellm not installed. Install with: pip install litellm") from e

        litellm.telemetry = False

        messages = [{"role": "user", "content": prompt}]
        if system:
            messages.insert(0, {"role": "system", "content": system})

        kwargs: dict[str, Any] = {
            "model": self._get_model_string(),
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "timeout": self.timeout,
        }
        if self.backend in LOCAL_API_BASES:
            kwargs["api_base"] = LOCAL_API_BASES[self.backend]

        last_error: Exception | None = None
        for attempt in range(1, self.max_retries + 1):
            try:
                response = litellm.completion(**kwargs)
            except Exception as e:
                last_error = e
                logger.debug(f"LLM attempt {attempt}/{self.max_retries} failed: {e}")
                if attempt == self.max_retries:
                    break
                delay = self.retry_delay
                if is_rate_limited(e):
                    delay *= 2
                    if console:
                        console.print("[yellow]  Rate limited, waiting...[/yellow]")
                elif console:
                    console.print(f"[yellow]  Retry {attempt + 1}/{self.max_retries}...[/yellow]")
                time.sleep(delay)
                continue

            self._record_usage(response)
            return self._content(response)

        raise LLMError(
            f"LLM request failed after {self.max_retries} attempts: {last_error}"
        ) from last_error

    def get_token_usage(self) -> dict[str, int]:
        """Get cumulative token usage."""
        return self._token_usage.copy()


def create_client_from_config(config: Any) -> LLMClient:
    """Create LLM client from ScenecutConfig."""
    return LLMClient(
        backend=config.llm_backend,
        model=config.llm_model,
    )
