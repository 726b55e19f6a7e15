"""
scenecut.exceptions - Custom exception classes.

All Scenecut-specific exceptions inherit from ScenecutError.
"""


class ScenecutError(Exception):
    """Base exception for all Scenecut errors."""

    pass


class ConfigError(ScenecutError):
    """Configuration loading or validation error."""

    pass


class ProjectError(ScenecutError):
    """Project directory or storyboard file error."""

    pass


class SequenceError(ScenecutError):
    """Invalid operation on the scene sequence."""

    pass


class TimecodeError(ScenecutError):
    """Negative, non-finite, or otherwise invalid timecode input."""

    pass


class MediaError(ScenecutError):
    """Image reference could not be stored or resolved."""

    pass


class ExportError(ScenecutError):
    """Timeline export or packaging error."""

    pass


class GenerationError(ScenecutError):
    """Image generation backend error."""

    pass


class RateLimitError(GenerationError):
    """Generation backend refused the request because of rate limiting."""

    pass


class LLMError(ScenecutError):
    """LLM backend or prompt error."""

    pass


class LLMResponseError(LLMError):
    """LLM returned malformed or unexpected response."""

    pass


class DependencyError(ScenecutError):
    """Required dependency missing or misconfigured."""

    def __init__(self, dependency: str, message: str, install_hint: str | None = None):
        self.dependency = dependency
        self.message = message
        self.install_hint = install_hint
        super().__init__(f"{dependency}: {message}")
