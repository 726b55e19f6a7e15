"""
scenecut.utils - Shared utility functions.
"""

from __future__ import annotations


def format_duration(seconds: float) -> str:
    """Format seconds as H:MM:SS or M:SS, keeping tenths below a minute.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted string (H:MM:SS if >= 1 hour, M:SS if >= 1 minute, else "4.5s")
    """
    if seconds < 60:
        return f"{seconds:g}s"
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def truncate(text: str, width: int = 40) -> str:
    text = " ".join(text.split())
    return text if len(text) <= width else text[: width - 1] + "…"


def is_rate_limited(error: Exception) -> bool:
    """True when a backend error message signals HTTP 429 or quota exhaustion."""
    error_str = str(error).lower()
    return "429" in error_str or "resource_exhausted" in error_str or "rate limit" in error_str
