"""
scenecut.llm - LLM text helpers for storyboard writing.
"""

from __future__ import annotations

from scenecut.llm.client import LLMClient, create_client_from_config
from scenecut.llm.enhance import enhance_description, voice_direction
from scenecut.llm.templates import PromptTemplateManager

__all__ = [
    "LLMClient",
    "PromptTemplateManager",
    "create_client_from_config",
    "enhance_description",
    "voice_direction",
]
