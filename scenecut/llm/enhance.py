"""
scenecut.llm.enhance - Prompt polishing and voice direction.

Two text helpers used while writing a storyboard: expanding a terse scene
description into a render-ready prompt, and rewriting dialogue with stress
and pacing marks for a speech engine.
"""

from __future__ import annotations

import re
from typing import Any

from scenecut.exceptions import LLMResponseError
from scenecut.llm.templates import PromptTemplateManager

_REFINED = re.compile(r"Refined Prompt:\s*(.+?)(?=\s*(?:Elements Expanded:|$))", re.IGNORECASE | re.DOTALL)
_ACUTE = str.maketrans("áéíóúýÁÉÍÓÚÝ", "aeiouyAEIOUY")

ENHANCE_SYSTEM = "You write image generation prompts for film storyboards. Be concrete and visual."
VOICE_SYSTEM = "You are a dialogue coach preparing lines for a text-to-speech engine."


def extract_refined_prompt(response: str) -> str:
    """Pull the refined prompt out of the model's answer.

    Falls back to the whole response when the model ignored the format.
    """
    match = _REFINED.search(response)
    text = match.group(1) if match else response
    return text.strip().strip('"').strip()


def enhance_description(
    client: Any,
    description: str,
    asset_context: str = "",
    template_manager: PromptTemplateManager | None = None,
    console=None,
) -> str:
    """Expand a scene description into a detailed visual prompt.

    Args:
        client: LLMClient instance
        description: Raw scene description
        asset_context: Assigned asset summary (AssetLibrary.describe)
        template_manager: Optional PromptTemplateManager
        console: Optional rich console for output

    Returns:
        Refined prompt text

    Raises:
        LLMError: If the request fails
        LLMResponseError: If the model returns nothing usable
    """
    template_manager = template_manager or PromptTemplateManager()
    prompt = template_manager.render(
        "enhance.txt",
        {"DESCRIPTION": description.strip(), "ASSET_CONTEXT": asset_context.strip()},
    )

    response = client.complete(
        prompt, system=ENHANCE_SYSTEM, max_tokens=1024, temperature=0.7, console=console
    )
    refined = extract_refined_prompt(response)
    if not refined:
        raise LLMResponseError("LLM returned an empty prompt")
    return refined


def voice_direction(
    client: Any,
    dialogue: str,
    description: str = "",
    template_manager: PromptTemplateManager | None = None,
    console=None,
) -> str:
    """Rewrite dialogue with capitalised stress and pacing marks."""
    template_manager = template_manager or PromptTemplateManager()
    prompt = template_manager.render(
        "voice.txt",
        {"DIALOGUE": dialogue.strip(), "DESCRIPTION": description.strip()},
    )

    response = client.complete(
        prompt, system=VOICE_SYSTEM, max_tokens=1024, temperature=0.5, console=console
    )
    # stress must be capitals; some models still emit accents
    directed = response.strip().translate(_ACUTE)
    if not directed:
        raise LLMResponseError("LLM returned empty voice direction")
    return directed
