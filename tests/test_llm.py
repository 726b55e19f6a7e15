"""Tests for scenecut.llm modules."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from scenecut.exceptions import LLMError, LLMResponseError
from scenecut.llm.client import LLMClient, create_client_from_config
from scenecut.llm.enhance import (
    ENHANCE_SYSTEM,
    VOICE_SYSTEM,
    enhance_description,
    extract_refined_prompt,
    voice_direction,
)
from scenecut.llm.templates import PromptTemplateManager


def completion(content: str | None):
    message = SimpleNamespace(content=content)
    usage = SimpleNamespace(prompt_tokens=10, completion_tokens=5, total_tokens=15)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=usage)


class TestLLMClient:
    def test_model_strings(self) -> None:
        assert LLMClient("gemini", "gemini-2.5-flash")._get_model_string() == "gemini/gemini-2.5-flash"
        assert LLMClient("ollama", "llama3")._get_model_string() == "ollama/llama3"
        assert LLMClient("lmstudio", "local")._get_model_string() == "openai/local"
        assert LLMClient("openai", "gpt-4o")._get_model_string() == "gpt-4o"

    def test_complete_returns_content(self) -> None:
        fake = MagicMock()
        fake.completion.return_value = completion("hello")
        with patch.dict("sys.modules", {"litellm": fake}):
            client = LLMClient()
            assert client.complete("hi", system="be brief") == "hello"
        messages = fake.completion.call_args.kwargs["messages"]
        assert messages[0] == {"role": "system", "content": "be brief"}
        assert client.get_token_usage()["total_tokens"] == 15

    def test_ollama_api_base(self) -> None:
        fake = MagicMock()
        fake.completion.return_value = completion("ok")
        with patch.dict("sys.modules", {"litellm": fake}):
            LLMClient(backend="ollama", model="llama3").complete("hi")
        assert fake.completion.call_args.kwargs["api_base"] == "http://localhost:11434"

    def test_empty_content_raises(self) -> None:
        fake = MagicMock()
        fake.completion.return_value = completion(None)
        with patch.dict("sys.modules", {"litellm": fake}):
            with pytest.raises(LLMResponseError):
                LLMClient().complete("hi")

    def test_retries_then_fails(self) -> None:
        fake = MagicMock()
        fake.completion.side_effect = Exception("connection refused")
        with patch.dict("sys.modules", {"litellm": fake}):
            with pytest.raises(LLMError):
                LLMClient(max_retries=2, retry_delay=0).complete("hi")
        assert fake.completion.call_count == 2

    def test_create_from_config(self) -> None:
        config = SimpleNamespace(llm_backend="claude", llm_model="sonnet")
        client = create_client_from_config(config)
        assert client.backend == "claude"
        assert client.model == "sonnet"


class TestPromptTemplateManager:
    def test_packaged_templates(self) -> None:
        manager = PromptTemplateManager()
        assert {"enhance.txt", "voice.txt"} <= set(manager.list_templates())

    def test_project_override(self, tmp_path: Path) -> None:
        (tmp_path / "voice.txt").write_text("VOICE {{ DIALOGUE }}")
        manager = PromptTemplateManager(tmp_path)
        assert manager.render("voice.txt", {"DIALOGUE": "hi"}) == "VOICE hi"

    def test_missing_template(self) -> None:
        with pytest.raises(FileNotFoundError):
            PromptTemplateManager().get_template("nope.txt")


class TestEnhance:
    def test_extract_refined_prompt(self) -> None:
        response = 'Sure!\nRefined Prompt: "A harbor at dawn, mist."\nElements Expanded: light'
        assert extract_refined_prompt(response) == "A harbor at dawn, mist."

    def test_extract_falls_back_to_whole_response(self) -> None:
        assert extract_refined_prompt("  A harbor at dawn.  ") == "A harbor at dawn."

    def test_enhance_description_renders_context(self) -> None:
        client = MagicMock()
        client.complete.return_value = "Refined Prompt: Mara in a red coat on the pier"
        result = enhance_description(client, "girl on pier", "Mara (red coat - trigger: mara_v1)")
        assert result == "Mara in a red coat on the pier"
        prompt = client.complete.call_args.args[0]
        assert 'Raw idea: "girl on pier"' in prompt
        assert "mara_v1" in prompt
        assert client.complete.call_args.kwargs["system"] == ENHANCE_SYSTEM

    def test_enhance_empty_response_raises(self) -> None:
        client = MagicMock()
        client.complete.return_value = "Refined Prompt:   "
        with pytest.raises(LLMResponseError):
            enhance_description(client, "x")

    def test_voice_direction_strips_accents(self) -> None:
        client = MagicMock()
        client.complete.return_value = "HEL-ló... [slowly] WHAT?"
        assert voice_direction(client, "hello what", "a hall") == "HEL-lo... [slowly] WHAT?"
        prompt = client.complete.call_args.args[0]
        assert 'Raw dialogue: "hello what"' in prompt
        assert client.complete.call_args.kwargs["system"] == VOICE_SYSTEM
