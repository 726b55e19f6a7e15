"""Tests for scenecut CLI commands."""

from __future__ import annotations

import json
import zipfile
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from scenecut import __version__
from scenecut.cli import app
from scenecut.project import Project

runner = CliRunner()


@pytest.fixture
def in_project(tmp_project: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_project)
    return tmp_project


def storyboard(project_dir: Path) -> dict:
    return json.loads((project_dir / "storyboard.json").read_text())


def scenes(project_dir: Path) -> list[dict]:
    return storyboard(project_dir)["sequence"]["scenes"]


class TestInitCommand:
    def test_init_creates_project_directory(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["init", "film", "-d", str(tmp_path)])
        assert result.exit_code == 0
        assert (tmp_path / "film" / "scenecut.yaml").exists()
        assert (tmp_path / "film" / "storyboard.json").exists()
        assert (tmp_path / "film" / "prompts" / "enhance.txt").exists()

    def test_init_with_preset(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["init", "reel", "-p", "vertical", "-d", str(tmp_path)])
        assert result.exit_code == 0
        assert storyboard(tmp_path / "reel")["sequence"]["settings"]["height"] == 1920

    def test_init_unknown_preset(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["init", "x", "-p", "imax", "-d", str(tmp_path)])
        assert result.exit_code == 1
        assert "Unknown preset" in result.output
        assert not (tmp_path / "x").exists()

    def test_init_fails_if_directory_exists(self, tmp_path: Path) -> None:
        (tmp_path / "existing").mkdir()
        result = runner.invoke(app, ["init", "existing", "-d", str(tmp_path)])
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestSceneCommands:
    def test_outside_project(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["list"])
        assert result.exit_code == 1
        assert "Not in a Scenecut project" in result.output

    def test_verbose_flag(self, in_project: Path) -> None:
        result = runner.invoke(app, ["--verbose", "list"])
        assert result.exit_code == 0

    def test_add_and_list(self, in_project: Path) -> None:
        result = runner.invoke(app, ["add", "-d", "Harbor at dawn", "-s", "2.5"])
        assert result.exit_code == 0
        result = runner.invoke(app, ["add", "-t", "Pier"])
        assert result.exit_code == 0

        saved = scenes(in_project)
        assert [s["title"] for s in saved] == ["Scene 1", "Pier"]
        assert saved[0]["duration"] == 2.5
        assert saved[1]["duration"] == 4.0
        assert storyboard(in_project)["sequence"]["active_scene_id"] == saved[1]["id"]

        result = runner.invoke(app, ["list"])
        assert result.exit_code == 0
        assert "Pier" in result.output
        assert "6.5s" in result.output

    def test_add_with_image(self, in_project: Path, tmp_path: Path, png_bytes: bytes) -> None:
        image = tmp_path / "still.png"
        image.write_bytes(png_bytes)
        result = runner.invoke(app, ["add", "-d", "x", "-i", str(image)])
        assert result.exit_code == 0
        scene = scenes(in_project)[0]
        assert scene["image"].startswith("media/")
        assert scene["image_history"] == [scene["image"]]

    def test_add_invalid_quality(self, in_project: Path) -> None:
        result = runner.invoke(app, ["add", "-q", "ultra"])
        assert result.exit_code == 1
        assert scenes(in_project) == []

    def test_edit(self, in_project: Path) -> None:
        runner.invoke(app, ["add", "-d", "old"])
        result = runner.invoke(app, ["edit", "1", "-d", "new", "--dialogue", "Hi", "--shot", "close-up"])
        assert result.exit_code == 0
        scene = scenes(in_project)[0]
        assert (scene["description"], scene["dialogue"], scene["shot_type"]) == ("new", "Hi", "close-up")

    def test_edit_unknown_scene(self, in_project: Path) -> None:
        result = runner.invoke(app, ["edit", "7", "-d", "x"])
        assert result.exit_code == 1
        assert "No scene '7'" in result.output

    def test_move_remove_resize(self, in_project: Path) -> None:
        for title in ("A", "B", "C"):
            runner.invoke(app, ["add", "-t", title])

        assert runner.invoke(app, ["move", "3", "1"]).exit_code == 0
        assert [s["title"] for s in scenes(in_project)] == ["C", "A", "B"]

        result = runner.invoke(app, ["resize", "2", "0.1"])
        assert result.exit_code == 0
        assert "Clamped" in result.output
        assert scenes(in_project)[1]["duration"] == 0.5

        assert runner.invoke(app, ["remove", "1"]).exit_code == 0
        assert [s["title"] for s in scenes(in_project)] == ["A", "B"]

    def test_select_by_id(self, in_project: Path) -> None:
        runner.invoke(app, ["add", "-t", "A"])
        runner.invoke(app, ["add", "-t", "B"])
        first_id = scenes(in_project)[0]["id"]
        assert runner.invoke(app, ["select", first_id]).exit_code == 0
        assert storyboard(in_project)["sequence"]["active_scene_id"] == first_id

    def test_settings_cascade(self, in_project: Path) -> None:
        runner.invoke(app, ["add"])
        runner.invoke(app, ["asset", "add", "Mara"])
        result = runner.invoke(app, ["settings", "--width", "1080", "--height", "1920"])
        assert result.exit_code == 0
        assert "9:16" in result.output
        assert "vertical" in result.output
        data = storyboard(in_project)
        assert data["sequence"]["scenes"][0]["aspect_ratio"] == "9:16"
        assert data["assets"][0]["aspect_ratio"] == "9:16"

    def test_settings_invalid(self, in_project: Path) -> None:
        result = runner.invoke(app, ["settings", "--fps", "0"])
        assert result.exit_code == 1


class TestAssetCommands:
    def test_add_assign_remove(self, in_project: Path) -> None:
        runner.invoke(app, ["add", "-d", "pier"])
        assert runner.invoke(app, ["asset", "add", "Mara", "--trigger", "mara_v1"]).exit_code == 0
        assert runner.invoke(app, ["assign", "1", "mara"]).exit_code == 0

        data = storyboard(in_project)
        asset_id = data["assets"][0]["id"]
        assert data["sequence"]["scenes"][0]["assigned_asset_ids"] == [asset_id]

        result = runner.invoke(app, ["asset", "list"])
        assert "mara_v1" in result.output

        assert runner.invoke(app, ["asset", "remove", "Mara"]).exit_code == 0
        data = storyboard(in_project)
        assert data["assets"] == []
        assert data["sequence"]["scenes"][0]["assigned_asset_ids"] == [asset_id]

    def test_invalid_type(self, in_project: Path) -> None:
        result = runner.invoke(app, ["asset", "add", "Car", "--type", "vehicle"])
        assert result.exit_code == 1


class TestHistoryCommand:
    def test_step(self, in_project: Path) -> None:
        runner.invoke(app, ["add"])
        project = Project(in_project)
        sequence, library = project.load_storyboard()
        scene_id = sequence.scenes[0].id
        sequence.set_image(scene_id, "media/a.png")
        sequence.set_image(scene_id, "media/b.png")
        project.save_storyboard(sequence, library)

        result = runner.invoke(app, ["history", "1", "--prev"])
        assert result.exit_code == 0
        assert "media/a.png" in result.output
        assert scenes(in_project)[0]["image"] == "media/a.png"
        assert scenes(in_project)[0]["image_history"] == ["media/a.png", "media/b.png"]


class TestRenderCommand:
    def test_render_applies_images(self, in_project: Path, png_bytes: bytes) -> None:
        runner.invoke(app, ["add", "-d", "harbor"])
        runner.invoke(app, ["add", "-d", "pier"])

        async def fake_generate(self, request, references):
            return png_bytes

        with patch("scenecut.generate.client.GeminiImageClient.generate", fake_generate):
            result = runner.invoke(app, ["render", "--all"])

        assert result.exit_code == 0
        assert all(s["image"] for s in scenes(in_project))

    def test_render_failure_exits_nonzero(self, in_project: Path) -> None:
        runner.invoke(app, ["add", "-d", "harbor"])

        from scenecut.exceptions import RateLimitError

        async def fake_generate(self, request, references):
            raise RateLimitError("Too many requests")

        with patch("scenecut.generate.client.GeminiImageClient.generate", fake_generate):
            result = runner.invoke(app, ["render"])

        assert result.exit_code == 1
        assert "Too many requests" in result.output
        assert scenes(in_project)[0]["image"] is None

    def test_render_missing_backend_shows_install_hint(self, in_project: Path) -> None:
        runner.invoke(app, ["add", "-d", "harbor"])

        from scenecut.exceptions import DependencyError

        async def fake_generate(self, request, references):
            raise DependencyError("google-genai", "not installed", install_hint="pip install google-genai")

        with patch("scenecut.generate.client.GeminiImageClient.generate", fake_generate):
            result = runner.invoke(app, ["render"])

        assert result.exit_code == 1
        assert "pip install google-genai" in result.output


class TestEnhanceCommand:
    def test_enhance_stores_prompt(self, in_project: Path) -> None:
        runner.invoke(app, ["add", "-d", "girl on pier"])
        with patch("scenecut.llm.client.LLMClient.complete", return_value="Refined Prompt: A girl on a pier"):
            result = runner.invoke(app, ["enhance", "1"])
        assert result.exit_code == 0
        assert scenes(in_project)[0]["enhanced_prompt"] == "A girl on a pier"

    def test_enhance_reports_token_usage(self, in_project: Path) -> None:
        runner.invoke(app, ["add", "-d", "girl on pier"])
        usage = {"prompt_tokens": 900, "completion_tokens": 334, "total_tokens": 1234}
        with (
            patch("scenecut.llm.client.LLMClient.complete", return_value="A girl on a pier"),
            patch("scenecut.llm.client.LLMClient.get_token_usage", return_value=usage),
        ):
            result = runner.invoke(app, ["enhance", "1"])
        assert result.exit_code == 0
        assert "1,234" in result.output

    def test_voice_requires_dialogue(self, in_project: Path) -> None:
        runner.invoke(app, ["add", "-d", "x"])
        result = runner.invoke(app, ["enhance", "1", "--voice"])
        assert result.exit_code == 1
        assert "no dialogue" in result.output


class TestExportCommands:
    def test_export_all(self, in_project: Path) -> None:
        runner.invoke(app, ["add", "-t", "Kitchen", "-s", "4"])
        runner.invoke(app, ["add", "-t", "Hall", "-s", "2.5"])

        result = runner.invoke(app, ["export"])
        assert result.exit_code == 0
        exports = in_project / "exports"
        assert (exports / "test_project.edl").exists()
        assert (exports / "test_project.fcpxml").exists()
        assert (exports / "timeline_captions.srt").exists()
        assert (exports / "import_resolve.py").exists()
        assert "FROM CLIP NAME: Scene_1_Kitchen.png" in (exports / "test_project.edl").read_text()
        assert "test_project Timeline" in (exports / "import_resolve.py").read_text()

    def test_export_single_to_path(self, in_project: Path, tmp_path: Path) -> None:
        runner.invoke(app, ["add"])
        target = tmp_path / "cut.edl"
        result = runner.invoke(app, ["export", "-f", "edl", "-o", str(target)])
        assert result.exit_code == 0
        assert target.read_text().startswith("TITLE: TEST_PROJECT")

    def test_export_unknown_format(self, in_project: Path) -> None:
        result = runner.invoke(app, ["export", "-f", "aaf"])
        assert result.exit_code == 1
        assert "Unknown format" in result.output

    def test_pack(self, in_project: Path) -> None:
        runner.invoke(app, ["add", "-t", "Kitchen"])
        result = runner.invoke(app, ["pack"])
        assert result.exit_code == 0
        pack = in_project / "exports" / "test_project_pack.zip"
        with zipfile.ZipFile(pack) as zf:
            assert "README_DAVINCI.txt" in zf.namelist()
            assert "images/Placeholder_Black.png" in zf.namelist()
