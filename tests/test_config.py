"""Tests for scenecut.config module."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from scenecut.config import (
    BUILTIN_PRESETS,
    SceneDefaults,
    ScenecutConfig,
    create_default_config,
    load_config,
    load_preset,
    merge_config,
    write_config,
)
from scenecut.exceptions import ConfigError


class TestSceneDefaults:
    def test_defaults(self) -> None:
        defaults = SceneDefaults()
        assert defaults.duration == 4.0
        assert defaults.quality == "standard"

    def test_duration_below_minimum_raises(self) -> None:
        with pytest.raises(ValueError):
            SceneDefaults(duration=0.1)

    def test_invalid_quality_raises(self) -> None:
        with pytest.raises(ValueError):
            SceneDefaults(quality="ultra")


class TestScenecutConfig:
    def test_default_config(self) -> None:
        config = ScenecutConfig()
        assert config.project_name == "untitled"
        assert config.fps == 24
        assert config.srt_offset_seconds == 3600
        assert config.aspect_ratio == "16:9"

    def test_vertical_aspect(self) -> None:
        assert ScenecutConfig(width=1080, height=1920).aspect_ratio == "9:16"

    def test_invalid_llm_backend_raises(self) -> None:
        with pytest.raises(ValueError):
            ScenecutConfig(llm_backend="invalid")

    def test_invalid_image_size_raises(self) -> None:
        with pytest.raises(ValueError):
            ScenecutConfig(image_size_pro="8K")

    def test_invalid_fps_raises(self) -> None:
        with pytest.raises(ValueError):
            ScenecutConfig(fps=0)


class TestPresets:
    def test_builtin(self) -> None:
        preset = load_preset("vertical")
        assert preset == {"fps": 30, "width": 1080, "height": 1920}

    def test_builtin_copy_is_independent(self) -> None:
        load_preset("cinema")["fps"] = 99
        assert BUILTIN_PRESETS["cinema"]["fps"] == 24

    def test_custom_preset_dir(self, tmp_path: Path) -> None:
        (tmp_path / "anamorphic.yaml").write_text("fps: 25\nwidth: 2048\nheight: 858\n")
        assert load_preset("anamorphic", tmp_path)["width"] == 2048

    def test_unknown_raises(self) -> None:
        with pytest.raises(ConfigError):
            load_preset("imax")


class TestMergeConfig:
    def test_project_overrides_preset(self) -> None:
        merged = merge_config({"fps": 25}, {"fps": 24, "width": 1920})
        assert merged == {"fps": 25, "width": 1920}

    def test_none_values_ignored(self) -> None:
        assert merge_config({"fps": None}, {"fps": 24}) == {"fps": 24}

    def test_scene_defaults_merged(self) -> None:
        merged = merge_config(
            {"scene_defaults": {"duration": 2.0}},
            {"scene_defaults": {"duration": 4.0, "shot_type": "wide"}},
        )
        assert merged["scene_defaults"] == {"duration": 2.0, "shot_type": "wide"}


class TestLoadConfig:
    def test_load(self, tmp_path: Path, sample_config_dict: dict) -> None:
        write_config(sample_config_dict, tmp_path / "scenecut.yaml")
        config = load_config(tmp_path)
        assert config.project_name == "test-project"
        assert config.fps == 24
        assert config.scene_defaults.duration == 3.0
        assert config.config_path == tmp_path / "scenecut.yaml"

    def test_preset_supplies_frame_size(self, tmp_path: Path) -> None:
        write_config({"preset": "vertical"}, tmp_path / "scenecut.yaml")
        config = load_config(tmp_path)
        assert (config.fps, config.width, config.height) == (30, 1080, 1920)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path)

    def test_invalid_values_raise_config_error(self, tmp_path: Path) -> None:
        write_config({"llm_backend": "nope"}, tmp_path / "scenecut.yaml")
        with pytest.raises(ConfigError):
            load_config(tmp_path)


class TestCreateDefaultConfig:
    def test_includes_preset_values(self) -> None:
        config = create_default_config("demo", "uhd")
        assert config["project_name"] == "demo"
        assert config["width"] == 3840

    def test_round_trips_through_yaml(self, tmp_path: Path) -> None:
        write_config(create_default_config("demo"), tmp_path / "scenecut.yaml")
        raw = yaml.safe_load((tmp_path / "scenecut.yaml").read_text())
        assert raw["scene_defaults"]["duration"] == 4.0
        assert load_config(tmp_path).project_name == "demo"

    def test_unknown_preset_raises(self) -> None:
        with pytest.raises(ConfigError):
            create_default_config("demo", "imax")
