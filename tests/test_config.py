"""Tests for YAML configuration."""

import pytest
import yaml

from handart.config import DEFAULT_PALETTE, AppConfig, load_config


class TestAppConfig:
    def test_defaults(self):
        cfg = AppConfig()
        assert cfg.canvas.width == 1280
        assert cfg.canvas.height == 720
        assert cfg.smoothing.window == 5
        assert cfg.stroke.min_distance == 2.0
        assert cfg.stroke.max_points == 100
        assert cfg.stroke.keep_points == 50
        assert cfg.particles.batch_size == 5
        assert cfg.particles.gravity == 0.5
        assert cfg.particles.decay == 0.02
        assert cfg.history.capacity == 50
        assert cfg.brush.palette == DEFAULT_PALETTE

    def test_palette_not_shared(self):
        a, b = AppConfig(), AppConfig()
        a.brush.palette.append("#123456")
        assert b.brush.palette == DEFAULT_PALETTE

    def test_yaml_roundtrip(self, tmp_path):
        cfg = AppConfig()
        cfg.canvas.width = 640
        cfg.brush.color = "#5C9CF1"
        cfg.particles.seed = 7
        path = tmp_path / "handart.yml"
        cfg.to_yaml(path)

        loaded = AppConfig.from_yaml(path)
        assert loaded.canvas.width == 640
        assert loaded.brush.color == "#5C9CF1"
        assert loaded.particles.seed == 7
        assert loaded.to_dict() == cfg.to_dict()

    def test_partial_override(self, tmp_path):
        path = tmp_path / "partial.yml"
        path.write_text(yaml.dump({"stroke": {"min_distance": 4.0}}))
        cfg = load_config(path)
        assert cfg.stroke.min_distance == 4.0
        assert cfg.stroke.max_points == 100
        assert cfg.canvas.width == 1280

    def test_unknown_keys_ignored(self):
        cfg = AppConfig.from_dict({
            "canvas": {"width": 300, "depth": 9},
            "telemetry": {"enabled": True},
        })
        assert cfg.canvas.width == 300

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("")
        assert AppConfig.from_yaml(path).to_dict() == AppConfig().to_dict()

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "list.yml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError):
            AppConfig.from_yaml(path)

    def test_load_config_default(self):
        assert load_config().to_dict() == AppConfig().to_dict()
