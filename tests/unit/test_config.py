"""Unit tests for settings loading."""

import pytest
import yaml

from narsil_explorer.config import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_NODES,
    ExplorerSettings,
    clamp_max_nodes,
    load_settings,
)
from narsil_explorer.core.exceptions import ConfigError
from narsil_explorer.core.types import LayoutType, ViewKind


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("NARSIL_URL", raising=False)
    monkeypatch.delenv("NARSIL_MAX_NODES", raising=False)


class TestLoadSettings:
    def test_missing_file_gives_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "missing.yaml")
        assert settings.base_url == DEFAULT_BASE_URL
        assert settings.max_nodes == DEFAULT_MAX_NODES
        assert settings.layout == LayoutType.DAGRE

    def test_reads_explorer_section(self, tmp_path):
        path = tmp_path / "explorer.yaml"
        path.write_text(yaml.dump({"explorer": {"depth": 4, "view": "import", "layout": "cose"}}))

        settings = load_settings(path)

        assert settings.depth == 4
        assert settings.view == ViewKind.IMPORT
        assert settings.layout == LayoutType.COSE

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "explorer.yaml"
        path.write_text(yaml.dump({"base_url": "http://from-file:3000"}))
        monkeypatch.setenv("NARSIL_URL", "http://from-env:4000")
        monkeypatch.setenv("NARSIL_MAX_NODES", "50")

        settings = load_settings(path)

        assert settings.base_url == "http://from-env:4000"
        assert settings.max_nodes == 50

    def test_bad_env_integer_is_ignored(self, tmp_path, monkeypatch):
        monkeypatch.setenv("NARSIL_MAX_NODES", "lots")
        settings = load_settings(tmp_path / "missing.yaml")
        assert settings.max_nodes == DEFAULT_MAX_NODES

    def test_unparseable_yaml_falls_back(self, tmp_path):
        path = tmp_path / "explorer.yaml"
        path.write_text("explorer: [unclosed")
        assert load_settings(path).depth == 2

    def test_invalid_values_raise(self, tmp_path):
        path = tmp_path / "explorer.yaml"
        path.write_text(yaml.dump({"depth": -3}))
        with pytest.raises(ConfigError):
            load_settings(path)


class TestClamp:
    def test_clamp_bounds(self):
        assert clamp_max_nodes(1) == 10
        assert clamp_max_nodes(250) == 250
        assert clamp_max_nodes(9999) == 500

    def test_settings_clamp_max_nodes(self):
        assert ExplorerSettings(max_nodes=2).max_nodes == 10
