"""
Tests for configuration loading.
"""

import json

import pytest
import yaml

from undecorator.config import (
    ConfigurationError,
    ConfigurationManager,
    UndecorateConfig,
    load_config,
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Run every test in an empty directory without UNDECORATE_* variables."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "UNDECORATE_IGNORE_IMPORTS",
        "UNDECORATE_EXTENSIONS",
        "UNDECORATE_EXCLUDED_PATTERNS",
        "UNDECORATE_MAX_WORKERS",
        "UNDECORATE_DRY_RUN",
        "UNDECORATE_BACKUP_ENABLED",
        "UNDECORATE_ENCODING",
    ):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


class TestUndecorateConfig:
    """Tests for UndecorateConfig.load."""

    def test_defaults(self):
        config = load_config()
        assert config.transform_settings.ignore_imports is False
        assert config.runner_settings.max_workers == 4
        assert config.runner_settings.backup_enabled is True
        assert ".tsx" in config.runner_settings.extensions

    def test_yaml_file_is_found(self, isolated_config):
        (isolated_config / "undecorate.yaml").write_text(
            yaml.dump({"transform": {"ignore_imports": True}, "runner": {"max_workers": 2}})
        )
        config = load_config()
        assert config.transform_settings.ignore_imports is True
        assert config.runner_settings.max_workers == 2

    def test_json_file(self, isolated_config):
        path = isolated_config / "custom.json"
        path.write_text(json.dumps({"runner": {"extensions": [".ts"]}}))
        config = UndecorateConfig.from_file(str(path))
        assert config.runner_settings.extensions == [".ts"]

    def test_precedence(self, isolated_config, monkeypatch):
        """Test that environment beats files and overrides beat both."""
        (isolated_config / "undecorate.json").write_text(
            json.dumps({"runner": {"max_workers": 2, "dry_run": False}})
        )
        monkeypatch.setenv("UNDECORATE_MAX_WORKERS", "3")
        monkeypatch.setenv("UNDECORATE_DRY_RUN", "true")
        config = load_config(overrides={"runner": {"max_workers": 8}})
        assert config.runner_settings.max_workers == 8
        assert config.runner_settings.dry_run is True

    def test_invalid_env_value_is_ignored(self, monkeypatch):
        monkeypatch.setenv("UNDECORATE_MAX_WORKERS", "many")
        assert load_config().runner_settings.max_workers == 4

    def test_unknown_keys_are_ignored(self):
        config = load_config(overrides={"runner": {"colour": "blue"}})
        assert not hasattr(config.runner_settings, "colour")

    @pytest.mark.parametrize(
        "data",
        [
            {"transform": {"ignore_imports": "yes"}},
            {"runner": {"max_workers": 0}},
            {"runner": {"extensions": ["ts"]}},
            {"runner": {"extensions": []}},
            {"runner": {"encoding": "not-a-codec"}},
            {"runner": {"dry_run": 1}},
        ],
    )
    def test_validation_errors(self, data):
        with pytest.raises(ConfigurationError):
            ConfigurationManager.validate_config(data)

    def test_missing_file(self):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config("missing.yaml")

    def test_malformed_file(self, isolated_config):
        (isolated_config / "broken.json").write_text("{not json")
        with pytest.raises(ConfigurationError, match="Invalid configuration file format"):
            load_config("broken.json")

    @pytest.mark.parametrize("name,fmt", [("out.yaml", "yaml"), ("out.json", "json")])
    def test_to_file_round_trips(self, isolated_config, name, fmt):
        config = UndecorateConfig.default()
        config.runner_settings.max_workers = 7
        config.to_file(str(isolated_config / name), fmt)
        loaded = UndecorateConfig.from_file(str(isolated_config / name))
        assert loaded.to_dict() == config.to_dict()

    def test_summary_mentions_settings(self):
        summary = UndecorateConfig.default().get_config_summary()
        assert "Ignore imports: False" in summary
        assert "Max workers: 4" in summary


class TestMergeConfigs:
    def test_nested_merge(self):
        merged = ConfigurationManager.merge_configs(
            {"runner": {"max_workers": 1, "dry_run": True}},
            {"runner": {"max_workers": 2}},
            {},
        )
        assert merged == {"runner": {"max_workers": 2, "dry_run": True}}
