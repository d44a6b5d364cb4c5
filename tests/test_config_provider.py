"""
Tests for ConfigProvider / ConfigSnapshot

1. YAML loading (flat and nested keys, scalar normalisation)
2. Fatal load failures (no silent defaults)
3. Load-once caching and reset
4. Snapshot immutability
"""

import dataclasses
import os

import pytest

from core.config_provider import CONFIG_ENV_VAR, ConfigProvider, ConfigSnapshot
from core.exceptions import ConfigLoadError


def write(path, text):
    path.write_text(text, encoding="utf-8")
    return path


class TestLoad:

    def test_flat_dotted_keys(self, tmp_path):
        cfg = write(tmp_path / "e2e.yaml", "browser: chrome\ntraces.dir: out/traces\n")
        snapshot = ConfigProvider.load(cfg)
        assert snapshot.get_property("browser") == "chrome"
        assert snapshot.get_property("traces.dir") == "out/traces"
        assert snapshot.source == str(cfg)

    def test_nested_keys_are_flattened(self, tmp_path):
        cfg = write(tmp_path / "e2e.yaml", "downloads:\n  path: dl\nbase:\n  url: http://x\n")
        snapshot = ConfigProvider.load(cfg)
        assert snapshot.get_property("downloads.path") == "dl"
        assert snapshot.get_property("base.url") == "http://x"

    def test_scalars_become_strings(self, tmp_path):
        cfg = write(tmp_path / "e2e.yaml", "headless: true\nretries: 3\nempty:\n")
        snapshot = ConfigProvider.load(cfg)
        assert snapshot.get_property("headless") == "true"
        assert snapshot.get_property("retries") == "3"
        assert snapshot.get_property("empty") is None

    def test_empty_file_is_empty_snapshot(self, tmp_path):
        snapshot = ConfigProvider.load(write(tmp_path / "e2e.yaml", ""))
        assert snapshot.as_dict() == {}

    def test_missing_key_is_none(self, tmp_path):
        snapshot = ConfigProvider.load(write(tmp_path / "e2e.yaml", "browser: webkit\n"))
        assert snapshot.get_property("nope") is None


class TestLoadFailures:

    def test_missing_file_is_fatal(self, tmp_path):
        with pytest.raises(ConfigLoadError) as exc:
            ConfigProvider.load(tmp_path / "absent.yaml")
        assert "absent.yaml" in str(exc.value)

    def test_malformed_yaml_is_fatal(self, tmp_path):
        cfg = write(tmp_path / "e2e.yaml", "browser: [chrome\n")
        with pytest.raises(ConfigLoadError):
            ConfigProvider.load(cfg)

    def test_non_mapping_root_is_fatal(self, tmp_path):
        cfg = write(tmp_path / "e2e.yaml", "- chrome\n- firefox\n")
        with pytest.raises(ConfigLoadError, match="mapping"):
            ConfigProvider.load(cfg)

    def test_get_does_not_retry_silently(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "absent.yaml"))
        with pytest.raises(ConfigLoadError):
            ConfigProvider.get()


class TestLoadOnce:

    def test_get_caches_snapshot(self, tmp_path, monkeypatch):
        cfg = write(tmp_path / "e2e.yaml", "browser: firefox\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(cfg))

        first = ConfigProvider.get()
        write(cfg, "browser: webkit\n")
        assert ConfigProvider.get() is first
        assert ConfigProvider.get().get_property("browser") == "firefox"

    def test_reset_reloads(self, tmp_path, monkeypatch):
        cfg = write(tmp_path / "e2e.yaml", "browser: firefox\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(cfg))
        ConfigProvider.get()

        write(cfg, "browser: webkit\n")
        ConfigProvider.reset()
        assert ConfigProvider.get().get_property("browser") == "webkit"

    def test_use_path_wins_without_touching_environment(self, tmp_path, monkeypatch):
        env_cfg = write(tmp_path / "env.yaml", "browser: firefox\n")
        pinned_cfg = write(tmp_path / "pinned.yaml", "browser: webkit\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(env_cfg))
        ConfigProvider.get()

        ConfigProvider.use_path(pinned_cfg)
        try:
            assert ConfigProvider.get().get_property("browser") == "webkit"
            assert os.environ[CONFIG_ENV_VAR] == str(env_cfg)
        finally:
            ConfigProvider.use_path(None)

        assert ConfigProvider.resolve_path() == env_cfg
        assert ConfigProvider.get().get_property("browser") == "firefox"

    def test_bundled_config_is_loadable(self, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        snapshot = ConfigProvider.get()
        assert snapshot.get_property("browser") == "chromium"
        assert snapshot.get_property("traces.dir") == "traces"


class TestSnapshot:

    def test_values_cannot_be_mutated(self):
        snapshot = ConfigSnapshot({"browser": "chrome"})
        with pytest.raises(TypeError):
            snapshot.values["browser"] = "firefox"

    def test_fields_cannot_be_reassigned(self):
        snapshot = ConfigSnapshot({"browser": "chrome"})
        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.values = {}

    def test_source_dict_is_copied(self):
        raw = {"browser": "chrome"}
        snapshot = ConfigSnapshot(raw)
        raw["browser"] = "firefox"
        assert snapshot.get_property("browser") == "chrome"

    @pytest.mark.parametrize("raw, expected", [
        ("true", True),
        ("TRUE", True),
        ("false", False),
        ("yes", False),
        ("1", False),
    ])
    def test_get_bool_only_accepts_true(self, raw, expected):
        assert ConfigSnapshot({"headless": raw}).get_bool("headless") is expected

    def test_get_bool_default_when_absent(self):
        assert ConfigSnapshot({}).get_bool("headless", default=True) is True
