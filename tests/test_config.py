"""Tests for configuration loading."""

import logging

import pytest

from fieldpath.config import Config, LoggingConfig, load_config, setup_logging

ENV_VARS = (
    "FIELDPATH_MAP_FILE",
    "FIELDPATH_CACHE_FILE",
    "FIELDPATH_CACHE_COMPRESS",
    "FIELDPATH_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults(self):
        config = Config()
        assert config.map.file == "prt_fild02.fld2"
        assert config.cache.file == "./data/paths_cache.json"
        assert config.cache.compress is False
        assert config.query.fallback_to_search is True

    def test_yaml_sections(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "map:\n"
            "  file: maps/test.fld2\n"
            "cache:\n"
            "  file: out/cache.json\n"
            "  compress: true\n"
            "  progress_interval: 0\n"
            "query:\n"
            "  fallback_to_search: false\n"
        )
        config = load_config(str(path))

        assert config.map.file == "maps/test.fld2"
        assert config.cache.file == "out/cache.json"
        assert config.cache.compress is True
        assert config.cache.progress_interval == 0
        assert config.cache.prune_unreachable is True
        assert config.query.fallback_to_search is False
        assert config.logging.level == "INFO"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)) == Config()

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_config(str(tmp_path / "nope.yaml"))
        assert config == Config()

    def test_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FIELDPATH_MAP_FILE", "env.fld2")
        monkeypatch.setenv("FIELDPATH_CACHE_FILE", "env.json")
        monkeypatch.setenv("FIELDPATH_CACHE_COMPRESS", "yes")
        monkeypatch.setenv("FIELDPATH_LOG_LEVEL", "DEBUG")

        config = load_config(str(tmp_path / "nope.yaml"))
        assert config.map.file == "env.fld2"
        assert config.cache.file == "env.json"
        assert config.cache.compress is True
        assert config.logging.level == "DEBUG"

    def test_env_flag_false(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FIELDPATH_CACHE_COMPRESS", "0")
        assert load_config(str(tmp_path / "nope.yaml")).cache.compress is False

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        """Environment values win over file values."""
        path = tmp_path / "config.yaml"
        path.write_text("cache:\n  file: from_yaml.json\n  compress: true\n")
        monkeypatch.setenv("FIELDPATH_CACHE_FILE", "from_env.json")
        monkeypatch.setenv("FIELDPATH_CACHE_COMPRESS", "off")

        config = load_config(str(path))
        assert config.cache.file == "from_env.json"
        assert config.cache.compress is False

    def test_env_log_level_normalized(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FIELDPATH_LOG_LEVEL", "debug")
        assert load_config(str(tmp_path / "nope.yaml")).logging.level == "DEBUG"

    def test_empty_section_keeps_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("cache:\nquery:\n  fallback_to_search: false\n")

        config = load_config(str(path))
        assert config.cache == Config().cache
        assert config.query.fallback_to_search is False


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_level(self):
        setup_logging(LoggingConfig(level="WARNING"))
        assert logging.getLogger().level == logging.WARNING

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "fieldpath.log"
        setup_logging(LoggingConfig(level="INFO", file=str(log_file)))
        logging.getLogger("fieldpath.test").info("hello")

        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "hello" in log_file.read_text()
