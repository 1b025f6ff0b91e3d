"""Tests for layered configuration."""

import json
import logging

import pytest

from lexistore import config as config_module
from lexistore.config import (
    BuildConfig,
    LexistoreConfig,
    configure,
    get_config,
    load_lexicon_styles,
    reset_config,
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    config_dir = tmp_path / "config"
    monkeypatch.setattr(config_module, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_dir / "config.json")
    for name in (
        "DB_PATH",
        "BUILD_MAX_WORD_LENGTH",
        "BUILD_MAX_DEFINITION_LINKS",
        "BUILD_PROGRESS_STEP",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield config_dir / "config.json"
    reset_config()


class TestDefaults:
    """Hardcoded defaults."""

    def test_defaults(self):
        config = LexistoreConfig.load()
        assert config.build.max_word_length == 15
        assert config.build.max_definition_links == 3
        assert config.build.progress_step == 1000
        assert config.defaults.db_path == "./storage/lexicon.db"
        assert config.lexicon_styles == []


class TestConfigFile:
    """Values from config.json."""

    def test_file_values(self, isolated_config):
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text(
            json.dumps(
                {
                    "build": {"max_word_length": 8},
                    "defaults": {"db_path": "/tmp/csw.db"},
                    "lexicon_styles": [
                        {
                            "lexicon": "CSW",
                            "compare_lexicon": "TWL",
                            "in_compare_lexicon": False,
                            "symbol": "#",
                        }
                    ],
                }
            )
        )
        config = LexistoreConfig.load()
        assert config.build.max_word_length == 8
        assert config.db_path == "/tmp/csw.db"
        assert config.lexicon_styles[0].symbol == "#"

    def test_invalid_style_skipped(self, isolated_config, caplog):
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text(
            json.dumps(
                {
                    "lexicon_styles": [
                        {"lexicon": "CSW", "symbol": "#"},
                        {
                            "lexicon": "CSW",
                            "compare_lexicon": "TWL",
                            "in_compare_lexicon": True,
                            "symbol": "+",
                        },
                    ]
                }
            )
        )
        with caplog.at_level(logging.WARNING, logger="lexistore.config"):
            config = LexistoreConfig.load()
        assert [s.symbol for s in config.lexicon_styles] == ["+"]
        assert "invalid lexicon style" in caplog.text

    def test_broken_file_ignored(self, isolated_config, caplog):
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text("{not json")
        with caplog.at_level(logging.WARNING, logger="lexistore.config"):
            config = LexistoreConfig.load()
        assert config.build.max_word_length == 15
        assert "Failed to load config" in caplog.text

    def test_save_round_trip(self, isolated_config):
        config = LexistoreConfig(build=BuildConfig(progress_step=50))
        config.save()
        assert json.loads(isolated_config.read_text())["build"]["progress_step"] == 50
        assert LexistoreConfig.load().build.progress_step == 50


class TestEnvironment:
    """Env var overrides."""

    def test_env_overrides_file(self, isolated_config, monkeypatch):
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text(json.dumps({"build": {"max_word_length": 8}}))
        monkeypatch.setenv("BUILD_MAX_WORD_LENGTH", "7")
        monkeypatch.setenv("DB_PATH", "/data/lex.db")
        config = LexistoreConfig.load()
        assert config.build.max_word_length == 7
        assert config.defaults.db_path == "/data/lex.db"

    def test_invalid_int_ignored(self, monkeypatch, caplog):
        monkeypatch.setenv("BUILD_PROGRESS_STEP", "lots")
        with caplog.at_level(logging.WARNING, logger="lexistore.config"):
            config = LexistoreConfig.load()
        assert config.build.progress_step == 1000
        assert "BUILD_PROGRESS_STEP" in caplog.text


class TestGlobalConfig:
    """Process-wide singleton."""

    def test_get_config_cached(self):
        assert get_config() is get_config()

    def test_configure_and_reset(self):
        custom = LexistoreConfig(build=BuildConfig(max_word_length=5))
        configure(custom)
        assert get_config() is custom
        reset_config()
        assert get_config() is not custom


class TestStyleYaml:
    """Styles supplied as YAML files."""

    def test_list_form(self, tmp_path):
        path = tmp_path / "styles.yaml"
        path.write_text(
            "- lexicon: CSW\n"
            "  compare_lexicon: TWL\n"
            "  in_compare_lexicon: false\n"
            "  symbol: '#'\n"
        )
        styles = load_lexicon_styles(path)
        assert len(styles) == 1
        assert styles[0].in_compare_lexicon is False

    def test_mapping_form(self, tmp_path):
        path = tmp_path / "styles.yaml"
        path.write_text(
            "lexicon_styles:\n"
            "  - {lexicon: CSW, compare_lexicon: TWL, in_compare_lexicon: true, symbol: '+'}\n"
        )
        assert load_lexicon_styles(path)[0].symbol == "+"
