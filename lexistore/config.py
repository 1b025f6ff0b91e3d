"""Configuration management for Lexistore.

Config resolution order (highest priority first):
1. Programmatic (LexistoreConfig constructed in code)
2. Environment variables (DB_PATH, BUILD_MAX_WORD_LENGTH, etc.)
3. Config file (~/.config/lexistore/config.json, managed by `lexistore config`)
4. Hardcoded defaults

Lexicon styles are kept in the config file as a list of objects:

    {"lexicon_styles": [
        {"lexicon": "CSW", "compare_lexicon": "TWL",
         "in_compare_lexicon": false, "symbol": "#"}
    ]}
"""

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .core.models import LexiconStyle


logger = logging.getLogger(__name__)


# =============================================================================
# Config file location
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "lexistore"
CONFIG_FILE = CONFIG_DIR / "config.json"


# =============================================================================
# Config dataclasses
# =============================================================================


@dataclass
class BuildConfig:
    """Build pipeline tuning."""

    max_word_length: int = 15
    max_definition_links: int = 3
    progress_step: int = 1000


@dataclass
class DefaultsConfig:
    """Non-build default settings."""

    db_path: str = "./storage/lexicon.db"


@dataclass
class LexistoreConfig:
    """Top-level lexistore configuration.

    Examples:
        # Package use: no files needed
        config = LexistoreConfig(build=BuildConfig(max_word_length=8))

        # CLI use: loads from ~/.config/lexistore/config.json
        config = LexistoreConfig.load()
    """

    build: BuildConfig = field(default_factory=BuildConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    lexicon_styles: list[LexiconStyle] = field(default_factory=list)

    @classmethod
    def load(cls) -> "LexistoreConfig":
        """Load config from file + env vars.

        Priority: env var values > config.json values > defaults.
        """
        config = cls()

        # Layer 1: Load from config file if it exists
        if CONFIG_FILE.exists():
            try:
                with open(CONFIG_FILE) as f:
                    data = json.load(f)
                _apply_dict(config, data)
            except (json.JSONDecodeError, OSError) as exc:
                logger.warning("Failed to load config from %s: %s", CONFIG_FILE, exc)

        # Layer 2: Env var overrides
        if val := os.environ.get("DB_PATH"):
            config.defaults.db_path = val
        for env_name, attr in (
            ("BUILD_MAX_WORD_LENGTH", "max_word_length"),
            ("BUILD_MAX_DEFINITION_LINKS", "max_definition_links"),
            ("BUILD_PROGRESS_STEP", "progress_step"),
        ):
            if val := os.environ.get(env_name):
                try:
                    setattr(config.build, attr, int(val))
                except ValueError:
                    logger.warning("Invalid %s=%r, ignoring", env_name, val)

        return config

    def save(self) -> None:
        """Save config to ~/.config/lexistore/config.json."""
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        with open(CONFIG_FILE, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for display."""
        return {
            "build": asdict(self.build),
            "defaults": asdict(self.defaults),
            "lexicon_styles": [s.model_dump() for s in self.lexicon_styles],
        }

    @property
    def db_path(self) -> str:
        return self.defaults.db_path

    @db_path.setter
    def db_path(self, value: str) -> None:
        self.defaults.db_path = value


# =============================================================================
# Config dict application
# =============================================================================


def parse_lexicon_styles(entries: Any) -> list[LexiconStyle]:
    """Validate a list of style dicts, skipping invalid entries."""
    if not isinstance(entries, list):
        logger.warning("lexicon_styles must be a list, got %s", type(entries).__name__)
        return []
    styles = []
    for index, entry in enumerate(entries):
        try:
            styles.append(LexiconStyle.model_validate(entry))
        except ValidationError as exc:
            logger.warning("Skipping invalid lexicon style #%d: %s", index, exc)
    return styles


def load_lexicon_styles(path: Path | str) -> list[LexiconStyle]:
    """Load lexicon styles from a YAML file (a list, or a ``lexicon_styles`` key)."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or []
    if isinstance(data, dict):
        data = data.get("lexicon_styles", [])
    return parse_lexicon_styles(data)


def _apply_dict(config: LexistoreConfig, data: dict) -> None:
    """Apply a dict of values onto a LexistoreConfig."""
    if "build" in data and isinstance(data["build"], dict):
        for k, v in data["build"].items():
            if hasattr(config.build, k):
                try:
                    setattr(config.build, k, int(v))
                except (TypeError, ValueError):
                    logger.warning("Invalid build.%s=%r in config, ignoring", k, v)
    if "defaults" in data and isinstance(data["defaults"], dict):
        for k, v in data["defaults"].items():
            if hasattr(config.defaults, k):
                setattr(config.defaults, k, v)
    if "lexicon_styles" in data:
        config.lexicon_styles = parse_lexicon_styles(data["lexicon_styles"])


# =============================================================================
# Global config singleton
# =============================================================================

_config: LexistoreConfig | None = None


def get_config() -> LexistoreConfig:
    """Get the global LexistoreConfig instance.

    First call loads from file + env vars. Subsequent calls return cached instance.
    Use configure() to replace the global config programmatically.
    """
    global _config
    if _config is None:
        _config = LexistoreConfig.load()
    return _config


def configure(config: LexistoreConfig) -> None:
    """Set the global LexistoreConfig programmatically."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global config (forces reload on next get_config())."""
    global _config
    _config = None
