"""Unified configuration loaded from .mindful-journal.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from mindful_journal.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".mindful-journal.toml"
CONFIG_DIR = Path.home() / ".config" / "mindful-journal"
CONFIG_SEARCH_PATHS = [
    Path("."),
]

DEFAULT_REFLECTION_MODEL = "gemini-2.5-flash"


class SupabaseConfig(BaseModel):
    """[supabase] section."""

    url: str = ""
    anon_key: str = ""
    table: str = "entries"

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.anon_key)

    def require(self) -> None:
        """Raise ConfigError unless both URL and key are set."""
        if not self.is_configured:
            raise ConfigError(
                "Missing Supabase settings. Define SUPABASE_URL and "
                "SUPABASE_ANON_KEY in your environment or set [supabase] url "
                f"and anon_key in {CONFIG_FILENAME}."
            )


class ReflectionConfig(BaseModel):
    """[reflection] section."""

    api_key: str = ""
    model: str = DEFAULT_REFLECTION_MODEL
    thinking_budget: int = 0

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


class SessionConfig(BaseModel):
    """[session] section: where the signed-in session is kept between runs."""

    storage_dir: str = str(CONFIG_DIR)


class LoggingConfig(BaseModel):
    """[logging] section."""

    level: str = "WARNING"

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            logger.warning("Unknown log level %r, using WARNING", value)
            return "WARNING"
        return level


class JournalAppConfig(BaseModel):
    """Top-level configuration model for the journal application."""

    supabase: SupabaseConfig = Field(default_factory=SupabaseConfig)
    reflection: ReflectionConfig = Field(default_factory=ReflectionConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(path: str | Path | None = None) -> JournalAppConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .mindful-journal.toml in CWD
    3. ~/.config/mindful-journal/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged JournalAppConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        global_config = CONFIG_DIR / "config.toml"
        if not data and global_config.exists():
            data = _load_toml(global_config)
            logger.info("Loaded config from %s", global_config)

    config = JournalAppConfig.model_validate(data) if data else JournalAppConfig()

    return _apply_env_vars(config)


def merge_cli_overrides(config: JournalAppConfig, **cli_kwargs: object) -> JournalAppConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "model": ("reflection", "model"),
        "log_level": ("logging", "level"),
    }

    for key, value in cli_kwargs.items():
        if value is None or key not in mapping:
            continue
        section, field = mapping[key]
        data[section][field] = value

    return JournalAppConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: JournalAppConfig) -> JournalAppConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "SUPABASE_URL": ("supabase", "url"),
        "SUPABASE_ANON_KEY": ("supabase", "anon_key"),
        "GENAI_API_KEY": ("reflection", "api_key"),
        "GOOGLE_AI_API_KEY": ("reflection", "api_key"),
        "MINDFUL_JOURNAL_MODEL": ("reflection", "model"),
        "MINDFUL_JOURNAL_LOG_LEVEL": ("logging", "level"),
    }

    # Later entries win, so GOOGLE_AI_API_KEY beats GENAI_API_KEY.
    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value.strip()

    return JournalAppConfig.model_validate(data)
