"""
Settings Management Module

Provides pydantic-based configuration management with:
- YAML configuration file loading
- Environment variable overrides (TUBE_PLAYER_*)
- Multi-environment support (dev, prod, test)
- Proxy session identifier resolution (environment, then persisted file)
"""

import os
from contextvars import ContextVar
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import AliasChoices, Field
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from .log_config import get_context_logger


DEFAULT_PROXY_ORIGIN = "https://vps.jonathanburnhams.com/"
DEFAULT_SESSION_STORE = Path.home() / ".tube_player" / "session-id"

logger = get_context_logger("settings")

# YAML values being loaded by Settings.load_from_yaml; empty outside of it.
_yaml_values: ContextVar[dict[str, Any]] = ContextVar("tube_player_yaml_values", default={})


class YamlValuesSource(PydanticBaseSettingsSource):
    """Settings source serving values read from the YAML configuration files."""

    def __init__(self, settings_cls: type[BaseSettings], values: dict[str, Any]):
        super().__init__(settings_cls)
        self.values = values

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        return self.values.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return dict(self.values)


class Settings(BaseSettings):
    """
    Main player settings with multi-environment support.

    Configuration hierarchy (lowest to highest precedence):
    1. Field defaults
    2. settings/config.yaml (base)
    3. settings/config.{environment}.yaml (environment-specific)
    4. Environment variables (TUBE_PLAYER_*, plus PROXY_SESSION_ID and SKIP_PROXY)
    5. Keyword arguments passed to Settings(...)

    Examples:
        Load settings:
        >>> settings = get_settings()
        >>> settings.max_retries
        3

        Bypass the proxy for local testing:
        $ SKIP_PROXY=true python -m my_app
    """

    model_config = SettingsConfigDict(
        env_prefix="TUBE_PLAYER_",
        env_nested_delimiter="__",
        case_sensitive=False,
        populate_by_name=True,
        extra="allow",
    )

    environment: str = "development"
    log_level: str = "INFO"

    proxy_origin: str = DEFAULT_PROXY_ORIGIN
    session_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("TUBE_PLAYER_SESSION_ID", "PROXY_SESSION_ID"),
    )
    session_store_path: Path = DEFAULT_SESSION_STORE
    skip_proxy: bool = Field(
        default=False,
        validation_alias=AliasChoices("TUBE_PLAYER_SKIP_PROXY", "SKIP_PROXY"),
    )
    max_retries: int = Field(default=3, ge=1)

    http: dict[str, Any] = Field(default_factory=dict)
    player: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlValuesSource(settings_cls, _yaml_values.get()),
            file_secret_settings,
        )

    @classmethod
    def load_from_yaml(cls, config_path: Path | None = None) -> "Settings":
        """
        Load settings from YAML configuration file.

        Args:
            config_path: Path to config file (default: settings/config.yaml)

        Returns:
            Settings instance
        """
        if config_path is None:
            # settings.py lives in src/tube_player/, the project root is three levels up
            project_root = Path(__file__).parent.parent.parent
            config_path = project_root / "settings" / "config.yaml"

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            config_data = yaml.safe_load(f) or {}

        env = os.getenv("TUBE_PLAYER_ENVIRONMENT", config_data.get("environment", "development"))
        env_config_path = config_path.parent / f"config.{env}.yaml"

        if env_config_path.exists():
            with open(env_config_path) as f:
                env_config = yaml.safe_load(f) or {}
                config_data = cls._deep_merge(config_data, env_config)

        token = _yaml_values.set(config_data)
        try:
            return cls()
        finally:
            _yaml_values.reset(token)

    @staticmethod
    def _deep_merge(base: dict, override: dict) -> dict:
        """Deep merge two dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = Settings._deep_merge(result[key], value)
            else:
                result[key] = value
        return result


def resolve_session_id(settings: Settings) -> str | None:
    """
    Resolve the proxy session identifier.

    The environment-provided identifier takes priority over the one
    persisted in ``settings.session_store_path``. Storage that cannot be
    read is treated as absent.

    Args:
        settings: Active settings

    Returns:
        Session identifier, or None when neither source has one
    """
    if settings.session_id:
        return settings.session_id

    try:
        stored = settings.session_store_path.read_text(encoding="utf-8").strip()
    except OSError:
        return None

    return stored or None


def persist_session_id(settings: Settings, session_id: str) -> None:
    """Write a session identifier to the persisted store."""
    path = settings.session_store_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(session_id, encoding="utf-8")
    logger.debug("Session id persisted", path=str(path))


@lru_cache
def get_settings(config_path: Path | None = None) -> Settings:
    """
    Get cached settings instance.

    Args:
        config_path: Optional path to config file

    Returns:
        Settings instance
    """
    return Settings.load_from_yaml(config_path)


def reload_settings() -> Settings:
    """Reload settings by clearing cache."""
    get_settings.cache_clear()
    return get_settings()


__all__ = [
    "DEFAULT_PROXY_ORIGIN",
    "Settings",
    "get_settings",
    "reload_settings",
    "resolve_session_id",
    "persist_session_id",
]
