"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority)
2. Environment variables (DIFFSTORY__SECTION__KEY)
3. User config (config.yaml in the diffstory config directory)
4. Built-in defaults (lowest priority)
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from diffstory.config.models import (
    DiffstoryConfig,
    GenerateConfig,
    LoggingConfig,
    ServerConfig,
    StoreConfig,
    WatcherConfig,
)
from diffstory.core.errors import ConfigError

CONFIG_FILENAME = "config.yaml"


def config_dir() -> Path:
    """Directory holding the user config file."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "diffstory"
    return Path("~/.config/diffstory").expanduser()


def default_config_path() -> Path:
    return config_dir() / CONFIG_FILENAME


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top-level value must be a mapping")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._yaml_config


def _make_settings_class(yaml_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class with instance-based YAML source (thread-safe)."""

    class DiffstorySettings(BaseSettings):
        """Root config. Env vars: DIFFSTORY__LOGGING__LEVEL, DIFFSTORY__SERVER__PORT, etc."""

        model_config = SettingsConfigDict(
            env_prefix="DIFFSTORY__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        logging: LoggingConfig = LoggingConfig()
        server: ServerConfig = ServerConfig()
        store: StoreConfig = StoreConfig()
        watcher: WatcherConfig = WatcherConfig()
        generate: GenerateConfig = GenerateConfig()
        debug_logging_enabled: bool = False

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > yaml file
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return DiffstorySettings


DiffstorySettings = _make_settings_class({})


def load_config(config_path: Path | None = None, **kwargs: Any) -> DiffstoryConfig:
    """Load config: defaults < user config < env vars < kwargs.

    Args:
        config_path: YAML file to read. Defaults to the user config location.
        **kwargs: Override values (highest precedence).

    Returns:
        Fully resolved configuration object.

    Raises:
        ConfigError: On invalid YAML syntax or validation errors.
    """
    yaml_config = _load_yaml(config_path or default_config_path())

    settings_cls = _make_settings_class(yaml_config)
    try:
        settings = settings_cls(**kwargs)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e
    return DiffstoryConfig.model_validate(settings.model_dump())


def merge_overrides(config: DiffstoryConfig, overrides: dict[str, Any]) -> DiffstoryConfig:
    """Return a copy of config with nested overrides applied (CLI flags)."""
    merged = _deep_merge(config.model_dump(), overrides)
    try:
        return DiffstoryConfig.model_validate(merged)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e
