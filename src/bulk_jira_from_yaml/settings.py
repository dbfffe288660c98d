"""Configuration helpers for the Jira client."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import AnyHttpUrl, Field, ValidationError, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

APP_NAME = "bulk-jira-from-yaml"
API_PATH = "/rest/api/3"
DEFAULT_LABEL = "off-boarding"

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when credentials or the Jira host are missing or invalid."""


class JiraConfig(BaseSettings):
    """Settings that describe how to reach a Jira Cloud site."""

    host: AnyHttpUrl = Field(description="Base URL of the Jira site, e.g. https://example.atlassian.net.")
    username: str = Field(description="Account e-mail used for basic authentication.")
    token: str = Field(description="Atlassian API token paired with ``username``.")
    label: str = Field(
        default=DEFAULT_LABEL,
        description="Label attached to every issue created in a run.",
    )
    http_timeout: float = Field(
        default=30.0,
        description="HTTP timeout (seconds) for REST requests.",
    )

    model_config = SettingsConfigDict(env_prefix="BJY_", env_file=".env", extra="ignore")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Values read from the config file arrive as init kwargs; the
        # environment takes precedence over them.
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    @field_validator("username", "token", "label")
    @classmethod
    def _non_empty(cls, value: str, info: ValidationInfo) -> str:
        if not value.strip():
            raise ValueError(f"Field '{info.field_name}' cannot be empty")
        return value.strip()

    @property
    def api_url(self) -> str:
        """Return the REST API root for the configured host."""

        return str(self.host).rstrip("/") + API_PATH

    def as_auth(self) -> tuple[str, str]:
        """Return the ``(username, token)`` pair for HTTP basic auth."""

        return self.username, self.token


def default_config_path() -> Path:
    return Path.home() / ".config" / APP_NAME / f"{APP_NAME}.yaml"


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file '{path}': {exc}") from exc

    try:
        data = yaml.safe_load(raw) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in config file '{path}': {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Config file '{path}' must contain a mapping")
    return data


def load_config(config_file: Path | None = None) -> JiraConfig:
    """Build a :class:`JiraConfig` from a YAML file and ``BJY_*`` variables.

    An explicit ``config_file`` must exist. Without one, the default location
    under ``~/.config`` is used when present and otherwise only the
    environment is consulted.
    """

    if config_file is not None:
        path = config_file.expanduser()
        if not path.is_file():
            raise ConfigError(f"Config file '{path}' not found")
    else:
        path = default_config_path()

    values: dict[str, Any] = {}
    if path.is_file():
        logger.debug("Using config file: %s", path)
        values = _read_config_file(path)
    else:
        logger.debug("No config file at %s; reading environment only", path)

    try:
        return JiraConfig(**values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
