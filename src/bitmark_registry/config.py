"""Client configuration: timeouts, API version, and YAML settings files."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

import httpx
import yaml

from bitmark_registry.errors import ConfigError
from bitmark_registry.models import ApiVersion

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 5.0
DEFAULT_TLS_TIMEOUT = 5.0
DEFAULT_REQUEST_TIMEOUT = 10.0

_CONFIG_KEYS = frozenset({"connect_timeout", "tls_timeout", "request_timeout", "api_version"})


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Transport and endpoint settings for a RegistryClient.

    Timeouts are in seconds. ``request_timeout`` bounds a whole call, from
    sending the request to reading the last byte of the body.
    """

    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    tls_timeout: float = DEFAULT_TLS_TIMEOUT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    api_version: ApiVersion = ApiVersion.V1

    def __post_init__(self) -> None:
        for name in ("connect_timeout", "tls_timeout", "request_timeout"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(f"{name} must be a number of seconds, got {value!r}")
            if value <= 0:
                raise ConfigError(f"{name} must be positive, got {value!r}")
        try:
            version = ApiVersion(self.api_version)
        except ValueError as exc:
            valid = ", ".join(v.value for v in ApiVersion)
            raise ConfigError(
                f"Unknown api_version {self.api_version!r}. Expected one of: {valid}"
            ) from exc
        # Frozen + slots: normalise a plain string through object.__setattr__.
        object.__setattr__(self, "api_version", version)

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> ClientConfig:
        """Build a config from a plain mapping (e.g. a parsed YAML section)."""
        unknown = set(data) - _CONFIG_KEYS
        if unknown:
            raise ConfigError(f"Unknown client config keys: {', '.join(sorted(unknown))}")
        return cls(**data)  # type: ignore[arg-type]

    def httpx_timeout(self) -> httpx.Timeout:
        """Translate to an httpx.Timeout.

        httpx covers TCP connect and TLS handshake with a single ``connect``
        phase, so both budgets are added together there.
        """
        return httpx.Timeout(
            self.request_timeout,
            connect=self.connect_timeout + self.tls_timeout,
        )


@dataclass(frozen=True, slots=True)
class RegistrySettings:
    """Everything needed to build a RegistryClient from a settings file."""

    base_uri: str
    client: ClientConfig = field(default_factory=ClientConfig)


def load_settings(path: str | Path) -> RegistrySettings:
    """Load registry settings from a YAML file.

    Expected shape::

        base_uri: https://registry.example.com
        client:
          request_timeout: 10
          api_version: v1

    Raises:
        ConfigError: If the file is missing, not valid YAML, or malformed.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read settings file {path}: {exc}") from exc

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in settings file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a mapping")

    base_uri = data.get("base_uri")
    if not isinstance(base_uri, str) or not base_uri.strip():
        raise ConfigError(f"Settings file {path} is missing 'base_uri'")

    client_raw = data.get("client") or {}
    if not isinstance(client_raw, dict):
        raise ConfigError(f"'client' in settings file {path} must be a mapping")

    logger.debug("Loaded registry settings from %s", path)
    return RegistrySettings(
        base_uri=base_uri.strip(),
        client=ClientConfig.from_mapping(client_raw),
    )
