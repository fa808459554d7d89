"""bitmark-registry: read-only client for the bitmark ledger registry API."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _distribution_version

from bitmark_registry.client import RegistryClient
from bitmark_registry.config import ClientConfig, RegistrySettings, load_settings
from bitmark_registry.errors import (
    BodyReadError,
    ConfigError,
    EmptyResultError,
    ParseError,
    RegistryClientError,
    ServerError,
    TransportError,
)
from bitmark_registry.models import ApiVersion, BlockSummary

_LOCAL_VERSION_FALLBACK = "0.0.0+local"


def _resolve_version() -> str:
    """Resolve package version from installed metadata with deterministic fallback."""
    try:
        return _distribution_version("bitmark-registry")
    except PackageNotFoundError:
        return _LOCAL_VERSION_FALLBACK


__version__ = _resolve_version()

__all__ = [
    "ApiVersion",
    "BlockSummary",
    "BodyReadError",
    "ClientConfig",
    "ConfigError",
    "EmptyResultError",
    "ParseError",
    "RegistryClient",
    "RegistryClientError",
    "RegistrySettings",
    "ServerError",
    "TransportError",
    "__version__",
    "load_settings",
]
