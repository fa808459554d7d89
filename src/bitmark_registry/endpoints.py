"""Registry endpoint table and URL construction.

Each API generation maps operation names to an ``Endpoint``: a path
template, the envelope key that carries the payload, and the query
parameters the endpoint accepts.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote as urlquote

import httpx

from bitmark_registry.errors import ConfigError
from bitmark_registry.models import ApiVersion

TRANSACTION = "transaction"
BITMARK = "bitmark"
BITMARKS_BY_OWNER = "bitmarks_by_owner"
BLOCKS = "blocks"

PENDING = "pending"
PROVENANCE = "provenance"


@dataclass(frozen=True, slots=True)
class Endpoint:
    """A single registry GET endpoint."""

    name: str
    path_template: str
    payload_key: str
    flags: frozenset[str] = frozenset()
    owner_filter: bool = False

    def path(self, identifier: str | None = None) -> str:
        if "{id}" not in self.path_template:
            return self.path_template
        if identifier is None:
            raise ConfigError(f"Endpoint '{self.name}' requires an identifier")
        # One path segment; reserved characters (including "/") are escaped.
        return self.path_template.replace("{id}", urlquote(identifier, safe=""))


_V1_ENDPOINTS: dict[str, Endpoint] = {
    TRANSACTION: Endpoint(TRANSACTION, "/v1/txs/{id}", "tx"),
    BITMARK: Endpoint(
        BITMARK,
        "/v1/bitmarks/{id}",
        "bitmark",
        flags=frozenset({PENDING, PROVENANCE}),
    ),
    BITMARKS_BY_OWNER: Endpoint(
        BITMARKS_BY_OWNER,
        "/v1/bitmarks",
        "bitmarks",
        flags=frozenset({PENDING, PROVENANCE}),
        owner_filter=True,
    ),
    BLOCKS: Endpoint(BLOCKS, "/v1/blocks", "blocks"),
}

# The legacy registry only ever served single bitmarks, keyed by the
# issuing transaction id, with no query parameters.
_LEGACY_ENDPOINTS: dict[str, Endpoint] = {
    BITMARK: Endpoint(BITMARK, "/registry/v1/bitmarks/{id}", "bitmark"),
}

ENDPOINTS: dict[ApiVersion, dict[str, Endpoint]] = {
    ApiVersion.V1: _V1_ENDPOINTS,
    ApiVersion.LEGACY: _LEGACY_ENDPOINTS,
}


def get_endpoint(api_version: ApiVersion, name: str) -> Endpoint:
    """Look up an endpoint for the given API generation.

    Raises:
        ConfigError: If that generation does not serve the operation.
    """
    try:
        return ENDPOINTS[api_version][name]
    except KeyError:
        raise ConfigError(
            f"The '{api_version}' registry API has no '{name}' endpoint"
        ) from None


def build_url(
    base_url: httpx.URL,
    endpoint: Endpoint,
    *,
    identifier: str | None = None,
    owner: str = "",
    pending: bool = False,
    provenance: bool = False,
) -> httpx.URL:
    """Clone *base_url* and point it at *endpoint*.

    The identifier is percent-encoded as one path segment but otherwise
    unchecked; its format is the server's concern. Flags are only sent
    when true (never as ``false``) and only if the endpoint accepts them.
    An empty *owner* means "no filter" and is left out.
    The base URL's own path, query and fragment are replaced.
    """
    params: list[tuple[str, str]] = []
    if endpoint.owner_filter and owner:
        params.append(("owner", owner))
    if pending and PENDING in endpoint.flags:
        params.append((PENDING, "true"))
    if provenance and PROVENANCE in endpoint.flags:
        params.append((PROVENANCE, "true"))

    return base_url.copy_with(
        path=endpoint.path(identifier),
        params=params,
        fragment=None,
    )
