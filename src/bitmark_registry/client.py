"""Blocking HTTP client for the bitmark registry API.

Every query method performs one GET, validates the JSON envelope and
returns the payload as raw JSON bytes. Errors surface as subclasses of
RegistryClientError; nothing is retried or cached.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from types import TracebackType

import httpx

from bitmark_registry import endpoints
from bitmark_registry.config import ClientConfig, RegistrySettings
from bitmark_registry.envelope import decode_blocks, decode_envelope
from bitmark_registry.errors import (
    BodyReadError,
    ConfigError,
    EmptyResultError,
    ServerError,
    TransportError,
)
from bitmark_registry.models import BlockSummary, Envelope

logger = logging.getLogger(__name__)

# Used when a non-200 response carries no message of its own.
FALLBACK_SERVER_MESSAGE = "registry request failed"

_HEADERS = {"Accept": "application/json"}


def _parse_base_url(base_uri: str) -> httpx.URL:
    try:
        url = httpx.URL(base_uri)
    except (httpx.InvalidURL, TypeError) as exc:
        raise ConfigError(f"Invalid registry URI {base_uri!r}: {exc}") from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigError(
            f"Invalid registry URI {base_uri!r}: expected an absolute http(s) URL"
        )
    return url


@dataclass(frozen=True)
class RegistryClient:
    """Sync client for the bitmark registry API.

    Holds no per-call state, so one instance can be shared across threads.
    Use :meth:`from_uri` to build one with the configured timeouts.
    """

    base_url: httpx.URL
    http: httpx.Client
    config: ClientConfig = field(default_factory=ClientConfig)

    # ── Construction ──────────────────────────────────────────

    @classmethod
    def from_uri(
        cls,
        base_uri: str,
        config: ClientConfig | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> RegistryClient:
        """Create a client for the registry at *base_uri*.

        No network I/O happens here; connections are opened lazily.

        Args:
            base_uri: Absolute http(s) URL of the registry.
            config: Timeouts and API version. Defaults to ClientConfig().
            transport: Optional httpx transport (custom TLS, proxies, tests).

        Raises:
            ConfigError: If *base_uri* is not an absolute http(s) URL.
        """
        config = config or ClientConfig()
        base_url = _parse_base_url(base_uri)
        http = httpx.Client(
            timeout=config.httpx_timeout(),
            headers=_HEADERS,
            transport=transport,
        )
        return cls(base_url=base_url, http=http, config=config)

    @classmethod
    def from_settings(
        cls,
        settings: RegistrySettings,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> RegistryClient:
        """Create a client from loaded RegistrySettings."""
        return cls.from_uri(settings.base_uri, settings.client, transport=transport)

    def close(self) -> None:
        """Release pooled connections."""
        self.http.close()

    def __enter__(self) -> RegistryClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ── Public API ────────────────────────────────────────────

    def get_transaction(self, tx_id: str) -> bytes:
        """Fetch one ledger transaction as raw JSON bytes.

        *tx_id* is percent-encoded as a single path segment; malformed ids are
        reported by the server as a ServerError.
        """
        return self._fetch(endpoints.TRANSACTION, identifier=tx_id).payload

    def get_bitmark(
        self,
        bitmark_id: str,
        *,
        pending: bool = False,
        provenance: bool = False,
    ) -> bytes:
        """Fetch one bitmark record as raw JSON bytes.

        Args:
            bitmark_id: Bitmark id (the issuing transaction id on the
                legacy API).
            pending: Include not-yet-confirmed state.
            provenance: Include the ownership-transfer chain.

        The legacy API takes no query parameters, so both flags are
        ignored there.
        """
        envelope = self._fetch(
            endpoints.BITMARK,
            identifier=bitmark_id,
            pending=pending,
            provenance=provenance,
        )
        return envelope.payload

    def get_bitmarks_by_owner(
        self,
        owner: str = "",
        *,
        pending: bool = False,
        provenance: bool = False,
    ) -> bytes:
        """Fetch a bitmark listing as raw JSON bytes.

        An empty *owner* means no owner filter at all.
        """
        envelope = self._fetch(
            endpoints.BITMARKS_BY_OWNER,
            owner=owner,
            pending=pending,
            provenance=provenance,
        )
        return envelope.payload

    def get_latest_block(self) -> BlockSummary:
        """Return the newest block summary.

        Raises:
            EmptyResultError: If the registry returns no blocks. A live
                registry always has at least one, so this is a protocol
                violation rather than a normal state.
        """
        raw = self._get(endpoints.BLOCKS)
        envelope = self._decode(raw)
        blocks = decode_blocks(envelope.payload, raw.content)
        if not blocks:
            raise EmptyResultError("registry returned an empty block list")
        return blocks[0]

    def get_latest_block_number(self) -> int:
        """Return the height of the newest block."""
        return self.get_latest_block().number

    # ── HTTP helpers ──────────────────────────────────────────

    def _fetch(
        self,
        name: str,
        *,
        identifier: str | None = None,
        owner: str = "",
        pending: bool = False,
        provenance: bool = False,
    ) -> Envelope:
        raw = self._get(
            name,
            identifier=identifier,
            owner=owner,
            pending=pending,
            provenance=provenance,
        )
        return self._decode(raw)

    def _get(
        self,
        name: str,
        *,
        identifier: str | None = None,
        owner: str = "",
        pending: bool = False,
        provenance: bool = False,
    ) -> _RawResponse:
        """GET an endpoint and read its whole body within ``request_timeout``.

        Raises:
            ConfigError: If the configured API version lacks the endpoint.
            TransportError: On network failure, timeout, or when the request
                budget runs out.
            BodyReadError: If the body stream breaks off.
        """
        endpoint = endpoints.get_endpoint(self.config.api_version, name)
        url = endpoints.build_url(
            self.base_url,
            endpoint,
            identifier=identifier,
            owner=owner,
            pending=pending,
            provenance=provenance,
        )
        deadline = time.monotonic() + self.config.request_timeout

        try:
            timeout = self._phase_timeout(self._remaining(deadline, url))
            with self.http.stream("GET", url, timeout=timeout) as response:
                self._narrow_read_timeout(response, self._remaining(deadline, url))
                content = self._read_body(response, url, deadline)
        except httpx.HTTPError as exc:
            raise TransportError(f"Failed to reach registry at {url}: {exc}") from exc

        logger.debug(
            "GET %s -> %d (%d bytes)", url, response.status_code, len(content)
        )
        return _RawResponse(endpoint.payload_key, response.status_code, content)

    def _remaining(self, deadline: float, url: httpx.URL) -> float:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise TransportError(
                f"Request to {url} exceeded {self.config.request_timeout}s"
            )
        return remaining

    def _phase_timeout(self, remaining: float) -> httpx.Timeout:
        """Cap every httpx phase at what is left of the request budget."""
        configured = self.config.httpx_timeout()
        return httpx.Timeout(
            remaining,
            connect=min(configured.connect or remaining, remaining),
        )

    @staticmethod
    def _narrow_read_timeout(response: httpx.Response, remaining: float) -> None:
        # The body phase reads its timeout from the request extensions when
        # iteration starts, so shrinking it here bounds the body reads.
        timeouts = response.request.extensions.get("timeout")
        if isinstance(timeouts, dict):
            timeouts["read"] = remaining

    def _read_body(
        self,
        response: httpx.Response,
        url: httpx.URL,
        deadline: float,
    ) -> bytes:
        chunks: list[bytes] = []
        try:
            for chunk in response.iter_bytes():
                chunks.append(chunk)
                self._remaining(deadline, url)
        except httpx.TimeoutException as exc:
            raise TransportError(f"Timed out reading response body from {url}: {exc}") from exc
        except httpx.HTTPError as exc:
            raise BodyReadError(f"Cannot read response body from {url}: {exc}") from exc
        return b"".join(chunks)

    @staticmethod
    def _decode(raw: _RawResponse) -> Envelope:
        envelope = decode_envelope(raw.content, raw.payload_key)
        if raw.status_code != 200:
            raise ServerError(raw.status_code, envelope.message or FALLBACK_SERVER_MESSAGE)
        return envelope


@dataclass(frozen=True, slots=True)
class _RawResponse:
    payload_key: str
    status_code: int
    content: bytes
