"""Domain models for bitmark-registry. All frozen dataclasses -- no mutation after creation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

# ─── Enumerations ─────────────────────────────────────────────


class ApiVersion(StrEnum):
    V1 = "v1"
    LEGACY = "legacy"


# ─── Wire Models ──────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Envelope:
    """A decoded registry response.

    ``payload`` holds the raw JSON bytes of the payload member, exactly as
    they appeared in the response body. ``message`` is only meaningful
    when the HTTP status is not 200.
    """

    payload: bytes
    message: str = ""


@dataclass(frozen=True, slots=True)
class BlockSummary:
    """One entry of the ``/v1/blocks`` listing."""

    number: int
    hash: str = ""
    owner: str = ""
    bitmark_id: str = ""
