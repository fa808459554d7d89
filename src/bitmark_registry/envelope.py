"""Decode registry response envelopes.

Every registry response is a JSON object of the form::

    {"<payload-key>": <opaque>, "message": "<string>"}

The payload is handed back as the exact bytes the server sent. Payload
schemas belong to the registry and its consumers, so the client only
validates the envelope around them.
"""

from __future__ import annotations

import json

from bitmark_registry.errors import ParseError
from bitmark_registry.models import BlockSummary, Envelope

_WHITESPACE = " \t\n\r"
_decoder = json.JSONDecoder()


def _skip_ws(text: str, idx: int) -> int:
    while idx < len(text) and text[idx] in _WHITESPACE:
        idx += 1
    return idx


def _raw_members(text: str) -> dict[str, str]:
    """Split a top-level JSON object into its members as raw JSON text.

    Values are validated by the decoder but returned unparsed. Duplicate
    keys keep the last occurrence, as ``json.loads`` does.

    Raises:
        ValueError: If *text* is not exactly one JSON object.
    """
    idx = _skip_ws(text, 0)
    if not text.startswith("{", idx):
        raise ValueError("top-level value is not an object")
    idx = _skip_ws(text, idx + 1)

    members: dict[str, str] = {}
    if text.startswith("}", idx):
        idx += 1
    else:
        while True:
            if not text.startswith('"', idx):
                raise ValueError(f"expected member name at offset {idx}")
            key, idx = _decoder.raw_decode(text, idx)
            idx = _skip_ws(text, idx)
            if not text.startswith(":", idx):
                raise ValueError(f"expected ':' at offset {idx}")
            start = _skip_ws(text, idx + 1)
            _, end = _decoder.raw_decode(text, start)
            members[key] = text[start:end]
            idx = _skip_ws(text, end)
            if text.startswith(",", idx):
                idx = _skip_ws(text, idx + 1)
                continue
            if text.startswith("}", idx):
                idx += 1
                break
            raise ValueError(f"expected ',' or '}}' at offset {idx}")

    if _skip_ws(text, idx) != len(text):
        raise ValueError(f"extra data after object at offset {idx}")
    return members


def decode_envelope(body: bytes, payload_key: str) -> Envelope:
    """Decode *body* as an envelope whose payload lives under *payload_key*.

    An absent payload member yields ``b""``; an absent ``message`` yields
    an empty string.

    Raises:
        ParseError: If the body is not UTF-8 JSON, not an object, or its
            ``message`` member is not a string. The raw body is attached.
    """
    try:
        text = body.decode("utf-8")
        members = _raw_members(text)
        message = json.loads(members["message"]) if "message" in members else ""
    except (UnicodeDecodeError, ValueError) as exc:
        raise ParseError(body, str(exc)) from exc

    if message is None:
        message = ""
    if not isinstance(message, str):
        raise ParseError(body, "'message' is not a string")

    payload = members.get(payload_key)
    return Envelope(
        payload=payload.encode("utf-8") if payload is not None else b"",
        message=message,
    )


def decode_blocks(payload: bytes, body: bytes) -> list[BlockSummary]:
    """Decode the ``blocks`` payload into BlockSummary entries.

    *body* is the full response body, attached to any ParseError raised.
    A missing or ``null`` payload decodes to an empty list.
    """
    if not payload:
        return []
    try:
        raw = json.loads(payload)
    except ValueError as exc:
        raise ParseError(body, str(exc)) from exc

    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ParseError(body, "'blocks' is not an array")

    blocks: list[BlockSummary] = []
    for entry in raw:
        if not isinstance(entry, dict):
            raise ParseError(body, "block entry is not an object")
        number = entry.get("number")
        if isinstance(number, bool) or not isinstance(number, int):
            raise ParseError(body, "block 'number' is not an integer")
        blocks.append(
            BlockSummary(
                number=number,
                hash=str(entry.get("hash") or ""),
                owner=str(entry.get("owner") or ""),
                bitmark_id=str(entry.get("bitmarkId") or ""),
            )
        )
    return blocks
