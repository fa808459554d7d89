"""Tests for the endpoint table and URL construction (endpoints.py)."""

from __future__ import annotations

import httpx
import pytest

from bitmark_registry import endpoints
from bitmark_registry.endpoints import Endpoint, build_url, get_endpoint
from bitmark_registry.errors import ConfigError
from bitmark_registry.models import ApiVersion

BASE = httpx.URL("https://registry.example.com")


def _v1(name: str) -> Endpoint:
    return get_endpoint(ApiVersion.V1, name)


class TestEndpointTable:
    @pytest.mark.parametrize(
        ("name", "template", "payload_key"),
        [
            (endpoints.TRANSACTION, "/v1/txs/{id}", "tx"),
            (endpoints.BITMARK, "/v1/bitmarks/{id}", "bitmark"),
            (endpoints.BITMARKS_BY_OWNER, "/v1/bitmarks", "bitmarks"),
            (endpoints.BLOCKS, "/v1/blocks", "blocks"),
        ],
    )
    def test_v1_endpoints(self, name: str, template: str, payload_key: str):
        endpoint = _v1(name)
        assert endpoint.path_template == template
        assert endpoint.payload_key == payload_key

    def test_legacy_bitmark(self):
        endpoint = get_endpoint(ApiVersion.LEGACY, endpoints.BITMARK)
        assert endpoint.path_template == "/registry/v1/bitmarks/{id}"
        assert endpoint.payload_key == "bitmark"
        assert endpoint.flags == frozenset()

    @pytest.mark.parametrize(
        "name", [endpoints.TRANSACTION, endpoints.BITMARKS_BY_OWNER, endpoints.BLOCKS]
    )
    def test_legacy_lacks_newer_endpoints(self, name: str):
        with pytest.raises(ConfigError, match=name):
            get_endpoint(ApiVersion.LEGACY, name)

    def test_templated_path_requires_identifier(self):
        with pytest.raises(ConfigError, match="requires an identifier"):
            _v1(endpoints.BITMARK).path()


class TestBuildUrl:
    def test_transaction_path(self):
        url = build_url(BASE, _v1(endpoints.TRANSACTION), identifier="abc123")
        assert str(url) == "https://registry.example.com/v1/txs/abc123"

    def test_identifier_is_escaped_as_one_segment(self):
        url = build_url(BASE, _v1(endpoints.TRANSACTION), identifier="a/b?c#d")
        assert url.raw_path == b"/v1/txs/a%2Fb%3Fc%23d"

    def test_pending_only(self):
        url = build_url(BASE, _v1(endpoints.BITMARK), identifier="bm1", pending=True)
        assert url.params.get("pending") == "true"
        assert "provenance" not in url.params

    def test_both_flags(self):
        url = build_url(
            BASE, _v1(endpoints.BITMARK), identifier="bm1", pending=True, provenance=True
        )
        assert url.query == b"pending=true&provenance=true"

    def test_false_flags_are_omitted(self):
        url = build_url(BASE, _v1(endpoints.BITMARK), identifier="bm1")
        assert url.query == b""
        assert str(url) == "https://registry.example.com/v1/bitmarks/bm1"

    def test_owner_listing_without_filters_has_no_query(self):
        url = build_url(BASE, _v1(endpoints.BITMARKS_BY_OWNER), owner="")
        assert str(url) == "https://registry.example.com/v1/bitmarks"

    def test_owner_filter(self):
        url = build_url(
            BASE, _v1(endpoints.BITMARKS_BY_OWNER), owner="eZpG6Wi9", provenance=True
        )
        assert url.query == b"owner=eZpG6Wi9&provenance=true"

    def test_endpoint_without_flags_ignores_them(self):
        legacy = get_endpoint(ApiVersion.LEGACY, endpoints.BITMARK)
        url = build_url(BASE, legacy, identifier="tx1", pending=True, provenance=True)
        assert str(url) == "https://registry.example.com/registry/v1/bitmarks/tx1"

    def test_owner_ignored_where_not_accepted(self):
        url = build_url(BASE, _v1(endpoints.BLOCKS), owner="someone")
        assert url.query == b""

    def test_base_path_query_and_fragment_are_replaced(self):
        base = httpx.URL("https://registry.example.com/api/?x=1#frag")
        url = build_url(base, _v1(endpoints.BLOCKS))
        assert str(url) == "https://registry.example.com/v1/blocks"

    def test_port_is_kept(self):
        base = httpx.URL("http://localhost:8087")
        url = build_url(base, _v1(endpoints.TRANSACTION), identifier="t")
        assert str(url) == "http://localhost:8087/v1/txs/t"

    def test_base_url_is_not_mutated(self):
        base = httpx.URL("https://registry.example.com")
        build_url(base, _v1(endpoints.BITMARK), identifier="bm1", pending=True)
        assert str(base) == "https://registry.example.com"
