"""
Unit tests for KeySet and KeySetClient.
"""

import httpx
import pytest

from oidc_rp.errors import ConfigurationError
from oidc_rp.jwks.keyset import KeySet, KeySetClient
from tests.helpers import ISSUER, json_response

JWKS_URI = f"{ISSUER}/jwks"


class TestKeySet:
    """Test cases for KeySet."""

    @pytest.fixture
    def mock_jwks_data(self):
        """Mock JWKS data."""
        return {
            "keys": [
                {"kty": "RSA", "kid": "key-1", "use": "sig", "n": "n1", "e": "AQAB", "alg": "RS256"},
                {"kty": "RSA", "kid": "key-2", "use": "enc", "n": "n2", "e": "AQAB"},
                {"kty": "RSA", "kid": "key-3", "use": "sig", "n": "n3", "e": "AQAB", "alg": "RS256"},
                {"kty": "RSA", "kid": "key-4", "n": "n4", "e": "AQAB"},
            ]
        }

    def test_index_by_use_last_wins(self, mock_jwks_data):
        """Duplicate uses resolve to the last key with that use."""
        keyset = KeySet.from_document(mock_jwks_data)

        assert set(keyset.by_use) == {"sig", "enc"}
        assert keyset.for_use("sig")["kid"] == "key-3"
        assert keyset.for_use("enc")["kid"] == "key-2"
        assert keyset.for_use("missing") is None

    def test_raw_order_kept(self, mock_jwks_data):
        keyset = KeySet.from_document(mock_jwks_data)

        assert [key["kid"] for key in keyset.keys] == ["key-1", "key-2", "key-3", "key-4"]
        assert keyset.first()["kid"] == "key-1"
        assert len(keyset) == 4

    def test_as_dict(self, mock_jwks_data):
        augmented = KeySet.from_document(mock_jwks_data).as_dict()

        assert augmented["keys"] == mock_jwks_data["keys"]
        assert augmented["sig"]["kid"] == "key-3"
        assert augmented["enc"]["kid"] == "key-2"
        assert "sig" not in mock_jwks_data

    def test_missing_keys(self):
        with pytest.raises(ConfigurationError):
            KeySet.from_document({"foo": []})

    def test_first_on_empty(self):
        with pytest.raises(ConfigurationError):
            KeySet([]).first()


class TestKeySetClient:
    """Test cases for KeySetClient."""

    @pytest.mark.asyncio
    async def test_fetch_success(self, transport_factory, public_jwk):
        http_client, transport = transport_factory(lambda request: json_response(200, {"keys": [public_jwk]}))
        jwks_client = KeySetClient(http_client)

        result = await jwks_client.fetch(JWKS_URI)

        assert result["keys"] == [public_jwk]
        assert result["sig"] == public_jwk
        assert jwks_client.require().first() == public_jwk
        assert str(transport.requests[0].url) == JWKS_URI

    @pytest.mark.asyncio
    async def test_refresh_replaces(self, transport_factory):
        """Each fetch replaces the KeySet; keys are never merged."""
        documents = [
            {"keys": [{"kid": "old", "use": "sig"}]},
            {"keys": [{"kid": "new", "use": "enc"}]},
        ]
        http_client, _ = transport_factory(lambda request: json_response(200, documents.pop(0)))
        jwks_client = KeySetClient(http_client)

        await jwks_client.fetch(JWKS_URI)
        await jwks_client.fetch(JWKS_URI)

        assert [key["kid"] for key in jwks_client.keyset.keys] == ["new"]
        assert jwks_client.keyset.for_use("sig") is None

    @pytest.mark.asyncio
    async def test_fetch_malformed(self, transport_factory):
        http_client, _ = transport_factory(lambda request: json_response(200, {"keys": "nope"}))
        jwks_client = KeySetClient(http_client)

        with pytest.raises(ConfigurationError):
            await jwks_client.fetch(JWKS_URI)
        assert jwks_client.keyset is None

    @pytest.mark.asyncio
    async def test_fetch_http_error(self, transport_factory):
        http_client, _ = transport_factory(lambda request: json_response(500, {}))
        jwks_client = KeySetClient(http_client)

        with pytest.raises(httpx.HTTPStatusError):
            await jwks_client.fetch(JWKS_URI)

    def test_require_before_fetch(self):
        jwks_client = KeySetClient(httpx.AsyncClient())

        with pytest.raises(ConfigurationError):
            jwks_client.require()

    @pytest.mark.asyncio
    async def test_clear(self, transport_factory, public_jwk):
        http_client, _ = transport_factory(lambda request: json_response(200, {"keys": [public_jwk]}))
        jwks_client = KeySetClient(http_client)
        await jwks_client.fetch(JWKS_URI)

        jwks_client.clear()

        assert jwks_client.keyset is None
