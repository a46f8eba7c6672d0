"""
Shared fixtures for relying party tests.
"""

import time
from typing import Any, Callable, Dict

import httpx
import pytest
from jose import jwk, jwt

from mocks.provider.server import generate_rsa_keypair
from tests.helpers import CLIENT_ID, ISSUER, RecordingTransport


@pytest.fixture(scope="session")
def rsa_keypair():
    """RSA (private PEM, public PEM) pair shared by the whole session."""
    return generate_rsa_keypair()


@pytest.fixture(scope="session")
def other_rsa_keypair():
    """A second key pair, for signature mismatch cases."""
    return generate_rsa_keypair()


@pytest.fixture(scope="session")
def public_jwk(rsa_keypair):
    """Public JWK matching ``rsa_keypair``."""
    key = jwk.construct(rsa_keypair[1], algorithm="RS256").to_dict()
    key.update({"kid": "key-1", "use": "sig"})
    return key


@pytest.fixture
def make_claims() -> Callable[..., Dict[str, Any]]:
    """Factory for access token claims that pass every check by default."""
    def _make(**overrides) -> Dict[str, Any]:
        now = int(time.time())
        claims = {
            "jti": "jti-1",
            "iss": ISSUER,
            "sub": "user1",
            "aud": CLIENT_ID,
            "iat": now,
            "exp": now + 3600,
            "scope": "openid profile research",
        }
        claims.update(overrides)
        return claims
    return _make


@pytest.fixture
def sign(rsa_keypair) -> Callable[..., str]:
    """Sign claims as an RS256 compact JWS."""
    def _sign(claims: Dict[str, Any], private_key: str = None) -> str:
        return jwt.encode(claims, private_key or rsa_keypair[0], algorithm="RS256")
    return _sign


@pytest.fixture
def transport_factory():
    """Build an AsyncClient over a RecordingTransport for a handler."""
    def _factory(handler):
        transport = RecordingTransport(handler)
        return httpx.AsyncClient(transport=transport), transport
    return _factory
