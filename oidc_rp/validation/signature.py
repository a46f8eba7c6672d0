"""
Signature verification capability for structured tokens.
"""

from typing import Any, Mapping, Protocol, Sequence, Union

from jose import jws
from jose.exceptions import JOSEError

Key = Union[str, Mapping[str, Any]]


class SignatureError(Exception):
    """The token signature could not be validated against the key."""


class SignatureVerifier(Protocol):
    """Validates a compact JWS and returns its signed payload bytes."""

    def verify(self, token: str, key: Key, algorithms: Sequence[str]) -> bytes:
        ...


class JoseSignatureVerifier:
    """SignatureVerifier backed by python-jose."""

    def verify(self, token: str, key: Key, algorithms: Sequence[str]) -> bytes:
        try:
            return jws.verify(token, dict(key) if isinstance(key, Mapping) else key, list(algorithms))
        except JOSEError as exc:
            raise SignatureError(str(exc)) from exc
