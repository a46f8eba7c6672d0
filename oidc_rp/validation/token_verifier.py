"""
Access token verification.

A token containing a ``.`` is treated as a structured (JWT-shaped) token and
verified locally against the configured signing key. Any other token is
opaque and resolved through the provider's ``/token/verify`` introspection
endpoint. Claims from either path then go through the same ordered checks:
issuer, audience, expiry, scope.
"""

import base64
import binascii
import json
import time
from dataclasses import dataclass, field
from typing import Any, Collection, Dict, Optional, Sequence

import httpx

from ..errors import ConfigurationError, InvalidTokenError, MissingTokenError, UnauthorizedError
from ..logging import get_logger
from .signature import JoseSignatureVerifier, Key, SignatureError, SignatureVerifier

INTROSPECTION_PATH = "/token/verify"


def now_seconds() -> int:
    return int(time.time())


@dataclass
class VerificationOptions:
    """Policy a token is verified against."""

    issuer: str
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    clients: Optional[Collection[str]] = None
    scope: Optional[str] = None
    key: Optional[Key] = None
    algorithms: Sequence[str] = field(default_factory=lambda: ["RS256"])


@dataclass(frozen=True)
class DecodedToken:
    header: Dict[str, Any]
    payload: Dict[str, Any]
    signature: str


def is_structured(token: str) -> bool:
    return "." in token


def _b64url_json(segment: str) -> Any:
    padded = segment + "=" * (-len(segment) % 4)
    return json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))


def decode(token: str) -> DecodedToken:
    """Split and decode a structured token without trusting it."""
    segments = token.split(".")
    if len(segments) != 3:
        raise InvalidTokenError(details={"reason": "Invalid access token segments"})

    header_segment, payload_segment, signature = segments
    try:
        header = _b64url_json(header_segment)
        payload = _b64url_json(payload_segment)
    except (ValueError, UnicodeError, binascii.Error) as exc:
        raise InvalidTokenError(details={"reason": "Unable to decode token"}) from exc

    if not isinstance(header, dict) or not isinstance(payload, dict):
        raise InvalidTokenError(details={"reason": "Unable to decode token"})

    return DecodedToken(header=header, payload=payload, signature=signature)


class TokenVerifier:
    """Resolves a token's claims and validates them against VerificationOptions."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        signature_verifier: Optional[SignatureVerifier] = None,
    ):
        self.logger = get_logger("oidc_rp.validation")
        self.signature_verifier = signature_verifier or JoseSignatureVerifier()
        self._client = http_client

    async def verify(self, token: str, options: VerificationOptions) -> Dict[str, Any]:
        """Return the validated claims, or raise UnauthorizedError."""
        if not token:
            raise MissingTokenError()

        if is_structured(token):
            claims = self.verify_structured(token, options)
        else:
            claims = await self.introspect(token, options)

        try:
            self.validate_claims(claims, options)
        except UnauthorizedError as e:
            self.logger.warning(
                "Access token rejected",
                error=e.error,
                error_description=e.error_description,
                status_code=e.status_code,
            )
            raise

        return claims

    def verify_structured(self, token: str, options: VerificationOptions) -> Dict[str, Any]:
        """Decode a structured token and trust its payload only once the signature checks out."""
        decoded = decode(token)

        if decoded.header.get("alg") not in options.algorithms:
            raise InvalidTokenError(details={"reason": "Unsupported algorithm"})

        if not options.key:
            raise ConfigurationError("No signing key available to verify access token")

        try:
            self.signature_verifier.verify(token, options.key, options.algorithms)
        except SignatureError as exc:
            self.logger.warning("Access token signature rejected", error=str(exc))
            raise InvalidTokenError(details={"reason": "Invalid signature"}) from exc

        return decoded.payload

    async def introspect(self, token: str, options: VerificationOptions) -> Dict[str, Any]:
        """Resolve an opaque token through the provider's introspection endpoint."""
        response = await self._client.post(
            options.issuer.rstrip("/") + INTROSPECTION_PATH,
            json={"access_token": token},
            auth=(options.client_id or "", options.client_secret or ""),
        )

        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and body.get("error"):
            raise UnauthorizedError.from_response(body, response.status_code)

        # Non-JSON error pages surface as transport errors.
        response.raise_for_status()
        if not isinstance(body, dict):
            raise InvalidTokenError(details={"reason": "Malformed introspection response"})

        return body

    def validate_claims(self, claims: Dict[str, Any], options: VerificationOptions) -> None:
        """Apply issuer, audience, expiry and scope checks in that order."""
        if claims.get("iss") != options.issuer:
            raise UnauthorizedError(
                error="invalid_token",
                error_description="Mismatching issuer",
                status_code=403,
            )

        audience = claims.get("aud")
        # only a single string audience can match
        if options.clients and (not isinstance(audience, str) or audience not in options.clients):
            raise UnauthorizedError(
                error="invalid_token",
                error_description="Mismatching audience",
                status_code=403,
            )

        exp = claims.get("exp")
        if not isinstance(exp, (int, float)) or exp < now_seconds():
            raise UnauthorizedError(
                error="invalid_token",
                error_description="Expired access token",
                status_code=403,
            )

        if options.scope and options.scope not in (claims.get("scope") or ""):
            raise UnauthorizedError(
                error="insufficient_scope",
                error_description="Insufficient scope",
                status_code=403,
            )
