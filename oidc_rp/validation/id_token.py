"""
ID token verification.
"""

from typing import Any, Dict, Sequence

from jose import jwt
from jose.exceptions import JWTError

from ..errors import UnauthorizedError
from ..logging import get_logger
from .signature import Key


class IDTokenVerifier:
    """Verifies an OpenID Connect ID token's signature, issuer, audience and expiry."""

    def __init__(self, algorithms: Sequence[str] = ("RS256",)):
        self.algorithms = list(algorithms)
        self.logger = get_logger("oidc_rp.id_token")

    async def verify(self, token: str, *, issuer: str, audience: str, key: Key) -> Dict[str, Any]:
        """Return the ID token claims or raise UnauthorizedError."""
        if not token:
            raise UnauthorizedError(
                error="invalid_token",
                error_description="Missing ID token",
                status_code=401,
            )

        try:
            claims = jwt.decode(
                token,
                dict(key) if isinstance(key, dict) else key,
                algorithms=self.algorithms,
                audience=audience,
                issuer=issuer,
                options={"verify_at_hash": False},
            )
        except JWTError as exc:
            self.logger.warning("ID token verification failed", error=str(exc))
            raise UnauthorizedError(
                error="invalid_token",
                error_description="Invalid ID token",
                status_code=401,
                details={"error": str(exc)},
            ) from exc

        return claims
