"""
Authorization code exchange.
"""

import asyncio
from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qs, urlparse

import httpx

from .errors import MissingCodeError
from .logging import get_logger
from .validation.id_token import IDTokenVerifier
from .validation.signature import Key
from .validation.token_verifier import TokenVerifier, VerificationOptions


def resolve_code(options: Mapping[str, Any]) -> Optional[str]:
    """Take ``code`` directly, or from the query of the redirect-back URL."""
    code = options.get("code")
    response_uri = options.get("response_uri")
    if not code and response_uri:
        values = parse_qs(urlparse(response_uri).query).get("code")
        if values:
            code = values[0]
    return code or None


class TokenExchange:
    """Exchanges an authorization code for tokens and verifies both tokens."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        token_verifier: TokenVerifier,
        id_token_verifier: Optional[IDTokenVerifier] = None,
    ):
        self.logger = get_logger("oidc_rp.exchange")
        self.token_verifier = token_verifier
        self.id_token_verifier = id_token_verifier or IDTokenVerifier()
        self._client = http_client

    async def exchange(
        self,
        options: Mapping[str, Any],
        *,
        token_endpoint: str,
        issuer: str,
        client_id: Optional[str],
        client_secret: Optional[str],
        redirect_uri: Optional[str],
        key: Key,
    ) -> Dict[str, Any]:
        """POST the code to the token endpoint and attach the verified claims."""
        code = resolve_code(options)
        if not code:
            raise MissingCodeError()

        response = await self._client.post(
            token_endpoint,
            data={
                "grant_type": options.get("grant_type") or "authorization_code",
                "code": code,
                "redirect_uri": options.get("redirect_uri") or redirect_uri or "",
            },
            auth=(client_id or "", client_secret or ""),
            headers={"Accept": "application/json"},
        )
        response.raise_for_status()
        data = response.json()

        id_result, access_result = await asyncio.gather(
            self.id_token_verifier.verify(
                data.get("id_token"),
                issuer=issuer,
                audience=client_id,
                key=key,
            ),
            self.token_verifier.verify(
                data.get("access_token") or "",
                VerificationOptions(
                    issuer=issuer,
                    client_id=client_id,
                    client_secret=client_secret,
                    key=key,
                ),
            ),
            return_exceptions=True,
        )

        for result in (id_result, access_result):
            if isinstance(result, BaseException):
                self.logger.warning(
                    "Token exchange verification failed",
                    error=type(result).__name__,
                    message=str(result),
                )
                raise result

        data["id_claims"] = id_result
        data["access_claims"] = access_result

        self.logger.info(
            "Authorization code exchanged",
            sub=id_result.get("sub"),
            has_refresh_token="refresh_token" in data,
        )
        return data
