"""
OpenID Connect relying party client.
"""

from typing import Any, Collection, Dict, Mapping, Optional, Sequence, Union

import httpx

from .authorization import ClientDefaults, authorization_params, authorization_uri
from .config import ClientSettings, build_scope, get_settings
from .discovery.provider import ProviderConfiguration, ProviderMetadata
from .errors import MissingCodeError, MissingTokenError
from .exchange import TokenExchange, resolve_code
from .jwks.keyset import KeySet, KeySetClient
from .logging import get_logger
from .validation.id_token import IDTokenVerifier
from .validation.signature import Key, SignatureVerifier
from .validation.token_verifier import TokenVerifier, VerificationOptions


class Client:
    """Relying party for a single OpenID Connect provider.

    Holds the issuer, client credentials and default scope, and caches the
    provider configuration and signing keys once they have been fetched with
    :meth:`discover` and :meth:`get_jwks`.
    """

    def __init__(
        self,
        issuer: str,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        redirect_uri: Optional[str] = None,
        scope: Union[str, Sequence[str], None] = None,
        *,
        timeout: float = 10.0,
        verify_tls: bool = True,
        http_client: Optional[httpx.AsyncClient] = None,
        signature_verifier: Optional[SignatureVerifier] = None,
        id_token_verifier: Optional[IDTokenVerifier] = None,
    ):
        self.issuer = issuer
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scope = build_scope(scope)
        self.logger = get_logger("oidc_rp.client")

        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout, verify=verify_tls)

        self.provider = ProviderMetadata(issuer, self._client)
        self.jwks_client = KeySetClient(self._client)
        self.token_verifier = TokenVerifier(self._client, signature_verifier)
        self.token_exchange = TokenExchange(self._client, self.token_verifier, id_token_verifier)

        self.tokens: Optional[Dict[str, Any]] = None
        self.registration: Optional[Dict[str, Any]] = None

    @classmethod
    def from_settings(cls, settings: ClientSettings, **kwargs) -> "Client":
        return cls(
            settings.issuer,
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            redirect_uri=settings.redirect_uri,
            scope=settings.scope,
            timeout=settings.timeout,
            verify_tls=settings.verify_tls,
            **kwargs,
        )

    @classmethod
    def from_env(cls, **kwargs) -> "Client":
        """Build a client from ``OIDC_*`` environment variables.

        Logging is configured from ``OIDC_LOG_LEVEL`` and ``OIDC_LOG_JSON``.
        """
        settings = get_settings()
        settings.apply_logging()
        return cls.from_settings(settings, **kwargs)

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @property
    def configuration(self) -> ProviderConfiguration:
        return self.provider.configuration

    @property
    def jwks(self) -> Optional[KeySet]:
        return self.jwks_client.keyset

    @property
    def defaults(self) -> ClientDefaults:
        return ClientDefaults(
            client_id=self.client_id,
            redirect_uri=self.redirect_uri,
            scope=self.scope,
        )

    async def discover(self) -> Dict[str, Any]:
        """Fetch and cache the provider's OpenID Connect configuration."""
        return await self.provider.fetch()

    async def get_jwks(self) -> Dict[str, Any]:
        """Fetch and cache the provider's signing keys."""
        return await self.jwks_client.fetch(self.configuration.endpoint("jwks_uri"))

    def authorization_params(self, options: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return authorization_params(self.defaults, options)

    def authorization_uri(self, options: Union[str, Mapping[str, Any], None] = None) -> str:
        """URL to send the user agent to for the authorization code grant."""
        return authorization_uri(
            self.configuration.endpoint("authorization_endpoint"),
            self.defaults,
            options,
        )

    async def token(self, options: Optional[Mapping[str, Any]] = None, **kwargs) -> Dict[str, Any]:
        """Exchange an authorization code for verified tokens.

        The code is taken from ``code`` or parsed from ``response_uri``. The
        returned token response carries ``id_claims`` and ``access_claims``.
        """
        options = {**(options or {}), **kwargs}
        if not resolve_code(options):
            raise MissingCodeError()

        token_endpoint = self.configuration.endpoint("token_endpoint")
        key = self.jwks_client.require().first()

        tokens = await self.token_exchange.exchange(
            options,
            token_endpoint=token_endpoint,
            issuer=self.issuer,
            client_id=self.client_id,
            client_secret=self.client_secret,
            redirect_uri=self.redirect_uri,
            key=key,
        )
        self.tokens = tokens
        return tokens

    async def userinfo(self, token: Optional[str] = None) -> Dict[str, Any]:
        """Fetch the user's claims from the userinfo endpoint."""
        if not token:
            raise MissingTokenError()

        response = await self._client.get(
            self.configuration.endpoint("userinfo_endpoint"),
            headers={"Authorization": f"Bearer {token}"},
        )
        response.raise_for_status()
        return response.json()

    async def register(self, registration: Mapping[str, Any]) -> Dict[str, Any]:
        """Register this client dynamically and adopt the issued credentials."""
        uri = self.configuration.endpoint("registration_endpoint")
        headers = {}
        access_token = self.tokens and self.tokens.get("access_token")
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"

        response = await self._client.post(uri, json=dict(registration), headers=headers)
        response.raise_for_status()
        data = response.json()

        self.client_id = data.get("client_id")
        self.client_secret = data.get("client_secret")
        self.registration = data

        self.logger.info("Client registered", client_id=self.client_id)
        return data

    async def verify(
        self,
        token: str,
        *,
        issuer: Optional[str] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        clients: Optional[Collection[str]] = None,
        scope: Optional[str] = None,
        key: Optional[Key] = None,
    ) -> Dict[str, Any]:
        """Verify a bearer access token and return its claims.

        Unset options fall back to the client's issuer, credentials, default
        scope and ``sig`` signing key.
        """
        if not token:
            raise MissingTokenError()

        if key is None and self.jwks is not None:
            key = self.jwks.for_use("sig")

        options = VerificationOptions(
            issuer=issuer or self.issuer,
            client_id=client_id or self.client_id,
            client_secret=client_secret or self.client_secret,
            clients=clients,
            scope=scope or self.scope,
            key=key,
        )
        return await self.token_verifier.verify(token, options)
