"""
OpenID Connect discovery.
"""

import asyncio
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from ..errors import ConfigurationError
from ..logging import get_logger

WELL_KNOWN_PATH = "/.well-known/openid-configuration"


class ProviderConfiguration(BaseModel):
    """Provider metadata advertised by the discovery document."""

    model_config = ConfigDict(extra="allow", frozen=True)

    issuer: Optional[str] = None
    authorization_endpoint: Optional[str] = None
    token_endpoint: Optional[str] = None
    userinfo_endpoint: Optional[str] = None
    registration_endpoint: Optional[str] = None
    jwks_uri: Optional[str] = None

    def endpoint(self, name: str) -> str:
        """Return an advertised endpoint or fail with ConfigurationError."""
        value = getattr(self, name, None)
        if not value:
            raise ConfigurationError(f"Provider configuration does not advertise {name}")
        return value


class ProviderMetadata:
    """Fetches and holds the provider's discovery document."""

    def __init__(self, issuer: str, http_client: httpx.AsyncClient):
        self.issuer = issuer
        self.logger = get_logger("oidc_rp.discovery")
        self._client = http_client
        self._lock = asyncio.Lock()

        self._document: Optional[Dict[str, Any]] = None
        self._configuration: Optional[ProviderConfiguration] = None

    @property
    def url(self) -> str:
        return self.issuer.rstrip("/") + WELL_KNOWN_PATH

    @property
    def loaded(self) -> bool:
        return self._configuration is not None

    @property
    def document(self) -> Optional[Dict[str, Any]]:
        """The raw discovery document, as last fetched."""
        return self._document

    @property
    def configuration(self) -> ProviderConfiguration:
        """The cached configuration; discovery must have run first."""
        if self._configuration is None:
            raise ConfigurationError(
                "OpenID Connect configuration not loaded; call discover() first"
            )
        return self._configuration

    async def fetch(self) -> Dict[str, Any]:
        """Fetch the discovery document and replace the cached configuration."""
        async with self._lock:
            response = await self._client.get(self.url)
            response.raise_for_status()

            try:
                data = response.json()
            except ValueError:
                data = None

            if not isinstance(data, dict):
                self.logger.error(
                    "Discovery response is not a JSON object",
                    url=self.url,
                    status_code=response.status_code,
                )
                raise ConfigurationError(
                    "Unable to retrieve OpenID Connect configuration",
                    details={"url": self.url},
                )

            try:
                configuration = ProviderConfiguration.model_validate(data)
            except ValidationError as exc:
                raise ConfigurationError(
                    "Malformed OpenID Connect configuration",
                    details={"url": self.url, "errors": exc.errors()},
                ) from exc

            self._document = data
            self._configuration = configuration

            self.logger.info(
                "Provider configuration refreshed",
                issuer=configuration.issuer,
                jwks_uri=configuration.jwks_uri,
            )
            return data

    def clear(self) -> None:
        self._document = None
        self._configuration = None
