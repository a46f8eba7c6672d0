"""
Client configuration for the OpenID Connect relying party.
"""

from typing import Optional, Sequence, Union

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .logging import configure_logging

DEFAULT_SCOPE = ("openid", "profile")


def build_scope(scope: Union[str, Sequence[str], None] = None) -> str:
    """Union caller scope with the fixed ``openid profile`` defaults.

    Repeated values are kept as given.
    """
    values = list(DEFAULT_SCOPE)
    if isinstance(scope, str):
        values.extend(scope.split())
    elif scope:
        values.extend(scope)
    return " ".join(values)


class ClientSettings(BaseSettings):
    """Construction-time settings, loadable from ``OIDC_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="OIDC_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Provider and client credentials
    issuer: str
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    redirect_uri: Optional[str] = None
    # space-delimited, added to the openid profile defaults
    scope: Optional[str] = None

    # Transport
    timeout: float = Field(default=10.0, gt=0)
    verify_tls: bool = True

    # Logging
    log_level: str = "info"
    log_json: bool = True

    @property
    def requested_scope(self) -> str:
        """Default scope sent with authorization requests."""
        return build_scope(self.scope)

    def apply_logging(self) -> None:
        """Configure structlog from ``log_level`` and ``log_json``."""
        configure_logging(self.log_level, json_logs=self.log_json)


def get_settings(**overrides) -> ClientSettings:
    """Load settings from the environment, with explicit overrides applied."""
    return ClientSettings(**overrides)
