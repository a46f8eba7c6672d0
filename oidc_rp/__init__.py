"""
OpenID Connect relying party.

Discovers a provider's configuration and signing keys, builds authorization
redirect URLs, exchanges authorization codes for tokens and verifies bearer
tokens, both structured (verified locally) and opaque (introspected).

- client: the Client facade most applications use.
- discovery, jwks: provider state fetched on explicit request.
- validation: token classification, signature and claim checks.
- middleware: FastAPI dependency for protecting routes.

Importing the package performs no network IO.
"""

from .client import Client
from .config import ClientSettings, build_scope
from .errors import (
    ConfigurationError,
    InvalidRequestError,
    InvalidTokenError,
    MissingCodeError,
    MissingTokenError,
    OIDCClientError,
    UnauthorizedError,
)

__all__ = [
    "Client",
    "ClientSettings",
    "ConfigurationError",
    "InvalidRequestError",
    "InvalidTokenError",
    "MissingCodeError",
    "MissingTokenError",
    "OIDCClientError",
    "UnauthorizedError",
    "build_scope",
]
