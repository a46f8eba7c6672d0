"""
Provider discovery package.

Retrieves the OpenID Connect discovery document from
``<issuer>/.well-known/openid-configuration`` and keeps it as the
provider configuration every other operation reads from.

- The document is fetched only on explicit request; importing this
  package performs no IO.
- A re-fetch replaces the cached configuration wholesale.
"""

from .provider import ProviderConfiguration, ProviderMetadata

__all__ = ["ProviderConfiguration", "ProviderMetadata"]
