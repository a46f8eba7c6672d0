"""
JWKS package.

Retrieves the JSON Web Key Set advertised by the provider's ``jwks_uri``
and keeps it as a KeySet used to verify token signatures.

Key points:
- Each fetch replaces the previous KeySet; keys are never merged.
- The first key is the canonical signing key; keys are also indexed by
  their declared ``use``.
"""

from .keyset import KeySet, KeySetClient

__all__ = ["KeySet", "KeySetClient"]
