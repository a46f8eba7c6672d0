"""
Token validation package.

- token_verifier: classifies access tokens as structured or opaque,
  resolves their claims and applies the ordered claim checks.
- signature: the signature verification capability structured tokens must
  pass before their payload is trusted.
- id_token: verification of the ID token returned by the token endpoint.
"""

from .id_token import IDTokenVerifier
from .signature import JoseSignatureVerifier, SignatureError, SignatureVerifier
from .token_verifier import TokenVerifier, VerificationOptions, decode, is_structured

__all__ = [
    "IDTokenVerifier",
    "JoseSignatureVerifier",
    "SignatureError",
    "SignatureVerifier",
    "TokenVerifier",
    "VerificationOptions",
    "decode",
    "is_structured",
]
