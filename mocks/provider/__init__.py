"""
Mock OpenID Connect provider.
"""

from .server import MockProviderServer, create_app, generate_rsa_keypair

__all__ = ["MockProviderServer", "create_app", "generate_rsa_keypair"]
