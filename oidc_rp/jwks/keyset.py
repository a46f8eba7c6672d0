"""
JWKS retrieval for the relying party.
"""

import asyncio
from typing import Any, Dict, List, Optional

import httpx

from ..errors import ConfigurationError
from ..logging import get_logger


class KeySet:
    """Signing keys published by the provider.

    Keeps the raw, ordered key list and an index of keys by their declared
    ``use``. When several keys declare the same use, the last one wins.
    """

    def __init__(self, keys: List[Dict[str, Any]], document: Optional[Dict[str, Any]] = None):
        self.keys = list(keys)
        self.document = dict(document) if document is not None else {"keys": self.keys}
        self.by_use: Dict[str, Dict[str, Any]] = {}
        for key in self.keys:
            use = key.get("use")
            if use:
                self.by_use[use] = key

    @classmethod
    def from_document(cls, document: Any) -> "KeySet":
        if not isinstance(document, dict) or not isinstance(document.get("keys"), list):
            raise ConfigurationError("JWKS response missing 'keys' array")
        return cls(document["keys"], document)

    def __len__(self) -> int:
        return len(self.keys)

    def first(self) -> Dict[str, Any]:
        """Canonical signing key: the first key in the published order."""
        if not self.keys:
            raise ConfigurationError("JWK set contains no keys")
        return self.keys[0]

    def for_use(self, use: str) -> Optional[Dict[str, Any]]:
        return self.by_use.get(use)

    def as_dict(self) -> Dict[str, Any]:
        """The JWKS document with each indexed key added under its use."""
        augmented = dict(self.document)
        augmented.update(self.by_use)
        return augmented


class KeySetClient:
    """Fetches the provider's JWKS and holds the current KeySet."""

    def __init__(self, http_client: httpx.AsyncClient):
        self.logger = get_logger("oidc_rp.jwks")
        self._client = http_client
        self._lock = asyncio.Lock()
        self._keyset: Optional[KeySet] = None

    @property
    def keyset(self) -> Optional[KeySet]:
        return self._keyset

    def require(self) -> KeySet:
        """Return the loaded KeySet, failing when no key has been fetched."""
        if self._keyset is None or not self._keyset.keys:
            raise ConfigurationError("JWK set not loaded; call get_jwks() first")
        return self._keyset

    async def fetch(self, jwks_uri: str) -> Dict[str, Any]:
        """Fetch the JWKS document and replace the cached KeySet."""
        async with self._lock:
            response = await self._client.get(jwks_uri)
            response.raise_for_status()

            try:
                document = response.json()
            except ValueError:
                document = None
            keyset = KeySet.from_document(document)
            self._keyset = keyset

            self.logger.info(
                "JWKS refreshed successfully",
                keys_count=len(keyset),
                uses=sorted(keyset.by_use),
            )
            return keyset.as_dict()

    def clear(self) -> None:
        self._keyset = None
        self.logger.info("JWKS cache cleared")
