"""
Bearer token authentication for FastAPI applications.
"""

from typing import Any, Collection, Dict, Optional

from fastapi import HTTPException, Request

from .client import Client
from .errors import ConfigurationError, MissingTokenError, UnauthorizedError
from .logging import get_logger, set_request_id


class BearerAuthenticator:
    """FastAPI dependency verifying the request's bearer token with a Client.

    Usage::

        auth = BearerAuthenticator(client, scope="research")

        @app.get("/reports")
        async def reports(claims: dict = Depends(auth)):
            ...

    The verified claims are also stored on ``request.state.claims``. Requests
    that arrive before the provider configuration or keys are loaded get a 503.
    """

    def __init__(
        self,
        client: Client,
        *,
        scope: Optional[str] = None,
        clients: Optional[Collection[str]] = None,
        realm: str = "user",
    ):
        self.client = client
        self.scope = scope
        self.clients = clients
        self.realm = realm
        self.logger = get_logger("oidc_rp.middleware")

    async def __call__(self, request: Request) -> Dict[str, Any]:
        set_request_id(request.headers.get("X-Request-ID"))

        try:
            token = self._extract_token(request)
            claims = await self.client.verify(token, scope=self.scope, clients=self.clients)
        except MissingTokenError as e:
            raise HTTPException(
                status_code=401,
                detail=e.message,
                headers={"WWW-Authenticate": f'Bearer realm="{self.realm}"'},
            )
        except UnauthorizedError as e:
            self.logger.info(
                "Bearer authentication failed",
                error=e.error,
                status_code=e.status_code,
                path=request.url.path,
            )
            raise HTTPException(
                status_code=e.status_code,
                detail={"error": e.error, "error_description": e.error_description},
                headers={"WWW-Authenticate": e.www_authenticate()},
            )
        except ConfigurationError as e:
            # keys or provider configuration not loaded yet
            self.logger.error("Bearer authentication unavailable", error=e.message, path=request.url.path)
            raise HTTPException(status_code=503, detail=e.to_response().model_dump())

        request.state.claims = claims
        return claims

    def _extract_token(self, request: Request) -> str:
        authorization = request.headers.get("Authorization")
        if not authorization or not authorization.startswith("Bearer "):
            raise MissingTokenError("Missing or invalid Authorization header")

        token = authorization[7:].strip()
        if not token:
            raise MissingTokenError("Authorization header contained empty bearer token")
        return token
