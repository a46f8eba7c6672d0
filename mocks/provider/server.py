"""
Mock OpenID Connect provider serving discovery, JWKS, token, userinfo,
registration and introspection endpoints.

Tokens are signed with a freshly generated RSA key, so a relying party
pointed at this server exercises real RS256 signature checks.
"""

import base64
import secrets
import time
from typing import Any, Dict, Optional, Tuple
from urllib.parse import parse_qs

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from jose import jwk, jwt
from jose.exceptions import JWTError

from oidc_rp.logging import configure_logging, get_logger


def generate_rsa_keypair() -> Tuple[str, str]:
    """Return a (private PEM, public PEM) pair."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return private_pem, public_pem


class MockProviderServer:
    """Mock OpenID Connect provider implementation."""

    def __init__(
        self,
        issuer: str = "http://provider.test",
        client_id: str = "client-1",
        client_secret: str = "secret-1",
    ):
        self.logger = get_logger("mock.provider")
        self.app = FastAPI(title="Mock OpenID Connect Provider", version="1.0.0")

        self.issuer = issuer.rstrip("/")
        self.client_id = client_id
        self.client_secret = client_secret
        self.kid = "mock-key-1"

        self.private_key, self.public_key = generate_rsa_keypair()
        public_jwk = jwk.construct(self.public_key, algorithm="RS256").to_dict()
        public_jwk.update({"kid": self.kid, "use": "sig"})
        self.jwks = {"keys": [public_jwk]}

        self.users = {
            "user1": {
                "sub": "user1",
                "preferred_username": "john.doe",
                "email": "john.doe@example.com",
                "name": "John Doe",
            },
        }

        # authorization code -> subject
        self.codes: Dict[str, str] = {}
        # opaque access token -> claims
        self.opaque_tokens: Dict[str, Dict[str, Any]] = {}
        self.registrations: Dict[str, Dict[str, Any]] = {}

        self._setup_routes()

    def issue_code(self, sub: str = "user1") -> str:
        """Issue an authorization code as if the user had just logged in."""
        code = secrets.token_urlsafe(16)
        self.codes[code] = sub
        return code

    def issue_opaque_token(self, sub: str = "user1", scope: str = "openid profile", expires_in: int = 3600) -> str:
        token = secrets.token_hex(16)
        self.opaque_tokens[token] = self._claims(sub, scope, expires_in)
        return token

    def sign(self, claims: Dict[str, Any]) -> str:
        return jwt.encode(claims, self.private_key, algorithm="RS256", headers={"kid": self.kid})

    def _claims(self, sub: str, scope: str, expires_in: int) -> Dict[str, Any]:
        now = int(time.time())
        return {
            "jti": secrets.token_hex(8),
            "iss": self.issuer,
            "sub": sub,
            "aud": self.client_id,
            "iat": now,
            "exp": now + expires_in,
            "scope": scope,
        }

    def _check_client(self, request: Request) -> None:
        authorization = request.headers.get("Authorization", "")
        if not authorization.startswith("Basic "):
            raise HTTPException(status_code=401, detail="Client authentication required")

        user, _, password = base64.b64decode(authorization[6:]).decode().partition(":")
        registered = self.registrations.get(user)
        if registered is not None and password == registered["client_secret"]:
            return
        if user != self.client_id or password != self.client_secret:
            raise HTTPException(status_code=401, detail="Invalid client")

    def _setup_routes(self):
        """Set up mock provider routes."""

        @self.app.get("/.well-known/openid-configuration")
        async def openid_configuration():
            """OpenID Connect configuration."""
            return {
                "issuer": self.issuer,
                "authorization_endpoint": f"{self.issuer}/authorize",
                "token_endpoint": f"{self.issuer}/token",
                "userinfo_endpoint": f"{self.issuer}/userinfo",
                "registration_endpoint": f"{self.issuer}/register",
                "jwks_uri": f"{self.issuer}/jwks",
                "response_types_supported": ["code"],
                "id_token_signing_alg_values_supported": ["RS256"],
                "scopes_supported": ["openid", "profile", "email"],
            }

        @self.app.get("/jwks")
        async def jwks_endpoint():
            """JWKS endpoint."""
            return self.jwks

        @self.app.post("/token")
        async def token_endpoint(request: Request):
            """Token endpoint for the authorization code grant."""
            self._check_client(request)
            form = {k: v[0] for k, v in parse_qs((await request.body()).decode()).items()}

            if form.get("grant_type") != "authorization_code":
                return JSONResponse(status_code=400, content={"error": "unsupported_grant_type"})

            sub = self.codes.pop(form.get("code", ""), None)
            if sub is None:
                return JSONResponse(status_code=400, content={"error": "invalid_grant"})

            access_claims = self._claims(sub, "openid profile", 3600)
            id_claims = {**self._claims(sub, "openid profile", 3600), **self.users.get(sub, {})}
            id_claims.pop("scope")

            self.logger.info("Issued tokens", sub=sub)
            return {
                "access_token": self.sign(access_claims),
                "id_token": self.sign(id_claims),
                "refresh_token": secrets.token_hex(16),
                "token_type": "Bearer",
                "expires_in": 3600,
            }

        @self.app.get("/userinfo")
        async def userinfo_endpoint(request: Request):
            """User info endpoint."""
            authorization = request.headers.get("Authorization", "")
            if not authorization.startswith("Bearer "):
                raise HTTPException(status_code=401, detail="Missing bearer token")

            try:
                claims = jwt.decode(
                    authorization[7:],
                    self.public_key,
                    algorithms=["RS256"],
                    options={"verify_aud": False},
                )
            except JWTError:
                raise HTTPException(status_code=401, detail="Invalid token")

            user = self.users.get(claims["sub"])
            if user is None:
                raise HTTPException(status_code=401, detail="Invalid user")
            return user

        @self.app.post("/register")
        async def register_endpoint(request: Request):
            """Dynamic client registration."""
            registration = await request.json()
            client_id = secrets.token_hex(8)
            response = {
                **registration,
                "client_id": client_id,
                "client_secret": secrets.token_hex(16),
            }
            self.registrations[client_id] = response
            return JSONResponse(status_code=201, content=response)

        @self.app.post("/token/verify")
        async def verify_endpoint(request: Request):
            """Opaque access token introspection."""
            try:
                self._check_client(request)
            except HTTPException:
                return JSONResponse(
                    status_code=401,
                    content={
                        "error": "unauthorized_client",
                        "error_description": "Unauthorized client",
                        "statusCode": 401,
                    },
                )

            body = await request.json()
            claims: Optional[Dict[str, Any]] = self.opaque_tokens.get(body.get("access_token", ""))
            if claims is None:
                return JSONResponse(
                    status_code=401,
                    content={
                        "error": "invalid_token",
                        "error_description": "Unknown access token",
                        "statusCode": 401,
                    },
                )
            return claims


def create_app():
    """Create mock provider application."""
    server = MockProviderServer()
    return server.app


if __name__ == "__main__":
    import uvicorn
    configure_logging("info")
    uvicorn.run(create_app(), host="0.0.0.0", port=8080)
