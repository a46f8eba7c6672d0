"""
Error types for the OpenID Connect relying party.

Transport failures are not wrapped: ``httpx.HTTPError`` and its subclasses
reach the caller unmodified.
"""

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    status_code: Optional[int] = None
    details: Dict[str, Any] = {}


class OIDCClientError(Exception):
    """Base exception for relying party errors."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            status_code=getattr(self, "status_code", None),
            details=self.details,
        )


class ConfigurationError(OIDCClientError):
    """Provider configuration or key material is missing or malformed."""

    def __init__(self, message: str = "Unable to retrieve OpenID Connect configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class InvalidRequestError(OIDCClientError):
    """Caller input is incomplete; raised before any network call."""

    def __init__(self, message: str = "Invalid request", details: Optional[Dict[str, Any]] = None):
        super().__init__("INVALID_REQUEST", message, details)


class MissingCodeError(InvalidRequestError):
    """No authorization code could be resolved for a token exchange."""

    def __init__(self, message: str = "Missing authorization code", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class MissingTokenError(InvalidRequestError):
    """No bearer token was supplied."""

    def __init__(self, message: str = "Missing access token", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class UnauthorizedError(OIDCClientError):
    """OAuth 2.0 shaped rejection of a token.

    ``code`` carries the OAuth error string (``invalid_token``,
    ``insufficient_scope``, ...), ``message`` the human description.
    """

    def __init__(
        self,
        error: str = "invalid_token",
        error_description: str = "Unauthorized",
        status_code: int = 401,
        realm: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(error, error_description, details)
        self.error = error
        self.error_description = error_description
        self.status_code = status_code
        self.realm = realm

    @classmethod
    def from_response(cls, body: Mapping[str, Any], status_code: Optional[int] = None) -> "UnauthorizedError":
        """Build an error from an introspection or token endpoint error body."""
        fallback = status_code if status_code and status_code >= 400 else 401
        try:
            status = int(body.get("statusCode", body.get("status_code", fallback)))
        except (TypeError, ValueError):
            status = fallback
        return cls(
            error=str(body.get("error")),
            error_description=str(body.get("error_description", body.get("error"))),
            status_code=status,
            realm=body.get("realm"),
            details={"response": dict(body)},
        )

    def www_authenticate(self) -> str:
        """Render the ``WWW-Authenticate`` challenge for this error."""
        params = []
        if self.realm:
            params.append(f'realm="{self.realm}"')
        params.append(f'error="{self.error}"')
        params.append(f'error_description="{self.error_description}"')
        return "Bearer " + ", ".join(params)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.error!r}, {self.error_description!r}, {self.status_code})"


class InvalidTokenError(UnauthorizedError):
    """Structured token could not be decoded or its signature was not trusted."""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            error="invalid_token",
            error_description="Invalid access token",
            status_code=401,
            realm="user",
            details=details,
        )
