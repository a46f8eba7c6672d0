"""
Unit tests for error types.
"""

from oidc_rp.errors import (
    ConfigurationError,
    InvalidRequestError,
    InvalidTokenError,
    MissingCodeError,
    MissingTokenError,
    UnauthorizedError,
)


class TestUnauthorizedError:
    """Test cases for UnauthorizedError."""

    def test_from_response_uses_body_status(self):
        """Status code in the body wins over the HTTP status."""
        error = UnauthorizedError.from_response(
            {"error": "invalid_token", "error_description": "Unknown token", "statusCode": 403},
            200,
        )

        assert error.error == "invalid_token"
        assert error.code == "invalid_token"
        assert error.error_description == "Unknown token"
        assert error.status_code == 403

    def test_from_response_falls_back_to_http_status(self):
        error = UnauthorizedError.from_response({"error": "unauthorized_client"}, 401)

        assert error.status_code == 401
        assert error.error_description == "unauthorized_client"

    def test_from_response_defaults_to_401(self):
        """A 200 response carrying an error still rejects as 401."""
        error = UnauthorizedError.from_response({"error": "invalid_token"}, 200)

        assert error.status_code == 401

    def test_from_response_non_numeric_status(self):
        """Unparseable status codes fall back to the HTTP status, then 401."""
        body = {"error": "invalid_token", "statusCode": "401 Unauthorized"}

        assert UnauthorizedError.from_response(body, 403).status_code == 403
        assert UnauthorizedError.from_response(body, 200).status_code == 401
        assert UnauthorizedError.from_response({"error": "invalid_token", "statusCode": None}, 200).status_code == 401

    def test_www_authenticate(self):
        error = UnauthorizedError("insufficient_scope", "Insufficient scope", 403, realm="user")

        assert error.www_authenticate() == (
            'Bearer realm="user", error="insufficient_scope", '
            'error_description="Insufficient scope"'
        )

    def test_to_response(self):
        error = UnauthorizedError("invalid_token", "Expired access token", 403)
        response = error.to_response()

        assert response.code == "invalid_token"
        assert response.message == "Expired access token"
        assert response.status_code == 403


def test_invalid_token_error_values():
    """Malformed structured tokens reject with the fixed 401 values."""
    error = InvalidTokenError()

    assert isinstance(error, UnauthorizedError)
    assert error.realm == "user"
    assert error.error == "invalid_token"
    assert error.error_description == "Invalid access token"
    assert error.status_code == 401


def test_input_errors():
    assert isinstance(MissingCodeError(), InvalidRequestError)
    assert isinstance(MissingTokenError(), InvalidRequestError)
    assert str(MissingCodeError()) == "Missing authorization code"
    assert MissingTokenError().code == "INVALID_REQUEST"


def test_configuration_error_default_message():
    error = ConfigurationError()

    assert error.code == "CONFIGURATION_ERROR"
    assert error.message == "Unable to retrieve OpenID Connect configuration"
    assert error.to_response().status_code is None
