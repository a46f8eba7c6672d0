"""
Authorization request construction.

Pure functions: nothing here performs network IO.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import urlencode, urlparse

DEFAULT_ENDPOINT = "authorize"

OPTIONAL_PARAMETERS = (
    "email",
    "password",
    "provider",
    "state",
    "response_mode",
    "nonce",
    "display",
    "prompt",
    "max_age",
    "ui_locales",
    "id_token_hint",
    "login_hint",
    "acr_values",
)


@dataclass(frozen=True)
class ClientDefaults:
    """Client-level values authorization requests fall back to."""

    client_id: Optional[str]
    redirect_uri: Optional[str]
    scope: str


def authorization_params(defaults: ClientDefaults, options: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Build authorization request parameters.

    ``client_id`` always comes from the client. ``response_type``,
    ``redirect_uri`` and ``scope`` may be overridden by the caller. Optional
    parameters are copied only when they are in the allow-list; anything else
    on ``options`` is ignored.
    """
    options = options or {}

    params: Dict[str, Any] = {
        "response_type": options.get("response_type") or "code",
        "client_id": defaults.client_id,
        "redirect_uri": options.get("redirect_uri") or defaults.redirect_uri,
        "scope": options.get("scope") or defaults.scope,
    }

    for name in OPTIONAL_PARAMETERS:
        if options.get(name):
            params[name] = options[name]

    return params


def authorization_uri(
    authorization_endpoint: str,
    defaults: ClientDefaults,
    options: Union[str, Mapping[str, Any], None] = None,
) -> str:
    """Build the absolute URL the user agent is redirected to.

    ``options`` may be a path segment (replacing ``authorize``), a mapping
    whose ``endpoint`` key names the path segment, or None.
    """
    endpoint = DEFAULT_ENDPOINT
    if isinstance(options, str):
        endpoint = options
        options = {}
    elif isinstance(options, Mapping):
        endpoint = options.get("endpoint") or DEFAULT_ENDPOINT
    else:
        options = {}

    params = {
        key: value
        for key, value in authorization_params(defaults, options).items()
        if value is not None
    }

    parsed = urlparse(authorization_endpoint)
    return parsed._replace(
        path="/" + endpoint.lstrip("/"),
        query=urlencode(params),
        fragment="",
    ).geturl()
