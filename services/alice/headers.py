"""Outbound request authentication headers for the Alice Blue API."""

import time
from typing import Callable, Dict, Optional
from urllib.parse import urlsplit

from .models import AuthContext, AuthMethod
from .security import basic_credentials, sign_payload

DEFAULT_SESSION_HEADER = "x-session-id"


def _path_and_query(url: str) -> str:
    parts = urlsplit(url)
    path = parts.path or "/"
    return f"{path}?{parts.query}" if parts.query else path


def build_auth_headers(
    api_key: str,
    api_secret: str,
    method: Optional[str],
    url: str,
    body: Optional[str] = None,
    bearer_token: Optional[str] = None,
    session_token: Optional[str] = None,
    session_header_name: str = DEFAULT_SESSION_HEADER,
    clock: Callable[[], float] = time.time,
) -> Dict[str, str]:
    """
    Build the header set for one outbound request.

    A bearer token wins over every other method. Otherwise ``method``
    (case-insensitive, default ``headers``) selects Basic auth, an HMAC
    signature over ``"<ts>:<path?query>:<body>"``, or plain key/secret
    headers. A session token is attached under ``session_header_name``
    regardless of the method. ``clock`` only matters for HMAC.
    """
    headers: Dict[str, str] = {"Content-Type": "application/json"}

    if bearer_token:
        headers["Authorization"] = f"Bearer {bearer_token}"
    else:
        auth_method = AuthMethod.resolve(method)
        if auth_method == AuthMethod.BASIC:
            headers["Authorization"] = f"Basic {basic_credentials(api_key, api_secret)}"
        elif auth_method == AuthMethod.HMAC:
            ts = str(int(clock()))
            to_sign = f"{ts}:{_path_and_query(url)}:{body or ''}"
            headers["x-api-key"] = api_key
            headers["x-timestamp"] = ts
            headers["x-signature"] = sign_payload(api_secret, to_sign)
        else:
            if api_key:
                headers["x-api-key"] = api_key
            if api_secret:
                headers["x-api-secret"] = api_secret

    if session_token:
        header_name = (session_header_name or DEFAULT_SESSION_HEADER).lower()
        headers[header_name] = session_token

    return headers


def build_headers_for(
    context: AuthContext,
    url: str,
    body: Optional[str] = None,
    clock: Callable[[], float] = time.time,
) -> Dict[str, str]:
    """Build headers from an AuthContext."""
    return build_auth_headers(
        context.api_key,
        context.api_secret,
        context.auth_method,
        url,
        body=body,
        bearer_token=context.bearer_token,
        session_token=context.session_token,
        session_header_name=context.session_header_name,
        clock=clock,
    )
