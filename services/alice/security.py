import base64
import hashlib
import hmac


def sign_payload(secret: str, message: str) -> str:
    """Hex HMAC-SHA256 of ``message`` keyed by ``secret``."""
    return hmac.new(
        secret.encode("utf-8"),
        message.encode("utf-8"),
        digestmod=hashlib.sha256,
    ).hexdigest()


def basic_credentials(api_key: str, api_secret: str) -> str:
    """Base64 ``key:secret`` for an HTTP Basic Authorization header."""
    return base64.b64encode(f"{api_key}:{api_secret}".encode("utf-8")).decode("ascii")


def mask_session_id(session_id: str) -> str:
    """
    Mask a SID before it leaves the process boundary.

    Keeps the first 6 and last 4 characters. Tokens of 10 characters or
    fewer are fully masked.
    """
    if len(session_id) <= 10:
        return "***"
    return f"{session_id[:6]}...{session_id[-4:]}"
