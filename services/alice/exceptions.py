"""Alice Blue integration exceptions."""

import json
from typing import Any, Optional

from core.utils.exceptions import BrokerAPIError, BrokerConnectionError, ConfigurationError

BODY_SNIPPET_LIMIT = 500


class FetchError(BrokerConnectionError):
    """A broker call that still failed after the retry policy was exhausted."""

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code


class TransientNetworkError(FetchError):
    """Transport-level failure: connection refused, DNS, timeout."""
    pass


class UpstreamStatusError(FetchError):
    """Non-2xx response from the broker."""

    def __init__(self, status_code: int, body: str = "", **kwargs):
        self.body = body
        super().__init__(
            f"HTTP {status_code}: {body[:BODY_SNIPPET_LIMIT]}",
            status_code=status_code,
            **kwargs,
        )


class SessionExchangeError(BrokerAPIError):
    """SID exchange response carried no recognizable success marker."""

    def __init__(self, payload: Any, message: Optional[str] = None, **kwargs):
        raw = json.dumps(payload, default=str)
        super().__init__(message or f"Failed to obtain SID: {raw}", api_response=payload, **kwargs)
        self.payload = payload


class SessionExchangeDisabledError(ConfigurationError):
    """Credential exchange is switched off for this deployment."""

    def __init__(self, message: str = "SID exchange disabled. Set ALICE__ALLOW_SID_EXCHANGE=true to enable (dev only)."):
        super().__init__(message, config_field="alice.allow_sid_exchange", config_value=False)


class ConfigurationIncompleteError(ConfigurationError):
    """Live trade reads are not configured and sample-data fallback is disabled."""
    pass
