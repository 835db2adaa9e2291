"""SID acquisition through the Alice Blue credential exchange."""

import json
from typing import Any, Mapping, Optional

from core.config.settings import AliceSettings
from core.logging import get_audit_logger
from core.monitoring.prometheus_metrics import AliceMetricsCollector
from .exceptions import FetchError, SessionExchangeError
from .fetcher import ResilientFetcher, read_json
from .models import Credentials

audit_logger = get_audit_logger(__name__)

STATUS_OK = "Ok"
SESSION_ID_FIELDS = ("sessionID", "sessionId")


def extract_session_id(payload: Any) -> Optional[str]:
    """Session id from the first populated of the conventional field names."""
    if not isinstance(payload, Mapping):
        return None
    for key in SESSION_ID_FIELDS:
        value = payload.get(key)
        if value:
            return str(value)
    return None


class SessionAcquirer:
    """Exchanges user credentials for a short-lived SID. Holds no session state."""

    def __init__(self, settings: AliceSettings, fetcher: ResilientFetcher,
                 metrics: Optional[AliceMetricsCollector] = None):
        self.settings = settings
        self.fetcher = fetcher
        self.metrics = metrics

    async def obtain_session(self, credentials: Credentials) -> str:
        """
        POST the credentials to the session endpoint and return the SID.

        Raises:
            FetchError: endpoint unreachable or failing after retries
            SessionExchangeError: response lacks a success marker or a session id
        """
        endpoint = self.settings.sid_endpoint
        body = json.dumps(credentials.to_payload())

        audit_logger.info("SID exchange requested", user_id=credentials.user_id, endpoint=endpoint)
        try:
            response = await self.fetcher.fetch(
                endpoint,
                method="POST",
                content=body,
                headers={"Content-Type": "application/json"},
            )
        except FetchError as e:
            self._record("unreachable")
            audit_logger.error("SID exchange failed", user_id=credentials.user_id,
                               status_code=e.status_code, error=e.message)
            raise

        payload = read_json(response)
        session_id = extract_session_id(payload)
        is_ok = isinstance(payload, Mapping) and payload.get("stat") == STATUS_OK

        if session_id:
            self._record("success")
            audit_logger.info("SID exchange succeeded", user_id=credentials.user_id)
            return session_id

        self._record("rejected")
        audit_logger.warning("SID exchange rejected", user_id=credentials.user_id, status_ok=is_ok)
        if is_ok:
            raise SessionExchangeError(
                payload,
                message=f"SID exchange reported Ok without a session id: {json.dumps(payload, default=str)}",
            )
        raise SessionExchangeError(payload)

    def _record(self, outcome: str) -> None:
        if self.metrics:
            self.metrics.record_session_exchange(outcome)
