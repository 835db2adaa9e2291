# Caller-facing facade over the Alice Blue session and trade flows

from typing import Optional

from core.config.settings import Settings
from core.logging import get_logger
from core.monitoring.prometheus_metrics import AliceMetricsCollector
from .exceptions import SessionExchangeDisabledError
from .fetcher import ResilientFetcher
from .models import Credentials, TradeFeed
from .session import SessionAcquirer
from .trades import TradeFetcher

logger = get_logger(__name__, component="alice_service")


class AliceService:
    """High-level entry point used by the API and CLI."""

    def __init__(self, settings: Settings, fetcher: ResilientFetcher,
                 metrics: Optional[AliceMetricsCollector] = None):
        self.settings = settings
        self.fetcher = fetcher
        self.metrics = metrics
        self.session_acquirer = SessionAcquirer(settings.alice, fetcher, metrics)
        self.trade_fetcher = TradeFetcher(settings.alice, fetcher, metrics)

    @property
    def session_exchange_enabled(self) -> bool:
        return self.settings.alice.allow_sid_exchange

    async def exchange_session(self, credentials: Credentials) -> str:
        """
        Obtain a SID for the given credentials.

        The raw SID is returned to the in-process caller, which owns it from
        here on; mask it before it crosses a process boundary.
        """
        if not self.session_exchange_enabled:
            logger.warning("SID exchange attempted while disabled", user_id=credentials.user_id)
            raise SessionExchangeDisabledError()
        return await self.session_acquirer.obtain_session(credentials)

    async def get_master_trades(self, session_token: Optional[str] = None) -> TradeFeed:
        return await self.trade_fetcher.get_master_trades(session_token=session_token)
