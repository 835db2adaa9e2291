"""Master-account trade reads with explicit sample-data fallback."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

from core.config.settings import AliceSettings
from core.logging import get_logger
from core.monitoring.prometheus_metrics import AliceMetricsCollector
from .exceptions import ConfigurationIncompleteError
from .fetcher import ResilientFetcher, read_json
from .headers import build_headers_for
from .models import AuthContext, CanonicalTrade, TradeFeed, TradeSource
from .normalizer import normalize_trades
from .sample_data import master_sample_trades

logger = get_logger(__name__, component="alice_trades")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TradeFetcher:
    """
    Reads master trades from the configured endpoint.

    Falls back to seeded sample trades when no endpoint is configured or
    when no credential material (API key, bearer token, session token) is
    available. The returned TradeFeed says which path ran.
    """

    def __init__(
        self,
        settings: AliceSettings,
        fetcher: ResilientFetcher,
        metrics: Optional[AliceMetricsCollector] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.settings = settings
        self.fetcher = fetcher
        self.metrics = metrics
        self._clock = clock

    async def get_master_trades(self, session_token: Optional[str] = None) -> TradeFeed:
        endpoint = self.settings.resolved_trades_endpoint
        if not endpoint:
            return self._fallback("no trades endpoint configured")

        bearer_token = self._resolve_bearer_token()
        if not self.settings.api_key and not bearer_token and not session_token:
            return self._fallback("no API key or token available")

        context = AuthContext.from_settings(
            self.settings, bearer_token=bearer_token, session_token=session_token
        )
        headers = build_headers_for(context, endpoint)

        response = await self.fetcher.fetch(endpoint, method="GET", headers=headers)
        trades = normalize_trades(
            read_json(response),
            account=self.settings.master_account,
            now=self._clock(),
        )

        logger.info("Fetched master trades", count=len(trades),
                    auth_method=context.auth_method.value,
                    bearer=bool(bearer_token), session=bool(session_token))
        if self.metrics:
            self.metrics.record_trade_read(TradeSource.LIVE.value)
        return TradeFeed(source=TradeSource.LIVE, trades=trades)

    async def fetch_trades(self, session_token: Optional[str] = None) -> List[CanonicalTrade]:
        """Trades only, for callers that do not care about the source."""
        feed = await self.get_master_trades(session_token=session_token)
        return feed.trades

    def _resolve_bearer_token(self) -> Optional[str]:
        """Token from settings, else the token file read fresh on every call."""
        if self.settings.oauth_token and self.settings.oauth_token.strip():
            return self.settings.oauth_token.strip()

        token_file = Path(self.settings.oauth_token_file)
        if not token_file.is_file():
            return None
        try:
            token = token_file.read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed reading token file", token_file=str(token_file), error=str(e))
            return None
        return token or None

    def _fallback(self, reason: str) -> TradeFeed:
        if not self.settings.allow_fallback:
            raise ConfigurationIncompleteError(
                f"Live trade reads unavailable: {reason}",
                config_field="alice.trades_endpoint",
            )
        logger.warning("Serving sample master trades", reason=reason)
        if self.metrics:
            self.metrics.record_trade_read(TradeSource.FALLBACK.value)
        return TradeFeed(source=TradeSource.FALLBACK, trades=master_sample_trades())
