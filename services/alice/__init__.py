"""Alice Blue broker integration: SID exchange, request auth and master trade reads."""

from .service import AliceService
from .fetcher import ResilientFetcher, read_json
from .headers import build_auth_headers, build_headers_for
from .session import SessionAcquirer, extract_session_id
from .trades import TradeFetcher
from .normalizer import normalize_trade, normalize_trades, extract_trade_records
from .sample_data import SAMPLE_TRADES, master_sample_trades
from .security import mask_session_id
from .models import (
    AuthContext,
    AuthMethod,
    CanonicalTrade,
    Credentials,
    RetryPolicy,
    TradeFeed,
    TradeSide,
    TradeSource,
)
from .exceptions import (
    FetchError,
    TransientNetworkError,
    UpstreamStatusError,
    SessionExchangeError,
    SessionExchangeDisabledError,
    ConfigurationIncompleteError,
)

__all__ = [
    "AliceService",
    "ResilientFetcher",
    "read_json",
    "build_auth_headers",
    "build_headers_for",
    "SessionAcquirer",
    "extract_session_id",
    "TradeFetcher",
    "normalize_trade",
    "normalize_trades",
    "extract_trade_records",
    "SAMPLE_TRADES",
    "master_sample_trades",
    "mask_session_id",
    "AuthContext",
    "AuthMethod",
    "CanonicalTrade",
    "Credentials",
    "RetryPolicy",
    "TradeFeed",
    "TradeSide",
    "TradeSource",
    "FetchError",
    "TransientNetworkError",
    "UpstreamStatusError",
    "SessionExchangeError",
    "SessionExchangeDisabledError",
    "ConfigurationIncompleteError",
]
