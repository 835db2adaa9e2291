# Maps loosely structured Alice Blue trade payloads onto CanonicalTrade
import math
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Optional

from .models import CanonicalTrade, TradeSide

DEFAULT_ACCOUNT = "Master"
DEFAULT_TYPE = "Market"
DEFAULT_STATUS = "Filled"

TRADE_ARRAY_KEYS = ("trades", "data")

ID_FIELDS = ("id", "tradeId")
TIMESTAMP_FIELDS = ("timestamp", "time")
SYMBOL_FIELDS = ("symbol", "instrument", "scrip", "ticker")
SIDE_FIELDS = ("side", "buySell")
QUANTITY_FIELDS = ("quantity", "qty", "quantityFilled")
PRICE_FIELDS = ("price", "rate", "fillPrice")

# Epoch values above this are milliseconds
_EPOCH_MILLIS_THRESHOLD = 1e12


def _first(record: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def _iso(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _to_number(value: Any) -> float:
    """Coerce to a non-negative finite float, 0 otherwise."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip()) if value.strip() else 0.0
        except ValueError:
            return 0.0
    else:
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def _to_timestamp(value: Any, now: datetime) -> str:
    if isinstance(value, str) and value.strip():
        return value
    if isinstance(value, datetime):
        return _iso(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value):
        seconds = value / 1000.0 if value > _EPOCH_MILLIS_THRESHOLD else float(value)
        try:
            return _iso(datetime.fromtimestamp(seconds, tz=timezone.utc))
        except (OverflowError, OSError, ValueError):
            return _iso(now)
    return _iso(now)


def _to_side(record: Mapping[str, Any]) -> TradeSide:
    explicit = _first(record, SIDE_FIELDS)
    if isinstance(explicit, TradeSide):
        return explicit
    if isinstance(explicit, str):
        normalized = explicit.strip().lower()
        if normalized.startswith("b"):
            return TradeSide.BUY
        if normalized.startswith("s"):
            return TradeSide.SELL

    transaction_type = record.get("transactionType")
    if isinstance(transaction_type, str) and transaction_type.strip().upper() == "SELL":
        return TradeSide.SELL
    return TradeSide.BUY


def extract_trade_records(payload: Any) -> List[Any]:
    """
    Locate the trade array in a payload.

    Checks ``trades`` then ``data`` on a mapping, or accepts a bare list.
    Anything else yields an empty list.
    """
    if isinstance(payload, Mapping):
        source = _first(payload, TRADE_ARRAY_KEYS)
    else:
        source = payload
    return list(source) if isinstance(source, list) else []


def normalize_trade(
    record: Any,
    index: int,
    account: str = DEFAULT_ACCOUNT,
    now: Optional[datetime] = None,
) -> CanonicalTrade:
    """Map one upstream record; missing fields take their defaults."""
    now = now or datetime.now(timezone.utc)
    if not isinstance(record, Mapping):
        record = {}

    trade_id = _first(record, ID_FIELDS)
    if trade_id is None:
        trade_id = f"A-{int(now.timestamp() * 1000)}-{index}"

    symbol = _first(record, SYMBOL_FIELDS)
    trade_type = record.get("type")
    status = record.get("status")

    return CanonicalTrade(
        id=str(trade_id),
        timestamp=_to_timestamp(_first(record, TIMESTAMP_FIELDS), now),
        account=account,
        symbol=str(symbol) if symbol is not None else "",
        type=str(trade_type) if trade_type is not None else DEFAULT_TYPE,
        side=_to_side(record),
        quantity=_to_number(_first(record, QUANTITY_FIELDS)),
        price=_to_number(_first(record, PRICE_FIELDS)),
        status=str(status) if status is not None else DEFAULT_STATUS,
    )


def normalize_trades(
    payload: Any,
    account: str = DEFAULT_ACCOUNT,
    now: Optional[datetime] = None,
) -> List[CanonicalTrade]:
    """Normalize every record in an upstream trades payload."""
    now = now or datetime.now(timezone.utc)
    return [
        normalize_trade(record, index, account=account, now=now)
        for index, record in enumerate(extract_trade_records(payload))
    ]
