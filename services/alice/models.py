"""Domain models for the Alice Blue session and trade flows."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AuthMethod(str, Enum):
    """Request authentication strategies supported by the header builder."""
    BASIC = "basic"
    HMAC = "hmac"
    HEADERS = "headers"

    @classmethod
    def resolve(cls, value: Any) -> "AuthMethod":
        """Resolve a configured method case-insensitively; unknown values mean custom headers."""
        if isinstance(value, AuthMethod):
            return value
        normalized = str(value or "").strip().lower()
        for method in cls:
            if method.value == normalized:
                return method
        return cls.HEADERS


class TradeSide(str, Enum):
    BUY = "Buy"
    SELL = "Sell"


class TradeSource(str, Enum):
    """Where a trade read came from."""
    LIVE = "live"
    FALLBACK = "fallback"


class Credentials(BaseModel):
    """User credentials for a single SID exchange. Never persisted."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    user_id: str = Field(alias="userId")
    password: str = Field(repr=False)
    two_factor_code: str = Field(alias="twoFA", repr=False)
    app_id: str = Field(alias="appId")

    def to_payload(self) -> Dict[str, str]:
        """Request body expected by the session endpoint."""
        return self.model_dump(by_alias=True)


@dataclass(frozen=True)
class AuthContext:
    """How to authenticate one outbound request."""
    api_key: str = ""
    api_secret: str = ""
    auth_method: AuthMethod = AuthMethod.HEADERS
    bearer_token: Optional[str] = None
    session_token: Optional[str] = None
    session_header_name: str = "x-session-id"

    @classmethod
    def from_settings(cls, alice_settings, bearer_token: Optional[str] = None,
                      session_token: Optional[str] = None) -> "AuthContext":
        return cls(
            api_key=alice_settings.api_key or "",
            api_secret=alice_settings.api_secret or "",
            auth_method=AuthMethod.resolve(alice_settings.auth_method),
            bearer_token=bearer_token or None,
            session_token=session_token or None,
            session_header_name=alice_settings.session_header_name,
        )


class CanonicalTrade(BaseModel):
    """A master-account trade in the internal schema."""
    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: str
    account: str
    symbol: str
    type: str
    side: TradeSide
    quantity: float = Field(ge=0)
    price: float = Field(ge=0)
    status: str


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with deterministic exponential backoff.

    ``max_attempts`` counts retries after the first try, so a request is
    issued at most ``max_attempts + 1`` times.
    """
    max_attempts: int = 3
    initial_backoff_ms: int = 500
    # Statuses that fail immediately; empty means every failure is retried
    non_retryable_statuses: FrozenSet[int] = field(default_factory=frozenset)

    def delay_for(self, attempt: int) -> float:
        """Backoff in seconds before retrying after attempt index ``attempt``."""
        return self.initial_backoff_ms * (2 ** attempt) / 1000.0

    @classmethod
    def from_settings(cls, retry_settings) -> "RetryPolicy":
        return cls(
            max_attempts=retry_settings.max_attempts,
            initial_backoff_ms=retry_settings.initial_backoff_ms,
        )


@dataclass(frozen=True)
class TradeFeed:
    """Result of a master trade read, tagged with its source."""
    source: TradeSource
    trades: List[CanonicalTrade]

    @property
    def is_fallback(self) -> bool:
        return self.source == TradeSource.FALLBACK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source.value,
            "trades": [trade.model_dump(mode="json") for trade in self.trades],
        }
