# Complete settings for the Alice Blue integration
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, field_validator
from enum import Enum
from typing import List, Optional


DEFAULT_SID_ENDPOINT = (
    "https://ant.aliceblueonline.com/rest/AliceBlueAPIService/api/customer/getUserSID"
)


class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class RetrySettings(BaseModel):
    """Retry policy for outbound broker calls"""
    # Retries after the first try; 3 retries -> 500/1000/2000ms delays
    max_attempts: int = 3
    initial_backoff_ms: int = 500

    @field_validator('max_attempts')
    @classmethod
    def validate_max_attempts(cls, v):
        if v < 0:
            raise ValueError("max_attempts cannot be negative")
        return v

    @field_validator('initial_backoff_ms')
    @classmethod
    def validate_backoff(cls, v):
        if v < 0:
            raise ValueError("initial_backoff_ms cannot be negative")
        return v


class AliceSettings(BaseModel):
    # Session (SID) exchange
    sid_endpoint: str = DEFAULT_SID_ENDPOINT
    # Dev-only: credential exchange is disabled unless explicitly enabled
    allow_sid_exchange: bool = False

    # Trades endpoint; api_base_url is used when trades_endpoint is unset
    trades_endpoint: Optional[str] = None
    api_base_url: Optional[str] = None

    api_key: str = ""
    api_secret: str = ""
    auth_method: str = "headers"  # basic|hmac|headers

    # Bearer/OAuth token, env value wins over the token file
    oauth_token: Optional[str] = None
    oauth_token_file: str = ".alice.token"

    session_header_name: str = "x-session-id"
    master_account: str = "Master"

    # When False, an under-configured deployment raises instead of serving sample trades
    allow_fallback: bool = True

    request_timeout_seconds: float = 10.0
    retry: RetrySettings = RetrySettings()

    @field_validator('auth_method', mode='before')
    @classmethod
    def normalize_auth_method(cls, v):
        return (v or "headers").strip().lower()

    @field_validator('session_header_name', mode='before')
    @classmethod
    def normalize_header_name(cls, v):
        return (v or "x-session-id").strip().lower()

    @property
    def resolved_trades_endpoint(self) -> Optional[str]:
        """Trades endpoint with the API base URL as fallback."""
        return self.trades_endpoint or self.api_base_url or None


class LoggingSettings(BaseModel):
    level: str = "INFO"
    json_format: bool = True
    # Redaction
    redact_keys: list[str] = [
        "authorization", "access_token", "api_key", "api-secret", "api_secret",
        "x-api-key", "x-api-secret", "x-signature", "password", "secret", "token",
        "twofa", "two_factor_code", "sessionid", "session_id", "x-session-id",
        "set-cookie",
    ]


class MonitoringSettings(BaseModel):
    metrics_enabled: bool = True


class APISettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:9002"],
        description="Allowed CORS origins"
    )
    cors_methods: List[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        description="Allowed CORS methods"
    )
    cors_headers: List[str] = Field(
        default=["Authorization", "Content-Type", "X-Request-ID", "X-Session-Id"],
        description="Allowed CORS headers"
    )

    @field_validator('cors_origins')
    def validate_cors_origins(cls, v):
        """Validate CORS origins configuration"""
        if "*" in v and len(v) > 1:
            raise ValueError("Cannot mix '*' with specific origins")
        return v


class Settings(BaseSettings):
    """Main application settings, loaded from environment variables"""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore"
    )

    app_name: str = "Alice Mirror"
    version: str = "0.3.0"
    environment: Environment = Environment.DEVELOPMENT

    alice: AliceSettings = AliceSettings()
    logging: LoggingSettings = LoggingSettings()
    monitoring: MonitoringSettings = MonitoringSettings()
    api: APISettings = APISettings()


# No global settings instance - use dependency injection instead
