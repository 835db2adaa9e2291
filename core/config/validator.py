"""
Configuration validation at application startup.

Checks the Alice Blue integration settings before the API or CLI starts
serving, so that a deployment which will only ever return sample trades
is reported loudly instead of silently.
"""

from pathlib import Path
from typing import List, Dict, Any
from dataclasses import dataclass

from core.logging import get_logger
from .settings import Environment, Settings

logger = get_logger(__name__, component="config")

VALID_AUTH_METHODS = {"basic", "hmac", "headers"}
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass
class ValidationResult:
    """Result of a configuration validation check"""
    is_valid: bool
    component: str
    message: str
    severity: str = "error"  # "error", "warning", "info"


class ConfigurationValidator:
    """Validates Alice Blue and logging configuration."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.validation_results: List[ValidationResult] = []

    def validate_all(self) -> bool:
        """
        Run all validation checks.

        Returns:
            bool: True if no check reported an error
        """
        self.validation_results = []
        self._validate_trades_endpoint()
        self._validate_credentials()
        self._validate_session_exchange()
        self._validate_logging_settings()

        errors = [r for r in self.validation_results if r.severity == "error"]
        warnings = [r for r in self.validation_results if r.severity == "warning"]

        for result in errors:
            logger.error("Configuration error", component_name=result.component, detail=result.message)
        for result in warnings:
            logger.warning("Configuration warning", component_name=result.component, detail=result.message)

        if not errors and not warnings:
            logger.info("All configuration validation checks passed")
        elif not errors:
            logger.info("Configuration validation passed with warnings", warnings=len(warnings))

        return len(errors) == 0

    def _report(self, component: str, message: str, severity: str = "error"):
        self.validation_results.append(ValidationResult(
            is_valid=False,
            component=component,
            message=message,
            severity=severity,
        ))

    def _validate_trades_endpoint(self):
        alice = self.settings.alice
        if alice.resolved_trades_endpoint:
            return
        if alice.allow_fallback:
            self._report("Trades", "No trades endpoint configured - master trades will be served from sample data",
                         severity="warning")
        else:
            self._report("Trades", "No trades endpoint configured and sample-data fallback is disabled")

    def _validate_credentials(self):
        alice = self.settings.alice
        if alice.auth_method not in VALID_AUTH_METHODS:
            self._report("Authentication",
                         f"Unknown auth method '{alice.auth_method}', custom headers will be used",
                         severity="warning")

        if alice.oauth_token or Path(alice.oauth_token_file).is_file():
            return

        if alice.auth_method in ("basic", "hmac") and not (alice.api_key and alice.api_secret):
            self._report("Authentication",
                         f"Auth method '{alice.auth_method}' requires both API key and API secret")
        elif not alice.api_key and alice.resolved_trades_endpoint:
            self._report("Authentication",
                         "Trades endpoint configured without API key or token - requests need a caller session",
                         severity="warning")

    def _validate_session_exchange(self):
        if self.settings.alice.allow_sid_exchange and self.settings.environment == Environment.PRODUCTION:
            self._report("Session", "SID credential exchange is enabled in production", severity="warning")

    def _validate_logging_settings(self):
        if self.settings.logging.level.upper() not in VALID_LOG_LEVELS:
            self._report("Logging", f"Invalid log level: {self.settings.logging.level}")

    def get_validation_summary(self) -> Dict[str, Any]:
        """Get a summary of validation results"""
        errors = [r for r in self.validation_results if r.severity == "error"]
        warnings = [r for r in self.validation_results if r.severity == "warning"]

        return {
            "total_checks": len(self.validation_results),
            "errors": len(errors),
            "warnings": len(warnings),
            "is_valid": len(errors) == 0,
            "error_details": [{"component": r.component, "message": r.message} for r in errors],
            "warning_details": [{"component": r.component, "message": r.message} for r in warnings]
        }


def validate_startup_configuration(settings: Settings) -> bool:
    """Convenience function to run startup configuration validation."""
    validator = ConfigurationValidator(settings)
    return validator.validate_all()
