# Structured logging for Alice Mirror
import sys
import logging
import structlog
from typing import Optional

from .processors import make_redactor, make_standard_context, normalize_error

# Global flag to prevent duplicate logging configuration
_logging_configured = False


def configure_logging(settings) -> None:
    """Configure stdlib logging and structlog from settings (idempotent)."""
    global _logging_configured

    if _logging_configured:
        return

    log_settings = getattr(settings, "logging", None)
    level = getattr(log_settings, "level", "INFO").upper()
    json_format = getattr(log_settings, "json_format", True)
    redact_keys = getattr(log_settings, "redact_keys", None)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        make_standard_context(settings),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        normalize_error,
        structlog.processors.UnicodeDecoder(),
        make_redactor(redact_keys),
    ]

    renderer = (
        structlog.processors.JSONRenderer()
        if json_format
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=shared_processors,
        )
    )
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    _logging_configured = True


def get_logger(name: str, component: Optional[str] = None) -> structlog.BoundLogger:
    """Get a structured logger instance, optionally bound to a component."""
    # Initial values keep the proxy lazy so loggers created at import time
    # still pick up the configuration applied later by configure_logging()
    if component:
        return structlog.get_logger(name, component=component)
    return structlog.get_logger(name)


def get_api_logger_safe(name: str) -> structlog.BoundLogger:
    """Logger for the HTTP layer."""
    return get_logger(name, component="api")


def get_audit_logger(name: str) -> structlog.BoundLogger:
    """Logger for security relevant events (session exchange, token use)."""
    return get_logger(name, component="audit")


__all__ = [
    "configure_logging",
    "get_logger",
    "get_api_logger_safe",
    "get_audit_logger",
]
