"""
Exception hierarchy for Alice Mirror.

Transient errors are failures a caller may retry: the broker was unreachable
or answered with an error status. Permanent errors come from configuration
and must be fixed before the call can succeed. Broker errors carry the broker
name so log lines can be filtered per integration.
"""

from typing import Dict, Any, Optional
from datetime import datetime, timezone


class AliceMirrorException(Exception):
    """Root of every error raised by Alice Mirror code"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 correlation_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.correlation_id = correlation_id
        self.occurred_at = datetime.now(timezone.utc)

    def to_log_fields(self) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}
        if self.correlation_id:
            fields["correlation_id"] = self.correlation_id
        if self.details:
            fields["error_details"] = self.details
        return fields


class TransientError(AliceMirrorException):
    """Failure that may succeed on a later attempt.

    ``retryable`` is False once ``retry_count`` has reached ``max_retries``,
    i.e. the error left the retry loop with its budget spent.
    """

    def __init__(self, message: str, retry_count: int = 0, max_retries: int = 3,
                 details: Optional[Dict[str, Any]] = None, correlation_id: Optional[str] = None):
        super().__init__(message, details, correlation_id)
        self.retry_count = retry_count
        self.max_retries = max_retries
        self.retryable = retry_count < max_retries

    def to_log_fields(self) -> Dict[str, Any]:
        fields = super().to_log_fields()
        fields.update(retry_count=self.retry_count, max_retries=self.max_retries)
        return fields


class PermanentError(AliceMirrorException):
    """Failure that retrying cannot fix"""
    pass


class BrokerError(TransientError):
    """Error talking to the broker"""

    def __init__(self, message: str, broker: str = "alice", **kwargs):
        super().__init__(message, **kwargs)
        self.broker = broker

    def to_log_fields(self) -> Dict[str, Any]:
        fields = super().to_log_fields()
        fields["broker"] = self.broker
        return fields


class BrokerConnectionError(BrokerError):
    """Broker unreachable or answering with an error status"""
    pass


class BrokerAPIError(BrokerError):
    """Broker answered, but the response was not usable"""

    def __init__(self, message: str, broker: str = "alice", api_error_code: Optional[str] = None,
                 api_response: Optional[Any] = None, **kwargs):
        super().__init__(message, broker, **kwargs)
        self.api_error_code = api_error_code
        self.api_response = api_response if api_response is not None else {}


class ConfigurationError(PermanentError):
    """Settings missing or inconsistent for the requested operation"""

    def __init__(self, message: str, config_field: Optional[str] = None,
                 config_value: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.config_field = config_field
        self.config_value = config_value

    def to_log_fields(self) -> Dict[str, Any]:
        fields = super().to_log_fields()
        if self.config_field:
            fields["config_field"] = self.config_field
        return fields


def is_retryable_error(error: Exception) -> bool:
    """True for transient errors that still have retry budget left."""
    return isinstance(error, TransientError) and error.retryable


def create_error_context(error: Exception, operation: str,
                         additional_context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Structured fields describing ``error`` for a log line.

    Args:
        error: The exception that occurred
        operation: Name of the operation that failed
        additional_context: Extra fields merged last

    Returns:
        Dictionary safe to pass as structlog keyword arguments
    """
    context: Dict[str, Any] = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        "operation": operation,
        "retryable": is_retryable_error(error),
    }
    if isinstance(error, AliceMirrorException):
        context.update(error.to_log_fields())
    if additional_context:
        context.update(additional_context)
    return context
