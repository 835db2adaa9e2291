# structlog processors shared by console and API logging
from typing import Any, Callable, Dict, Iterable, Optional

REDACTED = "[REDACTED]"

DEFAULT_REDACT_KEYS = (
    "authorization", "access_token", "api_key", "api-secret", "api_secret",
    "password", "secret", "token", "twofa", "sessionid", "session_id", "set-cookie",
)


def make_redactor(keys: Optional[Iterable[str]] = None) -> Callable:
    """Build a processor that redacts sensitive fields from the event dict recursively."""
    keys_to_redact = {k.lower() for k in (keys or DEFAULT_REDACT_KEYS)}

    def _redact(obj):
        if isinstance(obj, dict):
            out = {}
            for k, v in obj.items():
                if isinstance(k, str) and k.lower() in keys_to_redact:
                    out[k] = REDACTED
                else:
                    out[k] = _redact(v)
            return out
        if isinstance(obj, (list, tuple)):
            return [_redact(v) for v in obj]
        return obj

    def redact_sensitive(logger, name, event_dict):
        return _redact(event_dict)

    return redact_sensitive


def make_standard_context(settings: Any) -> Callable:
    """Bind env, service and version once from settings."""
    env = getattr(settings, "environment", None)
    app_name = getattr(settings, "app_name", None)
    version = getattr(settings, "version", None)

    def add_standard_context(logger, name, event_dict: Dict[str, Any]):
        if env is not None:
            event_dict.setdefault("env", getattr(env, "value", str(env)))
        if app_name:
            event_dict.setdefault("service", app_name)
        if version:
            event_dict.setdefault("version", version)
        return event_dict

    return add_standard_context


def normalize_error(logger, name, event_dict):
    """Add normalized error fields if exception info is present."""
    exc_text = event_dict.get("exception")
    if exc_text and isinstance(exc_text, str):
        first_line = exc_text.strip().splitlines()[-1]
        if ":" in first_line:
            etype, emsg = first_line.split(":", 1)
            event_dict.setdefault("error_type", etype.strip())
            event_dict.setdefault("error_message", emsg.strip())
    if "error" in event_dict and not event_dict.get("error_message"):
        event_dict["error_message"] = str(event_dict["error"])
    return event_dict
