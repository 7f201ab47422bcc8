"""Structured audit logging for password and login events."""

import logging
import sys
import threading
import uuid
from contextlib import suppress
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.types import EventDict

from .events import EventType

LOG_FILE_NAME = "anotherpass.log"

# Keys whose values never reach a log sink
SENSITIVE_KEYS = frozenset(
    {"password", "pass", "plaintext", "salt", "hash", "line", "secret", "token", "key"}
)

_LOGGER_INSTANCE: structlog.stdlib.BoundLogger | None = None
_logger_lock = threading.Lock()


def get_log_dir(base_dir: str | Path | None = None) -> Path:
    """Get normalized log directory path.

    Args:
        base_dir: Base directory for logs. If None, uses ~/.local/log

    Returns:
        Resolved Path object for log directory
    """
    if base_dir is None:
        base_dir = Path.home() / ".local" / "log"
    return Path(base_dir).expanduser().resolve()


def create_secure_handler(
    log_path: Path, max_bytes: int, backup_count: int
) -> RotatingFileHandler:
    """Create a RotatingFileHandler whose file is not world-readable.

    Args:
        log_path: Path to the log file
        max_bytes: Maximum size of each log file
        backup_count: Number of backup files to keep

    Returns:
        Configured RotatingFileHandler instance
    """
    log_path.parent.mkdir(mode=0o750, parents=True, exist_ok=True)
    log_path.parent.chmod(0o750)

    handler = RotatingFileHandler(
        str(log_path), maxBytes=max_bytes, backupCount=backup_count
    )
    if not log_path.exists():
        log_path.touch(mode=0o640)
    log_path.chmod(0o640)

    return handler


def add_timestamp(_: Any, __: str, event_dict: EventDict) -> EventDict:
    """Add ISO 8601 timestamp."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def add_thread_info(_: Any, __: str, event_dict: EventDict) -> EventDict:
    """Add thread information."""
    thread = threading.current_thread()
    event_dict["thread"] = {"id": thread.ident, "name": thread.name}
    return event_dict


def sanitize_keys(
    event_dict: dict[str, Any], sensitive_keys: frozenset[str] = SENSITIVE_KEYS
) -> dict[str, Any]:
    """Return a copy of the dictionary with sensitive values redacted.

    Keys are matched case-insensitively, and nested dicts and lists are
    walked.

    Args:
        event_dict: Dictionary to sanitize
        sensitive_keys: Lower-case keys to redact

    Returns:
        Sanitized copy of the dictionary
    """

    def _sanitize_value(key: str, value: Any) -> Any:
        if key.lower() in sensitive_keys:
            return "***"
        if isinstance(value, dict):
            return sanitize_keys(value, sensitive_keys)
        if isinstance(value, list):
            return [_sanitize_value("", item) for item in value]
        return value

    return {k: _sanitize_value(k, v) for k, v in event_dict.items()}


def sanitize_event_dict(_: Any, __: str, event_dict: EventDict) -> EventDict:
    """Processor masking sensitive values anywhere in the event."""
    return sanitize_keys(dict(event_dict))


def configure_logger(
    log_level: str = "INFO",
    correlation_id: str | None = None,
    max_log_size: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 5,
    base_dir: str | Path | None = None,
) -> structlog.stdlib.BoundLogger:
    """Configure structlog and the root logging handlers.

    Prefer setup_logging(), which also records the global instance.

    Args:
        log_level: Log level (default: INFO)
        correlation_id: Optional correlation ID for request tracing
        max_log_size: Maximum size of a log file before rotation
        backup_count: Number of backup files to keep
        base_dir: Optional base directory for log files

    Returns:
        A configured BoundLogger bound to the correlation ID
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            add_timestamp,
            add_thread_info,
            sanitize_event_dict,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    log_file = get_log_dir(base_dir) / LOG_FILE_NAME
    file_handler = create_secure_handler(log_file, max_log_size, backup_count)
    file_handler.setFormatter(logging.Formatter("%(message)s"))

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    return structlog.get_logger("anotherpass").bind(
        correlation_id=correlation_id or str(uuid.uuid4())
    )


def setup_logging(
    *,
    log_level: str = "INFO",
    correlation_id: str | None = None,
    max_log_size: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    base_dir: str | Path | None = None,
) -> structlog.stdlib.BoundLogger:
    """Set up structured logging and remember the configured logger.

    Args:
        log_level: Log level (default: INFO)
        correlation_id: Optional correlation ID for request tracing
        max_log_size: Maximum size of a log file before rotation
        backup_count: Number of backup files to keep
        base_dir: Optional base directory for log files

    Returns:
        The configured logger instance.
    """
    global _LOGGER_INSTANCE

    with suppress(Exception):
        structlog.reset_defaults()

    new_logger = configure_logger(
        log_level=log_level,
        correlation_id=correlation_id,
        max_log_size=max_log_size,
        backup_count=backup_count,
        base_dir=base_dir,
    )
    with _logger_lock:
        _LOGGER_INSTANCE = new_logger
    return new_logger


def get_logger() -> Any:
    """Return the configured audit logger.

    Falls back to an unconfigured structlog logger when setup_logging() has
    not been called, so library use never creates log files on its own.
    """
    with _logger_lock:
        if _LOGGER_INSTANCE is not None:
            return _LOGGER_INSTANCE
    return structlog.get_logger("anotherpass.audit")


def reset_logger() -> None:
    """Drop handlers, structlog configuration and the global logger."""
    global _LOGGER_INSTANCE
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        with suppress(Exception):
            handler.close()
        root_logger.removeHandler(handler)

    with suppress(Exception):
        structlog.reset_defaults()

    with _logger_lock:
        _LOGGER_INSTANCE = None


def audit_event(
    *,
    event_type: EventType | str,
    user: str,
    success: bool,
    details: dict[str, Any] | None = None,
    error: Exception | None = None,
) -> None:
    """Log an audit event.

    Args:
        event_type: Type of event (e.g., EventType.PASS_ADD)
        user: User the event concerns
        success: Whether the operation succeeded
        details: Optional event details, sanitized before logging
        error: Optional exception if operation failed
    """
    event: dict[str, Any] = {
        "event_type": event_type.value if isinstance(event_type, EventType) else event_type,
        "user": user,
        "success": success,
    }
    if details:
        event["details"] = sanitize_keys(details)
    if error is not None:
        event["error"] = {"type": type(error).__name__, "message": str(error)}

    logger = get_logger().bind(**event)
    if success:
        logger.info("audit_event")
    else:
        logger.error("audit_event")
