"""Structured logging with secret redaction."""

import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional, Set

import structlog
from structlog.types import EventDict

SENSITIVE_KEYS = {"password", "secret", "key", "nonce", "token", "plaintext", "ciphertext"}
REDACTED = "***"


def sanitize_keys(event_dict: Dict[str, Any], sensitive_keys: Set[str]) -> Dict[str, Any]:
    """Redact sensitive keys, matching case-insensitively and recursing into
    nested dicts and lists.

    Args:
        event_dict: Dictionary to sanitize
        sensitive_keys: Set of keys to redact

    Returns:
        Sanitized copy of the dictionary
    """
    lowered = {key.lower() for key in sensitive_keys}

    def _sanitize_value(key: str, value: Any) -> Any:
        if key.lower() in lowered:
            return REDACTED
        if isinstance(value, dict):
            return sanitize_keys(value, sensitive_keys)
        if isinstance(value, list):
            return [_sanitize_value("", item) for item in value]
        return value

    return {k: _sanitize_value(k, v) for k, v in event_dict.items()}


def sanitize_event_dict(_: Any, __: str, event_dict: EventDict) -> EventDict:
    """structlog processor masking sensitive values."""
    return sanitize_keys(dict(event_dict), SENSITIVE_KEYS)


def add_timestamp(_: Any, __: str, event_dict: EventDict) -> EventDict:
    """Add ISO 8601 timestamp."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def create_secure_handler(
    log_path: Path, max_bytes: int, backup_count: int
) -> RotatingFileHandler:
    """Create a RotatingFileHandler whose file is only readable by its owner
    and group.

    Args:
        log_path: Path to the log file
        max_bytes: Maximum size of each log file
        backup_count: Number of backup files to keep
    """
    os.makedirs(log_path.parent, mode=0o750, exist_ok=True)
    if not log_path.exists():
        log_path.touch(mode=0o640)
    os.chmod(log_path, 0o640)
    return RotatingFileHandler(str(log_path), maxBytes=max_bytes, backupCount=backup_count)


def configure_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    max_log_size: int = 10 * 1024 * 1024,
    backup_count: int = 3,
) -> structlog.stdlib.BoundLogger:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Log level name
        log_file: Optional path of a rotating JSON log file
        max_log_size: Maximum size of a log file before rotation
        backup_count: Number of rotated files to keep

    Returns:
        A configured logger bound to this package.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            add_timestamp,
            sanitize_event_dict,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)

    if log_file is not None:
        file_handler = create_secure_handler(Path(log_file), max_log_size, backup_count)
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(file_handler)

    return structlog.get_logger("password_kvstore")


def audit_event(
    *,
    event_type: str,
    folder: str,
    success: bool,
    details: Optional[Dict[str, Any]] = None,
    error: Optional[Exception] = None,
) -> None:
    """Log an audit event.

    Args:
        event_type: Type of event (e.g., "entry.create")
        folder: Name of the folder acted on
        success: Whether the operation succeeded
        details: Optional event details, sanitized before logging
        error: Optional exception if the operation failed
    """
    logger = structlog.get_logger("password_kvstore.audit")
    event: Dict[str, Any] = {
        "event_type": str(getattr(event_type, "value", event_type)),
        "folder": folder,
        "success": success,
    }
    if details:
        event["details"] = sanitize_keys(details, SENSITIVE_KEYS)
    if error is not None:
        event["error"] = {"type": type(error).__name__, "message": str(error)}

    if success:
        logger.info("audit_event", **event)
    else:
        logger.error("audit_event", **event)
