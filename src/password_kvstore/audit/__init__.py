"""Audit logging package."""

from .events import EventType
from .logger import audit_event, configure_logging, sanitize_keys

__all__ = ["EventType", "audit_event", "configure_logging", "sanitize_keys"]
