"""Audit logging package."""

from .events import EventType
from .logger import audit_event, get_logger, reset_logger, setup_logging

__all__ = ["EventType", "audit_event", "get_logger", "reset_logger", "setup_logging"]
