"""Utility functions for the IRSA Operator."""

from .conditions import find_condition, is_ready, ready_reason, set_ready_condition, update_condition
from .errors import ConfigurationError, sanitize_exception
from .events import emit_event
from .inventory import Inventory, NamespacedName, diff

__all__ = [
    "update_condition",
    "set_ready_condition",
    "find_condition",
    "is_ready",
    "ready_reason",
    "emit_event",
    "ConfigurationError",
    "sanitize_exception",
    "Inventory",
    "NamespacedName",
    "diff",
]
