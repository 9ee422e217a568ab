"""Utility modules."""

from .resilience import (
    ValidationAuditEntry,
    ValidationAuditLog,
    sanitize_address_input,
)

__all__ = [
    "ValidationAuditEntry",
    "ValidationAuditLog",
    "sanitize_address_input",
]
