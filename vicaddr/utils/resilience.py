"""Input sanitization and audit logging for address validation."""

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

logger = logging.getLogger(__name__)


# ============================================================================
# Audit Logging
# ============================================================================

_SOURCES = ("api", "regex-urban", "regex-rural", "none")


def _empty_stats() -> dict[str, Any]:
    return {
        "total_validations": 0,
        "total_valid": 0,
        "total_unmapped": 0,
        "total_issues": 0,
        "by_source": {source: 0 for source in _SOURCES},
        "avg_processing_time_ms": 0.0,
    }


@dataclass
class ValidationAuditEntry:
    """Single validation audit entry for tracking and debugging."""
    timestamp: datetime
    input_address: str
    source: str  # "api", "regex-urban", "regex-rural", "none"
    confidence: str
    is_valid: bool
    unmapped: bool
    processing_time_ms: int
    issue: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "input_address": self.input_address[:100],  # Truncate for logs
            "source": self.source,
            "confidence": self.confidence,
            "is_valid": self.is_valid,
            "unmapped": self.unmapped,
            "processing_time_ms": self.processing_time_ms,
            "issue": self.issue,
        }


class ValidationAuditLog:
    """Ring buffer audit log for validation operations.

    Keeps the last N validation entries for debugging and monitoring.
    """

    def __init__(self, max_entries: int = 1000):
        self._entries: deque[ValidationAuditEntry] = deque(maxlen=max_entries)
        self._stats = _empty_stats()

    def log(self, entry: ValidationAuditEntry) -> None:
        """Add an entry to the audit log."""
        self._entries.append(entry)
        self._update_stats(entry)

        logger.debug(
            f"AUDIT: {entry.input_address[:50]} -> valid={entry.is_valid} "
            f"({entry.confidence}) [{entry.source}] {entry.processing_time_ms}ms"
        )

    def _update_stats(self, entry: ValidationAuditEntry) -> None:
        """Update running statistics."""
        self._stats["total_validations"] += 1
        if entry.is_valid:
            self._stats["total_valid"] += 1
        if entry.unmapped:
            self._stats["total_unmapped"] += 1
        if entry.issue:
            self._stats["total_issues"] += 1

        source = entry.source if entry.source in self._stats["by_source"] else "none"
        self._stats["by_source"][source] += 1

        n = self._stats["total_validations"]
        self._stats["avg_processing_time_ms"] = (
            (self._stats["avg_processing_time_ms"] * (n - 1) + entry.processing_time_ms) / n
        )

    def get_recent(self, count: int = 10) -> list[dict[str, Any]]:
        """Get the most recent entries."""
        entries = list(self._entries)[-count:] if count > 0 else []
        return [e.to_dict() for e in entries]

    def get_stats(self) -> dict[str, Any]:
        """Get aggregate statistics."""
        total = self._stats["total_validations"]
        return {
            **self._stats,
            "by_source": dict(self._stats["by_source"]),
            "valid_rate": self._stats["total_valid"] / total if total > 0 else 0,
            "unmapped_rate": self._stats["total_unmapped"] / total if total > 0 else 0,
        }

    def clear(self) -> None:
        """Clear the audit log."""
        self._entries.clear()
        self._stats = _empty_stats()

    def __len__(self) -> int:
        return len(self._entries)


# ============================================================================
# Input Sanitization
# ============================================================================

def sanitize_address_input(
    address: str,
    max_length: int = 500,
    strip_control_chars: bool = True,
) -> str:
    """Sanitize address input before processing.

    Args:
        address: Raw address input
        max_length: Maximum allowed length
        strip_control_chars: Remove control characters

    Returns:
        Sanitized address string ("" for non-string input)
    """
    if not address or not isinstance(address, str):
        return ""

    result = address[:max_length]

    if strip_control_chars:
        result = "".join(
            char for char in result
            if char.isprintable() or char in (" ", "\t", "\n", "\r")
        )

    # Normalize whitespace
    result = " ".join(result.split())

    return result.strip()
