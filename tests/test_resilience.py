"""Tests for input sanitization and the validation audit log."""

from datetime import datetime

from vicaddr.utils.resilience import (
    ValidationAuditEntry,
    ValidationAuditLog,
    sanitize_address_input,
)


def make_entry(source="regex-rural", is_valid=True, unmapped=True, issue=None, ms=10):
    return ValidationAuditEntry(
        timestamp=datetime(2024, 1, 1, 12, 0, 0),
        input_address="90 forman rd shelbourne 3515",
        source=source,
        confidence="low",
        is_valid=is_valid,
        unmapped=unmapped,
        processing_time_ms=ms,
        issue=issue,
    )


# ============================================================================
# Input Sanitization Tests
# ============================================================================


class TestInputSanitization:
    """Tests for sanitize_address_input."""

    def test_whitespace_collapsed(self):
        assert sanitize_address_input("  90   forman rd\t shelbourne \n 3515 ") == "90 forman rd shelbourne 3515"

    def test_control_characters_removed(self):
        assert sanitize_address_input("90 forman\x00 rd\x07") == "90 forman rd"

    def test_truncated(self):
        assert sanitize_address_input("a" * 600, max_length=500) == "a" * 500

    def test_non_string(self):
        assert sanitize_address_input(None) == ""
        assert sanitize_address_input(12345) == ""
        assert sanitize_address_input(["90 forman rd"]) == ""

    def test_control_characters_kept_when_disabled(self):
        assert sanitize_address_input("a\x00b", strip_control_chars=False) == "a\x00b"


# ============================================================================
# Audit Logging Tests
# ============================================================================


class TestAuditLogging:
    """Tests for ValidationAuditLog."""

    def test_ring_buffer(self):
        log = ValidationAuditLog(max_entries=3)

        for i in range(5):
            log.log(make_entry(ms=i))

        assert len(log) == 3
        assert [e["processing_time_ms"] for e in log.get_recent(10)] == [2, 3, 4]
        assert log.get_stats()["total_validations"] == 5

    def test_stats(self):
        log = ValidationAuditLog()
        log.log(make_entry(source="api", unmapped=False, ms=100))
        log.log(make_entry(source="regex-rural", ms=20))
        log.log(make_entry(source="none", is_valid=False, unmapped=True, issue="no_pattern_match", ms=0))

        stats = log.get_stats()

        assert stats["total_valid"] == 2
        assert stats["total_unmapped"] == 2
        assert stats["total_issues"] == 1
        assert stats["by_source"] == {"api": 1, "regex-urban": 0, "regex-rural": 1, "none": 1}
        assert stats["avg_processing_time_ms"] == 40
        assert stats["valid_rate"] == 2 / 3

    def test_empty_stats(self):
        stats = ValidationAuditLog().get_stats()

        assert stats["total_validations"] == 0
        assert stats["valid_rate"] == 0
        assert ValidationAuditLog().get_recent() == []

    def test_recent_zero(self):
        log = ValidationAuditLog()
        log.log(make_entry())

        assert log.get_recent(0) == []

    def test_clear(self):
        log = ValidationAuditLog()
        log.log(make_entry())

        log.clear()

        assert len(log) == 0
        assert log.get_stats()["total_validations"] == 0

    def test_entry_to_dict(self):
        data = make_entry(issue="out_of_state").to_dict()

        assert data["timestamp"] == "2024-01-01T12:00:00"
        assert data["issue"] == "out_of_state"
