"""Tests for log masking and payload sanitisation."""

from core.log_masking import mask_dict, mask_string, sanitize_payload
from core.logger import add_service_name, strip_payload_pii


class TestMasking:
    def test_database_password_masked(self):
        masked = mask_string("postgresql://leadlens:hunter2@db:5432/leadlens")
        assert "hunter2" not in masked
        assert "***MASKED***" in masked

    def test_email_masked(self):
        assert mask_string("contact owner@example.com") == "contact ***EMAIL***"

    def test_sensitive_keys_masked(self):
        masked = mask_dict({"api_key": "abc123", "estimate_id": "est-1"})
        assert masked == {"api_key": "***MASKED***", "estimate_id": "est-1"}


class TestSanitizePayload:
    def test_pii_keys_dropped(self):
        payload = {"tier_id": "gold", "email": "a@b.com", "Phone": "555-0100", "zipCode": "90210"}
        assert sanitize_payload(payload) == {"tier_id": "gold"}

    def test_long_strings_truncated(self):
        sanitized = sanitize_payload({"note": "x" * 500})
        assert sanitized["note"] == "x" * 100 + "..."

    def test_non_dict_reported_by_type(self):
        assert sanitize_payload(["a"]) == {"_type": "list"}
        assert sanitize_payload(None) == {"_type": "NoneType"}


class TestLogProcessors:
    def test_payload_field_sanitised(self):
        event = strip_payload_pii(None, "warning", {"event": "Rejected", "payload": {"email": "a@b.com", "percent": 5}})
        assert event["payload"] == {"percent": 5}

    def test_events_without_payload_untouched(self):
        event = {"event": "Folded", "estimate_id": "est-1"}
        assert strip_payload_pii(None, "debug", dict(event)) == event

    def test_service_name_added(self):
        assert add_service_name(None, "info", {})["service"] == "leadlens"
