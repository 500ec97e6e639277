"""
Booking-email webhook smoke test.
"""
from datetime import datetime, timezone
from unittest import mock

from booking_ops.webhooks import booking_webhook
from booking_ops.webhooks.booking_webhook import (
    TEST_BOOKING_ID,
    TROUBLESHOOTING,
    build_test_booking,
    run_booking_webhook_check,
)
from booking_ops.webhooks.client import ERROR_RESPONSE, NO_RESPONSE, SUCCESS, WebhookOutcome

NOW = datetime(2026, 1, 15, 9, 30, tzinfo=timezone.utc)
URL = "http://localhost:5678/webhook/send-booking-email"


class TestBuildTestBooking:

    def test_payload_fields(self):
        payload = build_test_booking(NOW)

        assert payload["bookingId"] == TEST_BOOKING_ID
        assert payload["brand"] == "Samsung"
        assert payload["model"] == "Galaxy S24 Ultra"
        assert payload["status"] == "Pending"
        assert payload["preferredDateTime"] == payload["createdAt"] == NOW.isoformat()
        assert len(payload) == 14


class TestRunBookingWebhookCheck:

    def test_success(self, capsys):
        outcome = WebhookOutcome(SUCCESS, 200, {"message": "Workflow was started"})
        with mock.patch.object(booking_webhook, "post_json", return_value=outcome) as post:
            assert run_booking_webhook_check(URL, timeout=7, now=NOW) is True

        post.assert_called_once_with(URL, build_test_booking(NOW), timeout=7)
        out = capsys.readouterr().out
        assert "TEST PASSED" in out
        assert "Workflow was started" in out

    def test_error_response(self, capsys):
        outcome = WebhookOutcome(ERROR_RESPONSE, 404, {"message": "webhook not registered"})
        with mock.patch.object(booking_webhook, "post_json", return_value=outcome):
            assert run_booking_webhook_check(URL, now=NOW) is False

        captured = capsys.readouterr()
        assert "HTTP 404" in captured.err
        assert "webhook not registered" in captured.out
        assert "Hint 1" not in captured.out

    def test_no_response_prints_hints(self, capsys):
        outcome = WebhookOutcome(NO_RESPONSE, error="Connection refused")
        with mock.patch.object(booking_webhook, "post_json", return_value=outcome):
            assert run_booking_webhook_check(URL, now=NOW) is False

        out = capsys.readouterr().out
        for hint in TROUBLESHOOTING:
            assert hint in out
        assert f"Hint {len(TROUBLESHOOTING)}" in out
