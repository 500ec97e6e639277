"""
Booking-email webhook smoke test.

Posts one synthetic booking to the automation webhook that sends booking
emails and reports whether it was accepted.
"""
from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from booking_ops.constants import DEFAULT_WEBHOOK_TIMEOUT, SEPARATOR_WIDTH
from booking_ops.monitoring.console import log_error, log_formatted, log_success
from booking_ops.webhooks.client import NO_RESPONSE, post_json

TEST_BOOKING_ID = "507f1f77bcf86cd799439011"

TROUBLESHOOTING = (
    "Make sure the automation service is running (usually on http://localhost:5678)",
    "Verify the webhook URL (N8N_WEBHOOK_URL) is correct",
    "Check that the workflow is active",
    "Ensure the webhook path matches: /webhook/send-booking-email",
)


def build_test_booking(now: Optional[datetime] = None) -> Dict[str, Any]:
    """The fixed synthetic booking sent by the smoke test."""
    stamp = (now or datetime.now(timezone.utc)).isoformat()
    return {
        "bookingId": TEST_BOOKING_ID,
        "customerName": "Test Customer",
        "customerEmail": "test@example.com",
        "customerPhone": "+919876543210",
        "customerAddress": "123 Test Street, Test City, 12345",
        "brand": "Samsung",
        "model": "Galaxy S24 Ultra",
        "invoiceNumber": "INV-TEST-001",
        "preferredDateTime": stamp,
        "companyEmail": "company@example.com",
        "companyName": "Samsung India",
        "whatsappNumber": "+919876543210",
        "status": "Pending",
        "createdAt": stamp,
    }


def run_booking_webhook_check(url: str, timeout: float = DEFAULT_WEBHOOK_TIMEOUT,
                              now: Optional[datetime] = None) -> bool:
    """
    Send the test booking to ``url``.

    Returns:
        True when the webhook answered 2xx
    """
    payload = build_test_booking(now)
    log_formatted("Testing booking webhook", {"Webhook URL": url, "Timeout (s)": timeout}, "webhook")
    print("Payload:")
    print(json.dumps(payload, indent=2))
    print("-" * SEPARATOR_WIDTH)

    outcome = post_json(url, payload, timeout=timeout)

    if outcome.ok:
        log_success("Webhook triggered successfully")
        log_formatted("Test passed", {"Response Status": outcome.status_code, "Response Data": outcome.body}, "success")
        return True

    details: Dict[str, Any]
    if outcome.kind == NO_RESPONSE:
        details = {"No response from": url, "Error": outcome.error}
        details.update({f"Hint {i}": hint for i, hint in enumerate(TROUBLESHOOTING, start=1)})
    else:
        details = {"Response Status": outcome.status_code, "Response Data": outcome.body}
    log_error("Test failed - webhook error", outcome.error or f"HTTP {outcome.status_code}")
    log_formatted("Webhook failure details", details, "error")
    return False
