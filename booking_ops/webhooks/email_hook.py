"""
Email-hook endpoint contract and smoke test.

The booking API accepts email events from the automation workflow at
``POST /api/email-hook``. The contract it enforces is modelled here so the
smoke test knows which status each synthetic payload should get back:

- ``from`` and ``subject`` are required (400 otherwise)
- ``from`` must look like an email address (400 otherwise)
- anything else that parses is accepted (2xx)

The workflow sends empty fields as ``""`` or ``"="`` and sometimes wraps the
body in a one-element array; both are normalised before validation.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from booking_ops.constants import (
    DEFAULT_WEBHOOK_TIMEOUT,
    EMAIL_HOOK_LOGS_PATH,
    EMAIL_HOOK_PATH,
    EMAIL_HOOK_STATS_PATH,
)
from booking_ops.monitoring.console import log_formatted, log_info
from booking_ops.monitoring.logger import get_logger
from booking_ops.webhooks.booking_webhook import TEST_BOOKING_ID
from booking_ops.webhooks.client import NO_RESPONSE, WebhookOutcome, get_json, post_json

logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MSG_ACCEPTED = "Email hook received"
MSG_REQUIRED = "Invalid payload: 'from' and 'subject' are required fields"
MSG_BAD_FROM = "Invalid payload: 'from' must be a valid email address"
MSG_MALFORMED = "Invalid payload: body must be a JSON object"


def clean_value(value: Any) -> Any:
    """The workflow's empty markers (None, "", "=") become None."""
    if value is None or value == "" or value == "=":
        return None
    return value


class EmailHookPayload(BaseModel):
    """
    Inbound email event as posted by the automation workflow.

    Only ``from`` and ``subject`` are part of the contract; every other field
    is carried as sent, whatever its type.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    sender: Any = Field(default=None, alias="from")
    to: Any = None
    subject: Any = None
    reply_text: Any = Field(default=None, alias="replyText")
    # Passed through untouched, never cleaned
    reply_sent: Any = Field(default=None, alias="replySent")
    booking_id: Any = Field(default=None, alias="bookingId")
    message_id: Any = Field(default=None, alias="messageId")
    in_reply_to: Any = Field(default=None, alias="inReplyTo")
    references: Any = None
    timestamp: Any = None

    @field_validator(
        "sender", "to", "subject", "reply_text", "booking_id",
        "message_id", "in_reply_to", "references", "timestamp",
        mode="before",
    )
    @classmethod
    def _clean(cls, v: Any) -> Any:
        return clean_value(v)


def unwrap_body(body: Any) -> Any:
    """First element of an array body, the body itself otherwise."""
    if isinstance(body, list):
        return body[0] if body else {}
    return body


def validate_email_hook(body: Any) -> Tuple[int, str]:
    """
    Status and message the endpoint answers ``body`` with.

    Returns:
        (400, reason) for rejected payloads, (200, MSG_ACCEPTED) otherwise
    """
    body = unwrap_body(body)
    if not isinstance(body, dict):
        return 400, MSG_MALFORMED

    payload = EmailHookPayload.model_validate(body)
    if not payload.sender or not payload.subject:
        return 400, MSG_REQUIRED
    if not EMAIL_PATTERN.match(str(payload.sender)):
        return 400, MSG_BAD_FROM
    return 200, MSG_ACCEPTED


@dataclass
class EmailHookCase:
    name: str
    payload: dict
    expected_status: int


@dataclass
class CheckResult:
    name: str
    passed: bool
    status_code: Optional[int] = None
    detail: Optional[str] = None


def email_hook_cases(now: Optional[datetime] = None) -> List[EmailHookCase]:
    """Synthetic payloads, each paired with the status the contract implies."""
    stamp = (now or datetime.now(timezone.utc)).isoformat()
    payloads = [
        ("valid payload", {
            "from": "customer@example.com",
            "subject": "Booking Confirmation Request",
            "replyText": "Thank you for your booking. We will contact you shortly.",
            "replySent": True,
            "timestamp": stamp,
        }),
        ("missing subject", {
            "from": "customer@example.com",
            "replyText": "Some reply text",
        }),
        ("invalid from address", {
            "from": "invalid-email",
            "subject": "Test Subject",
        }),
        ("outgoing email log", {
            "from": "noreply@example.com",
            "to": "brand@example.com",
            "subject": f"New Demo Booking Request - Test Model #{TEST_BOOKING_ID}",
            "replyText": "Email sent to company about new booking",
            "replySent": True,
            "bookingId": TEST_BOOKING_ID,
            "timestamp": stamp,
        }),
        ("company reply", {
            "from": "brand@example.com",
            "to": "noreply@example.com",
            "subject": f"Re: New Demo Booking Request - Test Model #{TEST_BOOKING_ID}",
            "replyText": (
                "Thank you for the booking request. We will schedule the demo for tomorrow "
                "at 10 AM. Our technician will contact the customer shortly."
            ),
            "replySent": False,
            "timestamp": stamp,
        }),
    ]
    return [EmailHookCase(name, payload, validate_email_hook(payload)[0]) for name, payload in payloads]


def status_matches(expected: int, outcome: WebhookOutcome) -> bool:
    """An expected 200 accepts any 2xx; error statuses must match exactly."""
    if outcome.kind == NO_RESPONSE:
        return False
    if expected == 200:
        return outcome.ok
    return outcome.status_code == expected


def _report(result: CheckResult) -> CheckResult:
    mark = "✅" if result.passed else "❌"
    verdict = "passed" if result.passed else "failed"
    suffix = f" ({result.detail})" if result.detail else ""
    print(f"{mark} {result.name} {verdict}{suffix}")
    return result


def run_email_hook_checks(base_url: str, timeout: float = DEFAULT_WEBHOOK_TIMEOUT,
                          log_limit: int = 5, now: Optional[datetime] = None) -> List[CheckResult]:
    """
    Exercise the email-hook endpoints and print one line per check.

    Args:
        base_url: API root, e.g. http://localhost:4000
        timeout: Per-request timeout in seconds
        log_limit: ``limit`` query parameter for the logs endpoint
    """
    base_url = base_url.rstrip("/")
    log_formatted("Testing email hook endpoint", {"Base URL": base_url}, "email")
    results: List[CheckResult] = []

    for case in email_hook_cases(now):
        outcome = post_json(f"{base_url}{EMAIL_HOOK_PATH}", case.payload, timeout=timeout)
        passed = status_matches(case.expected_status, outcome)
        if outcome.kind == NO_RESPONSE:
            detail = f"no response: {outcome.error}"
        else:
            detail = f"expected {case.expected_status}, got {outcome.status_code}"
        results.append(_report(CheckResult(case.name, passed, outcome.status_code, detail)))

    for name, path in (
        ("fetch email logs", f"{EMAIL_HOOK_LOGS_PATH}?limit={log_limit}"),
        ("fetch email statistics", EMAIL_HOOK_STATS_PATH),
    ):
        outcome = get_json(f"{base_url}{path}", timeout=timeout)
        detail = f"no response: {outcome.error}" if outcome.kind == NO_RESPONSE else f"status {outcome.status_code}"
        results.append(_report(CheckResult(name, outcome.ok, outcome.status_code, detail)))

    failed = [r.name for r in results if not r.passed]
    logger.info("Email hook checks finished", total=len(results), failed=failed)
    if failed:
        log_info(f"{len(failed)} of {len(results)} checks failed")
    else:
        log_info(f"All {len(results)} checks passed")
    return results


def all_passed(results: List[CheckResult]) -> bool:
    return all(r.passed for r in results)
