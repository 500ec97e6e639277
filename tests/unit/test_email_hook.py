"""
Email-hook contract and the smoke test that exercises it.
"""
from datetime import datetime, timezone
from unittest import mock

import pytest

from booking_ops.webhooks import email_hook
from booking_ops.webhooks.client import ERROR_RESPONSE, NO_RESPONSE, SUCCESS, WebhookOutcome
from booking_ops.webhooks.email_hook import (
    MSG_ACCEPTED,
    MSG_BAD_FROM,
    MSG_REQUIRED,
    all_passed,
    email_hook_cases,
    run_email_hook_checks,
    status_matches,
    validate_email_hook,
)

NOW = datetime(2026, 1, 15, 9, 30, tzinfo=timezone.utc)


class TestValidateEmailHook:

    def test_valid_payload(self):
        assert validate_email_hook({"from": "a@example.com", "subject": "Hi"}) == (200, MSG_ACCEPTED)

    def test_missing_subject(self):
        assert validate_email_hook({"from": "a@example.com"}) == (400, MSG_REQUIRED)

    def test_missing_from(self):
        assert validate_email_hook({"subject": "Hi"}) == (400, MSG_REQUIRED)

    @pytest.mark.parametrize("sender", ["invalid-email", "a@b", "a b@example.com", "@example.com"])
    def test_malformed_from(self, sender):
        assert validate_email_hook({"from": sender, "subject": "Hi"}) == (400, MSG_BAD_FROM)

    @pytest.mark.parametrize("marker", ["=", ""])
    def test_empty_markers_count_as_missing(self, marker):
        assert validate_email_hook({"from": "a@example.com", "subject": marker})[0] == 400

    def test_array_body_uses_first_element(self):
        body = [{"from": "a@example.com", "subject": "Hi"}, {"from": "junk"}]
        assert validate_email_hook(body)[0] == 200

    def test_empty_array_is_rejected(self):
        assert validate_email_hook([])[0] == 400

    def test_non_object_body_is_rejected(self):
        assert validate_email_hook("from=a@example.com")[0] == 400

    def test_empty_reply_sent_marker_is_accepted(self):
        assert validate_email_hook({"from": "a@example.com", "subject": "Hi", "replySent": "="})[0] == 200

    @pytest.mark.parametrize("extra", [
        {"timestamp": 1700000000},
        {"to": ["b@example.com"]},
        {"bookingId": 123456},
        {"replySent": "yes"},
        {"messageId": {"id": "<abc@mail>"}},
        {"references": ["<a@mail>", "<b@mail>"]},
    ])
    def test_optional_fields_of_any_type_are_accepted(self, extra):
        body = {"from": "a@example.com", "subject": "Hi", **extra}
        assert validate_email_hook(body) == (200, MSG_ACCEPTED)

    def test_non_string_from_is_checked_as_text(self):
        assert validate_email_hook({"from": 42, "subject": "Hi"}) == (400, MSG_BAD_FROM)

    def test_non_string_subject_counts_as_present(self):
        assert validate_email_hook({"from": "a@example.com", "subject": 2024})[0] == 200


class TestCases:

    def test_expected_statuses(self):
        cases = email_hook_cases(NOW)
        assert [(c.name, c.expected_status) for c in cases] == [
            ("valid payload", 200),
            ("missing subject", 400),
            ("invalid from address", 400),
            ("outgoing email log", 200),
            ("company reply", 200),
        ]

    def test_timestamps_use_now(self):
        assert email_hook_cases(NOW)[0].payload["timestamp"] == NOW.isoformat()


class TestStatusMatches:

    def test_any_2xx_satisfies_200(self):
        assert status_matches(200, WebhookOutcome(SUCCESS, 201))

    def test_error_status_must_match(self):
        assert status_matches(400, WebhookOutcome(ERROR_RESPONSE, 400))
        assert not status_matches(400, WebhookOutcome(ERROR_RESPONSE, 500))
        assert not status_matches(400, WebhookOutcome(SUCCESS, 200))

    def test_no_response_never_matches(self):
        assert not status_matches(200, WebhookOutcome(NO_RESPONSE, error="refused"))


def _fake_post(url, payload, timeout):
    status, _ = validate_email_hook(payload)
    kind = SUCCESS if status == 200 else ERROR_RESPONSE
    return WebhookOutcome(kind, status, {"success": status == 200})


class TestRunEmailHookChecks:

    def test_contract_compliant_server_passes_everything(self, capsys):
        with mock.patch.object(email_hook, "post_json", side_effect=_fake_post) as post, \
                mock.patch.object(email_hook, "get_json", return_value=WebhookOutcome(SUCCESS, 200, [])) as get:
            results = run_email_hook_checks("http://api.local/", timeout=4, log_limit=3, now=NOW)

        assert all_passed(results)
        assert len(results) == 7
        assert post.call_args_list[0].args[0] == "http://api.local/api/email-hook"
        assert [c.args[0] for c in get.call_args_list] == [
            "http://api.local/api/email-hook/logs?limit=3",
            "http://api.local/api/email-hook/stats",
        ]
        out = capsys.readouterr().out
        assert "✅ missing subject passed" in out
        assert "All 7 checks passed" in out

    def test_server_accepting_everything_fails_the_negative_cases(self, capsys):
        with mock.patch.object(email_hook, "post_json", return_value=WebhookOutcome(SUCCESS, 200)), \
                mock.patch.object(email_hook, "get_json", return_value=WebhookOutcome(SUCCESS, 200)):
            results = run_email_hook_checks("http://api.local", now=NOW)

        failed = [r.name for r in results if not r.passed]
        assert failed == ["missing subject", "invalid from address"]
        assert "❌ missing subject failed (expected 400, got 200)" in capsys.readouterr().out

    def test_unreachable_server_fails_every_check(self):
        down = WebhookOutcome(NO_RESPONSE, error="Connection refused")
        with mock.patch.object(email_hook, "post_json", return_value=down), \
                mock.patch.object(email_hook, "get_json", return_value=down):
            results = run_email_hook_checks("http://api.local", now=NOW)

        assert not any(r.passed for r in results)
        assert all("Connection refused" in r.detail for r in results)
