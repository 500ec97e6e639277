"""
JSON-over-HTTP helper with outcome classification.

Three outcomes matter to an operator: the endpoint answered 2xx, it
answered with an error status, or nothing answered at all. No retries.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import requests

from booking_ops.constants import DEFAULT_WEBHOOK_TIMEOUT
from booking_ops.exceptions import WebhookError
from booking_ops.monitoring.logger import get_logger

logger = get_logger(__name__)

SUCCESS = "success"
ERROR_RESPONSE = "error_response"
NO_RESPONSE = "no_response"


@dataclass
class WebhookOutcome:
    kind: str
    status_code: Optional[int] = None
    body: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.kind == SUCCESS


def _parse_body(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _classify(response: requests.Response) -> WebhookOutcome:
    kind = SUCCESS if 200 <= response.status_code < 300 else ERROR_RESPONSE
    return WebhookOutcome(kind=kind, status_code=response.status_code, body=_parse_body(response))


def send_json(method: str, url: str, payload: Any = None,
              timeout: float = DEFAULT_WEBHOOK_TIMEOUT) -> WebhookOutcome:
    """
    Send one request and classify the result.

    Args:
        method: HTTP method
        url: Target URL
        payload: JSON body (ignored when None)
        timeout: Seconds before giving up on a response

    Returns:
        WebhookOutcome; network failures are returned, not raised

    Raises:
        WebhookError: The URL itself is unusable (no scheme, bad host)
    """
    try:
        response = requests.request(
            method,
            url,
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=timeout,
        )
    except (requests.exceptions.MissingSchema, requests.exceptions.InvalidSchema, requests.exceptions.InvalidURL) as e:
        raise WebhookError(f"Unusable endpoint URL {url!r}: {e}") from e
    except requests.RequestException as e:
        logger.warning("No response from endpoint", method=method, url=url, error=str(e))
        return WebhookOutcome(kind=NO_RESPONSE, error=str(e))

    outcome = _classify(response)
    logger.info("Endpoint responded", method=method, url=url, status=outcome.status_code, kind=outcome.kind)
    return outcome


def post_json(url: str, payload: Any, timeout: float = DEFAULT_WEBHOOK_TIMEOUT) -> WebhookOutcome:
    return send_json("POST", url, payload, timeout)


def get_json(url: str, timeout: float = DEFAULT_WEBHOOK_TIMEOUT) -> WebhookOutcome:
    return send_json("GET", url, None, timeout)
