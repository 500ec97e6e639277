"""
Custom exception hierarchy for the booking operations toolkit.

Hierarchy:

    BookingOpsError (base)
    ├── ConfigurationError  — fatal at startup (missing URI, missing credential)
    ├── OperationalError    — connectivity / query failures
    │   ├── DatabaseError
    │   ├── IdentityProviderError
    │   └── WebhookError
    └── ItemError           — one item of a batch failed

Rules:
    - ConfigurationError: print the message, exit 1. Nothing has been touched yet.
    - OperationalError: print the message, close the connection, exit 1. No retry.
    - ItemError: record it against the item, continue with the rest of the batch.
    - Everything else (AttributeError, TypeError, etc.): let crash.
"""


class BookingOpsError(Exception):
    """Base exception for all booking-ops errors."""
    pass


class ConfigurationError(BookingOpsError):
    """Required configuration is missing or unreadable.

    Treatment: abort the command before any external call is made.
    """
    pass


# ============ OPERATIONAL (connectivity, no retry) ============

class OperationalError(BookingOpsError):
    """An external service could not be reached or rejected the request."""
    pass


class DatabaseError(OperationalError):
    """MongoDB connection or query failed."""
    pass


class IdentityProviderError(OperationalError):
    """A Firebase Admin API call failed.

    Inside a role batch it is recorded against the user, not raised further.
    """
    pass


class WebhookError(OperationalError):
    """Webhook URL is unusable, so no request could be sent.

    An endpoint that is down is not an error here; it is a failed check.
    """
    pass


# ============ ITEM (recorded, batch continues) ============

class ItemError(BookingOpsError):
    """A single item of a batch operation failed.

    Treatment: record it in the per-item result, continue the batch.
    """

    def __init__(self, item: str, message: str):
        super().__init__(f"{item}: {message}")
        self.item = item
        self.message = message
