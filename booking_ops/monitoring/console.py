"""
Operator console formatter.

Prints framed key/value blocks for humans running the commands. These
helpers only write to stdout/stderr and never raise on odd input.
"""
from __future__ import annotations

import json
import sys
import traceback
from collections.abc import Mapping
from typing import Any

from booking_ops.constants import KEY_COLUMN_WIDTH, SEPARATOR_WIDTH

ICONS = {
    "info": "ℹ️",
    "success": "✅",
    "error": "❌",
    "warning": "⚠️",
    "email": "📧",
    "webhook": "🔗",
    "database": "💾",
    "socket": "⚡",
}
DEFAULT_ICON = "📝"

SEPARATOR = "=" * SEPARATOR_WIDTH


def format_value(value: Any) -> str:
    """Containers become indented JSON, everything else ``str()``."""
    if isinstance(value, (Mapping, list, tuple)):
        try:
            return json.dumps(value, indent=2, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            # non-string keys, circular references
            return str(value)
    return str(value)


def format_block(title: Any, data: Any = None, kind: str = "info") -> list[str]:
    """Lines of a framed block, without printing them."""
    icon = ICONS.get(kind, DEFAULT_ICON)
    if data is None:
        data = {}
    elif not isinstance(data, Mapping):
        data = {"value": data}

    lines = ["", SEPARATOR, f"{icon} {str(title).upper()}", SEPARATOR]
    for key, value in data.items():
        lines.append(f"{str(key):<{KEY_COLUMN_WIDTH}}: {format_value(value)}")
    lines.extend([SEPARATOR, ""])
    return lines


def log_formatted(title: Any, data: Any = None, kind: str = "info") -> None:
    """
    Print a framed block: title line, then one line per key/value pair.

    Args:
        title: Section title (printed upper-cased)
        data: Mapping printed in iteration order
        kind: info, success, error, warning, email, webhook, database or socket
    """
    print("\n".join(format_block(title, data, kind)))


def log_error(title: Any, error: Any) -> None:
    """Print an error message and, when present, its traceback to stderr."""
    lines = ["", SEPARATOR, f"{ICONS['error']} {str(title).upper()}", SEPARATOR]
    lines.append(f"Error Message: {error}")

    tb = getattr(error, "__traceback__", None)
    if isinstance(error, BaseException) and tb is not None:
        stack = "".join(traceback.format_exception(type(error), error, tb)).rstrip()
        lines.append(f"Stack Trace: {stack}")

    lines.extend([SEPARATOR, ""])
    print("\n".join(lines), file=sys.stderr)


def log_success(message: Any) -> None:
    print(f"{ICONS['success']} {message}")


def log_warning(message: Any) -> None:
    print(f"{ICONS['warning']}  {message}")


def log_info(message: Any) -> None:
    print(f"{ICONS['info']}  {message}")


def log_email(action: str, details: Any = None) -> None:
    log_formatted(f"Email {action}", details, "email")


def log_webhook(action: str, details: Any = None) -> None:
    log_formatted(f"Webhook {action}", details, "webhook")


def log_database(action: str, details: Any = None) -> None:
    log_formatted(f"Database {action}", details, "database")


def log_socket(action: str, details: Any = None) -> None:
    log_formatted(f"Socket.IO {action}", details, "socket")
