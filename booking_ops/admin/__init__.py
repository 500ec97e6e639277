"""
Read-only list-cell renderers for the admin panel.
"""
from booking_ops.admin.components import (
    Element,
    Record,
    preferred_communication_list,
    reply_text_preview,
)

__all__ = ["Element", "Record", "preferred_communication_list", "reply_text_preview"]
