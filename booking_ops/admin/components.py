"""
Admin-panel list-cell components.

Renderers take a record exposing a ``params`` mapping and return a small
``Element`` tree. They hold no state and never touch the network; the host
panel turns the tree into markup with ``Element.to_html()``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from html import escape
from typing import Any, Dict, Iterator, Mapping, Tuple, Union

from booking_ops.constants import REPLY_PREVIEW_LENGTH

Child = Union["Element", str]

# Order badges are rendered in
COMMUNICATION_BADGES = (
    ("whatsapp", "💬 WhatsApp", "primary"),
    ("email", "📧 Email", "info"),
)
NO_REPLY_TEXT = "No reply text"
ELLIPSIS = "..."


@dataclass(frozen=True)
class Element:
    tag: str
    props: Tuple[Tuple[str, str], ...] = ()
    children: Tuple[Child, ...] = ()

    def prop(self, name: str, default: Any = None) -> Any:
        return dict(self.props).get(name, default)

    def iter(self) -> Iterator["Element"]:
        yield self
        for child in self.children:
            if isinstance(child, Element):
                yield from child.iter()

    def find_all(self, tag: str) -> list:
        return [el for el in self.iter() if el.tag == tag]

    def text(self) -> str:
        return "".join(c if isinstance(c, str) else c.text() for c in self.children)

    def to_html(self) -> str:
        attrs = "".join(f' {name}="{escape(value)}"' for name, value in self.props)
        inner = "".join(escape(c) if isinstance(c, str) else c.to_html() for c in self.children)
        return f"<{self.tag}{attrs}>{inner}</{self.tag}>"


def _element(tag: str, children, **props) -> Element:
    return Element(tag, tuple((k.replace("_", "-"), str(v)) for k, v in props.items()), tuple(children))


def badge(label: str, variant: str = "default") -> Element:
    return _element("span", [label], **{"class": f"badge badge-{variant}"})


def box(*children: Child, **style: str) -> Element:
    if style:
        css = "; ".join(f"{k.replace('_', '-')}: {v}" for k, v in style.items())
        return _element("div", children, style=css)
    return _element("div", children)


def text_node(content: str, color: str | None = None, font_size: str = "sm") -> Element:
    props = {"class": f"text text-{font_size}"}
    if color:
        props["class"] += f" text-{color}"
    return _element("span", [content], **props)


@dataclass
class Record:
    params: Dict[str, Any] = field(default_factory=dict)


def record_params(record: Any) -> Mapping[str, Any]:
    """``params`` of a Record, of any object carrying one, or of a dict."""
    if isinstance(record, Mapping):
        params = record.get("params")
    else:
        params = getattr(record, "params", None)
    return params if isinstance(params, Mapping) else {}


def preferred_communication_list(record: Any) -> Element:
    """One badge per known channel; a single "None" badge for anything that is not a non-empty list."""
    channels = record_params(record).get("preferredCommunication")

    if not isinstance(channels, (list, tuple)) or len(channels) == 0:
        return badge("None", "default")

    badges = [badge(label, variant) for key, label, variant in COMMUNICATION_BADGES if key in channels]
    return box(*badges, display="flex", gap="4px", flex_wrap="wrap")


def reply_text_preview(record: Any) -> Element:
    reply_text = record_params(record).get("replyText")

    if not reply_text:
        return box(text_node(NO_REPLY_TEXT, color="grey40"))

    reply_text = str(reply_text)
    if len(reply_text) > REPLY_PREVIEW_LENGTH:
        preview = reply_text[:REPLY_PREVIEW_LENGTH] + ELLIPSIS
    else:
        preview = reply_text
    return box(text_node(preview))
