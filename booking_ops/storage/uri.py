"""
Connection-string helpers for MongoDB URIs.
"""
from __future__ import annotations

import re
from urllib.parse import urlsplit

# Path segment between the host list and the optional query string
_DB_PATH = re.compile(r"mongodb(\+srv)?://[^/]+/([^?]*)")


def database_path(uri: str) -> str | None:
    """Database name embedded in the URI path, or None if there is none."""
    match = _DB_PATH.match(uri)
    if match and match.group(2):
        return match.group(2)
    return None


def with_database_name(uri: str | None, db_name: str | None) -> str | None:
    """
    Insert ``db_name`` as the URI's path segment when the URI has none.

    ``mongodb+srv://u:p@host/?appName=x`` + ``shop`` →
    ``mongodb+srv://u:p@host/shop?appName=x``. URIs that already name a
    database are returned unchanged, so are calls without ``db_name``.
    """
    if not uri or not db_name:
        return uri
    if database_path(uri):
        return uri

    base, sep, query = uri.partition("?")
    base = re.sub(r"/$", "", base)
    return f"{base}/{db_name}{sep}{query}"


def uri_host(uri: str | None) -> str:
    """Host part of the URI (credentials stripped), ``unknown`` if unparsable."""
    if not uri:
        return "unknown"
    try:
        netloc = urlsplit(uri).netloc
    except ValueError:
        return "unknown"
    host = netloc.rsplit("@", 1)[-1]
    return host or "unknown"
