"""
Database inspection and maintenance operations.

Each function takes an open ``MongoDatabase`` and returns plain data; the
CLI decides how to print it. ``clear_collections`` is the only write and it
is irreversible: an empty filter removes every document.
"""
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from bson import ObjectId
from bson.errors import InvalidId

from booking_ops.constants import COLLECTION_BOOKINGS, COLLECTION_CATEGORIES, COLLECTION_USERS
from booking_ops.exceptions import DatabaseError
from booking_ops.monitoring.logger import get_logger
from booking_ops.storage.db import MongoDatabase

logger = get_logger(__name__)

NOT_AVAILABLE = "N/A"

# Placeholder tokens seeded by test scripts contain this run
TEST_TOKEN_MARKER = "xxxx"


def list_collections(db: MongoDatabase) -> List[str]:
    """All collection names, sorted."""
    names = sorted(db.list_collections())
    logger.info("Listed collections", database=db.name, count=len(names))
    return names


def collection_counts(
    db: MongoDatabase,
    names: Optional[Iterable[str]] = None,
    include_empty: bool = False,
) -> "OrderedDict[str, int]":
    """
    Document count per collection.

    Args:
        db: Open database
        names: Collections to count; all collections when None
        include_empty: Keep collections with zero documents
    """
    if names is None:
        names = list_collections(db)

    counts: "OrderedDict[str, int]" = OrderedDict()
    for name in names:
        count = db.count_documents(name)
        if count > 0 or include_empty:
            counts[name] = count
    return counts


def database_info(db: MongoDatabase, names: Iterable[str]) -> "OrderedDict[str, Union[int, str]]":
    """Counts for a fixed list; a collection that cannot be counted reads N/A."""
    counts: "OrderedDict[str, Union[int, str]]" = OrderedDict()
    for name in names:
        try:
            counts[name] = db.count_documents(name)
        except DatabaseError as e:
            logger.warning("Count failed", collection=name, error=str(e))
            counts[name] = NOT_AVAILABLE
    return counts


def compact_document(doc: dict, field_limit: int = 5) -> dict:
    """``_id`` plus the first ``field_limit`` other fields, in stored order."""
    out = {"_id": str(doc.get("_id"))}
    others = [(k, v) for k, v in doc.items() if k != "_id"]
    out.update(others[:field_limit])
    return out


def sample_documents(
    db: MongoDatabase,
    names: Iterable[str],
    field_limit: int = 5,
) -> "OrderedDict[str, Union[dict, str, None]]":
    """
    One unfiltered sample per collection.

    Values are the compact document, None for an empty collection, or the
    error text when the lookup failed.
    """
    samples: "OrderedDict[str, Union[dict, str, None]]" = OrderedDict()
    for name in names:
        try:
            doc = db.find_one(name)
        except DatabaseError as e:
            samples[name] = f"error or not present ({e})"
            continue
        samples[name] = compact_document(doc, field_limit) if doc else None
    return samples


def list_categories(db: MongoDatabase) -> List[Tuple[str, str]]:
    """``(name, description)`` for every category."""
    docs = db.find_docs(COLLECTION_CATEGORIES, limit=0)
    return [
        (str(doc.get("name", "")), doc.get("description") or "No description")
        for doc in docs
    ]


def clear_collections(db: MongoDatabase, names: Iterable[str]) -> "OrderedDict[str, int]":
    """
    Delete all documents from each named collection.

    Returns deleted count per collection; running it again reports zeros.
    """
    deleted: "OrderedDict[str, int]" = OrderedDict()
    for name in names:
        deleted[name] = db.delete_all(name)
    logger.info("Cleared collections", database=db.name, deleted=dict(deleted))
    return deleted


def list_users(db: MongoDatabase) -> List[Tuple[str, str, bool]]:
    """``(role, email, has_push_token)`` for every user."""
    docs = db.find_docs(
        COLLECTION_USERS,
        limit=0,
        projection={"name": 1, "email": 1, "role": 1, "pushToken": 1},
    )
    return [
        (str(doc.get("role") or "-"), str(doc.get("email") or "-"), bool(doc.get("pushToken")))
        for doc in docs
    ]


def find_user(db: MongoDatabase, email: str) -> Optional[Dict]:
    """User document by exact (lower-cased) email."""
    return db.find_one(COLLECTION_USERS, {"email": email.strip().lower()})


@dataclass
class PushTokenInfo:
    role: str
    email: str
    token: Optional[str]

    @property
    def length(self) -> int:
        return len(self.token) if self.token else 0

    @property
    def is_test_token(self) -> bool:
        return bool(self.token) and TEST_TOKEN_MARKER in self.token


def list_push_tokens(db: MongoDatabase) -> List[PushTokenInfo]:
    """Every user's push token, None where the user has none."""
    docs = db.find_docs(
        COLLECTION_USERS,
        limit=0,
        projection={"email": 1, "role": 1, "pushToken": 1},
    )
    return [
        PushTokenInfo(str(doc.get("role") or "-"), str(doc.get("email") or "-"), doc.get("pushToken") or None)
        for doc in docs
    ]


def _as_object_id(value: Any) -> Any:
    """ObjectId for 24-hex strings; anything else is looked up as stored."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return value


@dataclass
class BookingDetails:
    booking: Dict
    # None when the booking has no createdBy or the user no longer exists
    customer: Optional[Dict] = None

    @property
    def has_creator(self) -> bool:
        return bool(self.booking.get("createdBy"))


def find_booking(db: MongoDatabase, booking_id: str) -> Optional[BookingDetails]:
    """
    Booking by ``_id`` together with the user that created it.

    Args:
        db: Open database
        booking_id: Document ``_id`` (24-hex ObjectId or the raw stored value)

    Returns:
        BookingDetails, or None when no booking has that ``_id``
    """
    booking = db.find_one(COLLECTION_BOOKINGS, {"_id": _as_object_id(booking_id.strip())})
    if booking is None:
        return None

    details = BookingDetails(booking)
    if details.has_creator:
        details.customer = db.find_one(COLLECTION_USERS, {"_id": _as_object_id(booking["createdBy"])})
        if details.customer is None:
            logger.warning("Booking creator not found", booking=str(booking["_id"]), created_by=str(booking["createdBy"]))
    return details
