"""
MongoDB connection wrapper.

One ``MongoDatabase`` per command run; it is closed explicitly (or by the
``with`` block) before the process exits.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pymongo import MongoClient
from pymongo.errors import ConfigurationError as MongoConfigurationError
from pymongo.errors import PyMongoError

from booking_ops.exceptions import ConfigurationError, DatabaseError
from booking_ops.monitoring.logger import get_logger
from booking_ops.monitoring.redaction import mask_uri_credentials
from booking_ops.storage.uri import uri_host

logger = get_logger(__name__)

# Database used by the driver when the URI names none
FALLBACK_DB_NAME = "test"


class MongoDatabase:
    """Database handle and the handful of CRUD calls the tools need."""

    def __init__(
        self,
        uri: str,
        db_name: Optional[str] = None,
        server_selection_timeout_ms: int = 5000,
        max_pool_size: int = 5,
        client: Optional[MongoClient] = None,
    ):
        """
        Create the client. No network I/O happens until the first command.

        Args:
            uri: MongoDB connection string
            db_name: Database to use; defaults to the one named in the URI
            server_selection_timeout_ms: How long to wait for a reachable server
            max_pool_size: Connection pool size
            client: Pre-built client (tests)
        """
        self.uri = uri
        try:
            self.client = client or MongoClient(
                uri,
                serverSelectionTimeoutMS=server_selection_timeout_ms,
                maxPoolSize=max_pool_size,
            )
            if db_name:
                self.db = self.client[db_name]
            else:
                self.db = self.client.get_default_database(default=FALLBACK_DB_NAME)
        except (MongoConfigurationError, ValueError) as e:
            # InvalidURI, bad ports and options; the driver message may echo the URI
            raise ConfigurationError(
                f"Invalid MongoDB connection settings ({mask_uri_credentials(uri)}): {mask_uri_credentials(str(e))}"
            ) from e

    @classmethod
    def from_config(cls, config) -> "MongoDatabase":
        """Build from a loaded ``Config`` (raises ConfigurationError without a URI)."""
        uri = config.require_mongo_uri()
        return cls(
            uri,
            server_selection_timeout_ms=config.database.server_selection_timeout_ms,
            max_pool_size=config.database.max_pool_size,
        )

    def __enter__(self) -> "MongoDatabase":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def name(self) -> str:
        return self.db.name

    @property
    def host(self) -> str:
        return uri_host(self.uri)

    def ping(self) -> Dict[str, Any]:
        """Round-trip to the server; raises DatabaseError when unreachable."""
        try:
            result = self.client.admin.command("ping")
        except PyMongoError as e:
            raise DatabaseError(f"Could not connect to MongoDB at {self.host}: {e}") from e
        logger.info("Connected to MongoDB", host=self.host, database=self.name,
                    uri=mask_uri_credentials(self.uri))
        return result

    def list_collections(self) -> List[str]:
        try:
            return self.db.list_collection_names()
        except PyMongoError as e:
            raise DatabaseError(f"Could not list collections: {e}") from e

    def count_documents(self, collection: str, filt: Optional[dict] = None) -> int:
        try:
            return self.db[collection].count_documents(filt or {})
        except PyMongoError as e:
            raise DatabaseError(f"Could not count documents in {collection}: {e}") from e

    def find_one(self, collection: str, filt: Optional[dict] = None) -> Optional[dict]:
        try:
            return self.db[collection].find_one(filt or {})
        except PyMongoError as e:
            raise DatabaseError(f"Could not query {collection}: {e}") from e

    def find_docs(self, collection: str, filt: Optional[dict] = None, limit: int = 200,
                  projection: Optional[dict] = None) -> List[dict]:
        try:
            return list(self.db[collection].find(filt or {}, projection).limit(limit))
        except PyMongoError as e:
            raise DatabaseError(f"Could not query {collection}: {e}") from e

    def delete_all(self, collection: str) -> int:
        """Delete every document in ``collection`` (empty filter). Irreversible."""
        try:
            result = self.db[collection].delete_many({})
        except PyMongoError as e:
            raise DatabaseError(f"Could not delete from {collection}: {e}") from e
        logger.warning("Deleted all documents", collection=collection, deleted=result.deleted_count)
        return result.deleted_count

    def close(self) -> None:
        self.client.close()
        logger.debug("MongoDB connection closed", host=self.host)


def connect(config) -> MongoDatabase:
    """Open and verify a connection for a command run."""
    database = MongoDatabase.from_config(config)
    try:
        database.ping()
    except DatabaseError:
        database.close()
        raise
    return database
