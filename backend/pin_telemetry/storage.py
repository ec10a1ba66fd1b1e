"""
Storage
=======

The MongoDB handle shared by every endpoint.

WHAT IT DOES:
------------
1. Connects to MongoDB once, when the app starts (see main.lifespan)
2. Makes sure the indexes exist (uniqueID must be unique!)
3. Reads and writes the two collections:
   - users       = the User Directory
   - signaldatas = the Telemetry Store

The Storage object lives on app.state and gets handed to the endpoints
through the get_storage dependency. There is no global connection.

If MongoDB is not reachable at startup we raise StorageUnavailableError
and the server does not start.
"""

import logging
from typing import Optional

from fastapi import HTTPException, Request
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from pin_telemetry.models import SignalReading, User

logger = logging.getLogger(__name__)


class StorageUnavailableError(RuntimeError):
    """MongoDB could not be reached when the app started."""


class Storage:
    """
    Thin wrapper around the esp32DB database.

    Every method either returns a result or lets the PyMongoError
    bubble up to the endpoint boundary.
    """

    def __init__(
        self,
        database: Database,
        users_collection: str = "users",
        signals_collection: str = "signaldatas",
        client: Optional[MongoClient] = None,
    ):
        """
        Args:
            database: The pymongo (or mongomock) database to use
            users_collection: Name of the User Directory collection
            signals_collection: Name of the Telemetry Store collection
            client: The client that owns the database; closed by close()
        """
        self.database = database
        self.users = database[users_collection]
        self.signals = database[signals_collection]
        self._client = client

    @classmethod
    def connect(
        cls,
        uri: str,
        db_name: str,
        timeout_ms: int = 5000,
        users_collection: str = "users",
        signals_collection: str = "signaldatas",
    ) -> "Storage":
        """
        Open a connection, check it with a ping and create the indexes.

        Raises:
            StorageUnavailableError: If MongoDB does not answer
        """
        client = MongoClient(uri, serverSelectionTimeoutMS=timeout_ms)
        try:
            client.admin.command("ping")
        except PyMongoError as e:
            client.close()
            raise StorageUnavailableError(
                f"Cannot connect to MongoDB at {uri}: {e}. "
                f"Make sure MongoDB is running and reachable."
            ) from e

        storage = cls(
            client[db_name],
            users_collection=users_collection,
            signals_collection=signals_collection,
            client=client,
        )
        storage.ensure_indexes()
        logger.info(f"MongoDB connected ({db_name})")
        return storage

    def ensure_indexes(self):
        """Create the indexes we rely on (safe to call repeatedly)."""
        self.users.create_index([("uniqueID", ASCENDING)], unique=True)
        self.users.create_index([("apiKey", ASCENDING)])
        self.signals.create_index([("userID", ASCENDING)])

    def ping(self) -> bool:
        """True if MongoDB answers, False otherwise."""
        try:
            self.database.command("ping")
            return True
        except PyMongoError as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False

    def close(self):
        """Close the client if we own one."""
        if self._client is not None:
            self._client.close()
            self._client = None

    # =========================================================================
    # USER DIRECTORY
    # =========================================================================

    def find_user_by_unique_id(self, unique_id: str) -> Optional[User]:
        document = self.users.find_one({"uniqueID": unique_id})
        return User.from_document(document) if document else None

    def find_user_by_api_key(self, api_key: str) -> Optional[User]:
        document = self.users.find_one({"apiKey": api_key})
        return User.from_document(document) if document else None

    def create_user(self, user: User) -> User:
        """
        Insert a new user.

        If another request inserted the same uniqueID first, the unique
        index rejects ours and we return the user that won instead.
        """
        try:
            result = self.users.insert_one(user.to_document())
        except DuplicateKeyError:
            logger.info(f"[AUTH] {user.unique_id} registered concurrently, reusing stored key")
            existing = self.find_user_by_unique_id(user.unique_id)
            if existing is None:
                raise
            return existing
        return user.model_copy(update={"id": result.inserted_id})

    # =========================================================================
    # TELEMETRY STORE
    # =========================================================================

    def insert_signal_reading(self, reading: SignalReading) -> SignalReading:
        """Append one reading. Readings are never updated or deleted."""
        result = self.signals.insert_one(reading.to_document())
        return reading.model_copy(update={"id": result.inserted_id})


# =============================================================================
# DEPENDENCY INJECTION
# =============================================================================

def get_storage(request: Request) -> Storage:
    """
    Get the storage handle for use in endpoints.

    Every endpoint function that needs the database uses this.
    """
    storage = getattr(request.app.state, "storage", None)
    if storage is None:
        raise HTTPException(status_code=500, detail="Server not fully started yet")
    return storage
