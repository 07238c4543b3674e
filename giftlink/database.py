"""MongoDB-backed persistence for user accounts."""
from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from pymongo import ASCENDING, MongoClient, ReturnDocument
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from .config import Settings
from .errors import DuplicateAccountError
from .models import User

logger = logging.getLogger("giftlink.database")

USERS_COLLECTION = "users"
EMAIL_INDEX_NAME = "email_unique"

ClientFactory = Callable[..., MongoClient]


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


class DatabaseProvider:
    """Hand out a usable database handle, connecting on first use.

    The underlying client is created once and shared, since ``MongoClient``
    is safe to use from multiple threads.
    """

    def __init__(
        self,
        url: str,
        database_name: str,
        *,
        server_selection_timeout_ms: int = 5000,
        client_factory: ClientFactory = MongoClient,
    ) -> None:
        self._url = url
        self._database_name = database_name
        self._timeout_ms = server_selection_timeout_ms
        self._client_factory = client_factory
        self._client: Optional[MongoClient] = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "DatabaseProvider":
        return cls(
            settings.mongo_url,
            settings.database_name,
            server_selection_timeout_ms=settings.server_selection_timeout_ms,
            **kwargs,
        )

    @property
    def database_name(self) -> str:
        return self._database_name

    def get(self) -> Database:
        with self._lock:
            if self._client is None:
                self._client = self._client_factory(
                    self._url,
                    tz_aware=True,
                    serverSelectionTimeoutMS=self._timeout_ms,
                )
                logger.info("Connected to MongoDB database '%s'", self._database_name)
            client = self._client
        return client[self._database_name]

    def close(self) -> None:
        with self._lock:
            client, self._client = self._client, None
        if client is not None:
            client.close()


class UserStore:
    """Read and write user documents in the ``users`` collection."""

    def __init__(self, provider: DatabaseProvider) -> None:
        self._provider = provider

    def _collection(self) -> Collection:
        return self._provider.get()[USERS_COLLECTION]

    def initialize(self) -> None:
        """Create the unique email index if it does not already exist."""

        self._collection().create_index(
            [("email", ASCENDING)],
            unique=True,
            name=EMAIL_INDEX_NAME,
        )

    def get_user_by_email(self, email: str) -> Optional[User]:
        document = self._collection().find_one({"email": email})
        if document is None:
            return None
        return User.from_document(document)

    def create_user(
        self,
        *,
        email: str,
        first_name: str,
        last_name: str,
        password_hash: str,
    ) -> User:
        """Insert a new user document and return it with its assigned id."""

        if not password_hash:
            raise ValueError("Password hash must not be empty")

        document: Dict[str, Any] = {
            "email": email,
            "firstName": first_name,
            "lastName": last_name,
            "password": password_hash,
            "createdAt": _current_timestamp(),
        }
        try:
            result = self._collection().insert_one(document)
        except DuplicateKeyError as exc:
            raise DuplicateAccountError() from exc

        document["_id"] = result.inserted_id
        return User.from_document(document)

    def touch_user(self, email: str) -> Optional[User]:
        """Write the stored record back with a refreshed ``updatedAt``.

        Returns ``None`` when no record matches ``email``.
        """

        collection = self._collection()
        existing = collection.find_one({"email": email})
        if existing is None:
            return None

        existing["updatedAt"] = _current_timestamp()
        fields = {key: value for key, value in existing.items() if key != "_id"}
        updated = collection.find_one_and_update(
            {"email": email},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )
        if updated is None:
            return None
        return User.from_document(updated)


__all__ = ["DatabaseProvider", "UserStore", "USERS_COLLECTION", "EMAIL_INDEX_NAME"]
