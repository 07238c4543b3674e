"""Domain models for the GiftLink accounts service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class User:
    """Represents a user document stored in the ``users`` collection."""

    id: str
    email: str
    first_name: str
    last_name: str
    password_hash: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @staticmethod
    def from_document(document: Mapping[str, Any]) -> "User":
        """Create a :class:`User` from a raw MongoDB document."""
        return User(
            id=str(document["_id"]),
            email=str(document["email"]),
            first_name=str(document.get("firstName", "")),
            last_name=str(document.get("lastName", "")),
            password_hash=str(document.get("password", "")),
            created_at=document.get("createdAt"),
            updated_at=document.get("updatedAt"),
        )


__all__ = ["User"]
