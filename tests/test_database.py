from __future__ import annotations

from typing import Iterator
from unittest import mock

import mongomock
import pytest

from giftlink.database import EMAIL_INDEX_NAME, DatabaseProvider, UserStore
from giftlink.errors import DuplicateAccountError


@pytest.fixture()
def provider() -> Iterator[DatabaseProvider]:
    factory = mock.Mock(side_effect=lambda url, **kwargs: mongomock.MongoClient())
    db_provider = DatabaseProvider(
        "mongodb://unused",
        "giftdb-tests",
        server_selection_timeout_ms=250,
        client_factory=factory,
    )
    yield db_provider
    db_provider.close()


@pytest.fixture()
def store(provider: DatabaseProvider) -> UserStore:
    user_store = UserStore(provider)
    user_store.initialize()
    return user_store


def _create(store: UserStore, email: str = "owner@giftlink.org"):
    return store.create_user(
        email=email,
        first_name="Gift",
        last_name="Owner",
        password_hash="$2b$04$notarealhashbutnonempty",
    )


def test_provider_reuses_single_client(provider: DatabaseProvider) -> None:
    first = provider.get()
    second = provider.get()

    assert first.name == "giftdb-tests"
    assert second.name == "giftdb-tests"
    provider._client_factory.assert_called_once_with(
        "mongodb://unused",
        tz_aware=True,
        serverSelectionTimeoutMS=250,
    )


def test_initialize_creates_unique_email_index(store: UserStore, provider: DatabaseProvider) -> None:
    indexes = provider.get()["users"].index_information()
    assert EMAIL_INDEX_NAME in indexes
    assert indexes[EMAIL_INDEX_NAME].get("unique") is True


def test_create_and_fetch_user(store: UserStore) -> None:
    created = _create(store)

    fetched = store.get_user_by_email("owner@giftlink.org")
    assert fetched is not None
    assert fetched.id == created.id
    assert fetched.first_name == "Gift"
    assert fetched.last_name == "Owner"
    assert fetched.password_hash == created.password_hash
    assert fetched.updated_at is None

    assert store.get_user_by_email("OWNER@giftlink.org") is None


def test_unique_index_rejects_duplicate_email(store: UserStore) -> None:
    _create(store)
    with pytest.raises(DuplicateAccountError):
        _create(store)


def test_create_user_requires_password_hash(store: UserStore) -> None:
    with pytest.raises(ValueError):
        store.create_user(email="x@giftlink.org", first_name="X", last_name="Y", password_hash="")


def test_touch_user_refreshes_updated_at(store: UserStore) -> None:
    created = _create(store)

    touched = store.touch_user("owner@giftlink.org")
    assert touched is not None
    assert touched.id == created.id
    assert touched.updated_at is not None
    assert touched.first_name == created.first_name
    assert touched.password_hash == created.password_hash


def test_touch_user_returns_none_for_unknown_email(store: UserStore) -> None:
    assert store.touch_user("missing@giftlink.org") is None


def test_documents_without_created_at_are_readable(store: UserStore, provider: DatabaseProvider) -> None:
    provider.get()["users"].insert_one(
        {
            "email": "legacy@giftlink.org",
            "firstName": "Legacy",
            "lastName": "Member",
            "password": "$2b$04$notarealhashbutnonempty",
        }
    )

    fetched = store.get_user_by_email("legacy@giftlink.org")
    assert fetched is not None
    assert fetched.first_name == "Legacy"
    assert fetched.created_at is None

    touched = store.touch_user("legacy@giftlink.org")
    assert touched is not None
    assert touched.created_at is None
    assert touched.updated_at is not None
