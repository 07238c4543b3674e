from __future__ import annotations

from typing import Iterator
from unittest import mock

import mongomock
import pytest

from giftlink.accounts import AccountService
from giftlink.database import DatabaseProvider, UserStore
from giftlink.errors import DuplicateAccountError, IncorrectPasswordError, UserNotFoundError
from giftlink.security import TokenSigner, build_password_context


@pytest.fixture()
def store() -> Iterator[UserStore]:
    provider = DatabaseProvider(
        "mongodb://unused",
        "giftdb-tests",
        client_factory=lambda url, **kwargs: mongomock.MongoClient(),
    )
    user_store = UserStore(provider)
    user_store.initialize()
    yield user_store
    provider.close()


@pytest.fixture()
def accounts(store: UserStore) -> AccountService:
    return AccountService(
        store,
        TokenSigner("accounts-secret"),
        password_context=build_password_context(rounds=4),
    )


@pytest.mark.parametrize("password", ["secret1", "x" * 32, "pässwörd", "with spaces"])
def test_registered_password_passes_login_only_for_same_plaintext(
    accounts: AccountService, password: str
) -> None:
    registered = accounts.register(
        email="member@giftlink.org",
        first_name="Member",
        last_name="One",
        password=password,
    )

    logged_in = accounts.login(email="member@giftlink.org", password=password)
    assert logged_in.user.id == registered.user.id
    assert accounts.signer.decode(logged_in.token) == {"user": {"id": registered.user.id}}

    with pytest.raises(IncorrectPasswordError):
        accounts.login(email="member@giftlink.org", password=password + "!")


def test_login_unknown_email(accounts: AccountService) -> None:
    with pytest.raises(UserNotFoundError) as excinfo:
        accounts.login(email="nobody@giftlink.org", password="secret1")
    assert excinfo.value.status_code == 404


def test_duplicate_detected_by_existence_check(accounts: AccountService) -> None:
    accounts.register(email="dup@giftlink.org", first_name="A", last_name="B", password="secret1")

    with mock.patch("giftlink.accounts.hash_password") as hasher:
        with pytest.raises(DuplicateAccountError):
            accounts.register(email="dup@giftlink.org", first_name="A", last_name="B", password="secret1")
        hasher.assert_not_called()


def test_duplicate_detected_by_unique_index_when_check_races(
    accounts: AccountService, store: UserStore
) -> None:
    accounts.register(email="race@giftlink.org", first_name="A", last_name="B", password="secret1")

    with mock.patch.object(store, "get_user_by_email", return_value=None):
        with pytest.raises(DuplicateAccountError) as excinfo:
            accounts.register(email="race@giftlink.org", first_name="C", last_name="D", password="secret2")

    assert excinfo.value.status_code == 200
    assert excinfo.value.to_payload() == {"error": "User email already exists, please login instead."}


def test_refresh_profile_keeps_identity(accounts: AccountService) -> None:
    registered = accounts.register(email="p@giftlink.org", first_name="P", last_name="Q", password="secret1")

    refreshed = accounts.refresh_profile("p@giftlink.org")
    assert refreshed.user.id == registered.user.id
    assert refreshed.user.updated_at is not None
    assert accounts.signer.decode(refreshed.token) == {"user": {"id": registered.user.id}}

    with pytest.raises(UserNotFoundError):
        accounts.refresh_profile("missing@giftlink.org")
