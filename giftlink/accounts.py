"""Registration, login and profile refresh workflows."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from passlib.context import CryptContext

from .database import UserStore
from .errors import (
    DuplicateAccountError,
    IncorrectPasswordError,
    UserNotFoundError,
)
from .models import User
from .security import TokenSigner, build_password_context, hash_password, verify_password

logger = logging.getLogger("giftlink.accounts")


@dataclass(frozen=True)
class AuthResult:
    """A signed token together with the account it was issued for."""

    token: str
    user: User


class AccountService:
    """Blocking account operations; callers run these off the event loop."""

    def __init__(
        self,
        store: UserStore,
        signer: TokenSigner,
        *,
        password_context: CryptContext | None = None,
    ) -> None:
        self._store = store
        self._signer = signer
        self._password_context = password_context or build_password_context()

    @property
    def signer(self) -> TokenSigner:
        return self._signer

    def register(self, *, email: str, first_name: str, last_name: str, password: str) -> AuthResult:
        if self._store.get_user_by_email(email) is not None:
            raise DuplicateAccountError()

        password_hash = hash_password(password, context=self._password_context)
        user = self._store.create_user(
            email=email,
            first_name=first_name,
            last_name=last_name,
            password_hash=password_hash,
        )
        token = self._signer.sign(user.id)
        logger.info("User registered successfully")
        return AuthResult(token=token, user=user)

    def login(self, *, email: str, password: str) -> AuthResult:
        user = self._store.get_user_by_email(email)
        if user is None:
            raise UserNotFoundError("No existing user found. Please register instead.")

        if not verify_password(password, user.password_hash, context=self._password_context):
            raise IncorrectPasswordError()

        token = self._signer.sign(user.id)
        logger.info("User %s logged in", user.id)
        return AuthResult(token=token, user=user)

    def refresh_profile(self, email: str) -> AuthResult:
        # The stored fields are written back as-is; only ``updatedAt`` changes.
        user = self._store.touch_user(email)
        if user is None:
            raise UserNotFoundError()

        token = self._signer.sign(user.id)
        logger.info("User %s profile updated", user.id)
        return AuthResult(token=token, user=user)


__all__ = ["AccountService", "AuthResult"]
