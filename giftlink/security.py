"""Password hashing and token signing helpers."""
from __future__ import annotations

from typing import Any, Dict

from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import DEFAULT_BCRYPT_ROUNDS

TOKEN_ALGORITHM = "HS256"


def build_password_context(rounds: int = DEFAULT_BCRYPT_ROUNDS) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


_pwd_context = build_password_context()


def hash_password(password: str, *, context: CryptContext | None = None) -> str:
    """Hash ``password`` with a freshly generated bcrypt salt."""

    if not password:
        raise ValueError("Password must not be empty")
    return (context or _pwd_context).hash(password)


def verify_password(password: str, hashed: str, *, context: CryptContext | None = None) -> bool:
    if not hashed:
        return False
    try:
        return (context or _pwd_context).verify(password, hashed)
    except ValueError:
        return False


class TokenSigner:
    """Issue signed tokens that identify a user record.

    Tokens carry ``{"user": {"id": <record id>}}`` and no expiry claim.
    """

    def __init__(self, secret: str, *, algorithm: str = TOKEN_ALGORITHM) -> None:
        if not secret:
            raise ValueError("A signing secret must be provided")
        self._secret = secret
        self._algorithm = algorithm

    def sign(self, user_id: str) -> str:
        claims: Dict[str, Any] = {"user": {"id": str(user_id)}}
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as exc:
            raise ValueError("Invalid authentication token") from exc


__all__ = [
    "TOKEN_ALGORITHM",
    "TokenSigner",
    "build_password_context",
    "hash_password",
    "verify_password",
]
