"""HTTP API for GiftLink account registration, login and profile updates."""

from __future__ import annotations

import logging
from functools import partial
from typing import Any, Dict, Optional, Type, TypeVar

import anyio
from email_validator import EmailNotValidError, validate_email
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .accounts import AccountService
from .config import Settings, load_settings
from .database import DatabaseProvider, UserStore
from .errors import AccountError, InternalServiceError, InvalidInputError
from .security import TokenSigner, build_password_context

logger = logging.getLogger("giftlink.service")

_RequestModel = TypeVar("_RequestModel", bound=BaseModel)


def _check_email(value: str) -> str:
    try:
        validate_email(value, check_deliverability=False, globally_deliverable=False)
    except EmailNotValidError as exc:
        raise ValueError("value is not a valid email address") from exc
    # Stored exactly as submitted; lookups are case-sensitive.
    return value


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(..., min_length=1)
    first_name: str = Field(..., alias="firstName", min_length=1)
    last_name: str = Field(..., alias="lastName", min_length=1)
    password: str = Field(..., min_length=6, max_length=32)

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: str) -> str:
        return _check_email(value)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6, max_length=32)

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: str) -> str:
        return _check_email(value)


class UpdateProfileRequest(BaseModel):
    name: str = Field(..., min_length=1)


async def _read_json(request: Request) -> Optional[Dict[str, Any]]:
    try:
        payload = await request.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    return payload


def _parse(model: Type[_RequestModel], payload: Optional[Dict[str, Any]]) -> Optional[_RequestModel]:
    if payload is None:
        return None
    try:
        return model.model_validate(payload)
    except ValidationError:
        return None


def _error_response(exc: AccountError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


def register_auth_routes(app: FastAPI, accounts: AccountService) -> None:
    """Expose the account endpoints on the provided FastAPI application."""

    @app.get("/healthz")
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/register")
    async def register(request: Request) -> JSONResponse:
        body = _parse(RegisterRequest, await _read_json(request))
        if body is None:
            return _error_response(InvalidInputError("Invalid field values"))

        try:
            result = await anyio.to_thread.run_sync(
                partial(
                    accounts.register,
                    email=body.email,
                    first_name=body.first_name,
                    last_name=body.last_name,
                    password=body.password,
                )
            )
        except AccountError as exc:
            logger.info("Registration rejected: %s", exc.message)
            return _error_response(exc)
        except Exception:
            logger.exception("Registration failed")
            return _error_response(InternalServiceError())

        return JSONResponse(
            content={
                "authtoken": result.token,
                "firstName": body.first_name,
                "email": body.email,
            }
        )

    @app.post("/login")
    async def login(request: Request) -> JSONResponse:
        body = _parse(LoginRequest, await _read_json(request))
        if body is None:
            logger.error("Invalid credential")
            return _error_response(InvalidInputError("Invalid credential"))

        try:
            result = await anyio.to_thread.run_sync(
                partial(accounts.login, email=body.email, password=body.password)
            )
        except AccountError as exc:
            logger.error(exc.message)
            return _error_response(exc)
        except Exception:
            logger.exception("Login failed")
            return _error_response(InternalServiceError())

        return JSONResponse(
            content={
                "authtoken": result.token,
                "userName": result.user.first_name,
                "userEmail": result.user.email,
            }
        )

    @app.put("/update")
    async def update_profile(request: Request) -> JSONResponse:
        # TODO: apply ``name`` to the stored record once the client contract for it is settled.
        body = _parse(UpdateProfileRequest, await _read_json(request))
        if body is None:
            logger.error("Invalid input")
            return _error_response(InvalidInputError("Invalid input"))

        email = (request.headers.get("email") or "").strip()
        if not email:
            logger.error("Email not in the request headers")
            return _error_response(InvalidInputError("Email not in the request headers"))

        try:
            result = await anyio.to_thread.run_sync(accounts.refresh_profile, email)
        except AccountError as exc:
            logger.error(exc.message)
            return _error_response(exc)
        except Exception:
            logger.exception("Profile update failed")
            return _error_response(InternalServiceError())

        return JSONResponse(status_code=status.HTTP_200_OK, content={"authtoken": result.token})


def create_app(
    settings: Settings | None = None,
    *,
    provider: DatabaseProvider | None = None,
    initialize_database: bool = False,
) -> FastAPI:
    """Instantiate the FastAPI application for the accounts service."""

    app_settings = settings or load_settings()
    db_provider = provider or DatabaseProvider.from_settings(app_settings)

    store = UserStore(db_provider)
    if initialize_database:
        store.initialize()

    accounts = AccountService(
        store,
        TokenSigner(app_settings.jwt_secret),
        password_context=build_password_context(app_settings.bcrypt_rounds),
    )

    app = FastAPI(
        title="GiftLink Accounts API",
        version="0.1.0",
        description="Registration, login and profile endpoints for GiftLink.",
    )
    app.state.settings = app_settings
    app.state.database = db_provider
    app.state.accounts = accounts

    register_auth_routes(app, accounts)

    return app


__all__ = [
    "LoginRequest",
    "RegisterRequest",
    "UpdateProfileRequest",
    "create_app",
    "register_auth_routes",
]
