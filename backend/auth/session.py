# backend/auth/session.py

from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import current_app, g
from flask_jwt_extended import (
    JWTManager,
    get_current_user,
    get_jwt_identity,
    verify_jwt_in_request,
)
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from errors import AccountDisabled, TokenExpired, TokenInvalid, error
from models import db
from models.user_model import User


jwt = JWTManager()


@jwt.user_lookup_loader
def _load_user(_jwt_header, jwt_data) -> Optional[User]:
    try:
        user_id = int(jwt_data["sub"])
    except (KeyError, TypeError, ValueError):
        return None
    return db.session.get(User, user_id)


@jwt.unauthorized_loader
def _missing_token(reason: str):
    return error("Access token required", 401)


@jwt.expired_token_loader
def _expired_token(_jwt_header, _jwt_payload):
    return error(TokenExpired.default_message, TokenExpired.status_code)


@jwt.invalid_token_loader
def _invalid_token(reason: str):
    return error(TokenInvalid.default_message, TokenInvalid.status_code)


@jwt.user_lookup_error_loader
def _unknown_user(_jwt_header, _jwt_data):
    return error("User not found", 401)


def session_required(fn):
    """
    Require a valid, unexpired bearer token for an existing, active user.
    The loaded user is available through ``current_user()``.
    """

    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        user = get_current_user()
        if not user.is_active:
            current_app.logger.warning("Rejected token for deactivated user %s", user.id)
            raise AccountDisabled()
        g.session_user = user
        return fn(*args, **kwargs)

    return wrapper


def optional_session(fn):
    """Attach the session user when a good token is present; never reject."""

    @wraps(fn)
    def wrapper(*args, **kwargs):
        g.session_user = None
        try:
            verify_jwt_in_request(optional=True)
            if get_jwt_identity() is not None:
                user = get_current_user()
                if user.is_active:
                    g.session_user = user
        except (JWTExtendedException, PyJWTError) as e:
            current_app.logger.debug("Ignoring unusable token: %s", e)
        return fn(*args, **kwargs)

    return wrapper


def current_user() -> Optional[User]:
    return g.get("session_user")
