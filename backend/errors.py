# backend/errors.py

from __future__ import annotations

from typing import Any, Optional

import pydantic
from flask import Flask, current_app, jsonify, request
from werkzeug.exceptions import HTTPException


class ApiError(Exception):
    """Base class for errors that map onto a JSON error envelope."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApiError):
    status_code = 400
    default_message = "Invalid request"


class DuplicateEmailError(ApiError):
    status_code = 400
    default_message = "User with this email already exists"


class InvalidCredentials(ApiError):
    status_code = 401
    default_message = "Invalid email or password"


class AccountDisabled(ApiError):
    status_code = 401
    default_message = "Account is deactivated"


class NotFound(ApiError):
    status_code = 404
    default_message = "Resource not found"


class TokenExpired(ApiError):
    status_code = 403
    default_message = "Token expired"


class TokenInvalid(ApiError):
    status_code = 401
    default_message = "Invalid token"


class ServerError(ApiError):
    status_code = 500
    default_message = "Internal server error"


def success(data: Any = None, message: Optional[str] = None, status: int = 200):
    body = {"status": "success"}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def error(message: str, status: int):
    return jsonify({"status": "error", "message": message}), status


def _field_message(err: dict) -> str:
    # custom validators raise ValueError with a display-ready message
    if err.get("type") == "value_error" and "error" in err.get("ctx", {}):
        return str(err["ctx"]["error"])
    field = ".".join(str(part) for part in err.get("loc", ()) if part != "__root__")
    return f"{field}: {err['msg']}" if field else err["msg"]


def validation_message(exc: pydantic.ValidationError) -> str:
    """Join every field error of a pydantic failure into one display string."""
    return ", ".join(_field_message(err) for err in exc.errors())


def json_body() -> dict:
    """The JSON request body as a dict; anything else is rejected."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def parse_body(schema: type[pydantic.BaseModel], data: Optional[dict]):
    """Validate ``data`` against ``schema``; raise ``ValidationError`` on failure."""
    try:
        return schema.model_validate(data or {})
    except pydantic.ValidationError as e:
        raise ValidationError(validation_message(e)) from e


def register_error_handlers(app: Flask) -> None:

    @app.errorhandler(ApiError)
    def handle_api_error(e: ApiError):
        if e.status_code >= 500:
            current_app.logger.error("%s: %s", type(e).__name__, e.message)
        return error(e.message, e.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        if e.code == 413:
            return error("File size too large. Maximum size is 5MB.", 413)
        return error(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        current_app.logger.exception("Unhandled error: %s", e)
        return error("Server error", 500)
