# backend/auth/routes.py

from flask import Blueprint

from auth.schemas import LoginSchema, RegisterSchema
from auth.services import login_user, register_user, touch_last_login
from auth.session import current_user, session_required
from errors import ValidationError, json_body, parse_body, success

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def _missing(data: dict, *fields) -> bool:
    return any(not data.get(f) for f in fields)


@auth_bp.route("/register", methods=["POST"])
def register():

    data = json_body()
    if _missing(data, "name", "email", "password"):
        raise ValidationError("Please provide name, email, and password")

    payload = parse_body(RegisterSchema, data)
    result = register_user(payload)

    return success(result, "User registered successfully", 201)


@auth_bp.route("/login", methods=["POST"])
def login():

    data = json_body()
    if _missing(data, "email", "password"):
        raise ValidationError("Please provide email and password")

    payload = parse_body(LoginSchema, data)
    result = login_user(payload)

    return success(result, "Login successful")


@auth_bp.route("/me", methods=["GET"])
@session_required
def me():
    return success({"user": current_user().to_public_dict()})


@auth_bp.route("/logout", methods=["POST"])
@session_required
def logout():
    # tokens are stateless; the client discards its copy
    return success(message="Logout successful")


@auth_bp.route("/logout-all", methods=["POST"])
@session_required
def logout_all():
    touch_last_login(current_user())
    return success(message="Successfully logged out from all devices")
