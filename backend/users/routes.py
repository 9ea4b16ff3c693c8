from __future__ import annotations

from flask import Blueprint

from auth.schemas import ChangePasswordSchema
from auth.services import change_password
from auth.session import current_user, session_required
from errors import ValidationError, json_body, parse_body, success

from .schemas import ProfileUpdateSchema, SettingsUpdateSchema
from .services import deactivate_account, get_settings, update_profile, update_settings


users_bp = Blueprint("users", __name__, url_prefix="/users")


@users_bp.route("/profile", methods=["GET"])
@session_required
def profile():
    return success({"user": current_user().to_public_dict()})


@users_bp.route("/profile", methods=["PUT"])
@session_required
def edit_profile():

    data = {k: v for k, v in json_body().items() if v is not None}
    payload = parse_body(ProfileUpdateSchema, data)
    user = update_profile(current_user(), payload)

    return success({"user": user.to_public_dict()}, "Profile updated successfully")


@users_bp.route("/change-password", methods=["PUT"])
@session_required
def password():

    data = json_body()
    if not data.get("currentPassword") or not data.get("newPassword"):
        raise ValidationError("Current password and new password are required")

    payload = parse_body(ChangePasswordSchema, data)
    change_password(current_user(), payload)

    return success(message="Password changed successfully")


@users_bp.route("/settings", methods=["GET"])
@session_required
def settings():
    return success({"settings": get_settings(current_user())})


@users_bp.route("/settings", methods=["PUT"])
@session_required
def edit_settings():

    payload = parse_body(SettingsUpdateSchema, json_body())
    updated = update_settings(current_user(), payload)

    return success({"settings": updated}, "Settings updated successfully")


@users_bp.route("/account", methods=["DELETE"])
@session_required
def deactivate():
    deactivate_account(current_user())
    return success(message="Account deactivated successfully")
