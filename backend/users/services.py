from __future__ import annotations

import copy

from flask import current_app

from models import db
from models.user_model import User
from storage.uploads import (
    decode_image_data_url,
    delete_profile_image,
    is_image_data_url,
    upload_profile_image,
)
from timeutils import isoformat, utcnow

from .schemas import ProfileUpdateSchema, SettingsUpdateSchema


DEFAULT_SETTINGS = {
    "notifications": {"email": True, "push": False, "sms": True},
    "privacy": {"profileVisible": True, "dataSharing": False},
    "security": {"twoFactorEnabled": False, "loginAlerts": True},
    "preferences": {
        "theme": "light",
        "language": "en",
        "currency": "USD",
        "dateFormat": "MM/DD/YYYY",
    },
}

# sections kept in User.settings; "preferences" lives in User.preferences
_SETTINGS_SECTIONS = ("notifications", "privacy", "security")


def update_profile(user: User, data: ProfileUpdateSchema) -> User:
    changes = data.model_fields_set

    if "name" in changes:
        user.name = data.name
    if "phone" in changes:
        user.phone = data.phone
    if "address" in changes:
        user.address = data.address
    if "avatar" in changes:
        user.avatar = data.avatar

    old_path = None
    if "profilePicture" in changes and is_image_data_url(data.profilePicture):
        image, ext = decode_image_data_url(data.profilePicture)
        stored = upload_profile_image(image, ext, user.id)
        old_path = user.avatar_path
        user.avatar = stored.url
        user.avatar_path = stored.path

    db.session.commit()

    if old_path:
        delete_profile_image(old_path)
    return user


def get_settings(user: User) -> dict:
    stored = user.settings or {}
    settings = {
        section: {**DEFAULT_SETTINGS[section], **(stored.get(section) or {})}
        for section in _SETTINGS_SECTIONS
    }
    settings["preferences"] = {**DEFAULT_SETTINGS["preferences"], **(user.preferences or {})}
    return settings


def update_settings(user: User, data: SettingsUpdateSchema) -> dict:
    # JSON columns only notice reassignment, so build fresh dicts
    stored = copy.deepcopy(user.settings or {})
    for section in _SETTINGS_SECTIONS:
        value = getattr(data, section)
        if value is not None:
            stored[section] = {**(stored.get(section) or {}), **value}
    user.settings = stored

    if data.preferences is not None:
        user.preferences = {**(user.preferences or {}), **data.preferences}

    db.session.commit()

    settings = get_settings(user)
    settings["updatedAt"] = isoformat(utcnow())
    return settings


def deactivate_account(user: User) -> None:
    user.is_active = False
    db.session.commit()
    current_app.logger.info("Deactivated user %s", user.id)
