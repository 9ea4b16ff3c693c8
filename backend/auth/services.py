# backend/auth/services.py

from flask import current_app
from flask_jwt_extended import create_access_token
from sqlalchemy.exc import IntegrityError

from errors import AccountDisabled, DuplicateEmailError, InvalidCredentials
from models import db
from models.user_model import User
from timeutils import utcnow


def issue_token(user: User) -> str:
    return create_access_token(
        identity=str(user.id),
        additional_claims={"email": user.email, "name": user.name},
    )


def register_user(data):

    email = User.normalize_email(data.email)
    if User.find_by_email(email):
        raise DuplicateEmailError()

    user = User(name=data.name, email=email)
    user.set_password(data.password)

    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # lost a race against a concurrent registration for the same email
        db.session.rollback()
        raise DuplicateEmailError()

    current_app.logger.info("Registered user %s", user.id)

    return {"user": user.to_public_dict(), "token": issue_token(user)}


def login_user(data):

    user = User.find_by_email(data.email)

    # unknown email and wrong password must be indistinguishable
    if not user or not user.check_password(data.password):
        raise InvalidCredentials()

    if not user.is_active:
        current_app.logger.warning("Login refused for deactivated user %s", user.id)
        raise AccountDisabled("Account is deactivated. Please contact support.")

    user.last_login = utcnow()
    db.session.commit()

    return {"user": user.to_public_dict(), "token": issue_token(user)}


def change_password(user: User, data) -> None:

    if not user.check_password(data.currentPassword):
        raise InvalidCredentials("Current password is incorrect", status_code=400)

    user.set_password(data.newPassword)
    db.session.commit()
    current_app.logger.info("Password changed for user %s", user.id)


def touch_last_login(user: User) -> None:
    user.last_login = utcnow()
    db.session.commit()
