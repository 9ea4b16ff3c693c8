from datetime import timedelta

from flask_jwt_extended import create_access_token, decode_token

from conftest import bearer
from models import db
from models.user_model import User


def test_register_returns_profile_and_token(register):
    resp = register()
    body = resp.get_json()

    assert resp.status_code == 201
    assert body["status"] == "success"
    assert body["data"]["user"]["email"] == "jane@example.com"
    assert "password" not in body["data"]["user"]
    assert body["data"]["token"]


def test_register_then_login_token_subject_matches(app, client, register):
    user_id = register().get_json()["data"]["user"]["id"]

    resp = client.post("/api/auth/login", json={"email": "jane@example.com", "password": "secret123"})
    body = resp.get_json()

    assert resp.status_code == 200
    with app.app_context():
        claims = decode_token(body["data"]["token"])
    assert claims["sub"] == user_id
    assert claims["email"] == "jane@example.com"
    assert claims["name"] == "Jane Doe"
    assert body["data"]["user"]["lastLogin"] is not None


def test_register_duplicate_email_is_case_insensitive(app, register):
    assert register(email="a@b.com").status_code == 201

    resp = register(email="A@B.com")

    assert resp.status_code == 400
    assert resp.get_json() == {"status": "error", "message": "User with this email already exists"}
    with app.app_context():
        assert User.query.count() == 1


def test_register_missing_fields(register):
    resp = register(name="")
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Please provide name, email, and password"


def test_register_short_password(register):
    resp = register(password="12345")
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Password must be at least 6 characters long"


def test_register_invalid_email(register):
    resp = register(email="not-an-email")
    assert resp.status_code == 400
    assert resp.get_json()["message"].startswith("email:")


def test_login_wrong_password_matches_unknown_email(client, register):
    register()

    wrong_pw = client.post("/api/auth/login", json={"email": "jane@example.com", "password": "nope123"})
    unknown = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "secret123"})

    assert wrong_pw.status_code == unknown.status_code == 401
    assert wrong_pw.get_json() == unknown.get_json()
    assert wrong_pw.get_json()["message"] == "Invalid email or password"


def test_login_email_is_case_insensitive(client, register):
    register()
    resp = client.post("/api/auth/login", json={"email": "  JANE@Example.com ", "password": "secret123"})
    assert resp.status_code == 200


def test_login_deactivated_account(app, client, register):
    register()
    with app.app_context():
        User.query.filter_by(email="jane@example.com").update({"is_active": False})
        db.session.commit()

    resp = client.post("/api/auth/login", json={"email": "jane@example.com", "password": "secret123"})

    assert resp.status_code == 401
    assert "deactivated" in resp.get_json()["message"]


def test_me_requires_token(client):
    resp = client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.get_json() == {"status": "error", "message": "Access token required"}


def test_me_returns_current_user(client, auth_headers):
    resp = client.get("/api/auth/me", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.get_json()["data"]["user"]["name"] == "Jane Doe"


def test_invalid_token_is_rejected(client):
    resp = client.get("/api/auth/me", headers=bearer("not.a.token"))
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid token"


def test_expired_token_is_forbidden(app, client, register):
    user_id = register().get_json()["data"]["user"]["id"]
    with app.app_context():
        token = create_access_token(identity=user_id, expires_delta=timedelta(seconds=-10))

    resp = client.get("/api/auth/me", headers=bearer(token))

    assert resp.status_code == 403
    assert resp.get_json()["message"] == "Token expired"


def test_token_for_deleted_user(app, client):
    with app.app_context():
        token = create_access_token(identity="999")
    resp = client.get("/api/auth/me", headers=bearer(token))
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "User not found"


def test_session_rechecks_active_flag(app, client, auth_headers):
    with app.app_context():
        User.query.update({"is_active": False})
        db.session.commit()

    resp = client.get("/api/auth/me", headers=auth_headers)

    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Account is deactivated"


def test_logout_endpoints(client, auth_headers):
    assert client.post("/api/auth/logout", headers=auth_headers).status_code == 200
    resp = client.post("/api/auth/logout-all", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.get_json()["message"] == "Successfully logged out from all devices"


def test_health_with_optional_session(client, auth_headers):
    anonymous = client.get("/api/health")
    garbage = client.get("/api/health", headers=bearer("garbage"))
    signed_in = client.get("/api/health", headers=auth_headers)

    assert anonymous.status_code == garbage.status_code == signed_in.status_code == 200
    assert anonymous.get_json()["data"]["authenticated"] is False
    assert garbage.get_json()["data"]["authenticated"] is False
    assert signed_in.get_json()["data"]["authenticated"] is True


def test_unknown_route_uses_envelope(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.get_json()["status"] == "error"


def test_non_object_json_body_is_rejected(client):
    resp = client.post("/api/auth/login", json=["jane@example.com", "secret123"])
    assert resp.status_code == 400
    assert resp.get_json() == {"status": "error", "message": "Request body must be a JSON object"}
