import pytest

from app import create_app
from config import TestConfig
from models import db


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def app(tmp_path):
    app = create_app(TestConfig, UPLOAD_FOLDER=str(tmp_path / "uploads"))
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def register(client):
    def _register(name="Jane Doe", email="jane@example.com", password="secret123"):
        return client.post(
            "/api/auth/register",
            json={"name": name, "email": email, "password": password},
        )

    return _register


@pytest.fixture
def auth_headers(register):
    resp = register()
    assert resp.status_code == 201
    return bearer(resp.get_json()["data"]["token"])


@pytest.fixture
def other_headers(register):
    resp = register(name="Other", email="other@example.com")
    assert resp.status_code == 201
    return bearer(resp.get_json()["data"]["token"])
