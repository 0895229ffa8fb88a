import pytest

from config import TestingConfig
from daily_challenge import create_app, db


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def signup(client):
    """Create (or fetch) a user by name; returns (user, auth headers)."""

    def _signup(name):
        resp = client.post("/api/users", json={"name": name})
        assert resp.status_code in (200, 201)
        data = resp.get_json()
        token = data.pop("token")
        return data, {"Authorization": f"Bearer {token}"}

    return _signup


@pytest.fixture
def make_challenge(client):
    def _make(user, headers, name="Kickstart", duration=7, goals=None):
        resp = client.post(
            "/api/challenges",
            json={
                "user_id": user["id"],
                "name": name,
                "duration": duration,
                "goals": goals or ["Water", "Walk", "Read"],
            },
            headers=headers,
        )
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()

    return _make
