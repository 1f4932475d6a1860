"""
Pytest configuration and shared fixtures.
"""

import os
import sys
from pathlib import Path

import pytest

# Modules live at the repository root
sys.path.insert(0, str(Path(__file__).parent.parent))

# Must be set before app/config are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["WEEK_START"] = "0"

from storage import MemoryStorage, StorageError  # noqa: E402
from event_store import SessionContext  # noqa: E402


class FailingStorage:
    """Storage whose backend is always down."""

    def get(self, key):
        raise StorageError("backend down")

    def set(self, key, value):
        raise StorageError("backend down")


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture
def ctx(memory_storage):
    return SessionContext(user_id="42", storage=memory_storage)


@pytest.fixture
def failing_ctx():
    return SessionContext(user_id="42", storage=FailingStorage())


@pytest.fixture
def app():
    from app import app as flask_app
    from models import db

    flask_app.config.update(TESTING=True)
    with flask_app.app_context():
        db.create_all()
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def register_and_login(client, username="mario", password="segreto"):
    client.post("/register", data={"username": username, "password": password})
    return client.post("/login", data={"username": username, "password": password})


@pytest.fixture
def logged_in(client):
    register_and_login(client)
    return client
