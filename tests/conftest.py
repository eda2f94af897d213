"""
Shared pytest fixtures: a throwaway sqlite store and an app wired to it.
"""
import pytest

from microblog import create_app
from microblog.db import Store
from microblog.identity import register_user


@pytest.fixture
def store(tmp_path):
    """Store on a fresh sqlite file with the schema created."""
    store = Store(str(tmp_path / "test.db"))
    store.db_setup()
    return store


@pytest.fixture
def bob(store):
    return register_user(store, "bob")


@pytest.fixture
def alice(store):
    return register_user(store, "alice", "alicepassword")


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "DATABASE_PATH": str(tmp_path / "app.db"),
        "AVATAR_FOLDER": str(tmp_path / "avatars"),
        "RATELIMIT_ENABLED": False,
        "SEED_SAMPLE_DATA": False,
        "ALLOW_SELF_LIKE": False,
        "DEFAULT_SORT": "postTime",
        "GOOGLE_CLIENT_ID": None,
        "GOOGLE_CLIENT_SECRET": None,
    })
    yield app


@pytest.fixture
def app_store(app):
    return app.extensions["microblog.store"]


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login_as(client, app_store):
    """Register (if needed) and log in through the real /login route."""
    def _login_as(username, password=None):
        if not app_store.username_exists(username):
            register_user(app_store, username, password)
        return client.post("/login", data={"username": username, "password": password or ""})
    return _login_as
