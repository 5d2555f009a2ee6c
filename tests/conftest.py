import pytest
from fastapi.testclient import TestClient

from task_tracker.application import create_app
from task_tracker.settings import Settings


def _settings(**overrides) -> Settings:
    values = {
        "database_url": "memory://",
        "persistence_backend": "memory",
        "password_scheme": "bcrypt",
        "bcrypt_rounds": 4,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def make_app():
    """Build an app from Settings overrides (memory store, cheap bcrypt by default)."""
    def _make(**overrides):
        return create_app(_settings(**overrides))
    return _make


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def repo(app):
    return app.state.repository
