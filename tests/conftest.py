"""
Global pytest fixtures for the short link test suite.

Responsibilities:
    - Provide a fresh FastAPI TestClient via the app factory for integration tests
    - Provide isolated in-memory Storage for direct testing
    - Provide a LinkManager fixture wired to the Storage fixture

Why an app factory?
    Using `create_app()` ensures each test gets fresh in-memory state,
    eliminating cross-test flakiness.
"""

import pytest
from fastapi.testclient import TestClient

from main import create_app
from shortlink.config import Settings
from shortlink.manager.link_manager import LinkManager
from shortlink.storage.storage import Storage


@pytest.fixture
def storage() -> Storage:
    """Provide a fresh in-memory Storage backend."""
    return Storage()


@pytest.fixture
def manager(storage: Storage) -> LinkManager:
    """Provide a LinkManager wired to the storage fixture."""
    return LinkManager(storage=storage)


@pytest.fixture
def dev_settings() -> Settings:
    return Settings(env="development")


@pytest.fixture
def prod_settings() -> Settings:
    return Settings(env="production")


@pytest.fixture
def client(storage: Storage, dev_settings: Settings):
    """
    Provide a TestClient over a new app instance sharing the `storage` fixture.

    Notes:
        - Entered as a context manager so the lifespan (store open/close) runs.
        - Server exceptions are rendered as responses, not re-raised, so 500
          paths can be asserted like any other status.
    """
    app = create_app(settings=dev_settings, storage=storage)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def prod_client(storage: Storage, prod_settings: Settings):
    app = create_app(settings=prod_settings, storage=storage)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
