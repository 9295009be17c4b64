from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from taskstore_api.app.memory import InMemoryTaskStorage
from taskstore_api.app.settings import Settings
from taskstore_api.main import create_app


@pytest.fixture
def storage() -> InMemoryTaskStorage:
    return InMemoryTaskStorage()


@pytest.fixture
def client(storage: InMemoryTaskStorage) -> Iterator[TestClient]:
    app = create_app(
        storage=storage,
        settings_override=Settings(app_name="taskstore-test", database_url=""),
    )
    with TestClient(app) as test_client:
        yield test_client
