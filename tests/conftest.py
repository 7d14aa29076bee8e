import pytest
from fastapi.testclient import TestClient

from string_analyzer.api.routes import get_store
from string_analyzer.crud.string import InMemoryStringStore
from string_analyzer.main import app


@pytest.fixture
def store():
    return InMemoryStringStore()


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
