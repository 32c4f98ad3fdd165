import pytest

fastapi = pytest.importorskip("fastapi")
TestClient = pytest.importorskip("fastapi.testclient").TestClient
mongomock = pytest.importorskip("mongomock")

from restapi.config import Settings  # noqa: E402
from restapi.infrastructure.db.user_repository import MongoUserStorage  # noqa: E402
from restapi.main import create_app  # noqa: E402


@pytest.fixture
def collection():
    """In-memory collection so tests never need a running MongoDB."""
    return mongomock.MongoClient()["users-service"]["users"]


@pytest.fixture
def storage(collection):
    return MongoUserStorage(collection)


@pytest.fixture
def app(storage):
    return create_app(Settings(), storage=storage)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
