import pytest
from fastapi.testclient import TestClient

from inventory.main import app
from inventory.database import InventoryDatabase
from inventory.notifier import ChangeNotifier
from inventory.services.catalog_service import CatalogService
from inventory.services.provider import InventoryProvider


# Create test database (SQLite in-memory for testing)
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
AUTHORITY = "com.example.android.inventory"


@pytest.fixture(scope="function")
def database():
    """Fresh in-memory database for each test."""
    db = InventoryDatabase(SQLALCHEMY_DATABASE_URL, version=1).open()

    yield db

    db.close()


@pytest.fixture(scope="function")
def notifier():
    return ChangeNotifier()


@pytest.fixture(scope="function")
def provider(database, notifier):
    return InventoryProvider(database, notifier, AUTHORITY)


@pytest.fixture(scope="function")
def catalog(provider):
    return CatalogService(provider)


@pytest.fixture(scope="function")
def client(provider):
    """Create test client backed by a fresh database for each test."""
    app.state.provider = provider

    with TestClient(app) as test_client:
        yield test_client

    app.state.provider = None


@pytest.fixture
def harry_potter():
    """Sample product values."""
    return {
        "name": "Harry Potter",
        "supplier_name": "Magic BookPrint",
        "supplier_phone": "+48 888 888 888",
        "price": 20,
        "quantity": 50,
    }


class Recorder:
    """Observer that remembers the URIs it was told about."""

    def __init__(self):
        self.calls = []

    def __call__(self, uri):
        self.calls.append(uri)


@pytest.fixture
def recorder():
    return Recorder()
