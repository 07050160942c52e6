import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.database import Base, Database
from app.main import create_app


# Test database (SQLite in-memory, one shared connection)
SQLALCHEMY_DATABASE_URL = "sqlite://"


@pytest.fixture(scope="function")
def settings():
    return Settings(DATABASE_URL=SQLALCHEMY_DATABASE_URL, LOG_LEVEL="WARNING")


@pytest.fixture(scope="function")
def database(settings):
    """Fresh in-memory database for each test."""
    return Database.from_settings(settings)


@pytest.fixture(scope="function")
def client(settings, database):
    """Create test client; startup creates the tables, shutdown drops the database."""
    app = create_app(settings, database=database)

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="function")
def db_session(database):
    """Create database session for direct database access in tests."""
    database.connect()
    session = database.session()

    yield session

    session.close()
    Base.metadata.drop_all(bind=database.engine)
    database.dispose()


@pytest.fixture
def create_product(client):
    """Create a product through the API and return its JSON."""
    def _create(name="Test Product", price=10.0):
        response = client.post("/v1/products", json={"name": name, "price": price})
        assert response.status_code == 201
        return response.json()
    return _create
