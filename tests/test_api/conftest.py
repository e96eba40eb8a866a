# tests/test_api/conftest.py
import pytest
from fastapi.testclient import TestClient

from api.main import create_app


@pytest.fixture
def app(database, settings):
    return create_app(database=database, settings=settings)


@pytest.fixture
def client(app):
    return TestClient(app)
