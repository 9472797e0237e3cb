import pytest
from fastapi.testclient import TestClient

from deps.store import get_round_book
from main import app
from services.rounds import RoundBook


@pytest.fixture
def book():
    return RoundBook()


@pytest.fixture
def client(book):
    app.dependency_overrides[get_round_book] = lambda: book
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
