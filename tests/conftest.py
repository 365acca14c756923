import pytest
from fastapi.testclient import TestClient

from main import app, get_mailer, get_settings
from notifier import Settings


class FakeMailer:
    """Records every email instead of calling SES."""

    def __init__(self, error=None):
        self.sent = []
        self.error = error

    def send(self, email):
        if self.error is not None:
            raise self.error
        self.sent.append(email)


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def settings():
    return Settings(owner_email="owner@example.com", from_email="sales@example.com")


@pytest.fixture
def client(mailer, settings):
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def order_payload():
    return {
        "customer": {"name": "Jane Doe", "phone": "727-555-0100"},
        "items": [{"sku": "UBNT-LBE-5AC-GEN2", "name": "LiteBeam 5AC Gen2", "qty": 5}],
        "fulfillment": {"method": "pickup"},
    }


@pytest.fixture
def contact_payload():
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "message": "Do you have ten more LiteBeams in stock?",
    }
