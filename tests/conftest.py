import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("SMTP_HOST", None)
os.environ.pop("ADMIN_EMAIL", None)

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from jewellery.db.init_db import init_db
from jewellery.db.session import get_db
from jewellery.main import app
from jewellery.models.entities import Category, Product
from jewellery.models.schemas import UserDto
from jewellery.services.user_service import UserService


class RecordingEmailService:
    """Stands in for SMTP delivery and remembers what would have been sent."""

    def __init__(self):
        self.sent = []

    def send_welcome_email(self, to_email, user_name):
        self.sent.append(("welcome", to_email, user_name))
        return True

    def send_order_confirmation(self, to_email, user_name, order_id, order_status):
        self.sent.append(("confirmation", to_email, order_id, order_status))
        return True

    def send_order_status_update(self, to_email, user_name, order_id, new_status):
        self.sent.append(("status", to_email, order_id, new_status))
        return True


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    factory = sessionmaker(bind=engine)
    init_db(bind=engine, session_factory=factory)
    return factory


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def emails():
    return RecordingEmailService()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db, emails):
    def _make_user(email="jane@example.com", password="secret123", role=None, first_name="Jane"):
        dto = UserDto(first_name=first_name, last_name="Doe", email=email, password=password, role=role)
        response = UserService(db, email_service=emails).register(dto)
        assert response.success, response.errors
        return response.data.user
    return _make_user


@pytest.fixture
def make_product(db):
    def _make_product(name="Gold Ring", price="100", stock=10, category="Rings"):
        category_id = db.scalars(select(Category).where(Category.name == category)).one().id
        product = Product(name=name, price=Decimal(price), stock=stock, category_id=category_id)
        db.add(product)
        db.commit()
        return product
    return _make_product


@pytest.fixture
def signup(client):
    """Register through the API and return bearer headers for the new account."""
    def _signup(email="jane@example.com", role=None, password="secret123", first_name="Jane"):
        payload = {"firstName": first_name, "lastName": "Doe", "email": email, "password": password}
        if role:
            payload["role"] = role
        response = client.post("/api/auth/register", json=payload)
        assert response.status_code == 200, response.json()
        return {"Authorization": f"Bearer {response.json()['data']['token']}"}
    return _signup
