from datetime import date, timedelta

import pytest

from app import create_app
from models import db
from models.user import Role, User
from scheduling.policy import BookingPolicy

TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite://",
    "AUTO_CREATE_TABLES": True,
    "BCRYPT_ROUNDS": 4,
    "LOG_LEVEL": "WARNING",
}

ADMIN_EMAIL = "owner@salon.test"
ADMIN_PASSWORD = "owner-pass-123"


@pytest.fixture
def app():
    app = create_app(TEST_CONFIG)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def policy():
    return BookingPolicy()


@pytest.fixture
def booking_data():
    def make(day, slot="10:00", **extra):
        data = {
            "appointment_date": day,
            "appointment_time": slot,
            "customer_name": "Dana Reyes",
            "customer_email": "dana@example.com",
            "customer_phone": "+14155550123",
        }
        data.update(extra)
        return data
    return make


@pytest.fixture
def payload():
    """JSON body for POST /bookings."""
    def make(day, slot="10:00", **extra):
        body = {
            "appointment_date": day.isoformat(),
            "appointment_time": slot,
            "customer_name": "Dana Reyes",
            "customer_email": "dana@example.com",
            "customer_phone": "+14155550123",
        }
        body.update(extra)
        return body
    return make


@pytest.fixture
def next_week():
    return date.today() + timedelta(days=7)


def _csrf_headers(client):
    cookie = client.get_cookie("csrf_token")
    return {"X-CSRF-Token": cookie.value} if cookie else {}


def register_and_login(client, email, password, admin=False):
    resp = client.post("/auth/register", json={"email": email, "password": password})
    assert resp.status_code == 201, resp.get_json()

    if admin:
        user = User.query.filter_by(email=email).first()
        user.roles.append(Role.query.filter_by(name="ADMIN").first())
        db.session.commit()

    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return _csrf_headers(client)


@pytest.fixture
def admin_client(app):
    client = app.test_client()
    client.csrf = register_and_login(client, ADMIN_EMAIL, ADMIN_PASSWORD, admin=True)
    return client


@pytest.fixture
def customer_client(app):
    client = app.test_client()
    client.csrf = register_and_login(client, "regular@salon.test", "customer-pass-1")
    return client
