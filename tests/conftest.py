"""Shared fixtures: an in-memory database, a TestClient bound to it, and users per role."""

import os
from datetime import date, timedelta

# must be set before the app (and its engine) is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SMTP_HOST"] = ""
os.environ["ENV"] = "development"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session

from barbershop import models  # noqa: F401
from barbershop.auth import hash_password
from barbershop.db import engine, get_session
from barbershop.main import app
from barbershop.models import User

PASSWORD = "secret123"


@pytest.fixture
def session():
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(session):
    app.dependency_overrides[get_session] = lambda: session
    yield TestClient(app)
    app.dependency_overrides.clear()


def _login(client, email):
    resp = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def register_user(client):
    """Register through the API and return (user json, bearer headers)."""
    counter = {"n": 0}

    def _register(role="customer", name=None):
        counter["n"] += 1
        n = counter["n"]
        payload = {
            "name": name or f"{role.title()} {n}",
            "email": f"{role}{n}@example.com",
            "phone": f"+1555000{n:04d}",
            "password": PASSWORD,
            "role": role,
        }
        resp = client.post("/api/auth/register", json=payload)
        assert resp.status_code == 201, resp.text
        return resp.json(), _login(client, payload["email"])

    return _register


@pytest.fixture
def customer(register_user):
    return register_user("customer")


@pytest.fixture
def admin_headers(client, session):
    admin = User(
        name="Admin",
        email="admin@example.com",
        phone="+15559999999",
        password_hash=hash_password(PASSWORD),
        role="admin",
    )
    session.add(admin)
    session.commit()
    return _login(client, "admin@example.com")


@pytest.fixture
def owner(client):
    """A shop owner registered together with their shop."""
    resp = client.post(
        "/api/auth/shop-register",
        json={
            "owner_name": "Olivia Owner",
            "email": "owner@example.com",
            "phone": "+15551110000",
            "password": PASSWORD,
            "shop_name": "Sharp Cuts",
            "street": "12 Main Street",
            "city": "Springfield",
            "state": "IL",
            "zip_code": "62701",
        },
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()
    return {
        "user": body["user"],
        "shop": body["shop"],
        "headers": {"Authorization": f"Bearer {body['access_token']}"},
    }


@pytest.fixture
def barber(client, owner):
    """A barber account created by the owner and attached to the owner's shop."""
    resp = client.post(
        f"/api/shops/{owner['shop']['id']}/barbers",
        json={
            "name": "Bob Barber",
            "email": "bob@example.com",
            "phone": "+15552220000",
            "password": PASSWORD,
            "specialties": ["Fade"],
            "experience": 5,
        },
        headers=owner["headers"],
    )
    assert resp.status_code == 201, resp.text
    return {"user": resp.json(), "headers": _login(client, "bob@example.com")}


@pytest.fixture
def service(client, owner):
    resp = client.post(
        f"/api/shops/{owner['shop']['id']}/services",
        json={"name": "Classic Cut", "category": "haircut", "price": 25.0, "duration": 30},
        headers=owner["headers"],
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def open_slots(client, barber):
    """Working hours on every weekday plus three days of generated slots from tomorrow."""
    for day in range(7):
        resp = client.put(
            f"/api/working-hours/{day}",
            json={
                "start_time": "09:00",
                "end_time": "17:00",
                "break_start_time": "12:00",
                "break_end_time": "13:00",
            },
            headers=barber["headers"],
        )
        assert resp.status_code == 200, resp.text

    start = date.today() + timedelta(days=1)
    resp = client.post(
        "/api/slots/generate",
        json={"start_date": start.isoformat(), "end_date": (start + timedelta(days=2)).isoformat()},
        headers=barber["headers"],
    )
    assert resp.status_code == 201, resp.text

    resp = client.get(f"/api/slots/available/{barber['user']['id']}/{start.isoformat()}")
    assert resp.status_code == 200, resp.text
    return resp.json()
