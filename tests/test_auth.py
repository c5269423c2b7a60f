from datetime import datetime, timedelta

from sqlalchemy import DateTime
from sqlmodel import select

from barbershop.auth import create_access_token, hash_token
from barbershop.models import Booking, User

from conftest import PASSWORD


def test_register_returns_public_user(client):
    resp = client.post(
        "/api/auth/register",
        json={
            "name": "Carla Customer",
            "email": "Carla@Example.com",
            "phone": "+15553334444",
            "password": PASSWORD,
        },
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["email"] == "carla@example.com"
    assert body["role"] == "customer"
    assert body["is_email_verified"] is False
    assert "password_hash" not in body


def test_register_rejects_duplicate_email(client, customer):
    user, _ = customer
    resp = client.post(
        "/api/auth/register",
        json={"name": "Other", "email": user["email"], "phone": "+15550009999", "password": PASSWORD},
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "User with this email already exists"


def test_register_rejects_duplicate_phone(client, customer):
    user, _ = customer
    resp = client.post(
        "/api/auth/register",
        json={"name": "Other", "email": "other@example.com", "phone": user["phone"], "password": PASSWORD},
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "User with this phone already exists"


def test_register_rejects_privileged_roles(client):
    resp = client.post(
        "/api/auth/register",
        json={"name": "Eve", "email": "eve@example.com", "phone": "+15550001111", "password": PASSWORD, "role": "admin"},
    )
    assert resp.status_code == 400


def test_register_validates_password_length(client):
    resp = client.post(
        "/api/auth/register",
        json={"name": "Short", "email": "short@example.com", "phone": "+15550001112", "password": "abc"},
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Validation failed"


def test_login_and_me(client, customer):
    user, headers = customer
    resp = client.get("/api/auth/me", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["id"] == user["id"]
    assert resp.json()["last_login"] is not None


def test_login_wrong_password(client, customer):
    user, _ = customer
    resp = client.post("/api/auth/login", json={"email": user["email"], "password": "wrong-pass"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid email or password"


def test_login_deactivated_user(client, session, customer):
    user, _ = customer
    row = session.get(User, user["id"])
    row.is_active = False
    session.add(row)
    session.commit()

    resp = client.post("/api/auth/login", json={"email": user["email"], "password": PASSWORD})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Your account has been deactivated"


def test_token_for_deactivated_user_is_rejected(client, session, customer):
    user, headers = customer
    row = session.get(User, user["id"])
    row.is_active = False
    session.add(row)
    session.commit()

    resp = client.get("/api/auth/me", headers=headers)
    assert resp.status_code == 401
    assert resp.json()["detail"] == "User account is deactivated"


def test_oauth2_form_login(client, customer):
    user, _ = customer
    resp = client.post("/api/auth/token", data={"username": user["email"], "password": PASSWORD})
    assert resp.status_code == 200
    assert resp.json()["token_type"] == "bearer"


def test_missing_token_is_unauthorized(client):
    resp = client.get("/api/auth/me")
    assert resp.status_code == 401


def test_token_for_unknown_user(client, session):
    token = create_access_token({"sub": "999"})
    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "User not found"


def test_update_profile(client, customer):
    _, headers = customer
    resp = client.put("/api/auth/profile", json={"name": "New Name", "experience": 3}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["name"] == "New Name"
    assert resp.json()["experience"] == 3


def test_update_profile_rejects_taken_phone(client, register_user):
    first, _ = register_user("customer")
    _, headers = register_user("customer")
    resp = client.put("/api/auth/profile", json={"phone": first["phone"]}, headers=headers)
    assert resp.status_code == 400


def test_change_password(client, customer):
    user, headers = customer
    resp = client.put(
        "/api/auth/change-password",
        json={"current_password": "not-it", "new_password": "newsecret"},
        headers=headers,
    )
    assert resp.status_code == 400

    resp = client.put(
        "/api/auth/change-password",
        json={"current_password": PASSWORD, "new_password": "newsecret"},
        headers=headers,
    )
    assert resp.status_code == 200
    resp = client.post("/api/auth/login", json={"email": user["email"], "password": "newsecret"})
    assert resp.status_code == 200


def test_forgot_and_reset_password(client, session, customer):
    user, _ = customer
    resp = client.post("/api/auth/forgot-password", json={"email": user["email"]})
    assert resp.status_code == 200
    raw = resp.json()["reset_token"]

    # only the digest is stored
    row = session.get(User, user["id"])
    assert row.reset_password_token == hash_token(raw)

    resp = client.put(f"/api/auth/reset-password/{raw}", json={"password": "brandnew1"})
    assert resp.status_code == 200
    assert resp.json()["access_token"]

    resp = client.post("/api/auth/login", json={"email": user["email"], "password": "brandnew1"})
    assert resp.status_code == 200

    # the token is single use
    resp = client.put(f"/api/auth/reset-password/{raw}", json={"password": "another1"})
    assert resp.status_code == 400


def test_forgot_password_unknown_email(client):
    resp = client.post("/api/auth/forgot-password", json={"email": "nobody@example.com"})
    assert resp.status_code == 404


def test_expired_reset_token(client, session, customer):
    user, _ = customer
    raw = client.post("/api/auth/forgot-password", json={"email": user["email"]}).json()["reset_token"]

    row = session.get(User, user["id"])
    row.reset_password_expire = datetime.now() - timedelta(minutes=1)
    session.add(row)
    session.commit()

    resp = client.put(f"/api/auth/reset-password/{raw}", json={"password": "brandnew1"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid or expired password reset token"


def test_verify_email(client, session, customer):
    user, _ = customer
    row = session.get(User, user["id"])
    row.email_verification_token = hash_token("known-token")
    session.add(row)
    session.commit()

    resp = client.get("/api/auth/verify-email/known-token")
    assert resp.status_code == 200

    session.refresh(row)
    assert row.is_email_verified is True
    assert client.get("/api/auth/verify-email/known-token").status_code == 400


def test_shop_register_creates_owner_and_shop(client, owner):
    assert owner["user"]["role"] == "shop_owner"
    assert owner["user"]["shop_id"] == owner["shop"]["id"]
    assert owner["shop"]["owner_id"] == owner["user"]["id"]
    assert owner["shop"]["working_hours"]["sunday"]["closed"] is True
    assert owner["shop"]["email"] == "owner@example.com"


def test_shop_login_requires_owner_role(client, owner, customer):
    resp = client.post("/api/auth/shop-login", json={"email": "owner@example.com", "password": PASSWORD})
    assert resp.status_code == 200
    assert resp.json()["user"]["role"] == "shop_owner"

    user, _ = customer
    resp = client.post("/api/auth/shop-login", json={"email": user["email"], "password": PASSWORD})
    assert resp.status_code == 403


def test_register_creates_hashed_password(session, customer):
    user, _ = customer
    row = session.exec(select(User).where(User.id == user["id"])).one()
    assert row.password_hash != PASSWORD
    assert row.password_hash.startswith("$2")


def test_timestamps_are_stored_naive(session):
    for column in (User.__table__.c.created_at, User.__table__.c.reset_password_expire, Booking.__table__.c.confirmed_at):
        assert type(column.type) is DateTime
        assert column.type.timezone is False

    stamp = datetime(2030, 1, 7, 9, 30)
    user = User(
        name="Naive Ned", email="ned@example.com", phone="+15554443333",
        password_hash="x", created_at=stamp, last_login=stamp,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    assert user.created_at == stamp
    assert user.last_login == stamp
