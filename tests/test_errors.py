from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from barbershop.auth import create_access_token
from barbershop.errors import register_exception_handlers


def _throwaway_app():
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/duplicate")
    def duplicate():
        raise IntegrityError("INSERT INTO user", {}, Exception("UNIQUE constraint failed: user.email"))

    @app.get("/boom")
    def boom():
        raise RuntimeError("kaput")

    return app


def test_body_validation_is_400_with_errors(client):
    resp = client.post("/api/auth/login", json={"email": "not-an-email"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["detail"] == "Validation failed"
    assert {tuple(err["loc"]) for err in body["errors"]} >= {("body", "email"), ("body", "password")}


def test_bad_path_parameter_is_resource_not_found(client):
    resp = client.get("/api/shops/not-a-number")
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Resource not found"}


def test_unknown_route(client):
    resp = client.get("/api/nowhere")
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Route /api/nowhere not found"}


def test_http_exception_detail_is_kept(client):
    resp = client.get("/api/shops/4242")
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Shop not found"}


def test_garbage_token(client):
    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.jwt"})
    assert resp.status_code == 401
    assert resp.json() == {"detail": "Invalid token"}


def test_expired_token(client, customer):
    user, _ = customer
    token = create_access_token({"sub": str(user["id"])}, expires_minutes=-5)
    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json() == {"detail": "Token expired"}


def test_integrity_error_is_duplicate_field():
    client = TestClient(_throwaway_app())
    resp = client.get("/duplicate")
    assert resp.status_code == 400
    assert resp.json() == {"detail": "Duplicate field value entered"}


def test_unhandled_error_is_server_error(caplog):
    client = TestClient(_throwaway_app(), raise_server_exceptions=False)
    resp = client.get("/boom")
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Server Error"}
    assert "Unhandled error on GET /boom" in caplog.text


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}
