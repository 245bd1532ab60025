import pytest
from fastapi.testclient import TestClient

from menucatalog.core.config import Settings
from menucatalog.core.security import hash_password
from menucatalog.main import create_app

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"

@pytest.fixture
def latte():
    return {
        "name": "Latte",
        "description": "Espresso with milk",
        "price": 4.5,
        "image": "https://x/img.png",
        "category": "Drinks",
    }


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        SECRET_KEY="test-secret-key-for-the-menu-catalog-suite",
        ADMIN_USERNAME=ADMIN_USERNAME,
        # Low iteration count keeps the test suite fast
        ADMIN_PASSWORD_HASH=hash_password(ADMIN_PASSWORD, iterations=1000),
        ACCESS_TOKEN_EXPIRE_MINUTES=30,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_token(client):
    r = client.post("/api/auth/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
    assert r.status_code == 200
    token = r.json()["access_token"]
    # Forget the cookie session so only explicit headers authenticate
    client.post("/api/auth/logout")
    return token


@pytest.fixture
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def create_product(client, admin_headers, latte):
    def _create(**overrides):
        payload = dict(latte, **overrides)
        r = client.post("/api/products", json=payload, headers=admin_headers)
        assert r.status_code == 200, r.text
        return r.json()
    return _create
