# tests/test_errors.py
import logging

from sqlalchemy.exc import OperationalError

from menucatalog.core.exceptions import NotFoundError, StoreError, UnauthorizedError, ValidationError
from menucatalog.models.product import Product


def test_error_kinds_and_statuses():
    assert (ValidationError("price").status_code, ValidationError("price").kind) == (400, "validation_error")
    assert (UnauthorizedError().status_code, UnauthorizedError().kind) == (401, "unauthorized")
    assert (NotFoundError().status_code, NotFoundError().kind) == (404, "not_found")
    assert (StoreError().status_code, StoreError().kind) == (500, "internal_error")
    assert ValidationError("price").to_dict() == {
        "error": "validation_error",
        "message": "price is required",
        "field": "price",
    }


def _broken_store(monkeypatch, method):
    def fail(*args, **kwargs):
        raise OperationalError("SELECT secret_table_detail", {}, Exception("disk I/O error"))
    monkeypatch.setattr(f"sqlalchemy.orm.Session.{method}", fail)


def test_list_store_failure_is_opaque(client, monkeypatch, caplog):
    _broken_store(monkeypatch, "query")
    with caplog.at_level(logging.ERROR):
        r = client.get("/api/products")
    assert r.status_code == 500
    assert r.json() == {"error": "internal_error", "message": "Internal server error"}
    assert "secret_table_detail" not in r.text
    assert "disk I/O error" in caplog.text


def test_create_store_failure_is_opaque(client, admin_headers, latte, monkeypatch, app):
    _broken_store(monkeypatch, "commit")
    r = client.post("/api/products", json=latte, headers=admin_headers)
    assert r.status_code == 500
    assert r.json()["error"] == "internal_error"

    monkeypatch.undo()
    db = app.state.db.session()
    try:
        assert db.query(Product).count() == 0
    finally:
        db.close()


def test_delete_store_failure_is_opaque(client, admin_headers, create_product, monkeypatch):
    product = create_product()
    _broken_store(monkeypatch, "commit")
    r = client.delete(f"/api/products/{product['id']}", headers=admin_headers)
    assert r.status_code == 500
    assert r.json()["message"] == "Internal server error"
