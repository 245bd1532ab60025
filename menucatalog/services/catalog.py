import logging
import math
import uuid
from typing import Any, Dict, List

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from menucatalog.core.exceptions import NotFoundError, StoreError, ValidationError
from menucatalog.models.product import Product, NAME_MAX_LENGTH, DESCRIPTION_MAX_LENGTH
from menucatalog.schemas.product import ProductCreate

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "description", "price", "image", "category")
TEXT_FIELDS = ("name", "description", "image", "category")
MAX_LENGTHS = {
    "name": NAME_MAX_LENGTH,
    "description": DESCRIPTION_MAX_LENGTH,
}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_price(value: Any) -> float:
    """Accept ints, floats and numeric strings; reject booleans, NaN and infinities."""
    if isinstance(value, bool):
        raise ValidationError("price", "Price must be a positive number")

    if not isinstance(value, (int, float, str)):
        raise ValidationError("price", "Price must be a positive number")

    try:
        price = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        raise ValidationError("price", "Price must be a positive number")

    if not math.isfinite(price) or price <= 0:
        raise ValidationError("price", "Price must be a positive number")
    return price


def validate_product_payload(data: Any) -> ProductCreate:
    """
    Check a create-product payload field by field.

    Fields are checked in a fixed order and the first failure is raised, so
    the error always names a single field. Keys outside the product fields
    are ignored. Text values are stored exactly as submitted; surrounding
    whitespace only matters for the blank check.

    Raises:
        ValidationError: naming the first offending field
    """
    if not isinstance(data, dict):
        raise ValidationError("body", "Request body must be a JSON object")

    for field in REQUIRED_FIELDS:
        if _is_blank(data.get(field)):
            raise ValidationError(field)

    price = _parse_price(data["price"])

    cleaned: Dict[str, Any] = {"price": price}
    for field in TEXT_FIELDS:
        value = data[field]
        if not isinstance(value, str):
            raise ValidationError(field, f"{field} must be a string")
        max_length = MAX_LENGTHS.get(field)
        if max_length is not None and len(value) > max_length:
            raise ValidationError(
                field, f"{field.capitalize()} cannot be more than {max_length} characters"
            )
        cleaned[field] = value

    try:
        return ProductCreate(**cleaned)
    except PydanticValidationError as e:
        error = e.errors()[0]
        field = str(error["loc"][0]) if error.get("loc") else "body"
        raise ValidationError(field, f"{field}: {error.get('msg', 'invalid value')}")


class CatalogService:
    """Operations over the products table. One instance per request session."""

    def __init__(self, db: Session):
        self.db = db

    def list_products(self) -> List[Product]:
        """All products, newest first."""
        try:
            return (
                self.db.query(Product)
                .order_by(Product.created_at.desc(), Product.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            self._store_failure("list products", e)

    def list_categories(self) -> List[str]:
        """
        Distinct categories of the current products, derived on every call.

        Categories come in the order they first appear in the newest-first
        product list, i.e. by the creation time of their newest product.
        """
        newest = func.max(Product.created_at)
        try:
            rows = (
                self.db.query(Product.category, newest)
                .group_by(Product.category)
                .order_by(newest.desc(), Product.category)
                .all()
            )
        except SQLAlchemyError as e:
            self._store_failure("list categories", e)
        return [row[0] for row in rows]

    def create_product(self, product: ProductCreate) -> Product:
        db_product = Product(
            id=uuid.uuid4().hex,
            name=product.name,
            description=product.description,
            price=product.price,
            image=product.image,
            category=product.category,
        )

        try:
            self.db.add(db_product)
            self.db.commit()
            self.db.refresh(db_product)
        except SQLAlchemyError as e:
            self._store_failure("create product", e)

        logger.info(f"Product {db_product.id} created in category '{db_product.category}'")
        return db_product

    def delete_product(self, product_id: str) -> None:
        """
        Delete a product by id.

        A single DELETE statement decides the outcome, so when two callers
        race on the same id only one of them sees a deleted row.

        Raises:
            ValidationError: if the id is blank
            NotFoundError: if no product has this id
        """
        if _is_blank(product_id):
            raise ValidationError("id", "Product ID is required")

        try:
            deleted = (
                self.db.query(Product)
                .filter(Product.id == product_id)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self._store_failure("delete product", e)

        if not deleted:
            raise NotFoundError()

        logger.info(f"Product {product_id} deleted")

    def _store_failure(self, action: str, error: SQLAlchemyError):
        self.db.rollback()
        logger.exception(f"Failed to {action}: {str(error)}")
        raise StoreError() from error
