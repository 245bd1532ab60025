import json
import logging
from typing import List
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from menucatalog.database.session import get_db
from menucatalog.models.user import UserRole
from menucatalog.schemas.product import ProductInDB, DeleteAck
from menucatalog.services.catalog import CatalogService, validate_product_payload
from menucatalog.core.exceptions import ValidationError
from menucatalog.api.endpoints.auth import check_user_role

logger = logging.getLogger(__name__)

router = APIRouter()

require_admin = check_user_role([UserRole.ADMIN])


@router.get("", response_model=List[ProductInDB])
async def get_products(db: Session = Depends(get_db)):
    """Get all products, newest first."""
    return CatalogService(db).list_products()


@router.get("/categories", response_model=List[str])
async def get_categories(db: Session = Depends(get_db)):
    """Get the distinct categories on the menu, ordered by their newest product."""
    return CatalogService(db).list_categories()


@router.post("", response_model=ProductInDB)
async def create_product(
    request: Request,
    current_role: str = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Create a new product (admin only)."""
    # The body is read only after the session check has passed
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("body", "Request body must be valid JSON")

    product = validate_product_payload(data)
    return CatalogService(db).create_product(product)


@router.delete("", response_model=DeleteAck)
async def delete_product_without_id(current_role: str = Depends(require_admin)):
    raise ValidationError("id", "Product ID is required")


@router.delete("/{product_id}", response_model=DeleteAck)
async def delete_product(
    product_id: str,
    current_role: str = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete a product (admin only). Deleting the same id twice is a 404."""
    CatalogService(db).delete_product(product_id)
    return DeleteAck(message="Product deleted successfully", id=product_id)
