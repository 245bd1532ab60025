from typing import Any, Dict, Optional


class CatalogError(Exception):
    """Base class for errors that are rendered to API callers."""

    kind = "internal_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.kind, "message": self.message}


class ValidationError(CatalogError):
    """Client-supplied data violates a field constraint."""

    kind = "validation_error"
    status_code = 400

    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or f"{field} is required")
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["field"] = self.field
        return body


class UnauthorizedError(CatalogError):
    kind = "unauthorized"
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class NotFoundError(CatalogError):
    kind = "not_found"
    status_code = 404

    def __init__(self, message: str = "Product not found"):
        super().__init__(message)


class StoreError(CatalogError):
    """Persistence failure. The message shown to callers is always opaque."""

    kind = "internal_error"
    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
