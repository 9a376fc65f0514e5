"""Error hierarchy shared by services, repositories and routers.

Every service failure carries a stable code and the HTTP status the API
answers with. Routers never build error responses by hand; the global
handlers in webapp.routers.errors turn these into JSON envelopes.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base exception for all webapp business and storage errors."""

    def __init__(self, message: str, code: str, http_status: int = 500):
        super().__init__(message)
        self.message = message
        self.code = code
        self.http_status = http_status

    def to_response(self) -> dict:
        return {"error": {"code": self.code, "message": self.message}}


# --- client errors -----------------------------------------------------------

class ValidationError(ServiceError):
    """Malformed or missing input."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, "VALIDATION_ERROR", 400)
        self.field = field


class ConflictError(ServiceError):
    """Uniqueness violation (email, SKU or storage key)."""

    def __init__(self, message: str):
        super().__init__(message, "CONFLICT", 400)


class UnauthorizedError(ServiceError):
    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, "UNAUTHORIZED", 401)


class ForbiddenError(ServiceError):
    def __init__(self, message: str = "Access denied", code: str = "FORBIDDEN"):
        super().__init__(message, code, 403)


class EmailNotVerifiedError(ForbiddenError):
    def __init__(self, message: str = "Email not verified. Please verify your email address first."):
        super().__init__(message, "EMAIL_NOT_VERIFIED")


class NotFoundError(ServiceError):
    def __init__(self, resource_type: str, resource_id: object):
        super().__init__(f"{resource_type} '{resource_id}' not found", "NOT_FOUND", 404)
        self.resource_type = resource_type
        self.resource_id = resource_id


class ProductNotOwnedError(NotFoundError):
    """No product matches (id, owner): absence and foreign ownership are not told apart.

    The API answers this outcome with 403, as the product endpoints always have.
    """

    def __init__(self, product_id: object):
        super().__init__("Product", product_id)
        self.message = f"Product '{product_id}' not found or access denied"
        self.code = "PRODUCT_NOT_FOUND_OR_DENIED"
        self.http_status = 403


# --- server errors -----------------------------------------------------------

class InternalError(ServiceError):
    """Unexpected store or object-store failure."""

    def __init__(self, message: str = "An unexpected error occurred", operation: str | None = None):
        super().__init__(message, "INTERNAL_ERROR", 500)
        self.operation = operation


class ObjectStoreError(InternalError):
    def __init__(self, message: str, key: str | None = None):
        super().__init__(message, "object_store")
        self.key = key


class NotificationError(ServiceError):
    """Verification message could not be published."""

    def __init__(self, message: str):
        super().__init__(message, "NOTIFICATION_ERROR", 502)
