"""Domain errors raised by the storefront services.

Every error carries a stable ``code`` and an HTTP ``status_code`` so the API
layer can turn it into a structured response without inspecting messages.
"""


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    code = "error"
    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"success": False, "error": self.code, "message": self.message}


class NotFoundError(StorefrontError):
    """Raised when a cart, cart item, order or product is absent."""

    code = "not_found"
    status_code = 404


class ProductNotFoundError(NotFoundError):
    """Raised when a referenced product no longer exists."""

    code = "product_not_found"

    def __init__(self, product_id: int, name: str | None = None):
        self.product_id = product_id
        label = name or f"#{product_id}"
        super().__init__(f"Product {label} no longer exists")


class InsufficientStockError(StorefrontError):
    """Raised when a product has fewer units than requested."""

    code = "insufficient_stock"
    status_code = 409

    def __init__(self, product_name: str, available: int, requested: int):
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Not enough stock for {product_name}. Available: {available}, requested: {requested}"
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update(product=self.product_name, available=self.available, requested=self.requested)
        return data


class EmptyCartError(StorefrontError):
    code = "empty_cart"
    status_code = 400

    def __init__(self):
        super().__init__("Cart is empty")


class ValidationError(StorefrontError):
    """Raised for missing or malformed input."""

    code = "validation_error"
    status_code = 400

    def __init__(self, message: str, fields: list[str] | None = None):
        self.fields = fields or []
        super().__init__(message)

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.fields:
            data["fields"] = self.fields
        return data


class PaymentValidationError(StorefrontError):
    """Raised when card details fail the simulated checks."""

    code = "payment_validation_error"
    status_code = 402


class InvalidStatusError(StorefrontError):
    code = "invalid_status"
    status_code = 400

    def __init__(self, status: str):
        self.status = status
        super().__init__(f"Invalid status: {status}")


class InvalidTransitionError(StorefrontError):
    code = "invalid_transition"
    status_code = 409

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        if target == "cancelled":
            msg = f"Cannot cancel order in current status ({current})"
        else:
            msg = f"Cannot change order status from {current} to {target}"
        super().__init__(msg)


class ConflictError(StorefrontError):
    """Raised when a concurrent operation modified the same record."""

    code = "conflict"
    status_code = 409


class DependencyFailureError(StorefrontError):
    """Raised when the database, payment or lock collaborator is unreachable."""

    code = "dependency_failure"
    status_code = 503


class UnauthorizedError(StorefrontError):
    code = "unauthorized"
    status_code = 401


class ForbiddenError(StorefrontError):
    code = "forbidden"
    status_code = 403
