class BaseServiceError(Exception):
    """Base exception for all service-related errors."""
    pass

class ValidationError(BaseServiceError):
    """Raised when data validation fails."""
    pass

class PricingError(ValidationError):
    """Raised when a price, rate or page count is negative or not a number."""
    pass

class PayloadShapeError(ValidationError):
    """Raised when a batch webhook payload is in none of the accepted shapes."""
    pass

class InvalidStatusTransition(ValidationError):
    """Raised when a product status change is not allowed from its current status."""

    def __init__(self, current, requested):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change status from '{current}' to '{requested}'")

class AuthorMismatchError(ValidationError):
    """Raised when a webhook names an author who does not own the product."""
    pass

class NotFoundError(BaseServiceError):
    """Base exception for missing records."""
    pass

class ProductNotFoundError(NotFoundError):
    """Raised when product is not found."""
    pass

class OrderNotFoundError(NotFoundError):
    """Raised when an order is not found."""
    pass

class SaleNotFoundError(NotFoundError):
    """Raised when a sale is not found."""
    pass

class IntegrationNotFoundError(NotFoundError):
    """Raised when an API integration or endpoint is not found."""
    pass

class DatabaseError(BaseServiceError):
    """Exception raised for database-related errors."""
    pass

class EndpointTestError(BaseServiceError):
    """Raised when an outbound endpoint test cannot complete."""
    pass

class PermissionDeniedError(BaseServiceError):
    """Raised when a user touches a record they do not own."""
    pass
