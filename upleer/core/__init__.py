"""
Core module exports.
"""
from .enums import (
    ProductStatus,
    UserRole,
    PaymentStatus,
    PaymentMethod,
)

from .exceptions import (
    BaseServiceError,
    ValidationError,
    PricingError,
    PayloadShapeError,
    InvalidStatusTransition,
    AuthorMismatchError,
    NotFoundError,
    ProductNotFoundError,
    OrderNotFoundError,
    SaleNotFoundError,
    IntegrationNotFoundError,
    DatabaseError,
    EndpointTestError,
    PermissionDeniedError,
)
