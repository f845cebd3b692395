"""
Shared enums and constants used across the application.
"""

from enum import Enum


class ProductStatus(str, Enum):
    """Product lifecycle. Stored as the lowercase value."""
    PENDING = "pending"
    APPROVED = "approved"
    PUBLISHED = "published"
    REJECTED = "rejected"
    ARCHIVED = "archived"

    def can_transition_to(self, target: "ProductStatus") -> bool:
        if target == self:
            return True
        return target in PRODUCT_STATUS_TRANSITIONS[self]

    @property
    def is_active(self) -> bool:
        return self in (ProductStatus.APPROVED, ProductStatus.PUBLISHED)


PRODUCT_STATUS_TRANSITIONS = {
    ProductStatus.PENDING: {
        ProductStatus.APPROVED,
        ProductStatus.PUBLISHED,
        ProductStatus.REJECTED,
        ProductStatus.ARCHIVED,
    },
    ProductStatus.APPROVED: {
        ProductStatus.PUBLISHED,
        ProductStatus.REJECTED,
        ProductStatus.ARCHIVED,
    },
    ProductStatus.PUBLISHED: {ProductStatus.ARCHIVED},
    ProductStatus.REJECTED: {ProductStatus.PENDING, ProductStatus.ARCHIVED},
    ProductStatus.ARCHIVED: {ProductStatus.PENDING, ProductStatus.PUBLISHED},
}

# The external workflow may only move products between these
WEBHOOK_PRODUCT_STATUSES = (
    ProductStatus.PENDING,
    ProductStatus.PUBLISHED,
    ProductStatus.REJECTED,
    ProductStatus.ARCHIVED,
)


class UserRole(str, Enum):
    AUTHOR = "author"
    ADMIN = "admin"


class PaymentStatus(str, Enum):
    """Sale payment status, in the vocabulary the author dashboard shows."""
    PENDENTE = "pendente"
    APROVADO = "aprovado"
    DEVOLVIDO = "devolvido"

    @classmethod
    def from_webhook(cls, value) -> "PaymentStatus":
        mapping = {
            "pending": cls.PENDENTE,
            "pendente": cls.PENDENTE,
            "approved": cls.APROVADO,
            "paid": cls.APROVADO,
            "aprovado": cls.APROVADO,
            "refunded": cls.DEVOLVIDO,
            "devolvido": cls.DEVOLVIDO,
        }
        return mapping.get(str(value or "").strip().lower(), cls.PENDENTE)


class PaymentMethod(str, Enum):
    PIX = "pix"
    CARTAO_CREDITO = "cartao_credito"
    BOLETO = "boleto"

    @classmethod
    def from_webhook(cls, value) -> "PaymentMethod":
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.PIX


class OrderStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class IntegrationAuthType(str, Enum):
    API_KEY = "api_key"
    OAUTH = "oauth"
    BEARER = "bearer"
    BASIC = "basic"
