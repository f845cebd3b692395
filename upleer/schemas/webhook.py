"""
Payloads sent by the external order workflow.

Keys are the workflow's own (Portuguese, snake_case) and are accepted as-is.
Ids may arrive as numbers or strings and are normalised to strings; prices may
use a decimal comma.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from upleer.core.exceptions import PricingError
from upleer.services.pricing import to_money


def _as_text(value):
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _as_money(value, field):
    try:
        return to_money(value, field)
    except PricingError as e:
        raise ValueError(str(e))


class WebhookModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Endereco(WebhookModel):
    rua: Optional[str] = None
    numero: Optional[str] = None
    bairro: Optional[str] = None
    cidade: Optional[str] = None
    estado: Optional[str] = None
    cep: Optional[str] = None
    complemento: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _text(cls, v):
        return _as_text(v)


class ProductLine(WebhookModel):
    id_produto_interno: str
    nome: Optional[str] = None
    preco: Decimal
    quantidade: int = Field(default=1, ge=1)
    foto_produto: Optional[str] = None

    @field_validator("id_produto_interno", mode="before")
    @classmethod
    def _product_id(cls, v):
        text = _as_text(v)
        if not text:
            raise ValueError("id_produto_interno is required")
        return text

    @field_validator("preco", mode="before")
    @classmethod
    def _price(cls, v):
        return _as_money(v, "preco")

    @property
    def line_total(self) -> Decimal:
        return self.preco * self.quantidade


class VendorEntry(WebhookModel):
    """One author's part of an external order."""
    order_id: str
    cliente_nome: str
    cliente_email: str
    cliente_cpf: Optional[str] = None
    cliente_telefone: Optional[str] = None
    endereco: Optional[Endereco] = None
    forma_pagamento: Optional[str] = None
    bandeira_cartao: Optional[str] = None
    parcelas: Optional[str] = None
    status_pagamento: Optional[str] = None
    status_envio: Optional[str] = None
    id_autor: str
    produtos: List[ProductLine] = Field(min_length=1)

    @field_validator("order_id", "id_autor", "parcelas", "cliente_cpf", "cliente_telefone", mode="before")
    @classmethod
    def _ids(cls, v):
        return _as_text(v)

    @field_validator("order_id", "id_autor")
    @classmethod
    def _not_blank(cls, v):
        if not v:
            raise ValueError("must not be empty")
        return v

    @property
    def vendor_total(self) -> Decimal:
        return sum((line.line_total for line in self.produtos), Decimal("0"))

    @property
    def total_quantity(self) -> int:
        return sum(line.quantidade for line in self.produtos)

    @property
    def installments(self) -> int:
        try:
            return max(int(self.parcelas or 1), 1)
        except ValueError:
            return 1


class SingleSalePayload(BaseModel):
    """Legacy single-product sale, camelCase keys."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    product_id: int = Field(alias="productId")
    buyer_name: str = Field(alias="buyerName", min_length=1)
    buyer_email: str = Field(alias="buyerEmail", min_length=1)
    sale_price: Decimal = Field(alias="salePrice")
    buyer_phone: Optional[str] = Field(default=None, alias="buyerPhone")
    buyer_cpf: Optional[str] = Field(default=None, alias="buyerCpf")
    buyer_address: Optional[str] = Field(default=None, alias="buyerAddress")
    buyer_city: Optional[str] = Field(default=None, alias="buyerCity")
    buyer_state: Optional[str] = Field(default=None, alias="buyerState")
    buyer_zip_code: Optional[str] = Field(default=None, alias="buyerZipCode")
    payment_method: Optional[str] = Field(default=None, alias="paymentMethod")
    payment_status: Optional[str] = Field(default=None, alias="paymentStatus")
    installments: int = Field(default=1, ge=1)
    quantity: int = Field(default=1, ge=1)
    order_date: Optional[datetime] = Field(default=None, alias="orderDate")
    discount_coupon: Optional[str] = Field(default=None, alias="discountCoupon")
    discount_amount: Decimal = Field(default=Decimal("0"), alias="discountAmount")
    shipping_cost: Decimal = Field(default=Decimal("0"), alias="shippingCost")
    shipping_carrier: Optional[str] = Field(default=None, alias="shippingCarrier")
    delivery_days: int = Field(default=0, ge=0, alias="deliveryDays")

    @field_validator("sale_price", mode="before")
    @classmethod
    def _price(cls, v):
        return _as_money(v, "salePrice")

    @field_validator("discount_amount", "shipping_cost", mode="before")
    @classmethod
    def _extras(cls, v, info):
        if v is None or (isinstance(v, str) and not v.strip()):
            return Decimal("0")
        return _as_money(v, info.field_name)

    @field_validator("order_date")
    @classmethod
    def _naive_utc(cls, v):
        if v is not None and v.tzinfo is not None:
            v = v.astimezone(timezone.utc).replace(tzinfo=None)
        return v

    @field_validator("delivery_days", mode="before")
    @classmethod
    def _days(cls, v):
        return 0 if v is None or v == "" else v

    @field_validator("buyer_phone", "buyer_cpf", "buyer_zip_code", mode="before")
    @classmethod
    def _text(cls, v):
        return _as_text(v)


class ProductStatusUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    status: str
    public_url: Optional[str] = Field(default=None, alias="publicUrl")


class OrderStatusUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: Optional[str] = None
    status_pagamento: Optional[str] = None
    status_envio: Optional[str] = None

    def changes(self) -> dict:
        return {k: v for k, v in self.model_dump().items() if v is not None}
