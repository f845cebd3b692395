# upleer/schemas/product.py
from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from pydantic import ConfigDict, Field, field_validator

from upleer.core.enums import ProductStatus
from upleer.schemas.base import BaseSchema, TimestampedSchema


class ProductBase(BaseSchema):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    isbn: Optional[str] = None
    author: str = Field(min_length=1)
    co_authors: Optional[str] = None
    genre: str = Field(min_length=1)
    language: str = "português"
    target_audience: Optional[str] = None


class ProductCreate(ProductBase):
    pdf_url: str = Field(min_length=1)
    cover_image_url: Optional[str] = None
    page_count: int = Field(ge=0)
    author_earnings: Decimal = Field(ge=0)


class ProductUpdate(BaseSchema):
    title: Optional[str] = None
    description: Optional[str] = None
    isbn: Optional[str] = None
    author_earnings: Optional[Decimal] = Field(default=None, ge=0)


class PricingPreviewRequest(BaseSchema):
    page_count: int = Field(ge=0)
    author_earnings: Decimal = Field(ge=0)
    fixed_fee: Optional[Decimal] = Field(default=None, ge=0)
    printing_cost_per_page: Optional[Decimal] = Field(default=None, ge=0)
    commission_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)


class ProductStatusChange(BaseSchema):
    status: ProductStatus
    public_url: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _lower(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class ProductRead(TimestampedSchema):
    id: int
    author_id: str
    title: str
    description: Optional[str] = None
    isbn: Optional[str] = None
    author: str
    co_authors: Optional[str] = None
    genre: str
    language: str
    target_audience: Optional[str] = None
    pdf_url: str
    cover_image_url: Optional[str] = None
    public_url: Optional[str] = None
    page_count: int
    base_cost: float
    sale_price: float
    margin_percent: int
    author_earnings: Optional[float] = None
    platform_commission: Optional[float] = None
    fixed_fee: Optional[float] = None
    printing_cost_per_page: Optional[float] = None
    commission_rate: Optional[float] = None
    status: ProductStatus


class ProductPage(BaseSchema):
    items: List[ProductRead]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_prev: bool


class UserRead(BaseSchema):
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str
    created_at: Optional[datetime] = None


class NuvemshopMappingRead(BaseSchema):
    """Store listing for a product, as written by the order workflow. Keys keep the table's names."""
    model_config = ConfigDict(alias_generator=None)

    id: int
    id_produto_interno: str
    id_autor: str
    produto_id_nuvemshop: str
    variant_id_nuvemshop: str
    sku: Optional[str] = None
    created_at: Optional[datetime] = None
