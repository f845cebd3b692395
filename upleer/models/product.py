"""
Product model: one PDF booklet ("apostila") uploaded by an author.

Pricing columns come in two generations. `base_cost`, `sale_price` and
`margin_percent` exist on every row; `author_earnings`, `platform_commission`,
`fixed_fee`, `printing_cost_per_page` and `commission_rate` were added later and
are NULL on rows created before them until the `backfill_product_financials`
data migration fills them in.
"""

from sqlalchemy import Column, Integer, String, Text, ForeignKey, TIMESTAMP, Enum, Index, func
from sqlalchemy.orm import relationship

from upleer.database import Base
from upleer.core.enums import ProductStatus
from upleer.models.base import Money, utcnow


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        Index("idx_products_author_status", "author_id", "status"),
    )

    id = Column(Integer, primary_key=True)
    author_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)

    # Catalogue information
    title = Column(String, nullable=False)
    description = Column(Text)
    isbn = Column(String)
    author = Column(String, nullable=False)  # author name as printed on the cover
    co_authors = Column(String)
    genre = Column(String, nullable=False)
    language = Column(String, nullable=False, default="português")
    target_audience = Column(String)

    # Blob storage pointers, owned elsewhere
    pdf_url = Column(String, nullable=False)
    cover_image_url = Column(String)
    public_url = Column(String)

    page_count = Column(Integer, nullable=False)

    # Pricing
    base_cost = Column(Money(), nullable=False)
    sale_price = Column(Money(), nullable=False)
    margin_percent = Column(Integer, nullable=False, default=150)
    author_earnings = Column(Money(), nullable=True)
    platform_commission = Column(Money(), nullable=True)
    fixed_fee = Column(Money(), nullable=True)
    printing_cost_per_page = Column(Money(), nullable=True)
    commission_rate = Column(Money(), nullable=True)

    status = Column(
        Enum(
            ProductStatus,
            name="productstatus",
            native_enum=False,
            length=20,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=ProductStatus.PENDING,
    )

    created_at = Column(TIMESTAMP(timezone=False), default=utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=False), default=utcnow, onupdate=utcnow, server_default=func.now())

    owner = relationship("User", back_populates="products")
    sales = relationship("Sale", back_populates="product")

    @property
    def has_financials(self) -> bool:
        return self.author_earnings is not None and self.platform_commission is not None

    def __repr__(self) -> str:
        return f"<Product id={self.id} title={self.title!r} author_id={self.author_id} status={self.status}>"
