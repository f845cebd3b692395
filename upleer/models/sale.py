# upleer/models/sale.py

from sqlalchemy import Column, Integer, String, ForeignKey, TIMESTAMP, UniqueConstraint, Index, func
from sqlalchemy.orm import relationship

from upleer.database import Base
from upleer.core.enums import PaymentStatus
from upleer.models.base import Money, utcnow


class Sale(Base):
    """
    One author's share of an order. A multi-vendor order produces one Sale per
    author, all sharing the same order_id. `product_id` points at the first
    product line; the full list lives in sale_items.
    """

    __tablename__ = "sales"
    __table_args__ = (
        UniqueConstraint("author_id", "vendor_order_number", name="uq_sales_author_vendor_order_number"),
        Index("idx_sales_author_created", "author_id", "created_at"),
    )

    id = Column(Integer, primary_key=True)

    order_id = Column(String, ForeignKey("orders.id"), nullable=True, index=True)
    author_id = Column(String, ForeignKey("users.id"), nullable=True, index=True)
    vendor_order_number = Column(Integer, nullable=False, default=1)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)

    # sha256(order_id:author_id) for webhook-created sales, NULL for legacy rows
    idempotency_key = Column(String(64), unique=True, nullable=True)

    buyer_email = Column(String)
    buyer_name = Column(String)
    buyer_phone = Column(String)
    buyer_cpf = Column(String)
    buyer_address = Column(String)
    buyer_city = Column(String)
    buyer_state = Column(String)
    buyer_zip_code = Column(String)

    sale_price = Column(Money(), nullable=False)
    commission = Column(Money(), nullable=False)
    author_earnings = Column(Money(), nullable=False)

    order_date = Column(TIMESTAMP(timezone=False))
    payment_status = Column(String, default=PaymentStatus.PENDENTE.value)
    payment_method = Column(String)
    installments = Column(Integer, default=1)
    discount_coupon = Column(String)
    discount_amount = Column(Money(), default=0)
    shipping_cost = Column(Money(), default=0)
    shipping_carrier = Column(String)
    delivery_days = Column(Integer)
    quantity = Column(Integer, default=1)

    created_at = Column(TIMESTAMP(timezone=False), default=utcnow, server_default=func.now())

    order = relationship("Order", back_populates="sales")
    author = relationship("User", back_populates="sales")
    product = relationship("Product", back_populates="sales")
    items = relationship("SaleItem", back_populates="sale", order_by="SaleItem.id")

    def __repr__(self) -> str:
        return (
            f"<Sale id={self.id} order={self.order_id} author={self.author_id} "
            f"vendor_order_number={self.vendor_order_number} sale_price={self.sale_price}>"
        )
