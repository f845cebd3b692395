# upleer/models/sale_item.py
from sqlalchemy import Column, Integer, String, ForeignKey, TIMESTAMP, func
from sqlalchemy.orm import relationship

from upleer.database import Base
from upleer.models.base import Money, utcnow


class SaleItem(Base):
    """One product line inside a Sale. `price` is the unit price."""
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False, index=True)
    product_id = Column(String, nullable=False)
    product_name = Column(String, nullable=False)
    price = Column(Money(), nullable=False)
    quantity = Column(Integer, nullable=False)
    foto_produto = Column(String)

    created_at = Column(TIMESTAMP(timezone=False), default=utcnow, server_default=func.now())

    sale = relationship("Sale", back_populates="items")
