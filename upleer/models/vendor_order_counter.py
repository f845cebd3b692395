# upleer/models/vendor_order_counter.py
from sqlalchemy import Column, Integer, String, ForeignKey

from upleer.database import Base


class VendorOrderCounter(Base):
    """Last vendor order number handed out per author. Locked row-by-row."""
    __tablename__ = "vendor_order_counters"

    author_id = Column(String, ForeignKey("users.id"), primary_key=True)
    last_number = Column(Integer, nullable=False, default=0)
