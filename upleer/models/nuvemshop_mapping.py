# upleer/models/nuvemshop_mapping.py
# The external N8N workflow reads and writes this table directly. Column names
# must not change.
from sqlalchemy import Column, Integer, String, TIMESTAMP, func

from upleer.database import Base
from upleer.models.base import utcnow


class ProdutoNuvemshopMapping(Base):
    __tablename__ = "produto_nuvemshop_mapping"

    id = Column(Integer, primary_key=True)
    id_produto_interno = Column(String, nullable=False)
    id_autor = Column(String, nullable=False)
    produto_id_nuvemshop = Column(String, nullable=False)
    variant_id_nuvemshop = Column(String, nullable=False)
    sku = Column(String)
    created_at = Column(TIMESTAMP(timezone=False), default=utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=False), default=utcnow, server_default=func.now())
