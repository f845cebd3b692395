# upleer/models/order.py
from sqlalchemy import Column, String, TIMESTAMP, func
from sqlalchemy.orm import relationship

from upleer.database import Base
from upleer.core.enums import OrderStatus
from upleer.models.base import Money, utcnow


class Order(Base):
    """
    One checkout in the external store. The id is the store's order id (or a
    synthesized LEGACY_<saleId>_<timestamp> for backfilled sales). A single
    order can span several authors, each getting their own Sale row.
    """
    __tablename__ = "orders"

    id = Column(String, primary_key=True)
    cliente_nome = Column(String, nullable=False)
    cliente_email = Column(String, nullable=False)
    cliente_cpf = Column(String)
    cliente_telefone = Column(String)

    endereco_rua = Column(String)
    endereco_numero = Column(String)
    endereco_bairro = Column(String)
    endereco_cidade = Column(String)
    endereco_estado = Column(String)
    endereco_cep = Column(String)
    endereco_complemento = Column(String)

    valor_total = Column(Money(), nullable=True)

    forma_pagamento = Column(String)
    bandeira_cartao = Column(String)
    parcelas = Column(String)
    status_pagamento = Column(String)
    status_envio = Column(String)
    status = Column(String, default=OrderStatus.PENDING.value)

    created_at = Column(TIMESTAMP(timezone=False), default=utcnow, server_default=func.now())

    sales = relationship("Sale", back_populates="order")

    def __repr__(self) -> str:
        return f"<Order id={self.id} status={self.status} valor_total={self.valor_total}>"
