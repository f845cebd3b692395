# upleer/schemas/sale.py
from datetime import datetime
from typing import Optional, List

from pydantic import computed_field

from upleer.schemas.base import BaseSchema
from upleer.services.vendor_numbering import format_vendor_order_number


class SaleItemRead(BaseSchema):
    id: int
    product_id: str
    product_name: str
    price: float
    quantity: int
    foto_produto: Optional[str] = None


class OrderRead(BaseSchema):
    id: str
    cliente_nome: str
    cliente_email: str
    cliente_cpf: Optional[str] = None
    cliente_telefone: Optional[str] = None
    endereco_rua: Optional[str] = None
    endereco_numero: Optional[str] = None
    endereco_bairro: Optional[str] = None
    endereco_cidade: Optional[str] = None
    endereco_estado: Optional[str] = None
    endereco_cep: Optional[str] = None
    endereco_complemento: Optional[str] = None
    valor_total: Optional[float] = None
    forma_pagamento: Optional[str] = None
    bandeira_cartao: Optional[str] = None
    parcelas: Optional[str] = None
    status_pagamento: Optional[str] = None
    status_envio: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None


class SaleRead(BaseSchema):
    id: int
    order_id: Optional[str] = None
    author_id: Optional[str] = None
    product_id: int
    product_title: Optional[str] = None
    vendor_order_number: int
    buyer_name: Optional[str] = None
    buyer_email: Optional[str] = None
    buyer_phone: Optional[str] = None
    buyer_city: Optional[str] = None
    buyer_state: Optional[str] = None
    sale_price: float
    commission: float
    author_earnings: float
    quantity: Optional[int] = None
    payment_status: Optional[str] = None
    payment_method: Optional[str] = None
    installments: Optional[int] = None
    order_date: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @computed_field
    @property
    def vendor_order_label(self) -> str:
        return format_vendor_order_number(self.vendor_order_number)


class SaleDetail(SaleRead):
    buyer_cpf: Optional[str] = None
    buyer_address: Optional[str] = None
    buyer_zip_code: Optional[str] = None
    discount_coupon: Optional[str] = None
    shipping_carrier: Optional[str] = None
    items: List[SaleItemRead] = []
    order: Optional[OrderRead] = None
