from .user import User
from .product import Product, ProductStatus
from .order import Order
from .sale import Sale
from .sale_item import SaleItem
from .vendor_order_counter import VendorOrderCounter
from .session import Session
from .nuvemshop_mapping import ProdutoNuvemshopMapping
from .api_integration import ApiIntegration, ApiEndpoint, ApiLog

# This ensures all models are registered with SQLAlchemy
__all__ = [
    'User',
    'Product',
    'ProductStatus',
    'Order',
    'Sale',
    'SaleItem',
    'VendorOrderCounter',
    'Session',
    'ProdutoNuvemshopMapping',
    'ApiIntegration',
    'ApiEndpoint',
    'ApiLog',
]
