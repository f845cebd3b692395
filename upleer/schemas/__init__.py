from .base import BaseSchema, TimestampedSchema
from .product import (
    ProductCreate,
    ProductUpdate,
    ProductRead,
    ProductPage,
    ProductStatusChange,
    PricingPreviewRequest,
    UserRead,
    NuvemshopMappingRead,
)
from .sale import SaleRead, SaleDetail, SaleItemRead, OrderRead
from .webhook import (
    VendorEntry,
    ProductLine,
    Endereco,
    SingleSalePayload,
    ProductStatusUpdate,
    OrderStatusUpdate,
)
from .integration import (
    IntegrationCreate,
    IntegrationUpdate,
    IntegrationRead,
    EndpointCreate,
    EndpointRead,
    EndpointTestRequest,
    ApiLogRead,
)
from .user import (
    UserProfileRead,
    ProfileUpdate,
    AccountSettings,
    BankingSettings,
    NotificationSettings,
)
