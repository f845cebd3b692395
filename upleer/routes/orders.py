# upleer/routes/orders.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from upleer.dependencies import get_db
from upleer.routes.webhooks import verify_webhook_signature
from upleer.schemas.webhook import OrderStatusUpdate
from upleer.services.webhook_processor import WebhookProcessor

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.patch("/{order_id}/status")
async def update_order_status(
    order_id: str,
    update: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
    _: None = Depends(verify_webhook_signature),
):
    """Payment/shipping status pushed by the order workflow."""
    return await WebhookProcessor(db).update_order_status(order_id, update)
