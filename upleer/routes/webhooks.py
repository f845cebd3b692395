# upleer/routes/webhooks.py
import hashlib
import hmac
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from upleer.core.config import get_webhook_secret
from upleer.dependencies import get_db
from upleer.schemas.webhook import ProductStatusUpdate
from upleer.services.webhook_processor import WebhookProcessor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/webhook", tags=["webhooks"])


async def verify_webhook_signature(request: Request, webhook_secret: str = Depends(get_webhook_secret)):
    """Check X-Webhook-Signature (hex HMAC-SHA256 of the raw body) when a secret is configured."""
    if not webhook_secret:
        return

    signature = request.headers.get("X-Webhook-Signature")
    if not signature:
        raise HTTPException(status_code=401, detail="No signature provided")

    body = await request.body()
    expected_signature = hmac.new(
        webhook_secret.encode(),
        body,
        hashlib.sha256
    ).hexdigest()

    if not hmac.compare_digest(signature, expected_signature):
        raise HTTPException(status_code=401, detail="Invalid signature")


async def read_json(request: Request):
    try:
        return await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Request body must be valid JSON")


@router.post("/sales/batch")
async def sales_batch_webhook(
    request: Request,
    db: AsyncSession = Depends(get_db),
    _: None = Depends(verify_webhook_signature),
):
    """Multi-vendor order from the order workflow: one Sale per author, one SaleItem per line."""
    payload = await read_json(request)
    result = await WebhookProcessor(db).process_batch(payload)

    if result["totalErrors"] and not result["vendors"]:
        return JSONResponse(status_code=400, content=result)
    return result


@router.post("/sales", status_code=201)
async def single_sale_webhook(
    request: Request,
    db: AsyncSession = Depends(get_db),
    _: None = Depends(verify_webhook_signature),
):
    """Single-product sale, no Order or SaleItem rows."""
    payload = await read_json(request)
    return await WebhookProcessor(db).process_single_sale(payload)


@router.patch("/products/{product_id}/status")
async def product_status_webhook(
    product_id: int,
    update: ProductStatusUpdate,
    db: AsyncSession = Depends(get_db),
    _: None = Depends(verify_webhook_signature),
):
    return await WebhookProcessor(db).update_product_status(product_id, update.status, update.public_url)
