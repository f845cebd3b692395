"""
Webhook processing for orders coming from the external order workflow.

The workflow posts one external order split by author. Each author's part (a
"vendor entry") becomes one Sale with one SaleItem per product line, all under
a shared Order row. Entries are processed independently, each in its own
transaction: a bad entry is reported back and rolled back without touching the
others.

Resending a payload is safe. Every Sale carries an idempotency key derived from
(order_id, author id), so an entry that was already stored is reported as a
duplicate instead of being written twice.
"""

import hashlib
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from upleer.core.enums import (
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    WEBHOOK_PRODUCT_STATUSES,
)
from upleer.core.exceptions import (
    AuthorMismatchError,
    BaseServiceError,
    OrderNotFoundError,
    PayloadShapeError,
    ProductNotFoundError,
    ValidationError,
)
from upleer.core.utils import insert_for
from upleer.models.order import Order
from upleer.models.product import Product
from upleer.models.sale import Sale
from upleer.models.sale_item import SaleItem
from upleer.models.base import utcnow
from upleer.schemas.webhook import OrderStatusUpdate, SingleSalePayload, VendorEntry
from upleer.services.pricing import get_webhook_commission_rate, quantize, split_commission
from upleer.services.product_service import ProductService, parse_status
from upleer.services.vendor_numbering import format_vendor_order_number, next_vendor_order_number

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _is_wrapper(item: Any) -> bool:
    return isinstance(item, dict) and isinstance(item.get("data"), list) and "id_autor" not in item


def normalize_batch_payload(payload: Any) -> List[Dict[str, Any]]:
    """
    Reduce every payload shape the workflow has ever sent to a flat list of
    vendor entries.

    Accepted:
        [entry, entry, ...]
        {"data": [entry, ...]}
        [{"data": [entry, ...]}]   (one or more wrappers)
    """
    if isinstance(payload, dict):
        if not _is_wrapper(payload):
            raise PayloadShapeError("Object payloads must carry a 'data' list of vendor entries")
        entries = payload["data"]
    elif isinstance(payload, list):
        if payload and all(_is_wrapper(item) for item in payload):
            entries = [entry for wrapper in payload for entry in wrapper["data"]]
        else:
            entries = payload
    else:
        raise PayloadShapeError(f"Unsupported payload type: {type(payload).__name__}")

    if not entries:
        raise PayloadShapeError("Payload contains no vendor entries")
    if not all(isinstance(entry, dict) for entry in entries):
        raise PayloadShapeError("Every vendor entry must be a JSON object")
    return list(entries)


def idempotency_key(order_id: str, author_id: str) -> str:
    return hashlib.sha256(f"{order_id}:{author_id}".encode("utf-8")).hexdigest()


def describe_validation_error(error: PydanticValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item.get("loc", ())) or "payload"
        parts.append(f"{location}: {item.get('msg')}")
    return "; ".join(parts)


def _address_line(entry: VendorEntry) -> Optional[str]:
    if not entry.endereco:
        return None
    parts = [entry.endereco.rua, entry.endereco.numero, entry.endereco.complemento, entry.endereco.bairro]
    line = ", ".join(p for p in parts if p)
    return line or None


class WebhookProcessor:
    """Writes webhook payloads into orders, sales and sale_items."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------
    # Batch (multi-vendor) orders
    # ------------------------------------------------------------------

    async def process_batch(self, payload: Any) -> Dict[str, Any]:
        """
        Process one multi-vendor order.

        Raises PayloadShapeError when the payload is in no accepted shape.
        Per-entry problems never raise; they end up in the "errors" list.
        """
        raw_entries = normalize_batch_payload(payload)

        parsed: List[Tuple[Dict[str, Any], Optional[VendorEntry], Optional[str]]] = []
        positions: Dict[Tuple[str, str], int] = {}
        order_totals: Dict[str, Decimal] = {}
        for raw in raw_entries:
            try:
                entry = VendorEntry.model_validate(raw)
            except PydanticValidationError as e:
                parsed.append((raw, None, describe_validation_error(e)))
                continue
            order_totals[entry.order_id] = order_totals.get(entry.order_id, ZERO) + entry.vendor_total

            # One sale per (order, author): later entries for the same author add their lines to the first
            key = (entry.order_id, entry.id_autor)
            if key in positions:
                index = positions[key]
                first_raw, first, _ = parsed[index]
                merged = first.model_copy(update={"produtos": first.produtos + entry.produtos})
                parsed[index] = (first_raw, merged, None)
                logger.info("Merged repeated entry for author %s into order %s", entry.id_autor, entry.order_id)
                continue
            positions[key] = len(parsed)
            parsed.append((raw, entry, None))

        vendors: List[Dict[str, Any]] = []
        errors: List[Dict[str, Any]] = []

        for raw, entry, problem in parsed:
            author = str(raw.get("id_autor")) if raw.get("id_autor") is not None else None
            if entry is None:
                logger.warning("Rejected vendor entry for author %s: %s", author, problem)
                errors.append({"author": author, "error": problem})
                continue

            try:
                vendors.append(await self._process_vendor_entry(entry, order_totals[entry.order_id]))
            except BaseServiceError as e:
                await self.db.rollback()
                logger.warning("Vendor entry %s/%s failed: %s", entry.order_id, entry.id_autor, e)
                errors.append({"author": entry.id_autor, "error": str(e)})
            except SQLAlchemyError as e:
                await self.db.rollback()
                if isinstance(e, IntegrityError) and await self._find_by_key(entry) is not None:
                    # A concurrent request stored the same entry first
                    vendors.append(await self._duplicate_result(entry))
                    continue
                logger.error(
                    "Database error on vendor entry %s/%s: %s", entry.order_id, entry.id_autor, e, exc_info=True
                )
                errors.append({"author": entry.id_autor, "error": "Database error while saving sale"})

        created = [v for v in vendors if not v["duplicate"]]
        first_order_id = next((e.order_id for _, e, _ in parsed if e is not None), None)
        if first_order_id is None:
            first_order_id = next((str(r.get("order_id")) for r, _, _ in parsed if r.get("order_id") is not None), None)

        summary = {
            "message": self._summary_message(len(created), len(vendors) - len(created), len(errors)),
            "orderId": first_order_id,
            "totalVendors": len(created),
            "totalProducts": sum(v["products"] for v in created),
            "totalQuantity": sum(v["quantity"] for v in created),
            "totalValue": float(sum((Decimal(str(v["total"])) for v in created), ZERO)),
            "totalErrors": len(errors),
            "totalDuplicates": len(vendors) - len(created),
            "vendors": vendors,
            "errors": errors,
        }
        logger.info(
            "Batch for order %s: %s created, %s duplicate, %s failed",
            first_order_id,
            summary["totalVendors"],
            summary["totalDuplicates"],
            summary["totalErrors"],
        )
        return summary

    @staticmethod
    def _summary_message(created: int, duplicates: int, failed: int) -> str:
        if failed and not created and not duplicates:
            return "No vendor entries could be processed"
        message = f"Processed {created} vendor(s)"
        if duplicates:
            message += f", {duplicates} already recorded"
        if failed:
            message += f", {failed} failed"
        return message

    async def _find_by_key(self, entry: VendorEntry) -> Optional[Sale]:
        result = await self.db.execute(
            select(Sale).where(Sale.idempotency_key == idempotency_key(entry.order_id, entry.id_autor))
        )
        return result.scalar_one_or_none()

    async def _duplicate_result(self, entry: VendorEntry) -> Dict[str, Any]:
        sale = await self._find_by_key(entry)
        result = {
            "author": entry.id_autor,
            "saleId": sale.id,
            "vendorOrderNumber": sale.vendor_order_number,
            "vendorOrderLabel": format_vendor_order_number(sale.vendor_order_number),
            "products": len(entry.produtos),
            "quantity": entry.total_quantity,
            "total": float(sale.sale_price),
            "commission": float(sale.commission),
            "authorEarnings": float(sale.author_earnings),
            "duplicate": True,
        }
        # Read-only transaction, close it so the next entry starts clean
        await self.db.rollback()
        logger.info("Vendor entry %s/%s already recorded as sale %s", entry.order_id, entry.id_autor, result["saleId"])
        return result

    async def _ensure_order(self, entry: VendorEntry, order_total: Decimal) -> None:
        """Create the shared Order row unless another entry already did."""
        endereco = entry.endereco
        insert = insert_for(self.db)
        stmt = insert(Order).values(
            id=entry.order_id,
            cliente_nome=entry.cliente_nome,
            cliente_email=entry.cliente_email,
            cliente_cpf=entry.cliente_cpf,
            cliente_telefone=entry.cliente_telefone,
            endereco_rua=endereco.rua if endereco else None,
            endereco_numero=endereco.numero if endereco else None,
            endereco_bairro=endereco.bairro if endereco else None,
            endereco_cidade=endereco.cidade if endereco else None,
            endereco_estado=endereco.estado if endereco else None,
            endereco_cep=endereco.cep if endereco else None,
            endereco_complemento=endereco.complemento if endereco else None,
            valor_total=order_total,
            forma_pagamento=entry.forma_pagamento,
            bandeira_cartao=entry.bandeira_cartao,
            parcelas=entry.parcelas or "1",
            status_pagamento=entry.status_pagamento or "pending",
            status_envio=entry.status_envio or "unpacked",
            status=OrderStatus.PENDING.value,
            created_at=utcnow(),
        )
        await self.db.execute(stmt.on_conflict_do_nothing(index_elements=["id"]))

    async def _load_products(self, entry: VendorEntry) -> List[Product]:
        """Resolve every product line, checking that the entry's author owns it."""
        products = []
        for line in entry.produtos:
            try:
                product_id = int(line.id_produto_interno)
            except ValueError:
                raise ProductNotFoundError(f"Product {line.id_produto_interno} not found")

            product = await self.db.get(Product, product_id)
            if product is None:
                raise ProductNotFoundError(f"Product {line.id_produto_interno} not found")
            if product.author_id != entry.id_autor:
                raise AuthorMismatchError(
                    f"Product {product_id} belongs to author {product.author_id}, not {entry.id_autor}"
                )
            products.append(product)
        return products

    async def _process_vendor_entry(self, entry: VendorEntry, order_total: Decimal) -> Dict[str, Any]:
        if await self._find_by_key(entry) is not None:
            return await self._duplicate_result(entry)

        products = await self._load_products(entry)
        await self._ensure_order(entry, order_total)

        split = split_commission(entry.vendor_total, get_webhook_commission_rate())
        number = await next_vendor_order_number(self.db, entry.id_autor)

        endereco = entry.endereco
        sale = Sale(
            order_id=entry.order_id,
            author_id=entry.id_autor,
            vendor_order_number=number,
            product_id=products[0].id,
            idempotency_key=idempotency_key(entry.order_id, entry.id_autor),
            buyer_name=entry.cliente_nome,
            buyer_email=entry.cliente_email,
            buyer_phone=entry.cliente_telefone,
            buyer_cpf=entry.cliente_cpf,
            buyer_address=_address_line(entry),
            buyer_city=endereco.cidade if endereco else None,
            buyer_state=endereco.estado if endereco else None,
            buyer_zip_code=endereco.cep if endereco else None,
            sale_price=split.sale_price,
            commission=split.commission,
            author_earnings=split.author_earnings,
            order_date=utcnow(),
            payment_status=PaymentStatus.from_webhook(entry.status_pagamento).value,
            payment_method=PaymentMethod.from_webhook(entry.forma_pagamento).value,
            installments=entry.installments,
            discount_coupon=f"ORDER_{entry.order_id}",
            quantity=entry.total_quantity,
        )
        self.db.add(sale)
        await self.db.flush()

        for line, product in zip(entry.produtos, products):
            self.db.add(SaleItem(
                sale_id=sale.id,
                product_id=str(product.id),
                product_name=line.nome or product.title,
                price=line.preco,
                quantity=line.quantidade,
                foto_produto=line.foto_produto,
            ))

        await self.db.commit()

        logger.info(
            "Sale %s created for author %s on order %s (%s, %s items, total %s)",
            sale.id,
            entry.id_autor,
            entry.order_id,
            format_vendor_order_number(number),
            entry.total_quantity,
            split.sale_price,
        )
        return {
            "author": entry.id_autor,
            "saleId": sale.id,
            "vendorOrderNumber": number,
            "vendorOrderLabel": format_vendor_order_number(number),
            "products": len(entry.produtos),
            "quantity": entry.total_quantity,
            "total": float(split.sale_price),
            "commission": float(split.commission),
            "authorEarnings": float(split.author_earnings),
            "duplicate": False,
        }

    # ------------------------------------------------------------------
    # Single-product sales (older route, still called by the workflow)
    # ------------------------------------------------------------------

    async def process_single_sale(self, payload: Any) -> Dict[str, Any]:
        if not isinstance(payload, dict):
            raise ValidationError("Sale payload must be a JSON object")
        try:
            data = SingleSalePayload.model_validate(payload)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid sale payload: {describe_validation_error(e)}")

        product = await self.db.get(Product, data.product_id)
        if product is None:
            raise ProductNotFoundError(f"Product {data.product_id} not found")

        split = split_commission(data.sale_price, get_webhook_commission_rate())

        try:
            number = await next_vendor_order_number(self.db, product.author_id)
            sale = Sale(
                order_id=None,
                author_id=product.author_id,
                vendor_order_number=number,
                product_id=product.id,
                buyer_name=data.buyer_name,
                buyer_email=data.buyer_email,
                buyer_phone=data.buyer_phone,
                buyer_cpf=data.buyer_cpf,
                buyer_address=data.buyer_address,
                buyer_city=data.buyer_city,
                buyer_state=data.buyer_state,
                buyer_zip_code=data.buyer_zip_code,
                sale_price=split.sale_price,
                commission=split.commission,
                author_earnings=split.author_earnings,
                order_date=data.order_date or utcnow(),
                payment_status=PaymentStatus.from_webhook(data.payment_status).value,
                payment_method=PaymentMethod.from_webhook(data.payment_method).value,
                installments=data.installments,
                quantity=data.quantity,
                discount_coupon=data.discount_coupon,
                discount_amount=quantize(data.discount_amount),
                shipping_cost=quantize(data.shipping_cost),
                shipping_carrier=data.shipping_carrier,
                delivery_days=data.delivery_days,
            )
            self.db.add(sale)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

        logger.info(
            "Single sale %s created for product %s (author %s, %s)",
            sale.id,
            product.id,
            product.author_id,
            format_vendor_order_number(number),
        )
        return {
            "message": "Sale recorded",
            "saleId": sale.id,
            "productId": product.id,
            "authorId": product.author_id,
            "vendorOrderNumber": number,
            "vendorOrderLabel": format_vendor_order_number(number),
            "salePrice": float(split.sale_price),
            "commission": float(split.commission),
            "authorEarnings": float(split.author_earnings),
        }

    # ------------------------------------------------------------------
    # Status updates pushed by the workflow
    # ------------------------------------------------------------------

    async def update_product_status(
        self,
        product_id: int,
        status: Any,
        public_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        target = parse_status(status)
        if target not in WEBHOOK_PRODUCT_STATUSES:
            allowed = ", ".join(s.value for s in WEBHOOK_PRODUCT_STATUSES)
            raise ValidationError(f"Invalid status '{target.value}'. Allowed: {allowed}")
        return await ProductService(self.db).change_status(product_id, target, public_url)

    async def update_order_status(self, order_id: str, update: OrderStatusUpdate) -> Dict[str, Any]:
        changes = update.changes()
        if not changes:
            raise ValidationError("No status fields to update")

        order = await self.db.get(Order, order_id)
        if order is None:
            raise OrderNotFoundError(f"Order {order_id} not found")

        for field, value in changes.items():
            setattr(order, field, value)

        if "status_pagamento" in changes:
            # Keep the author dashboards in step with the order
            payment_status = PaymentStatus.from_webhook(changes["status_pagamento"]).value
            result = await self.db.execute(select(Sale).where(Sale.order_id == order_id))
            for sale in result.scalars().all():
                sale.payment_status = payment_status

        await self.db.commit()
        logger.info("Order %s updated: %s", order_id, changes)

        return {
            "message": "Order status updated",
            "order": {
                "id": order.id,
                "status": order.status,
                "status_pagamento": order.status_pagamento,
                "status_envio": order.status_envio,
            },
        }
