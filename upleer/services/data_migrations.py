"""
Data migrations: idempotent repair jobs for rows written before the current
schema existed.

Each job selects only the rows it still has to fix, so running it again after
it has been applied changes nothing. Jobs run in registration order, each in
its own transaction, and report a MigrationResult.

Run them with `python -m upleer.cli.data_migrations run`, or at startup by
setting RUN_DATA_MIGRATIONS=true.
"""

import calendar
import logging
from dataclasses import dataclass, asdict
from decimal import Decimal
from typing import Awaitable, Callable, Dict, List, Optional

from sqlalchemy import select, or_, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from upleer.core.enums import OrderStatus, PaymentStatus
from upleer.core.exceptions import DatabaseError, ValidationError
from upleer.models.base import utcnow
from upleer.models.order import Order
from upleer.models.product import Product
from upleer.models.sale import Sale
from upleer.models.sale_item import SaleItem
from upleer.services.pricing import quantize, reverse_pricing
from upleer.services.vendor_numbering import (
    authors_with_sales,
    next_vendor_order_number,
    renumber_author_sales,
)

logger = logging.getLogger(__name__)

# Pricing in force when the legacy products were created
LEGACY_FIXED_FEE = Decimal("9.90")
LEGACY_PRINTING_COST_PER_PAGE = Decimal("0.10")
LEGACY_COMMISSION_RATE = Decimal("30")


@dataclass
class MigrationResult:
    name: str
    examined: int = 0
    changed: int = 0
    skipped: int = 0
    dry_run: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


MigrationJob = Callable[[AsyncSession, bool], Awaitable[MigrationResult]]
MIGRATIONS: Dict[str, MigrationJob] = {}


def register(name: str):
    def decorator(func: MigrationJob) -> MigrationJob:
        MIGRATIONS[name] = func
        return func
    return decorator


def legacy_order_id(sale: Sale) -> str:
    created = sale.created_at or utcnow()
    millis = calendar.timegm(created.utctimetuple()) * 1000 + created.microsecond // 1000
    return f"LEGACY_{sale.id}_{millis}"


@register("backfill_legacy_orders")
async def backfill_legacy_orders(db: AsyncSession, dry_run: bool = False) -> MigrationResult:
    """
    Give every pre-marketplace sale an Order, an author and a SaleItem.

    Applies to sales with no order_id or no author_id. The author comes from
    the sale's product; sales whose product is gone are skipped.
    """
    result = MigrationResult(name="backfill_legacy_orders", dry_run=dry_run)

    rows = await db.execute(
        select(Sale)
        .options(selectinload(Sale.product), selectinload(Sale.items))
        .where(or_(Sale.order_id.is_(None), Sale.author_id.is_(None)))
        .order_by(Sale.id)
    )
    for sale in rows.scalars().all():
        result.examined += 1
        product = sale.product
        if product is None:
            logger.warning("Sale %s has no product, cannot backfill", sale.id)
            result.skipped += 1
            continue

        result.changed += 1
        if dry_run:
            continue

        if sale.author_id is None:
            # Take a fresh number so the author never ends up with two of the same
            number = await next_vendor_order_number(db, product.author_id)
            sale.author_id = product.author_id
            sale.vendor_order_number = number

        if sale.order_id is None:
            order_id = legacy_order_id(sale)
            if await db.get(Order, order_id) is None:
                db.add(Order(
                    id=order_id,
                    cliente_nome=sale.buyer_name or "",
                    cliente_email=sale.buyer_email or "",
                    cliente_cpf=sale.buyer_cpf,
                    cliente_telefone=sale.buyer_phone,
                    endereco_cidade=sale.buyer_city,
                    endereco_estado=sale.buyer_state,
                    endereco_cep=sale.buyer_zip_code,
                    valor_total=sale.sale_price,
                    forma_pagamento=sale.payment_method,
                    parcelas=str(sale.installments or 1),
                    status_pagamento=sale.payment_status or PaymentStatus.APROVADO.value,
                    status=OrderStatus.COMPLETED.value,
                    created_at=sale.created_at or utcnow(),
                ))
                await db.flush()
            sale.order_id = order_id

        if not sale.items:
            quantity = sale.quantity or 1
            db.add(SaleItem(
                sale_id=sale.id,
                product_id=str(product.id),
                product_name=product.title,
                price=quantize(Decimal(sale.sale_price) / quantity),
                quantity=quantity,
            ))

    return result


@register("backfill_product_financials")
async def backfill_product_financials(db: AsyncSession, dry_run: bool = False) -> MigrationResult:
    """Reverse-solve author earnings and platform commission from the stored sale price."""
    result = MigrationResult(name="backfill_product_financials", dry_run=dry_run)

    rows = await db.execute(
        select(Product)
        .where(or_(Product.author_earnings.is_(None), Product.platform_commission.is_(None)))
        .order_by(Product.id)
    )
    for product in rows.scalars().all():
        result.examined += 1
        sale_price = Decimal(str(product.sale_price or 0))
        if sale_price <= 0:
            result.skipped += 1
            continue

        pricing = reverse_pricing(
            sale_price,
            max(product.page_count or 0, 1),
            fixed_fee=LEGACY_FIXED_FEE,
            printing_cost_per_page=LEGACY_PRINTING_COST_PER_PAGE,
            commission_rate=LEGACY_COMMISSION_RATE,
        )
        result.changed += 1
        if dry_run:
            continue

        product.author_earnings = pricing.author_earnings
        product.platform_commission = pricing.platform_commission
        product.fixed_fee = pricing.fixed_fee
        product.printing_cost_per_page = pricing.printing_cost_per_page
        product.commission_rate = quantize(pricing.commission_rate)
        logger.debug(
            "Product %s: %s = %s author + %s platform",
            product.id, pricing.sale_price, pricing.author_earnings, pricing.platform_commission,
        )

    return result


@register("renumber_vendor_orders")
async def renumber_vendor_orders(db: AsyncSession, dry_run: bool = False) -> MigrationResult:
    """Renumber each author's sales 1..N chronologically and reset their counters."""
    result = MigrationResult(name="renumber_vendor_orders", dry_run=dry_run)

    for author_id in await authors_with_sales(db):
        count = await db.scalar(select(func.count(Sale.id)).where(Sale.author_id == author_id))
        result.examined += int(count or 0)
        result.changed += await renumber_author_sales(db, author_id, dry_run=dry_run)

    result.skipped = result.examined - result.changed
    return result


async def run_data_migrations(
    db: AsyncSession,
    only: Optional[List[str]] = None,
    dry_run: bool = False,
) -> List[MigrationResult]:
    names = list(only) if only else list(MIGRATIONS)
    unknown = [n for n in names if n not in MIGRATIONS]
    if unknown:
        raise ValidationError(f"Unknown data migration(s): {', '.join(unknown)}")

    results = []
    for name in names:
        logger.info("Running data migration %s%s", name, " (dry run)" if dry_run else "")
        try:
            outcome = await MIGRATIONS[name](db, dry_run)
            if dry_run:
                await db.rollback()
            else:
                await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Data migration %s failed: %s", name, e, exc_info=True)
            raise DatabaseError(f"Data migration {name} failed: {e}")

        logger.info(
            "Data migration %s: examined=%s changed=%s skipped=%s",
            outcome.name, outcome.examined, outcome.changed, outcome.skipped,
        )
        results.append(outcome)
    return results
