"""
Per-author vendor order numbers ("Pedido #001, #002, ...").

Numbers come from a counter row per author in `vendor_order_counters`. The row
is locked with SELECT ... FOR UPDATE so concurrent webhook requests for the
same author queue behind each other, and the number is written in the same
transaction as the Sale that carries it. The unique constraint on
(author_id, vendor_order_number) backs this up at the database level.
"""

import logging
from typing import Dict, List

from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from upleer.core.utils import insert_for
from upleer.models.sale import Sale
from upleer.models.vendor_order_counter import VendorOrderCounter

logger = logging.getLogger(__name__)


def format_vendor_order_number(number: int) -> str:
    return f"#{int(number):03d}"


async def _max_assigned(db: AsyncSession, author_id: str) -> int:
    result = await db.execute(
        select(func.coalesce(func.max(Sale.vendor_order_number), 0)).where(Sale.author_id == author_id)
    )
    return int(result.scalar_one())


async def _ensure_counter(db: AsyncSession, author_id: str) -> None:
    """Create the author's counter row, seeded from their existing sales, if missing."""
    insert = insert_for(db)
    seed = (
        select(func.coalesce(func.max(Sale.vendor_order_number), 0))
        .where(Sale.author_id == author_id)
        .scalar_subquery()
    )
    stmt = insert(VendorOrderCounter).values(author_id=author_id, last_number=seed)
    stmt = stmt.on_conflict_do_nothing(index_elements=["author_id"])
    await db.execute(stmt)


async def next_vendor_order_number(db: AsyncSession, author_id: str) -> int:
    """
    Reserve the next vendor order number for an author.

    Must run inside the caller's transaction; the counter row stays locked
    until that transaction commits or rolls back.
    """
    await _ensure_counter(db, author_id)

    result = await db.execute(
        select(VendorOrderCounter)
        .where(VendorOrderCounter.author_id == author_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    counter = result.scalar_one()

    # Rows written outside the counter (legacy backfills) can be ahead of it
    current = max(counter.last_number or 0, await _max_assigned(db, author_id))
    counter.last_number = current + 1
    await db.flush()

    logger.debug("Assigned vendor order number %s to author %s", counter.last_number, author_id)
    return counter.last_number


async def renumber_author_sales(db: AsyncSession, author_id: str, dry_run: bool = False) -> int:
    """
    Renumber one author's sales 1..N in (created_at, id) order and reset the
    counter to N. Returns how many sales got a new number.

    Done in two passes (negative placeholders first) so the unique constraint
    never sees two rows with the same number mid-update.
    """
    result = await db.execute(
        select(Sale.id, Sale.vendor_order_number)
        .where(Sale.author_id == author_id)
        .order_by(Sale.created_at.asc(), Sale.id.asc())
    )
    rows = result.all()

    changes: Dict[int, int] = {}
    for position, (sale_id, current) in enumerate(rows, start=1):
        if current != position:
            changes[sale_id] = position

    if dry_run:
        return len(changes)

    if changes:
        for sale_id, number in changes.items():
            await db.execute(update(Sale).where(Sale.id == sale_id).values(vendor_order_number=-number))
        for sale_id, number in changes.items():
            await db.execute(update(Sale).where(Sale.id == sale_id).values(vendor_order_number=number))

    await _ensure_counter(db, author_id)
    await db.execute(
        update(VendorOrderCounter)
        .where(VendorOrderCounter.author_id == author_id)
        .values(last_number=len(rows))
    )
    return len(changes)


async def authors_with_sales(db: AsyncSession) -> List[str]:
    result = await db.execute(
        select(Sale.author_id).where(Sale.author_id.isnot(None)).distinct().order_by(Sale.author_id)
    )
    return [row[0] for row in result.all()]
