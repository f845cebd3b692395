# tests/integration/services/test_vendor_numbering.py
from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import select

from upleer.models import Sale, VendorOrderCounter
from upleer.services.vendor_numbering import (
    format_vendor_order_number,
    next_vendor_order_number,
    renumber_author_sales,
)


def _sale(author_id, number, product_id, created_at=None):
    sale = Sale(
        author_id=author_id,
        product_id=product_id,
        vendor_order_number=number,
        sale_price=Decimal("10.00"),
        commission=Decimal("1.50"),
        author_earnings=Decimal("8.50"),
    )
    if created_at is not None:
        sale.created_at = created_at
    return sale


@pytest.mark.parametrize("number, label", [(1, "#001"), (42, "#042"), (1234, "#1234")])
def test_format_vendor_order_number(number, label):
    assert format_vendor_order_number(number) == label


@pytest.mark.asyncio
async def test_sequential_numbers_per_author(db_session, make_user, make_product):
    await make_user("A1")
    await make_user("A2")
    product = await make_product("A1")
    other = await make_product("A2")

    numbers = []
    for _ in range(5):
        number = await next_vendor_order_number(db_session, "A1")
        db_session.add(_sale("A1", number, product.id))
        await db_session.commit()
        numbers.append(number)

    assert numbers == [1, 2, 3, 4, 5]
    # Another author starts at one
    assert await next_vendor_order_number(db_session, "A2") == 1
    db_session.add(_sale("A2", 1, other.id))
    await db_session.commit()

    result = await db_session.execute(
        select(Sale.vendor_order_number).where(Sale.author_id == "A1").order_by(Sale.vendor_order_number)
    )
    assert result.scalars().all() == [1, 2, 3, 4, 5]


@pytest.mark.asyncio
async def test_counter_is_seeded_from_existing_sales(db_session, make_user, make_product):
    await make_user("A1")
    product = await make_product("A1")
    db_session.add_all([_sale("A1", 1, product.id), _sale("A1", 7, product.id)])
    await db_session.commit()

    assert await next_vendor_order_number(db_session, "A1") == 8
    counter = await db_session.get(VendorOrderCounter, "A1")
    assert counter.last_number == 8


@pytest.mark.asyncio
async def test_rolled_back_number_is_handed_out_again(db_session, make_user):
    await make_user("A1")

    assert await next_vendor_order_number(db_session, "A1") == 1
    await db_session.rollback()

    assert await next_vendor_order_number(db_session, "A1") == 1


@pytest.mark.asyncio
async def test_renumber_author_sales_is_chronological(db_session, make_user, make_product):
    await make_user("A1")
    product = await make_product("A1")
    db_session.add_all([
        _sale("A1", 1, product.id, created_at=datetime(2024, 3, 1)),
        _sale("A1", 2, product.id, created_at=datetime(2024, 1, 1)),
        _sale("A1", 3, product.id, created_at=datetime(2024, 2, 1)),
    ])
    await db_session.commit()

    assert await renumber_author_sales(db_session, "A1", dry_run=True) == 3
    changed = await renumber_author_sales(db_session, "A1")
    await db_session.commit()
    assert changed == 3

    result = await db_session.execute(
        select(Sale.created_at, Sale.vendor_order_number).where(Sale.author_id == "A1").order_by(Sale.created_at)
    )
    assert [number for _, number in result.all()] == [1, 2, 3]

    counter = await db_session.get(VendorOrderCounter, "A1", populate_existing=True)
    assert counter.last_number == 3

    # Nothing left to fix
    assert await renumber_author_sales(db_session, "A1") == 0
