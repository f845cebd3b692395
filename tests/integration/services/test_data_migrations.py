# tests/integration/services/test_data_migrations.py
from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from upleer.core.exceptions import ValidationError
from upleer.models import Order, Product, Sale, SaleItem
from upleer.services.data_migrations import (
    MIGRATIONS,
    legacy_order_id,
    run_data_migrations,
)


def test_jobs_are_registered_in_order():
    assert list(MIGRATIONS) == [
        "backfill_legacy_orders",
        "backfill_product_financials",
        "renumber_vendor_orders",
    ]


def test_legacy_order_id_format():
    sale = Sale(id=12, created_at=datetime(2024, 5, 1, 12, 0, 0))
    assert legacy_order_id(sale) == "LEGACY_12_1714564800000"


async def _legacy_setup(db_session, make_user, make_product):
    await make_user("A1")
    product = await make_product("A1", title="Apostila Antiga")

    db_session.add(Order(id="O-NEW", cliente_nome="Ana", cliente_email="ana@x.com"))
    db_session.add(Sale(
        order_id="O-NEW", author_id="A1", product_id=product.id, vendor_order_number=1,
        sale_price=Decimal("10.00"), commission=Decimal("1.50"), author_earnings=Decimal("8.50"),
        created_at=datetime(2024, 6, 1),
    ))
    legacy = Sale(
        order_id=None, author_id=None, product_id=product.id, vendor_order_number=1,
        buyer_name="Leo", buyer_email="leo@x.com",
        sale_price=Decimal("59.90"), commission=Decimal("8.99"), author_earnings=Decimal("50.91"),
        quantity=1, created_at=datetime(2024, 1, 15),
    )
    orphan = Sale(
        order_id=None, author_id=None, product_id=999, vendor_order_number=1,
        sale_price=Decimal("5.00"), commission=Decimal("0.75"), author_earnings=Decimal("4.25"),
    )
    db_session.add_all([legacy, orphan])
    await db_session.commit()
    return product, legacy, orphan


@pytest.mark.asyncio
async def test_backfill_legacy_orders(db_session, make_user, make_product):
    product, legacy, orphan = await _legacy_setup(db_session, make_user, make_product)

    [result] = await run_data_migrations(db_session, only=["backfill_legacy_orders"])

    assert (result.examined, result.changed, result.skipped) == (2, 1, 1)

    sale = await db_session.get(Sale, legacy.id, populate_existing=True)
    assert sale.author_id == "A1"
    assert sale.vendor_order_number == 2
    assert sale.order_id.startswith(f"LEGACY_{legacy.id}_")

    order = await db_session.get(Order, sale.order_id)
    assert order.status == "completed"
    assert order.valor_total == Decimal("59.90")
    assert order.cliente_nome == "Leo"

    items = (await db_session.execute(select(SaleItem).where(SaleItem.sale_id == legacy.id))).scalars().all()
    assert [(i.product_id, i.product_name, i.price, i.quantity) for i in items] == [
        (str(product.id), "Apostila Antiga", Decimal("59.90"), 1)
    ]

    # Second run finds only the orphan again
    [again] = await run_data_migrations(db_session, only=["backfill_legacy_orders"])
    assert (again.examined, again.changed, again.skipped) == (1, 0, 1)
    assert await db_session.scalar(select(func.count()).select_from(Order)) == 2


@pytest.mark.asyncio
async def test_dry_run_writes_nothing(db_session, make_user, make_product):
    await _legacy_setup(db_session, make_user, make_product)

    results = await run_data_migrations(db_session, dry_run=True)

    assert [r.dry_run for r in results] == [True, True, True]
    assert results[0].changed == 1
    assert await db_session.scalar(select(func.count()).select_from(Order)) == 1
    assert await db_session.scalar(select(func.count()).select_from(SaleItem)) == 0


@pytest.mark.asyncio
async def test_backfill_product_financials(db_session, make_user, make_product):
    await make_user("A1")
    regular = await make_product("A1", sale_price=Decimal("40.90"), page_count=50)
    no_pages = await make_product("A1", sale_price=Decimal("20.00"), page_count=0)
    free = await make_product("A1", sale_price=Decimal("0"))
    done = await make_product(
        "A1", sale_price=Decimal("30.00"),
        author_earnings=Decimal("1.00"), platform_commission=Decimal("29.00"),
    )

    [result] = await run_data_migrations(db_session, only=["backfill_product_financials"])
    assert (result.examined, result.changed, result.skipped) == (3, 2, 1)

    p = await db_session.get(Product, regular.id)
    assert (p.author_earnings, p.platform_commission) == (Decimal("20.00"), Decimal("20.90"))
    assert p.fixed_fee == Decimal("9.90")
    assert p.printing_cost_per_page == Decimal("0.10")
    assert p.commission_rate == Decimal("30.00")

    p = await db_session.get(Product, no_pages.id)
    assert (p.author_earnings, p.platform_commission) == (Decimal("7.69"), Decimal("12.31"))

    p = await db_session.get(Product, free.id)
    assert p.author_earnings is None

    p = await db_session.get(Product, done.id)
    assert p.author_earnings == Decimal("1.00")

    [again] = await run_data_migrations(db_session, only=["backfill_product_financials"])
    assert (again.examined, again.changed, again.skipped) == (1, 0, 1)


@pytest.mark.asyncio
async def test_renumber_job(db_session, make_user, make_product):
    await make_user("A1")
    product = await make_product("A1")
    for number, month in [(5, 3), (9, 1)]:
        db_session.add(Sale(
            author_id="A1", product_id=product.id, vendor_order_number=number,
            sale_price=Decimal("1"), commission=Decimal("0.15"), author_earnings=Decimal("0.85"),
            created_at=datetime(2024, month, 1),
        ))
    await db_session.commit()

    [result] = await run_data_migrations(db_session, only=["renumber_vendor_orders"])
    assert (result.examined, result.changed) == (2, 2)

    numbers = (await db_session.execute(
        select(Sale.vendor_order_number).order_by(Sale.created_at)
    )).scalars().all()
    assert numbers == [1, 2]

    [again] = await run_data_migrations(db_session, only=["renumber_vendor_orders"])
    assert again.changed == 0


@pytest.mark.asyncio
async def test_unknown_job_name(db_session):
    with pytest.raises(ValidationError):
        await run_data_migrations(db_session, only=["does_not_exist"])
