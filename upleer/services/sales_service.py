# upleer/services/sales_service.py
"""
Author-facing reads over sales: the sales list, a single sale with its items
and order, and the dashboard aggregates.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from upleer.core.enums import ProductStatus
from upleer.core.exceptions import PermissionDeniedError, SaleNotFoundError, ValidationError
from upleer.models.base import utcnow
from upleer.models.product import Product
from upleer.models.sale import Sale
from upleer.schemas.sale import SaleDetail, SaleRead

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = [s for s in ProductStatus if s.is_active]


def _month_starts(months: int, now: datetime) -> List[datetime]:
    """First day of each of the last `months` months, oldest first, current month included."""
    year, month = now.year, now.month
    starts = []
    for _ in range(months):
        starts.append(datetime(year, month, 1))
        month -= 1
        if month == 0:
            month = 12
            year -= 1
    return list(reversed(starts))


class SalesService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_author_sales(self, author_id: str) -> List[SaleRead]:
        result = await self.db.execute(
            select(Sale, Product.title)
            .join(Product, Sale.product_id == Product.id)
            .where(Sale.author_id == author_id)
            .order_by(Sale.created_at.desc(), Sale.id.desc())
        )
        return [
            SaleRead.model_validate(sale).model_copy(update={"product_title": title})
            for sale, title in result.all()
        ]

    async def get_sale_detail(self, sale_id: int, author_id: str, is_admin: bool = False) -> SaleDetail:
        result = await self.db.execute(
            select(Sale)
            .options(selectinload(Sale.items), selectinload(Sale.order), selectinload(Sale.product))
            .where(Sale.id == sale_id)
        )
        sale = result.scalar_one_or_none()
        if sale is None:
            raise SaleNotFoundError(f"Sale {sale_id} not found")
        if sale.author_id != author_id and not is_admin:
            raise PermissionDeniedError(f"Sale {sale_id} belongs to another author")

        detail = SaleDetail.model_validate(sale)
        return detail.model_copy(update={"product_title": sale.product.title if sale.product else None})

    async def get_author_stats(self, author_id: str) -> Dict[str, Any]:
        sales_row = (await self.db.execute(
            select(
                func.count(Sale.id),
                func.coalesce(func.sum(Sale.sale_price), 0),
                func.coalesce(func.sum(Sale.author_earnings), 0),
            ).where(Sale.author_id == author_id)
        )).one()

        active = await self.db.scalar(
            select(func.count(Product.id)).where(
                Product.author_id == author_id,
                Product.status.in_(ACTIVE_STATUSES),
            )
        )
        pending = await self.db.scalar(
            select(func.count(Product.id)).where(
                Product.author_id == author_id,
                Product.status == ProductStatus.PENDING,
            )
        )

        total_sales, total_revenue, total_earnings = sales_row
        return {
            "totalSales": int(total_sales or 0),
            "totalRevenue": float(Decimal(str(total_revenue or 0))),
            "totalEarnings": float(Decimal(str(total_earnings or 0))),
            "activeProducts": int(active or 0),
            "pendingProducts": int(pending or 0),
        }

    async def get_sales_data(
        self,
        author_id: str,
        months: int = 6,
        now: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """Monthly sale counts and author earnings, one bucket per month, empty months included."""
        if months < 1 or months > 36:
            raise ValidationError("months must be between 1 and 36")

        starts = _month_starts(months, now or utcnow())
        buckets = {start.strftime("%Y-%m"): {"month": start.strftime("%Y-%m"), "sales": 0, "revenue": Decimal("0")}
                   for start in starts}

        result = await self.db.execute(
            select(Sale.created_at, Sale.author_earnings).where(
                Sale.author_id == author_id,
                Sale.created_at >= starts[0],
            )
        )
        for created_at, earnings in result.all():
            if created_at is None:
                continue
            bucket = buckets.get(created_at.strftime("%Y-%m"))
            if bucket is None:
                continue
            bucket["sales"] += 1
            bucket["revenue"] += Decimal(str(earnings or 0))

        return [
            {"month": b["month"], "sales": b["sales"], "revenue": float(b["revenue"])}
            for b in buckets.values()
        ]
