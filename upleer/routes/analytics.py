# upleer/routes/analytics.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from upleer.core.auth import get_current_user
from upleer.dependencies import get_db
from upleer.models.user import User
from upleer.services.sales_service import SalesService

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("/stats")
async def dashboard_stats(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await SalesService(db).get_author_stats(user.id)


@router.get("/sales-data")
async def sales_data(
    months: int = Query(6, ge=1, le=36),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await SalesService(db).get_sales_data(user.id, months=months)
