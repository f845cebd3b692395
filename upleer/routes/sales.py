# upleer/routes/sales.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from upleer.core.auth import get_current_user
from upleer.dependencies import get_db
from upleer.models.user import User
from upleer.schemas.sale import SaleDetail, SaleRead
from upleer.services.sales_service import SalesService

router = APIRouter(prefix="/api/sales", tags=["sales"])


@router.get("", response_model=List[SaleRead])
async def list_my_sales(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await SalesService(db).list_author_sales(user.id)


@router.get("/{sale_id}", response_model=SaleDetail)
async def get_sale(
    sale_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await SalesService(db).get_sale_detail(sale_id, user.id, is_admin=user.is_admin)
