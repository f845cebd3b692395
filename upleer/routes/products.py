# upleer/routes/products.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from upleer.core.auth import get_current_user
from upleer.dependencies import get_db
from upleer.models.user import User
from upleer.schemas.product import PricingPreviewRequest, ProductCreate, ProductRead, ProductUpdate
from upleer.services.pricing import calculate_pricing
from upleer.services.product_service import ProductService

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("", response_model=List[ProductRead])
async def list_my_products(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ProductService(db).list_author_products(user.id)


@router.post("", response_model=ProductRead, status_code=201)
async def create_product(
    data: ProductCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ProductService(db).create_product(user.id, data)


@router.post("/pricing")
async def preview_pricing(
    data: PricingPreviewRequest,
    user: User = Depends(get_current_user),
):
    """Price breakdown for the upload form, nothing is stored."""
    pricing = calculate_pricing(
        data.page_count,
        data.author_earnings,
        fixed_fee=data.fixed_fee,
        printing_cost_per_page=data.printing_cost_per_page,
        commission_rate=data.commission_rate,
    )
    return pricing.to_response()


@router.get("/{product_id}", response_model=ProductRead)
async def get_product(
    product_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ProductService(db).get_author_product(product_id, user.id)


@router.patch("/{product_id}", response_model=ProductRead)
async def update_product(
    product_id: int,
    data: ProductUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ProductService(db).update_product(product_id, user.id, data)
