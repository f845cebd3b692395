# upleer/routes/admin.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from upleer.core.auth import require_admin
from upleer.core.enums import ProductStatus
from upleer.dependencies import get_db
from upleer.models.nuvemshop_mapping import ProdutoNuvemshopMapping
from upleer.models.user import User
from upleer.schemas.product import NuvemshopMappingRead, ProductPage, ProductRead, ProductStatusChange, UserRead
from upleer.services.product_service import ProductService

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/products", response_model=ProductPage)
async def list_products(
    status: Optional[ProductStatus] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    result = await ProductService(db).list_products(status=status, page=page, page_size=page_size)
    result["items"] = [ProductRead.model_validate(p) for p in result["items"]]
    return result


@router.patch("/products/{product_id}/status")
async def change_product_status(
    product_id: int,
    change: ProductStatusChange,
    db: AsyncSession = Depends(get_db),
):
    return await ProductService(db).change_status(product_id, change.status, change.public_url)


@router.get("/users", response_model=List[UserRead])
async def list_users(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(User).order_by(User.created_at.desc(), User.id))
    return result.scalars().all()


@router.get("/nuvemshop-mappings", response_model=List[NuvemshopMappingRead])
async def list_store_mappings(
    product_id: Optional[int] = None,
    author_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """Store listings the order workflow keeps for each product. Read only."""
    query = select(ProdutoNuvemshopMapping).order_by(ProdutoNuvemshopMapping.id)
    if product_id is not None:
        query = query.where(ProdutoNuvemshopMapping.id_produto_interno == str(product_id))
    if author_id is not None:
        query = query.where(ProdutoNuvemshopMapping.id_autor == author_id)
    result = await db.execute(query)
    return result.scalars().all()
