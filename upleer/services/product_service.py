# upleer/services/product_service.py
import logging
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from upleer.core.enums import ProductStatus
from upleer.core.exceptions import (
    InvalidStatusTransition,
    PermissionDeniedError,
    ProductNotFoundError,
    ValidationError,
)
from upleer.core.utils import paginate_query
from upleer.models.product import Product
from upleer.schemas.product import ProductCreate, ProductUpdate
from upleer.services.pricing import PricingBreakdown, calculate_pricing, quantize

logger = logging.getLogger(__name__)


def apply_pricing(product: Product, pricing: PricingBreakdown) -> None:
    """Copy a pricing breakdown onto a product's financial columns."""
    base_cost = pricing.fixed_fee + pricing.printing_cost
    product.page_count = pricing.page_count
    product.author_earnings = pricing.author_earnings
    product.platform_commission = pricing.platform_commission
    product.fixed_fee = pricing.fixed_fee
    product.printing_cost_per_page = pricing.printing_cost_per_page
    product.commission_rate = quantize(pricing.commission_rate)
    product.sale_price = pricing.sale_price
    product.base_cost = base_cost
    if base_cost > 0:
        product.margin_percent = int(((pricing.sale_price - base_cost) / base_cost * 100).to_integral_value())
    else:
        product.margin_percent = 0


def parse_status(value: Any) -> ProductStatus:
    if isinstance(value, ProductStatus):
        return value
    try:
        return ProductStatus(str(value or "").strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in ProductStatus)
        raise ValidationError(f"Invalid status '{value}'. Allowed: {allowed}")


class ProductService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_product(self, product_id: int) -> Product:
        product = await self.db.get(Product, product_id)
        if not product:
            raise ProductNotFoundError(f"Product {product_id} not found")
        return product

    async def get_author_product(self, product_id: int, author_id: str) -> Product:
        product = await self.get_product(product_id)
        if product.author_id != author_id:
            raise PermissionDeniedError(f"Product {product_id} belongs to another author")
        return product

    async def list_author_products(self, author_id: str):
        result = await self.db.execute(
            select(Product)
            .where(Product.author_id == author_id)
            .order_by(Product.created_at.desc(), Product.id.desc())
        )
        return result.scalars().all()

    async def list_products(
        self,
        status: Optional[ProductStatus] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> Dict[str, Any]:
        query = select(Product).order_by(Product.created_at.desc(), Product.id.desc())
        if status is not None:
            query = query.where(Product.status == status)
        return await paginate_query(query, self.db, page=page, page_size=page_size)

    async def create_product(self, author_id: str, data: ProductCreate) -> Product:
        """New products are priced from the author's desired earnings and start as pending."""
        pricing = calculate_pricing(data.page_count, data.author_earnings)

        product = Product(
            author_id=author_id,
            title=data.title,
            description=data.description,
            isbn=data.isbn,
            author=data.author,
            co_authors=data.co_authors,
            genre=data.genre,
            language=data.language,
            target_audience=data.target_audience,
            pdf_url=data.pdf_url,
            cover_image_url=data.cover_image_url,
            status=ProductStatus.PENDING,
        )
        apply_pricing(product, pricing)

        self.db.add(product)
        await self.db.commit()
        await self.db.refresh(product)
        logger.info("Created product %s for author %s at %s", product.id, author_id, product.sale_price)
        return product

    async def update_product(self, product_id: int, author_id: str, data: ProductUpdate) -> Product:
        product = await self.get_author_product(product_id, author_id)

        changes = data.model_dump(exclude_unset=True)
        for field in ("title", "description", "isbn"):
            if field in changes and changes[field] is not None:
                setattr(product, field, changes[field])

        if changes.get("author_earnings") is not None:
            # Reprice with the product's own fee and rates where it has them
            pricing = calculate_pricing(
                product.page_count,
                changes["author_earnings"],
                fixed_fee=product.fixed_fee,
                printing_cost_per_page=product.printing_cost_per_page,
                commission_rate=product.commission_rate,
            )
            apply_pricing(product, pricing)

        await self.db.commit()
        await self.db.refresh(product)
        return product

    async def change_status(
        self,
        product_id: int,
        status: Any,
        public_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Move a product through its lifecycle. Re-applying the current status is
        a no-op apart from the public URL.
        """
        target = parse_status(status)
        product = await self.get_product(product_id)
        current = ProductStatus(product.status)

        if not current.can_transition_to(target):
            raise InvalidStatusTransition(current.value, target.value)

        changed = current != target
        product.status = target
        if public_url is not None:
            product.public_url = public_url

        await self.db.commit()
        await self.db.refresh(product)

        if changed:
            logger.info("Product %s status %s -> %s", product_id, current.value, target.value)

        return {
            "id": product.id,
            "previousStatus": current.value,
            "status": target.value,
            "publicUrl": product.public_url,
            "changed": changed,
        }
