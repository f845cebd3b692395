"""
Utility functions for the application.
"""
from typing import Any, Dict

from sqlalchemy import func, select, Select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession


def insert_for(db: AsyncSession):
    """Dialect-specific INSERT so callers can use ON CONFLICT DO NOTHING."""
    dialect = db.bind.dialect.name if db.bind is not None else "postgresql"
    if dialect == "sqlite":
        return sqlite.insert
    return postgresql.insert


async def paginate_query(
    query: Select,
    db: AsyncSession,
    page: int = 1,
    page_size: int = 10
) -> Dict[str, Any]:
    """
    Paginate a SQLAlchemy select.

    Args:
        query: SQLAlchemy select() over a single ORM entity
        db: Database session
        page: Page number (1-indexed)
        page_size: Number of items per page

    Returns:
        Dictionary with pagination information and items
    """
    page = max(page, 1)
    page_size = max(page_size, 1)

    # Get total count for pagination
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = await db.scalar(count_query) or 0

    # Apply pagination
    offset = (page - 1) * page_size
    result = await db.execute(query.offset(offset).limit(page_size))
    items = result.scalars().all()

    # Calculate pagination values
    total_pages = (total + page_size - 1) // page_size if total > 0 else 1

    return {
        "items": items,
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_prev": page > 1
    }
