"""
Offset pagination for listings that grow without bound (the audit trail).
"""
from typing import Any, Dict, Tuple
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

MAX_PAGE_SIZE = 100


def clamp_page(page: int, page_size: int) -> Tuple[int, int]:
    """Page is at least 1; page size is kept within 1..MAX_PAGE_SIZE"""
    return max(1, page), max(1, min(MAX_PAGE_SIZE, page_size))


async def paginate(db: AsyncSession, query: Select, page: int = 1, page_size: int = 20) -> Dict[str, Any]:
    """
    Run `query` for one page.

    Returns items, total, page, page_size, total_pages, has_next and
    has_previous. An empty result still reports one page.
    """
    page, page_size = clamp_page(page, page_size)

    counted = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(counted)).scalar() or 0
    total_pages = max(1, -(-total // page_size))

    result = await db.execute(query.offset((page - 1) * page_size).limit(page_size))
    return {
        "items": result.scalars().all(),
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_previous": page > 1,
    }
