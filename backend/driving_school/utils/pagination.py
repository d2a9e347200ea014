"""
Pagination Utility Module

Standard ``page`` / ``limit`` handling shared by all list endpoints.
"""
from dataclasses import dataclass
from typing import Any, List, Optional

from fastapi import Query
from pydantic import BaseModel
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from driving_school.core.config import settings


class PaginationParams(BaseModel):
    """Standard pagination parameters"""
    page: int = 1
    limit: int = settings.DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def pagination_params(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, description="Items per page"),
) -> PaginationParams:
    """FastAPI dependency; caps limit at MAX_PAGE_SIZE"""
    return PaginationParams(page=page, limit=min(limit, settings.MAX_PAGE_SIZE))


@dataclass
class Page:
    """One page of query results"""
    items: List[Any]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.total > 0 else 0

    def meta(self) -> dict:
        return {"page": self.page, "limit": self.limit, "total": self.total, "pages": self.pages}


async def paginate(
    db: AsyncSession,
    query: Select,
    params: PaginationParams,
    count_query: Optional[Select] = None
) -> Page:
    """
    Apply pagination to a SQLAlchemy query.

    Args:
        db: Database session
        query: Base query, already filtered and ordered
        params: Page number and size
        count_query: Optional custom count query

    Returns:
        Page with the rows of the requested page and the total row count
    """
    if count_query is None:
        count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_query)).scalar() or 0

    result = await db.execute(query.offset(params.offset).limit(params.limit))
    items = list(result.scalars().all())

    return Page(items=items, total=total, page=params.page, limit=params.limit)
