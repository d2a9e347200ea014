"""Small query helpers shared by the services"""
from typing import Optional, Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from driving_school.core.exceptions import ResourceNotFoundError

ModelT = TypeVar("ModelT")


async def get_or_404(
    db: AsyncSession,
    model: Type[ModelT],
    obj_id: str,
    resource_name: Optional[str] = None
) -> ModelT:
    """
    Load a row by primary key or raise ResourceNotFoundError.

    populate_existing refreshes rows already in the session so eagerly
    loaded relationships reflect foreign keys changed in this request.
    """
    obj = await db.get(model, obj_id, populate_existing=True)
    if obj is None:
        raise ResourceNotFoundError(resource_name or model.__name__, obj_id)
    return obj


def apply_changes(obj, changes: dict) -> None:
    for field, value in changes.items():
        setattr(obj, field, value)
