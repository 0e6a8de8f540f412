from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.db.database import async_get_db
from ...core.exceptions.http_exceptions import NotFoundException
from ...crud.crud_categories import crud_categories
from ...models.category import Category
from ...schemas.category import (
    CategoryCreate,
    CategoryCreateInternal,
    CategoryRead,
    CategoryUpdate,
    ContentType,
    VisibilityUpdate,
)
from ..dependencies import get_current_admin, require_paid_access

router = APIRouter(prefix="/categories", tags=["categories"])


async def _get_category_or_404(db: AsyncSession, category_id: int, include_hidden: bool) -> dict:
    filters = {"id": category_id}
    if not include_hidden:
        filters["is_visible"] = True
    category = await crud_categories.get(db=db, schema_to_select=CategoryRead, **filters)
    if category is None:
        raise NotFoundException("Category not found")
    return category


@router.get("", response_model=list[CategoryRead])
async def read_categories(
    current_user: Annotated[dict, Depends(require_paid_access)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
    type: ContentType | None = None,
) -> list[Category]:
    stmt = select(Category).order_by(Category.sort_order, Category.id)
    if type is not None:
        stmt = stmt.where(Category.type == type)
    if not current_user["is_admin"]:
        stmt = stmt.where(Category.is_visible.is_(True))
    return list((await db.execute(stmt)).scalars().all())


@router.get("/{category_id}", response_model=CategoryRead)
async def read_category(
    category_id: int,
    current_user: Annotated[dict, Depends(require_paid_access)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> dict:
    return await _get_category_or_404(db, category_id, include_hidden=current_user["is_admin"])


@router.post("", response_model=CategoryRead, status_code=201, dependencies=[Depends(get_current_admin)])
async def write_category(
    category: CategoryCreate,
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> dict:
    max_order = (await db.execute(select(func.max(Category.sort_order)))).scalar()
    category_internal = CategoryCreateInternal(**category.model_dump(), sort_order=(max_order or 0) + 1)
    created = await crud_categories.create(db=db, object=category_internal)
    return await _get_category_or_404(db, created.id, include_hidden=True)


@router.patch("/{category_id}", response_model=CategoryRead, dependencies=[Depends(get_current_admin)])
async def patch_category(
    category_id: int,
    values: CategoryUpdate,
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> dict:
    await _get_category_or_404(db, category_id, include_hidden=True)
    await crud_categories.update(db=db, object=values, id=category_id)
    return await _get_category_or_404(db, category_id, include_hidden=True)


@router.patch("/{category_id}/visibility", response_model=CategoryRead, dependencies=[Depends(get_current_admin)])
async def set_category_visibility(
    category_id: int,
    values: VisibilityUpdate,
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> dict:
    await _get_category_or_404(db, category_id, include_hidden=True)
    await crud_categories.update(db=db, object={"is_visible": values.is_visible}, id=category_id)
    return await _get_category_or_404(db, category_id, include_hidden=True)


@router.delete("/{category_id}", dependencies=[Depends(get_current_admin)])
async def erase_category(
    category_id: int,
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> dict[str, str]:
    await _get_category_or_404(db, category_id, include_hidden=True)
    await crud_categories.db_delete(db=db, id=category_id)
    return {"message": "Category deleted"}
