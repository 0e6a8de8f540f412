from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.db.database import async_get_db
from ...core.exceptions.http_exceptions import NotFoundException
from ...crud.crud_categories import crud_categories
from ...crud.crud_media_items import crud_media_items
from ...models.category import Category
from ...models.media_item import MediaItem
from ...schemas.category import VisibilityUpdate
from ...schemas.media_item import MediaItemCreate, MediaItemCreateInternal, MediaItemRead, MediaItemUpdate
from ..dependencies import get_current_admin, require_paid_access

router = APIRouter(tags=["media items"])


async def get_media_item_or_404(db: AsyncSession, media_item_id: int, include_hidden: bool) -> MediaItem:
    """Fetch an item, hiding it from non-admins when it or its category is hidden."""
    stmt = select(MediaItem).where(MediaItem.id == media_item_id)
    if not include_hidden:
        stmt = stmt.join(Category, Category.id == MediaItem.category_id).where(
            MediaItem.is_visible.is_(True), Category.is_visible.is_(True)
        )
    item = (await db.execute(stmt)).scalar_one_or_none()
    if item is None:
        raise NotFoundException("Media item not found")
    return item


@router.get("/categories/{category_id}/media-items", response_model=list[MediaItemRead])
async def read_media_items(
    category_id: int,
    current_user: Annotated[dict, Depends(require_paid_access)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> list[MediaItem]:
    is_admin = current_user["is_admin"]
    category_filters = {"id": category_id} if is_admin else {"id": category_id, "is_visible": True}
    if not await crud_categories.exists(db=db, **category_filters):
        raise NotFoundException("Category not found")

    stmt = select(MediaItem).where(MediaItem.category_id == category_id).order_by(MediaItem.sort_order, MediaItem.id)
    if not is_admin:
        stmt = stmt.where(MediaItem.is_visible.is_(True))
    return list((await db.execute(stmt)).scalars().all())


@router.get("/media-items/{media_item_id}", response_model=MediaItemRead)
async def read_media_item(
    media_item_id: int,
    current_user: Annotated[dict, Depends(require_paid_access)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> MediaItem:
    return await get_media_item_or_404(db, media_item_id, include_hidden=current_user["is_admin"])


@router.post(
    "/categories/{category_id}/media-items",
    response_model=MediaItemRead,
    status_code=201,
    dependencies=[Depends(get_current_admin)],
)
async def write_media_item(
    category_id: int,
    media_item: MediaItemCreate,
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> MediaItem:
    if not await crud_categories.exists(db=db, id=category_id):
        raise NotFoundException("Category not found")

    max_order = (
        await db.execute(select(func.max(MediaItem.sort_order)).where(MediaItem.category_id == category_id))
    ).scalar()
    media_item_internal = MediaItemCreateInternal(
        **media_item.model_dump(), category_id=category_id, sort_order=(max_order or 0) + 1
    )
    created = await crud_media_items.create(db=db, object=media_item_internal)
    return await get_media_item_or_404(db, created.id, include_hidden=True)


@router.patch("/media-items/{media_item_id}", response_model=MediaItemRead, dependencies=[Depends(get_current_admin)])
async def patch_media_item(
    media_item_id: int,
    values: MediaItemUpdate,
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> dict:
    await get_media_item_or_404(db, media_item_id, include_hidden=True)
    await crud_media_items.update(db=db, object=values, id=media_item_id)
    return await _reload(db, media_item_id)


@router.patch(
    "/media-items/{media_item_id}/visibility",
    response_model=MediaItemRead,
    dependencies=[Depends(get_current_admin)],
)
async def set_media_item_visibility(
    media_item_id: int,
    values: VisibilityUpdate,
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> dict:
    await get_media_item_or_404(db, media_item_id, include_hidden=True)
    await crud_media_items.update(db=db, object={"is_visible": values.is_visible}, id=media_item_id)
    return await _reload(db, media_item_id)


@router.delete("/media-items/{media_item_id}", dependencies=[Depends(get_current_admin)])
async def erase_media_item(
    media_item_id: int,
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> dict[str, str]:
    await get_media_item_or_404(db, media_item_id, include_hidden=True)
    await crud_media_items.db_delete(db=db, id=media_item_id)
    return {"message": "Media item deleted"}


async def _reload(db: AsyncSession, media_item_id: int) -> dict:
    item = await crud_media_items.get(db=db, schema_to_select=MediaItemRead, id=media_item_id)
    if item is None:
        raise NotFoundException("Media item not found")
    return item
