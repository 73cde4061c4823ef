from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Response, status
from sqlalchemy import func, select, update

from questlog.api.deps import CurrentPlayer, DBSession, PageParams, commit_or_conflict
from questlog.db.models import Item, Quest
from questlog.schemas.item import ItemCreate, ItemFilters, ItemPage, ItemRead, ItemUpdate

router = APIRouter(prefix="/items", tags=["items"])


async def _load_item(item_id: str, db: DBSession) -> Item:
    item = await db.scalar(select(Item).where(Item.id == item_id))
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return item


async def _assert_name_free(name: str, db: DBSession, *, exclude_id: str | None = None) -> None:
    query = select(Item.id).where(func.lower(Item.name) == name.lower())
    if exclude_id is not None:
        query = query.where(Item.id != exclude_id)
    if await db.scalar(query.limit(1)) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Item name already exists")


@router.get("", response_model=ItemPage)
async def list_items(
    current_player: CurrentPlayer,
    db: DBSession,
    pagination: PageParams,
    filters: Annotated[ItemFilters, Query()],
) -> ItemPage:
    conditions = []
    if filters.type is not None:
        conditions.append(Item.item_type == filters.type)
    if filters.min_value is not None:
        conditions.append(Item.value >= filters.min_value)
    if filters.max_value is not None:
        conditions.append(Item.value <= filters.max_value)

    total = await db.scalar(select(func.count(Item.id)).where(*conditions)) or 0
    items = await db.scalars(
        select(Item)
        .where(*conditions)
        .order_by(Item.name.asc())
        .offset(pagination.offset)
        .limit(pagination.limit)
    )
    rows = [ItemRead.model_validate(item) for item in items.all()]
    return ItemPage(
        items=rows,
        total=total,
        page=pagination.page,
        pages=pagination.pages_for(total),
        count=len(rows),
    )


@router.get("/{item_id}", response_model=ItemRead)
async def get_item(item_id: str, current_player: CurrentPlayer, db: DBSession) -> ItemRead:
    return ItemRead.model_validate(await _load_item(item_id, db))


@router.post("", response_model=ItemRead, status_code=status.HTTP_201_CREATED)
async def create_item(payload: ItemCreate, current_player: CurrentPlayer, db: DBSession) -> ItemRead:
    name = payload.name.strip()
    await _assert_name_free(name, db)

    item = Item(
        name=name,
        item_type=payload.type,
        effect=payload.effect.strip(),
        value=payload.value,
    )
    db.add(item)
    await commit_or_conflict(db, "Item name already exists")
    await db.refresh(item)
    return ItemRead.model_validate(item)


@router.put("/{item_id}", response_model=ItemRead)
async def update_item(
    item_id: str,
    payload: ItemUpdate,
    current_player: CurrentPlayer,
    db: DBSession,
) -> ItemRead:
    item = await _load_item(item_id, db)

    updates = payload.model_dump(exclude_unset=True)
    if updates.get("name") is not None:
        name = str(updates["name"]).strip()
        await _assert_name_free(name, db, exclude_id=item.id)
        item.name = name
    if updates.get("type") is not None:
        item.item_type = updates["type"]
    if updates.get("effect") is not None:
        item.effect = str(updates["effect"]).strip()
    if updates.get("value") is not None:
        item.value = int(updates["value"])

    await commit_or_conflict(db, "Item name already exists")
    await db.refresh(item)
    return ItemRead.model_validate(item)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(item_id: str, current_player: CurrentPlayer, db: DBSession) -> Response:
    item = await _load_item(item_id, db)
    await db.execute(
        update(Quest).where(Quest.reward_item_id == item.id).values(reward_item_id=None)
    )
    await db.delete(item)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
