from fastapi import APIRouter, HTTPException, Query, Response, status
from sqlalchemy import delete, func, select

from questlog.api.deps import CurrentPlayer, DBSession, PageParams, commit_or_conflict
from questlog.db.models import Item, PlayerQuest, Quest
from questlog.schemas.quest import QuestCreate, QuestPage, QuestRead, QuestUpdate

router = APIRouter(prefix="/quests", tags=["quests"])


async def _load_quest(quest_id: str, db: DBSession) -> Quest:
    quest = await db.scalar(select(Quest).where(Quest.id == quest_id))
    if quest is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quest not found")
    return quest


async def _assert_title_free(title: str, db: DBSession, *, exclude_id: str | None = None) -> None:
    query = select(Quest.id).where(func.lower(Quest.title) == title.lower())
    if exclude_id is not None:
        query = query.where(Quest.id != exclude_id)
    if await db.scalar(query.limit(1)) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Quest title already exists")


async def _assert_reward_item(item_id: str | None, db: DBSession) -> str | None:
    if item_id is None:
        return None
    exists = await db.scalar(select(Item.id).where(Item.id == item_id))
    if exists is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="reward_item_id must reference an existing item",
        )
    return item_id


@router.get("", response_model=QuestPage)
async def list_quests(
    current_player: CurrentPlayer,
    db: DBSession,
    pagination: PageParams,
    max_level: int | None = Query(default=None, ge=1),
) -> QuestPage:
    conditions = []
    if max_level is not None:
        conditions.append(Quest.level <= max_level)

    total = await db.scalar(select(func.count(Quest.id)).where(*conditions)) or 0
    quests = await db.scalars(
        select(Quest)
        .where(*conditions)
        .order_by(Quest.level.asc(), Quest.title.asc())
        .offset(pagination.offset)
        .limit(pagination.limit)
    )
    rows = [QuestRead.model_validate(quest) for quest in quests.all()]
    return QuestPage(
        items=rows,
        total=total,
        page=pagination.page,
        pages=pagination.pages_for(total),
        count=len(rows),
    )


@router.get("/{quest_id}", response_model=QuestRead)
async def get_quest(quest_id: str, current_player: CurrentPlayer, db: DBSession) -> QuestRead:
    return QuestRead.model_validate(await _load_quest(quest_id, db))


@router.post("", response_model=QuestRead, status_code=status.HTTP_201_CREATED)
async def create_quest(
    payload: QuestCreate,
    current_player: CurrentPlayer,
    db: DBSession,
) -> QuestRead:
    title = payload.title.strip()
    await _assert_title_free(title, db)

    quest = Quest(
        title=title,
        description=payload.description.strip(),
        level=payload.level,
        reward_experience=payload.reward_experience,
        reward_item_id=await _assert_reward_item(payload.reward_item_id, db),
    )
    db.add(quest)
    await commit_or_conflict(db, "Quest title already exists")
    await db.refresh(quest)
    return QuestRead.model_validate(quest)


@router.put("/{quest_id}", response_model=QuestRead)
async def update_quest(
    quest_id: str,
    payload: QuestUpdate,
    current_player: CurrentPlayer,
    db: DBSession,
) -> QuestRead:
    quest = await _load_quest(quest_id, db)

    updates = payload.model_dump(exclude_unset=True)
    if updates.get("title") is not None:
        title = str(updates["title"]).strip()
        await _assert_title_free(title, db, exclude_id=quest.id)
        quest.title = title
    if updates.get("description") is not None:
        quest.description = str(updates["description"]).strip()
    if updates.get("level") is not None:
        quest.level = int(updates["level"])
    if updates.get("reward_experience") is not None:
        quest.reward_experience = int(updates["reward_experience"])
    if "reward_item_id" in updates:
        quest.reward_item_id = await _assert_reward_item(updates["reward_item_id"], db)

    await commit_or_conflict(db, "Quest title already exists")
    await db.refresh(quest)
    return QuestRead.model_validate(quest)


@router.delete("/{quest_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_quest(quest_id: str, current_player: CurrentPlayer, db: DBSession) -> Response:
    quest = await _load_quest(quest_id, db)
    await db.execute(delete(PlayerQuest).where(PlayerQuest.quest_id == quest.id))
    await db.delete(quest)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
