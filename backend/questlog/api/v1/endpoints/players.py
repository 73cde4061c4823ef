from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select, update

from questlog.api.deps import CurrentPlayer, DBSession, commit_or_conflict
from questlog.db.models import Item, Player, PlayerQuest, Quest, QuestStatus
from questlog.schemas.item import ItemRead
from questlog.schemas.player import (
    ItemUseResponse,
    PlayerProfileRead,
    PlayerProgressRead,
    QuestCompletionResponse,
    QuestLogEntryRead,
    QuestRewardsRead,
)
from questlog.schemas.quest import QuestRead
from questlog.services.inventory import find_item, normalize_item_id
from questlog.services.leveling import apply_quest_reward

router = APIRouter(prefix="/player", tags=["player"])
logger = structlog.get_logger(__name__)


def _map_entry(entry: PlayerQuest, quest: Quest | None) -> QuestLogEntryRead:
    return QuestLogEntryRead(
        id=entry.id,
        quest_id=entry.quest_id,
        status=entry.status,
        accepted_at=entry.accepted_at,
        completed_at=entry.completed_at,
        quest=QuestRead.model_validate(quest) if quest is not None else None,
    )


async def _load_quest(quest_id: str, db: DBSession) -> Quest:
    quest = await db.scalar(select(Quest).where(Quest.id == quest_id))
    if quest is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quest not found")
    return quest


async def _lock_player(player_id: str, db: DBSession) -> Player:
    player = await db.get(Player, player_id, with_for_update=True, populate_existing=True)
    if player is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Player not found")
    return player


async def _find_entry(player_id: str, quest_id: str, db: DBSession) -> PlayerQuest | None:
    return await db.scalar(
        select(PlayerQuest).where(
            PlayerQuest.player_id == player_id,
            PlayerQuest.quest_id == quest_id,
        )
    )


@router.get("/profile", response_model=PlayerProfileRead)
async def get_profile(current_player: CurrentPlayer, db: DBSession) -> PlayerProfileRead:
    rows = await db.execute(
        select(PlayerQuest, Quest)
        .outerjoin(Quest, Quest.id == PlayerQuest.quest_id)
        .where(PlayerQuest.player_id == current_player.id)
        .order_by(PlayerQuest.accepted_at.asc())
    )
    return PlayerProfileRead(
        id=current_player.id,
        name=current_player.name,
        email=current_player.email,
        level=current_player.level,
        experience=current_player.experience,
        created_at=current_player.created_at,
        inventory=list(current_player.inventory_json),
        quests=[_map_entry(entry, quest) for entry, quest in rows.all()],
    )


@router.post(
    "/quests/{quest_id}/accept",
    response_model=QuestLogEntryRead,
    status_code=status.HTTP_201_CREATED,
)
async def accept_quest(
    quest_id: str,
    current_player: CurrentPlayer,
    db: DBSession,
) -> QuestLogEntryRead:
    quest = await _load_quest(quest_id, db)

    existing = await _find_entry(current_player.id, quest.id, db)
    if existing is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Quest already accepted (status: {existing.status.value})",
        )

    entry = PlayerQuest(
        player_id=current_player.id,
        quest_id=quest.id,
        status=QuestStatus.in_progress,
    )
    db.add(entry)
    await commit_or_conflict(db, "Quest already accepted")
    await db.refresh(entry)

    logger.info("quest accepted", player_id=current_player.id, quest_id=quest.id)
    return _map_entry(entry, quest)


@router.post("/quests/{quest_id}/complete", response_model=QuestCompletionResponse)
async def complete_quest(
    quest_id: str,
    current_player: CurrentPlayer,
    db: DBSession,
) -> QuestCompletionResponse:
    quest = await _load_quest(quest_id, db)
    player = await _lock_player(current_player.id, db)

    entry = await _find_entry(player.id, quest.id, db)
    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Quest not accepted by player",
        )
    if entry.status != QuestStatus.in_progress:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Quest is already {entry.status.value}",
        )

    # Only one request can move the entry out of in_progress; that request owns the reward.
    transition = await db.execute(
        update(PlayerQuest)
        .where(
            PlayerQuest.id == entry.id,
            PlayerQuest.status == QuestStatus.in_progress,
        )
        .values(status=QuestStatus.completed, completed_at=datetime.now(UTC))
        .execution_options(synchronize_session=False)
    )
    if transition.rowcount != 1:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Quest is already completed",
        )

    outcome = apply_quest_reward(quest.reward_package, player.experience, player.level)
    player.experience = outcome.new_experience
    player.level = outcome.new_level
    player.inventory_json = [*player.inventory_json, *outcome.item_rewards]

    await db.commit()
    await db.refresh(entry)
    await db.refresh(player)

    logger.info(
        "quest completed",
        player_id=player.id,
        quest_id=quest.id,
        experience_reward=outcome.experience_reward,
        item_rewards=outcome.item_rewards,
    )
    if outcome.leveled_up:
        logger.info("player leveled up", player_id=player.id, level=outcome.new_level)

    return QuestCompletionResponse(
        quest=_map_entry(entry, quest),
        rewards=QuestRewardsRead(
            experience=outcome.experience_reward,
            items=outcome.item_rewards,
        ),
        player=PlayerProgressRead(
            level=player.level,
            experience=player.experience,
            leveled_up=outcome.leveled_up,
            inventory=list(player.inventory_json),
        ),
    )


@router.post("/items/{item_id}/use", response_model=ItemUseResponse)
async def use_item(
    item_id: str,
    current_player: CurrentPlayer,
    db: DBSession,
) -> ItemUseResponse:
    player = await _lock_player(current_player.id, db)

    lookup = find_item(player.inventory_json, item_id)
    if not lookup.can_use:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Item not found in inventory",
        )

    item = await db.scalar(select(Item).where(Item.id == normalize_item_id(item_id)))

    remaining = list(player.inventory_json)
    del remaining[lookup.item_index]
    player.inventory_json = remaining
    await db.commit()
    await db.refresh(player)

    logger.info("item used", player_id=player.id, item_id=normalize_item_id(item_id))
    return ItemUseResponse(
        used_item=ItemRead.model_validate(item) if item is not None else None,
        remaining_inventory=list(player.inventory_json),
    )
