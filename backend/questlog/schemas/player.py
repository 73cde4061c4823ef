from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from questlog.db.models import QuestStatus
from questlog.schemas.item import ItemRead
from questlog.schemas.quest import QuestRead


class PlayerRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: EmailStr
    level: int
    experience: int
    created_at: datetime


class QuestLogEntryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    quest_id: str
    status: QuestStatus
    accepted_at: datetime
    completed_at: datetime | None
    quest: QuestRead | None = None


class PlayerProfileRead(PlayerRead):
    inventory: list[str] = Field(default_factory=list)
    quests: list[QuestLogEntryRead] = Field(default_factory=list)


class QuestRewardsRead(BaseModel):
    experience: int
    items: list[str]


class PlayerProgressRead(BaseModel):
    level: int
    experience: int
    leveled_up: bool
    inventory: list[str]


class QuestCompletionResponse(BaseModel):
    quest: QuestLogEntryRead
    rewards: QuestRewardsRead
    player: PlayerProgressRead


class ItemUseResponse(BaseModel):
    used_item: ItemRead | None
    remaining_inventory: list[str]
