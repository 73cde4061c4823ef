from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class QuestCreate(BaseModel):
    title: str = Field(min_length=1, max_length=160)
    description: str = Field(min_length=1, max_length=4000)
    level: int = Field(default=1, ge=1, le=1000)
    reward_experience: int = Field(default=100, ge=0, le=1_000_000)
    reward_item_id: str | None = None


class QuestUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=160)
    description: str | None = Field(default=None, min_length=1, max_length=4000)
    level: int | None = Field(default=None, ge=1, le=1000)
    reward_experience: int | None = Field(default=None, ge=0, le=1_000_000)
    reward_item_id: str | None = None


class QuestRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    level: int
    reward_experience: int
    reward_item_id: str | None
    created_at: datetime


class QuestPage(BaseModel):
    items: list[QuestRead]
    total: int
    page: int
    pages: int
    count: int
