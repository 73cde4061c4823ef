from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from questlog.db.models import ItemType


class ItemCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    type: ItemType = ItemType.quest_item
    effect: str = Field(min_length=1, max_length=2000)
    value: int = Field(default=0, ge=0, le=1_000_000)


class ItemUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    type: ItemType | None = None
    effect: str | None = Field(default=None, min_length=1, max_length=2000)
    value: int | None = Field(default=None, ge=0, le=1_000_000)


class ItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    type: ItemType = Field(validation_alias=AliasChoices("item_type", "type"))
    effect: str
    value: int
    created_at: datetime


class ItemFilters(BaseModel):
    type: ItemType | None = None
    min_value: int | None = Field(default=None, ge=0)
    max_value: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def validate_range(self) -> "ItemFilters":
        if (
            self.min_value is not None
            and self.max_value is not None
            and self.min_value > self.max_value
        ):
            raise ValueError("min_value cannot be greater than max_value")
        return self


class ItemPage(BaseModel):
    items: list[ItemRead]
    total: int
    page: int
    pages: int
    count: int
