import enum
import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from questlog.db.base import Base
from questlog.services.leveling import RewardPackage


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


class ItemType(enum.StrEnum):
    weapon = "weapon"
    armor = "armor"
    potion = "potion"
    quest_item = "quest_item"


class QuestStatus(enum.StrEnum):
    available = "available"
    in_progress = "in_progress"
    completed = "completed"


class Player(Base):
    __tablename__ = "players"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(80), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    experience: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    level: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    inventory_json: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_now,
        onupdate=_now,
        nullable=False,
    )

    credential: Mapped["AuthCredential"] = relationship(back_populates="player", uselist=False)
    quest_log: Mapped[list["PlayerQuest"]] = relationship(back_populates="player")


class AuthCredential(Base):
    __tablename__ = "auth_credentials"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    player_id: Mapped[str] = mapped_column(
        ForeignKey("players.id", ondelete="CASCADE"),
        unique=True,
    )
    password_hash: Mapped[str] = mapped_column(String(512), nullable=False)
    password_algo: Mapped[str] = mapped_column(String(64), default="argon2id", nullable=False)
    password_updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_now,
        nullable=False,
    )

    player: Mapped[Player] = relationship(back_populates="credential")


class Item(Base):
    __tablename__ = "items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(120), unique=True, index=True)
    item_type: Mapped[ItemType] = mapped_column(
        Enum(ItemType, native_enum=False),
        default=ItemType.quest_item,
        nullable=False,
    )
    effect: Mapped[str] = mapped_column(Text, nullable=False)
    value: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_now,
        nullable=False,
    )


class Quest(Base):
    __tablename__ = "quests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    title: Mapped[str] = mapped_column(String(160), unique=True, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    level: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    reward_experience: Mapped[int] = mapped_column(Integer, default=100, nullable=False)
    reward_item_id: Mapped[str | None] = mapped_column(
        ForeignKey("items.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_now,
        onupdate=_now,
        nullable=False,
    )

    @property
    def reward_package(self) -> RewardPackage:
        return RewardPackage.from_config(
            {"experience": self.reward_experience, "item": self.reward_item_id}
        )


class PlayerQuest(Base):
    __tablename__ = "player_quests"
    __table_args__ = (
        UniqueConstraint("player_id", "quest_id", name="uq_player_quests_player_quest"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    player_id: Mapped[str] = mapped_column(
        ForeignKey("players.id", ondelete="CASCADE"),
        index=True,
    )
    quest_id: Mapped[str] = mapped_column(
        ForeignKey("quests.id", ondelete="CASCADE"),
        index=True,
    )
    status: Mapped[QuestStatus] = mapped_column(
        Enum(QuestStatus, native_enum=False),
        default=QuestStatus.in_progress,
        nullable=False,
    )
    accepted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_now,
        nullable=False,
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    player: Mapped[Player] = relationship(back_populates="quest_log")
    quest: Mapped[Quest] = relationship()


Index("ix_items_type_value", Item.item_type, Item.value)
Index("ix_player_quests_player_status", PlayerQuest.player_id, PlayerQuest.status)
