"""Experience, level and quest reward calculation.

Everything here is pure: callers load the player's current state, ask for the
outcome of a reward and persist the returned values themselves. Guarding
against awarding the same quest twice is the caller's job.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from questlog.services.inventory import normalize_item_id

EXPERIENCE_PER_LEVEL = 100


def derive_level(experience: int) -> int:
    """Flat curve: every 100 experience is one level, starting at level 1.

    Negative experience is not clamped and yields a level below 1.
    """
    return experience // EXPERIENCE_PER_LEVEL + 1


@dataclass(frozen=True, slots=True)
class RewardPackage:
    experience: int = 0
    item: str | None = None

    @classmethod
    def from_config(cls, config: Mapping[str, object] | None) -> RewardPackage:
        """Build a fully populated package from a partial ``{experience?, item?}`` mapping."""
        if not config:
            return cls()
        experience = config.get("experience") or 0
        item = config.get("item")
        item_id = normalize_item_id(item) if item is not None else ""
        return cls(experience=int(experience), item=item_id or None)


@dataclass(frozen=True, slots=True)
class QuestRewardResult:
    experience_reward: int
    new_experience: int
    new_level: int
    leveled_up: bool
    item_rewards: list[str] = field(default_factory=list)


def apply_quest_reward(
    reward_package: RewardPackage | Mapping[str, object] | None,
    current_experience: int,
    current_level: int,
) -> QuestRewardResult:
    """Compute the player state after receiving ``reward_package``.

    A raw ``{experience?, item?}`` mapping or ``None`` is normalized first.

    ``leveled_up`` compares against ``current_level`` exactly as supplied; a
    stale level from the caller is reflected in the flag rather than corrected.
    """
    if isinstance(reward_package, RewardPackage):
        package = reward_package
    else:
        package = RewardPackage.from_config(reward_package)
    experience_reward = package.experience
    new_experience = current_experience + experience_reward
    new_level = derive_level(new_experience)

    return QuestRewardResult(
        experience_reward=experience_reward,
        new_experience=new_experience,
        new_level=new_level,
        leveled_up=new_level > current_level,
        item_rewards=[package.item] if package.item is not None else [],
    )
