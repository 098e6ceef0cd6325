"""Achievement Models - Static tier ladders and unlock events."""

from typing import List

from pydantic import Field, field_validator

from pictocat.models.base import CamelModel


class AchievementTier(CamelModel):
    value: float
    coins: int = Field(0, ge=0)
    xp: int = Field(0, ge=0)


class Achievement(CamelModel):
    """Achievement definition. Data, never mutated at runtime."""
    id: str
    name: str = ""
    description: str = ""
    category: str = ""
    stat: str
    tiers: List[AchievementTier]

    @field_validator("tiers")
    @classmethod
    def tiers_strictly_increasing(cls, v: List[AchievementTier]) -> List[AchievementTier]:
        for previous, current in zip(v, v[1:]):
            if current.value <= previous.value:
                raise ValueError("Achievement tiers must be strictly increasing in value")
        return v


class UserAchievement(CamelModel):
    unlocked_tier: int = Field(0, ge=0)
    progress: float = 0


class AchievementUnlock(CamelModel):
    """Emitted once per tier crossed, for client notification."""
    achievement_id: str
    tier: int
    coins: int
    xp: int
    achievement: Achievement
