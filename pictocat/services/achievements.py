"""
Achievement Evaluator

Pure function of a user's stat snapshot. For every achievement that is
not maxed out, only the next tier is checked, so a single evaluation
advances each achievement by at most one tier. Callers run it after every
mutation; larger jumps resolve across later calls.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from pictocat.constants import ACHIEVEMENTS, STAT_COUNTERS
from pictocat.models.achievement import Achievement, AchievementUnlock

logger = logging.getLogger(__name__)

LENGTH_SUFFIX = ".length"

ALL_ACHIEVEMENTS: List[Achievement] = [Achievement.model_validate(a) for a in ACHIEVEMENTS]


class UnknownStatSelector(ValueError):
    """Raised when an achievement points at a stat the evaluator cannot read."""


@dataclass
class AchievementResult:
    """Ledger delta plus unlock events produced by one evaluation."""
    coins: int = 0
    xp: int = 0
    achievements: Dict[str, dict] = field(default_factory=dict)
    unlocks: List[AchievementUnlock] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.unlocks)


def resolve_stat(user: dict, selector: str) -> float:
    """Read the current progress value a stat selector points at."""
    if selector == "coins":
        return user.get("coins") or 0
    if selector == "playerStats.level":
        return (user.get("playerStats") or {}).get("level") or 1
    if selector.endswith(LENGTH_SUFFIX):
        value = user.get(selector[:-len(LENGTH_SUFFIX)])
        if value is None:
            return 0
        if not isinstance(value, (list, tuple, set, dict)):
            raise UnknownStatSelector(selector)
        return len(value)
    if selector in STAT_COUNTERS:
        return (user.get("stats") or {}).get(selector) or 0
    raise UnknownStatSelector(selector)


def evaluate(user: dict, definitions: Optional[Iterable[Achievement]] = None) -> AchievementResult:
    """
    Determine newly crossed tiers for a user snapshot.

    The snapshot is read only. Rewards are returned as a delta for the
    ledger to apply.
    """
    definitions = ALL_ACHIEVEMENTS if definitions is None else definitions
    result = AchievementResult()
    unlocked = user.get("unlockedAchievements") or {}

    for achievement in definitions:
        state = unlocked.get(achievement.id) or {}
        current_tier = int(state.get("unlockedTier") or 0)
        if current_tier >= len(achievement.tiers):
            continue

        try:
            progress = resolve_stat(user, achievement.stat)
        except UnknownStatSelector:
            logger.warning(f"Skipping achievement {achievement.id}: unknown stat '{achievement.stat}'")
            result.skipped.append(achievement.id)
            continue

        next_tier = achievement.tiers[current_tier]
        if progress < next_tier.value:
            continue

        new_tier = current_tier + 1
        result.achievements[achievement.id] = {"unlockedTier": new_tier, "progress": progress}
        result.coins += next_tier.coins
        result.xp += next_tier.xp
        result.unlocks.append(AchievementUnlock(
            achievement_id=achievement.id,
            tier=new_tier,
            coins=next_tier.coins,
            xp=next_tier.xp,
            achievement=achievement,
        ))

    return result
