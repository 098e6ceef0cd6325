"""
Leveling

XP crediting. Runs to a fixed point: excess XP keeps rolling into further
level-ups, each one raising the next threshold by XP_GROWTH_FACTOR.
"""

import math
from typing import Tuple

from pictocat.constants import INITIAL_XP_TO_NEXT_LEVEL, XP_GROWTH_FACTOR


def normalize_player_stats(player_stats: dict) -> dict:
    """Fill defaults so a partial/legacy document is safe to level."""
    stats = dict(player_stats or {})
    stats["level"] = max(int(stats.get("level") or 1), 1)
    stats["xp"] = max(int(stats.get("xp") or 0), 0)
    stats["xpToNextLevel"] = max(int(stats.get("xpToNextLevel") or INITIAL_XP_TO_NEXT_LEVEL), 1)
    return stats


def apply_xp(player_stats: dict, amount: int = 0) -> Tuple[dict, int]:
    """
    Credit XP and resolve level-ups.

    Returns (new_player_stats, levels_gained). The input dict is not
    mutated. Afterwards xp < xpToNextLevel always holds.
    """
    stats = normalize_player_stats(player_stats)
    stats["xp"] += max(int(amount), 0)

    levels_gained = 0
    while stats["xp"] >= stats["xpToNextLevel"]:
        stats["level"] += 1
        stats["xp"] -= stats["xpToNextLevel"]
        stats["xpToNextLevel"] = max(math.floor(stats["xpToNextLevel"] * XP_GROWTH_FACTOR), 1)
        levels_gained += 1

    return stats, levels_gained
