"""Economy Models - Shop, purchases and the daily pass."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from pictocat.models.achievement import AchievementUnlock
from pictocat.models.base import CamelModel
from pictocat.models.catalog import CatImage, Envelope, Upgrade
from pictocat.models.user import PlayerStats


class ShopData(CamelModel):
    envelopes: Dict[str, Envelope] = {}
    upgrades: Dict[str, Upgrade] = {}


class PurchaseEnvelopeRequest(CamelModel):
    envelope_id: str = Field(..., min_length=1)


class PurchaseEnvelopeResponse(CamelModel):
    success: bool = True
    updated_coins: int
    new_images: List[CatImage] = []
    player_stats: PlayerStats
    last_modified: datetime
    newly_unlocked_achievements: List[AchievementUnlock] = []


class PurchaseUpgradeRequest(CamelModel):
    upgrade_id: str = Field(..., min_length=1)


class PurchaseUpgradeResponse(CamelModel):
    success: bool = True
    updated_coins: int
    purchased_upgrades: List[str] = []
    last_modified: datetime
    newly_unlocked_achievements: List[AchievementUnlock] = []


class DailyPassRewards(CamelModel):
    images: List[CatImage] = []
    upgrade: Optional[Upgrade] = None
    coin_reward: int = 0


class DailyPassStatus(CamelModel):
    """Timestamps are epoch milliseconds."""
    is_claimable: bool
    next_pass_timestamp: int
    rewards: Optional[DailyPassRewards] = None


class ClaimDailyPassResponse(CamelModel):
    success: bool = True
    unlocked_images: List[CatImage] = []
    updated_coins: int
    coin_reward: int = 0
    last_modified: datetime
    newly_unlocked_achievements: List[AchievementUnlock] = []
