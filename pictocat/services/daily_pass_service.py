"""
Daily Pass Service - 24h reward generation and claiming.

Two independent clocks live on user.dailyPass (epoch milliseconds):
lastGeneratedTimestamp decides when a fresh reward is rolled,
lastClaimedTimestamp decides when the stored reward may be claimed.
"""

import logging
import random
from typing import List, Optional, Sequence

from pictocat.constants import (
    DAILY_COIN_REWARD_IF_ALL_UNLOCKED,
    DAILY_REWARD_IMAGE_COUNT,
    DAILY_WINDOW_MS,
    UPGRADES,
)
from pictocat.database import get_db
from pictocat.errors import AlreadyClaimed, NotFound
from pictocat.models.catalog import CatImage, Upgrade
from pictocat.models.economy import ClaimDailyPassResponse, DailyPassRewards, DailyPassStatus
from pictocat.services.ledger import Ledger
from pictocat.utils.timezone_utils import now_ms

logger = logging.getLogger(__name__)


# =============================================================================
# Clock rules
# =============================================================================

def needs_generation(daily_pass: Optional[dict], now: int) -> bool:
    last = (daily_pass or {}).get("lastGeneratedTimestamp")
    return not last or now - last > DAILY_WINDOW_MS


def is_claimable(daily_pass: Optional[dict], now: int) -> bool:
    last = (daily_pass or {}).get("lastClaimedTimestamp")
    return not last or now - last > DAILY_WINDOW_MS


def next_pass_timestamp(daily_pass: Optional[dict], now: int) -> int:
    last = (daily_pass or {}).get("lastClaimedTimestamp") or (now - DAILY_WINDOW_MS)
    return last + DAILY_WINDOW_MS


def generate_rewards(
    locked_ids: Sequence[int],
    upgrade_ids: Sequence[str],
    rng: Optional[random.Random] = None
) -> dict:
    """
    Roll a new stored reward.

    Up to DAILY_REWARD_IMAGE_COUNT distinct locked images, or a flat coin
    bonus when nothing is left to unlock, plus one random upgrade reference.
    """
    rng = rng or random
    image_ids: List[int] = []
    coin_reward = 0

    if locked_ids:
        image_ids = rng.sample(list(locked_ids), min(DAILY_REWARD_IMAGE_COUNT, len(locked_ids)))
    else:
        coin_reward = DAILY_COIN_REWARD_IF_ALL_UNLOCKED

    return {
        "imageIds": image_ids,
        "upgradeId": rng.choice(list(upgrade_ids)) if upgrade_ids else None,
        "coinReward": coin_reward,
    }


class DailyPassService:
    """Daily reward scheduler."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    async def _load_user(self, user_id: str) -> dict:
        db = get_db()
        user = await db.users.find_one({"_id": user_id})
        if not user:
            raise NotFound("User not found")
        return user

    async def _images(self, ids: List[int]) -> List[CatImage]:
        if not ids:
            return []
        db = get_db()
        docs = await db.cats.find({"numeric_id": {"$in": ids}}).to_list(length=None)
        return [CatImage.from_doc(doc) for doc in docs]

    async def _upgrade(self, upgrade_id: Optional[str]) -> Optional[Upgrade]:
        if not upgrade_id:
            return None
        db = get_db()
        doc = await db.upgrades.find_one({"_id": upgrade_id})
        if doc:
            return Upgrade.from_doc(doc)
        seed = UPGRADES.get(upgrade_id)
        return Upgrade.model_validate({**seed, "id": upgrade_id}) if seed else None

    async def get_status(self, user_id: str) -> DailyPassStatus:
        """Preview the stored reward, regenerating it when the window has elapsed."""
        db = get_db()
        user = await self._load_user(user_id)
        daily_pass = dict(user.get("dailyPass") or {})
        now = now_ms()

        if needs_generation(daily_pass, now):
            owned = user.get("unlockedImageIds") or []
            locked = await db.cats.distinct("numeric_id", {"numeric_id": {"$nin": owned}})
            upgrade_ids = await db.upgrades.distinct("_id") or list(UPGRADES)
            rewards = generate_rewards(locked, upgrade_ids, self.rng)

            ledger = Ledger(user)
            ledger.set_field("dailyPass.lastGeneratedTimestamp", now)
            ledger.set_field("dailyPass.rewards", rewards)
            await ledger.commit(db, evaluate=False)

            daily_pass.update(lastGeneratedTimestamp=now, rewards=rewards)
            logger.info(f"Generated daily pass for user {user_id}: {rewards}")

        rewards = daily_pass.get("rewards")
        if not rewards:
            return DailyPassStatus(
                is_claimable=False,
                next_pass_timestamp=now + DAILY_WINDOW_MS,
                rewards=DailyPassRewards(),
            )

        return DailyPassStatus(
            is_claimable=is_claimable(daily_pass, now),
            next_pass_timestamp=next_pass_timestamp(daily_pass, now),
            rewards=DailyPassRewards(
                images=await self._images(rewards.get("imageIds") or []),
                upgrade=await self._upgrade(rewards.get("upgradeId")),
                coin_reward=rewards.get("coinReward") or 0,
            ),
        )

    async def claim(self, user_id: str) -> ClaimDailyPassResponse:
        """Claim the stored reward once per 24h window."""
        db = get_db()
        user = await self._load_user(user_id)
        daily_pass = user.get("dailyPass") or {}
        rewards = daily_pass.get("rewards")
        if not rewards:
            raise NotFound("Daily pass data not found")

        now = now_ms()
        if not is_claimable(daily_pass, now):
            raise AlreadyClaimed()

        ledger = Ledger(user)
        image_ids = rewards.get("imageIds") or []
        coin_reward = rewards.get("coinReward") or 0
        ledger.unlock_items(image_ids)
        ledger.grant_coins(coin_reward)
        ledger.set_field("dailyPass.lastClaimedTimestamp", now)
        # Two racing claims: only the one still seeing the old timestamp wins
        ledger.require(
            {"dailyPass.lastClaimedTimestamp": daily_pass.get("lastClaimedTimestamp")},
            AlreadyClaimed(),
        )
        last_modified = await ledger.commit(db)

        logger.info(f"User {user_id} claimed daily pass: images={image_ids} coins={coin_reward}")

        return ClaimDailyPassResponse(
            unlocked_images=await self._images(image_ids),
            updated_coins=ledger.coins,
            coin_reward=coin_reward,
            last_modified=last_modified,
            newly_unlocked_achievements=ledger.unlocks,
        )
