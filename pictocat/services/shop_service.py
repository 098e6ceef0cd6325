"""
Shop Service - Catalog, envelope (gacha) and upgrade purchases.

Reference data is seeded on first access. Purchases run the gacha resolver
against the catalog and commit the debit, unlocks, XP and achievement
rewards through a single ledger write.
"""

import logging
import random
from typing import List, Optional

from pictocat.constants import ENVELOPES, EPIC_IMAGE_URLS, RARE_THEMES, SEED_FLAG_ID, UPGRADES
from pictocat.database import get_db
from pictocat.errors import AllItemsOwned, NotFound, ValidationError
from pictocat.models.catalog import CatImage, Envelope, EnvelopeUpdate, Rarity, Upgrade
from pictocat.models.economy import PurchaseEnvelopeResponse, PurchaseUpgradeResponse, ShopData
from pictocat.models.user import PlayerStats
from pictocat.services import gacha
from pictocat.services.ledger import Ledger

logger = logging.getLogger(__name__)


def catalog_rarity(url: str, theme: str) -> Rarity:
    """Rarity a catalog item gets when seeded."""
    if url in EPIC_IMAGE_URLS:
        return Rarity.EPIC
    if theme in RARE_THEMES:
        return Rarity.RARE
    return Rarity.COMMON


class ShopService:
    """Economy catalog and purchases."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    # =========================================================================
    # Seeding
    # =========================================================================

    async def ensure_seeded(self) -> bool:
        """
        Seed envelopes, upgrades and catalog rarities once.

        Safe to race: every write is an idempotent upsert, and the flag is
        only read as a shortcut. Returns True when this call did the seeding.
        """
        db = get_db()
        config = await db.system_config.find_one({"_id": SEED_FLAG_ID})
        if config and config.get("isSeeded"):
            return False

        logger.info("Shop data not seeded, initializing")

        for envelope_id, data in ENVELOPES.items():
            await db.envelopes.update_one(
                {"_id": envelope_id}, {"$setOnInsert": data}, upsert=True
            )
        for upgrade_id, data in UPGRADES.items():
            await db.upgrades.update_one(
                {"_id": upgrade_id}, {"$setOnInsert": data}, upsert=True
            )

        await db.cats.update_many({"rarity": {"$exists": False}}, {"$set": {"rarity": "common"}})
        await db.cats.update_many({"theme": {"$in": RARE_THEMES}}, {"$set": {"rarity": "rare"}})
        await db.cats.update_many({"url": {"$in": EPIC_IMAGE_URLS}}, {"$set": {"rarity": "epic"}})

        await db.system_config.update_one(
            {"_id": SEED_FLAG_ID}, {"$set": {"isSeeded": True}}, upsert=True
        )
        logger.info("Shop data seeded")
        return True

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_catalog(self) -> List[CatImage]:
        db = get_db()
        docs = await db.cats.find({}).sort("numeric_id", 1).to_list(length=None)
        return [CatImage.from_doc(doc) for doc in docs]

    async def get_envelope(self, envelope_id: str) -> Envelope:
        db = get_db()
        doc = await db.envelopes.find_one({"_id": envelope_id})
        if not doc:
            raise NotFound("Envelope not found")
        return Envelope.from_doc(doc)

    async def get_upgrade(self, upgrade_id: str) -> Upgrade:
        db = get_db()
        doc = await db.upgrades.find_one({"_id": upgrade_id})
        if not doc:
            raise NotFound("Upgrade not found")
        return Upgrade.from_doc(doc)

    async def _load_user(self, user_id: str) -> dict:
        db = get_db()
        user = await db.users.find_one({"_id": user_id})
        if not user:
            raise NotFound("User not found")
        return user

    async def get_shop_data(self, user_id: str) -> ShopData:
        """Envelopes priced for the caller's level, plus upgrades."""
        await self.ensure_seeded()
        db = get_db()
        user = await self._load_user(user_id)
        level = (user.get("playerStats") or {}).get("level") or 1

        envelopes = {}
        async for doc in db.envelopes.find({}):
            envelope = Envelope.from_doc(doc)
            envelope.current_cost = envelope.cost_for_level(level)
            envelopes[envelope.id] = envelope

        upgrades = {}
        async for doc in db.upgrades.find({}):
            upgrade = Upgrade.from_doc(doc)
            upgrades[upgrade.id] = upgrade

        return ShopData(envelopes=envelopes, upgrades=upgrades)

    # =========================================================================
    # Purchases
    # =========================================================================

    async def purchase_envelope(self, user_id: str, envelope_id: str) -> PurchaseEnvelopeResponse:
        """
        Buy and open an envelope.

        The whole-catalog-owned case is rejected before any coins move.
        """
        db = get_db()
        user = await self._load_user(user_id)
        envelope = await self.get_envelope(envelope_id)

        ledger = Ledger(user)
        cost = envelope.cost_for_level(ledger.level)
        ledger.spend_coins(cost)

        catalog = await self.get_catalog()
        owned = user.get("unlockedImageIds") or []
        if not gacha.unowned_items(catalog, owned):
            raise AllItemsOwned()

        won = gacha.draw(envelope, owned, catalog, self.rng)
        ledger.unlock_items([item.id for item in won])
        ledger.grant_xp(envelope.xp)
        ledger.record_stat("envelopesOpened", 1)
        last_modified = await ledger.commit(db)

        logger.info(
            f"User {user_id} opened {envelope_id} for {cost} coins: "
            f"{[item.id for item in won]}"
        )

        return PurchaseEnvelopeResponse(
            updated_coins=ledger.coins,
            new_images=won,
            player_stats=PlayerStats.model_validate(ledger.player_stats),
            last_modified=last_modified,
            newly_unlocked_achievements=ledger.unlocks,
        )

    async def purchase_upgrade(self, user_id: str, upgrade_id: str) -> PurchaseUpgradeResponse:
        db = get_db()
        user = await self._load_user(user_id)
        upgrade = await self.get_upgrade(upgrade_id)

        ledger = Ledger(user)
        ledger.purchase_upgrade(upgrade)
        last_modified = await ledger.commit(db)

        logger.info(f"User {user_id} bought upgrade {upgrade_id} for {upgrade.cost} coins")

        return PurchaseUpgradeResponse(
            updated_coins=ledger.coins,
            purchased_upgrades=list(ledger.snapshot.get("purchasedUpgrades") or []),
            last_modified=last_modified,
            newly_unlocked_achievements=ledger.unlocks,
        )

    # =========================================================================
    # Admin
    # =========================================================================

    async def update_envelope(self, envelope_id: str, update: EnvelopeUpdate) -> Envelope:
        db = get_db()
        changes = update.model_dump(by_alias=True, exclude_none=True)
        if not changes:
            raise ValidationError("No valid fields to update")

        result = await db.envelopes.update_one({"_id": envelope_id}, {"$set": changes})
        if result.matched_count == 0:
            raise NotFound("Envelope not found")
        logger.info(f"Envelope {envelope_id} updated: {changes}")
        return await self.get_envelope(envelope_id)
