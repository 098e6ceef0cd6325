"""
Tests for the Progression Ledger

Validation of each mutation and the shape of the single committed write.
"""

from datetime import datetime

import pytest

from pictocat.errors import AlreadyOwned, InsufficientFunds, LevelTooLow, NotFound
from pictocat.models.catalog import Upgrade
from pictocat.services.ledger import Ledger
from tests.conftest import make_user, update_result

XP_BOOST = Upgrade(id="xpBoost", name="XP Boost", cost=1000, level_required=6)


def at_level(level, **overrides):
    return make_user(playerStats={"level": level, "xp": 0, "xpToNextLevel": 100}, **overrides)


class TestCoins:
    def test_spend_debits_and_guards(self):
        ledger = Ledger(make_user(coins=500))
        ledger.spend_coins(75)

        assert ledger.coins == 425
        assert ledger.build_update(datetime.now())["$inc"] == {"coins": -75}
        assert ledger.build_filter() == {"_id": "user_1", "coins": {"$gte": 75}}

    def test_spend_beyond_balance_rejected(self):
        ledger = Ledger(make_user(coins=50))
        with pytest.raises(InsufficientFunds):
            ledger.spend_coins(75)
        assert ledger.coins == 50
        assert "$inc" not in ledger.build_update(datetime.now())

    def test_grant_folds_into_pending_set(self):
        ledger = Ledger(make_user(coins=500))
        ledger.set_field("coins", 100)
        ledger.grant_coins(50)

        update = ledger.build_update(datetime.now())
        assert update["$set"]["coins"] == 150
        assert "$inc" not in update


class TestPurchaseUpgrade:
    def test_already_owned_checked_first(self):
        ledger = Ledger(at_level(1, coins=0, purchasedUpgrades=["xpBoost"]))
        with pytest.raises(AlreadyOwned):
            ledger.purchase_upgrade(XP_BOOST)

    def test_level_checked_before_coins(self):
        ledger = Ledger(at_level(1, coins=0))
        with pytest.raises(LevelTooLow):
            ledger.purchase_upgrade(XP_BOOST)

    def test_insufficient_funds(self):
        ledger = Ledger(at_level(6, coins=500))
        with pytest.raises(InsufficientFunds):
            ledger.purchase_upgrade(XP_BOOST)

    def test_success_debits_and_adds(self):
        ledger = Ledger(at_level(6, coins=1500))
        ledger.purchase_upgrade(XP_BOOST)

        update = ledger.build_update(datetime.now())
        assert update["$inc"] == {"coins": -1000}
        assert update["$addToSet"] == {"purchasedUpgrades": {"$each": ["xpBoost"]}}
        assert ledger.coins == 500


class TestSets:
    def test_unlock_is_idempotent_union(self):
        ledger = Ledger(make_user(unlockedImageIds=[1, 2]))

        assert ledger.unlock_items([2, 3, 3]) == [3]
        assert ledger.unlock_items([3]) == []
        assert ledger.snapshot["unlockedImageIds"] == [1, 2, 3]
        assert ledger.build_update(datetime.now())["$addToSet"] == {
            "unlockedImageIds": {"$each": [3]}
        }

    def test_null_set_field_treated_as_empty(self):
        ledger = Ledger(make_user(unlockedImageIds=None))
        assert ledger.unlock_items([5]) == [5]

    def test_pull(self):
        ledger = Ledger(make_user(friends=["a", "b"]))
        ledger.pull("friends", ["a"])

        assert ledger.snapshot["friends"] == ["b"]
        assert ledger.build_update(datetime.now())["$pull"] == {"friends": {"$in": ["a"]}}


class TestStats:
    def test_record_stat_increments(self):
        ledger = Ledger(make_user())
        ledger.record_stat("gamesPlayed", 1)
        assert ledger.build_update(datetime.now())["$inc"] == {"stats.gamesPlayed": 1}
        assert ledger.snapshot["stats"]["gamesPlayed"] == 1

    def test_public_phrases_never_below_zero(self):
        ledger = Ledger(make_user())
        ledger.record_stat("publicPhrases", -1)
        assert "$inc" not in ledger.build_update(datetime.now())

    def test_public_phrases_decrement(self):
        ledger = Ledger(make_user(stats={"gamesPlayed": 0, "envelopesOpened": 0, "publicPhrases": 2}))
        ledger.record_stat("publicPhrases", -1)
        assert ledger.build_update(datetime.now())["$inc"] == {"stats.publicPhrases": -1}

    def test_unknown_counter(self):
        with pytest.raises(ValueError):
            Ledger(make_user()).record_stat("mice", 1)

    def test_grant_xp_levels_up(self):
        ledger = Ledger(make_user(playerStats={"level": 1, "xp": 90, "xpToNextLevel": 100}))
        assert ledger.grant_xp(30) == 1
        assert ledger.build_update(datetime.now())["$set"]["playerStats"] == {
            "level": 2, "xp": 20, "xpToNextLevel": 150
        }


class TestCommit:
    @pytest.mark.asyncio
    async def test_single_write_with_last_modified(self, db):
        ledger = Ledger(make_user())
        ledger.grant_coins(10)

        last_modified = await ledger.commit(db, evaluate=False)

        db.users.update_one.assert_called_once()
        query, update = db.users.update_one.call_args[0]
        assert query == {"_id": "user_1"}
        assert update["$max"] == {"lastModified": last_modified}
        assert update["$inc"] == {"coins": 10}
        assert ledger.last_modified == last_modified

    @pytest.mark.asyncio
    async def test_achievement_rewards_merge_into_same_write(self, db):
        user = make_user(stats={"gamesPlayed": 4, "envelopesOpened": 0, "publicPhrases": 0})
        ledger = Ledger(user)
        ledger.record_stat("gamesPlayed", 1)

        await ledger.commit(db)

        db.users.update_one.assert_called_once()
        update = db.users.update_one.call_args[0][1]
        assert update["$set"]["unlockedAchievements.gamer_1"] == {"unlockedTier": 1, "progress": 5}
        assert update["$inc"] == {"stats.gamesPlayed": 1, "coins": 50}
        assert update["$set"]["playerStats"] == {"level": 1, "xp": 25, "xpToNextLevel": 100}
        assert [u.achievement_id for u in ledger.unlocks] == ["gamer_1"]

    @pytest.mark.asyncio
    async def test_lost_coin_race_is_insufficient_funds(self, db):
        db.users.update_one.return_value = update_result(matched=0)
        ledger = Ledger(make_user(coins=500))
        ledger.spend_coins(75)

        with pytest.raises(InsufficientFunds):
            await ledger.commit(db)

    @pytest.mark.asyncio
    async def test_missing_user(self, db):
        db.users.update_one.return_value = update_result(matched=0)
        with pytest.raises(NotFound):
            await Ledger(make_user()).commit(db)

    @pytest.mark.asyncio
    async def test_phrase_privacy_is_positional(self, db):
        ledger = Ledger(make_user())
        ledger.set_phrase_privacy("yes", "public")

        await ledger.commit(db, evaluate=False)

        query, update = db.users.update_one.call_args[0]
        assert query == {"_id": "user_1", "phrases.id": "yes"}
        assert update["$set"] == {"phrases.$.privacy": "public"}
        assert ledger.snapshot["phrases"][0]["privacy"] == "public"
