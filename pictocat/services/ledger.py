"""
Progression Ledger

Accumulates every economy mutation of one user action and commits them as
a single update_one against the user document. Operations validate
against a working snapshot, so later operations (and the achievement pass
run at commit time) see the effect of earlier ones.
"""

import copy
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from pictocat.constants import STAT_COUNTERS
from pictocat.errors import AlreadyOwned, InsufficientFunds, LevelTooLow, NotFound, PictoCatError
from pictocat.models.achievement import AchievementUnlock
from pictocat.models.catalog import Upgrade
from pictocat.services import achievements
from pictocat.services.leveling import apply_xp, normalize_player_stats
from pictocat.utils.timezone_utils import utc_now

logger = logging.getLogger(__name__)


def _assign(doc: dict, path: str, value: Any) -> None:
    """Set a dotted path inside a nested dict, creating parents as needed."""
    *parents, leaf = path.split(".")
    for key in parents:
        if not isinstance(doc.get(key), dict):
            doc[key] = {}
        doc = doc[key]
    doc[leaf] = value


def _lookup(doc: dict, path: str, default: Any = None) -> Any:
    for key in path.split("."):
        if not isinstance(doc, dict) or key not in doc:
            return default
        doc = doc[key]
    return doc


class Ledger:
    """One user's pending mutations. Build, then commit once."""

    def __init__(self, user: dict):
        self.user_id = user["_id"]
        self.snapshot = copy.deepcopy(user)
        self.snapshot["playerStats"] = normalize_player_stats(self.snapshot.get("playerStats"))
        self.snapshot.setdefault("coins", 0)

        self._set: Dict[str, Any] = {}
        self._inc: Dict[str, int] = {}
        self._add_to_set: Dict[str, List[Any]] = {}
        self._pull: Dict[str, List[Any]] = {}
        self._filter: Dict[str, Any] = {}
        self._miss_error: Optional[PictoCatError] = None
        self._spent = 0

        self.levels_gained = 0
        self.unlocks: List[AchievementUnlock] = []
        self.skipped_achievements: List[str] = []
        self.last_modified: Optional[datetime] = None

    # =========================================================================
    # Snapshot accessors
    # =========================================================================

    @property
    def coins(self) -> int:
        return int(self.snapshot.get("coins") or 0)

    @property
    def level(self) -> int:
        return self.snapshot["playerStats"]["level"]

    @property
    def player_stats(self) -> dict:
        return dict(self.snapshot["playerStats"])

    def owns(self, field: str, value: Any) -> bool:
        return value in (self.snapshot.get(field) or [])

    # =========================================================================
    # Operations
    # =========================================================================

    def _add(self, path: str, delta: int) -> None:
        """Numeric delta. Folds into a pending $set on the same path when present."""
        if path in self._set:
            self._set[path] += delta
        else:
            self._inc[path] = self._inc.get(path, 0) + delta
        _assign(self.snapshot, path, (_lookup(self.snapshot, path) or 0) + delta)

    def spend_coins(self, amount: int) -> None:
        if amount < 0:
            raise ValueError("amount must be non-negative")
        if self.coins < amount:
            raise InsufficientFunds()
        self._add("coins", -amount)
        self._spent += amount

    def grant_coins(self, amount: int) -> None:
        if amount > 0:
            self._add("coins", amount)

    def grant_xp(self, amount: int) -> int:
        """Credit XP through the leveling algorithm. Returns levels gained."""
        stats, gained = apply_xp(self.snapshot["playerStats"], amount)
        self.snapshot["playerStats"] = stats
        self._set["playerStats"] = dict(stats)
        self.levels_gained += gained
        return gained

    def unlock_items(self, ids: Iterable[int]) -> List[int]:
        """Idempotent union into unlockedImageIds. Returns the ids that were new."""
        return self.add_to_set("unlockedImageIds", ids)

    def add_to_set(self, field: str, values: Iterable[Any]) -> List[Any]:
        current = list(self.snapshot.get(field) or [])
        self.snapshot[field] = current
        added = []
        for value in values:
            if value not in current and value not in added:
                added.append(value)
        if added:
            current.extend(added)
            self._add_to_set.setdefault(field, []).extend(added)
        return added

    def pull(self, field: str, values: Iterable[Any]) -> None:
        """Remove values from a set field. Only for non-monotonic sets (social graph)."""
        values = list(values)
        if not values:
            return
        current = self.snapshot.get(field) or []
        self.snapshot[field] = [value for value in current if value not in values]
        self._pull.setdefault(field, []).extend(values)

    def purchase_upgrade(self, upgrade: Upgrade) -> None:
        if self.owns("purchasedUpgrades", upgrade.id):
            raise AlreadyOwned()
        if self.level < upgrade.level_required:
            raise LevelTooLow(f"Requires level {upgrade.level_required}")
        self.spend_coins(upgrade.cost)
        self.add_to_set("purchasedUpgrades", [upgrade.id])

    def record_stat(self, counter: str, delta: int = 1) -> None:
        if counter not in STAT_COUNTERS:
            raise ValueError(f"Unknown stat counter: {counter}")
        current = int(_lookup(self.snapshot, f"stats.{counter}") or 0)
        # Counters never go below zero, even from a stale snapshot
        delta = max(current + delta, 0) - current
        if delta:
            self._add(f"stats.{counter}", delta)

    def set_field(self, path: str, value: Any) -> None:
        self._set[path] = value
        _assign(self.snapshot, path, value)

    def set_phrase_privacy(self, phrase_id: str, privacy: str) -> None:
        """Positional update of one owned phrase's privacy."""
        for phrase in self.snapshot.get("phrases") or []:
            if phrase.get("id") == phrase_id:
                phrase["privacy"] = privacy
        self._set["phrases.$.privacy"] = privacy
        self.require({"phrases.id": phrase_id}, NotFound("Phrase not found"))

    def require(self, condition: Dict[str, Any], error: PictoCatError) -> None:
        """Extra filter the stored document must still match at write time."""
        self._filter.update(condition)
        self._miss_error = error

    # =========================================================================
    # Achievements & commit
    # =========================================================================

    def evaluate_achievements(self) -> List[AchievementUnlock]:
        result = achievements.evaluate(self.snapshot)
        for achievement_id, state in result.achievements.items():
            self.set_field(f"unlockedAchievements.{achievement_id}", state)
        self.grant_coins(result.coins)
        if result.xp:
            self.grant_xp(result.xp)
        self.unlocks.extend(result.unlocks)
        self.skipped_achievements.extend(result.skipped)
        return result.unlocks

    def build_filter(self) -> dict:
        query: Dict[str, Any] = {"_id": self.user_id, **self._filter}
        if self._spent:
            # Conditional decrement: a concurrent spend that drained the balance loses
            query["coins"] = {"$gte": self._spent}
        return query

    def build_update(self, now: datetime) -> dict:
        update: Dict[str, Any] = {"$max": {"lastModified": now}}
        if self._set:
            update["$set"] = dict(self._set)
        inc = {path: delta for path, delta in self._inc.items() if delta}
        if inc:
            update["$inc"] = inc
        if self._add_to_set:
            update["$addToSet"] = {
                field: {"$each": values} for field, values in self._add_to_set.items()
            }
        if self._pull:
            update["$pull"] = {field: {"$in": values} for field, values in self._pull.items()}
        return update

    async def commit(self, db, evaluate: bool = True) -> datetime:
        """
        Run the achievement pass (once) and persist everything in one write.

        Raises InsufficientFunds when the coin guard no longer holds, or the
        error registered through require() when its filter stopped matching.
        """
        if evaluate:
            self.evaluate_achievements()

        now = utc_now()
        result = await db.users.update_one(self.build_filter(), self.build_update(now))
        if result.matched_count == 0:
            if self._spent:
                logger.warning(f"Coin guard failed for user {self.user_id} (spent {self._spent})")
                raise InsufficientFunds()
            if self._miss_error is not None:
                raise self._miss_error
            raise NotFound("User not found")

        self.last_modified = now
        if self.unlocks:
            unlocked = ", ".join(f"{u.achievement_id}#{u.tier}" for u in self.unlocks)
            logger.info(f"User {self.user_id} unlocked achievements: {unlocked}")
        return now
