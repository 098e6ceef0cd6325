"""User Service - Profile lifecycle, client saves and game rewards."""

import logging
import random
import re
from typing import List, Optional

from pymongo.errors import DuplicateKeyError

from pictocat.config import settings
from pictocat.constants import (
    BIO_MAX_LENGTH,
    SEARCH_LIMIT,
    SEARCH_MIN_LENGTH,
    SHARED_PRIVACY,
    USERNAME_CREATE_ATTEMPTS,
    USERNAME_MAX_LENGTH,
    USERNAME_PATTERN,
    USERNAME_SUFFIX_MAX,
    USERNAME_SUFFIX_MIN,
    initial_user_data,
)
from pictocat.database import get_db
from pictocat.errors import Conflict, Forbidden, NotFound, ValidationError
from pictocat.models.user import (
    AdminUserView,
    GameResult,
    GameResultResponse,
    PlayerStats,
    SaveUserDataRequest,
    SaveUserDataResponse,
    UpdateProfileRequest,
    UserProfile,
)
from pictocat.models.social import SearchableUser
from pictocat.services.auth_service import AuthenticatedUser
from pictocat.services.leveling import apply_xp
from pictocat.services.ledger import Ledger
from pictocat.utils.timezone_utils import utc_now

logger = logging.getLogger(__name__)

# Counters the client may raise through a save; publicPhrases is server-owned
CLIENT_COUNTERS = ("gamesPlayed", "envelopesOpened")


def derive_username(email: Optional[str], uid: str) -> str:
    """Email local-part stripped to [A-Za-z0-9_], or a uid-based fallback."""
    base = ""
    if email:
        base = re.sub(r"[^a-zA-Z0-9_]", "", email.split("@")[0])[:USERNAME_MAX_LENGTH]
    if len(base) < 3:
        base = f"user_{re.sub(r'[^a-zA-Z0-9_]', '', uid)[-6:]}"
    return base


def suffixed_username(base: str, rng: Optional[random.Random] = None) -> str:
    rng = rng or random
    return f"{base[:15]}_{rng.randint(USERNAME_SUFFIX_MIN, USERNAME_SUFFIX_MAX)}"


class UserService:
    """User profile and progression service."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    async def _load_user(self, user_id: str) -> dict:
        db = get_db()
        user = await db.users.find_one({"_id": user_id})
        if not user:
            raise NotFound("User not found")
        return user

    # =========================================================================
    # Profile lifecycle
    # =========================================================================

    async def _create_user(self, identity: AuthenticatedUser) -> dict:
        """Insert a fresh user, de-duplicating the derived username."""
        db = get_db()
        base = derive_username(identity.email, identity.uid)
        username = base
        if await db.users.find_one({"username": username}, {"_id": 1}):
            username = suffixed_username(base, self.rng)

        for _ in range(USERNAME_CREATE_ATTEMPTS):
            doc = {
                "_id": identity.uid,
                "username": username,
                "email": identity.email,
                "role": identity.role.value,
                "isVerified": False,
                "lastModified": utc_now(),
                **initial_user_data(),
            }
            try:
                await db.users.insert_one(doc)
                logger.info(f"Created user {identity.uid} as '{username}'")
                return doc
            except DuplicateKeyError:
                # Either a concurrent first fetch created us, or the name got taken
                existing = await db.users.find_one({"_id": identity.uid})
                if existing:
                    return existing
                username = suffixed_username(base, self.rng)

        raise Conflict("Could not allocate a unique username")

    async def get_or_create(self, identity: AuthenticatedUser) -> UserProfile:
        """Full profile, created just in time. Refreshes role and email from the token."""
        db = get_db()
        user = await db.users.find_one({"_id": identity.uid})
        if not user:
            user = await self._create_user(identity)
            return UserProfile.from_doc(user)

        updates = {}
        if user.get("role") != identity.role.value:
            updates["role"] = identity.role.value
        if not user.get("email") and identity.email:
            updates["email"] = identity.email

        if updates:
            updates["lastModified"] = utc_now()
            await db.users.update_one({"_id": identity.uid}, {"$set": updates})
            user.update(updates)
            logger.info(f"Refreshed user {identity.uid}: {sorted(updates)}")

        return UserProfile.from_doc(user)

    async def save_user_data(self, user_id: str, request: SaveUserDataRequest) -> SaveUserDataResponse:
        """
        Persist a partial client save.

        Sets are unioned and monotonic counters only move up, so a stale
        client can never shrink server state. Phrase privacy stays
        whatever the server last published.
        """
        data = request.model_dump(mode="json", by_alias=True, exclude_none=True)
        if not data:
            raise ValidationError("No valid fields provided")

        db = get_db()
        user = await self._load_user(user_id)
        ledger = Ledger(user)
        dropped = []

        if "coins" in data:
            ledger.set_field("coins", data["coins"])

        if "phrases" in data:
            stored_privacy = {p.get("id"): p.get("privacy", "private") for p in user.get("phrases") or []}
            phrases = []
            for phrase in data["phrases"]:
                phrase["privacy"] = stored_privacy.get(phrase["id"], "private")
                phrases.append(phrase)
            ledger.set_field("phrases", phrases)

            # Shared phrases the client deleted lose their projection and count
            incoming = {phrase["id"] for phrase in phrases}
            dropped = [
                pid for pid, privacy in stored_privacy.items()
                if privacy in SHARED_PRIVACY and pid not in incoming
            ]
            if dropped:
                ledger.record_stat("publicPhrases", -len(dropped))

        if "unlockedImageIds" in data:
            ledger.unlock_items(data["unlockedImageIds"])

        if "purchasedUpgrades" in data:
            ledger.add_to_set("purchasedUpgrades", data["purchasedUpgrades"])

        if "playerStats" in data:
            player_stats, _ = apply_xp(data["playerStats"])
            ledger.set_field("playerStats", player_stats)

        if "stats" in data:
            stored = user.get("stats") or {}
            for counter in CLIENT_COUNTERS:
                value = data["stats"].get(counter, 0)
                if value > (stored.get(counter) or 0):
                    ledger.set_field(f"stats.{counter}", value)

        last_modified = await ledger.commit(db)

        if dropped:
            await db.public_phrases.delete_many({"userId": user_id, "phraseId": {"$in": dropped}})
            logger.info(f"User {user_id} deleted shared phrases {dropped}")

        return SaveUserDataResponse(
            last_modified=last_modified,
            newly_unlocked_achievements=ledger.unlocks,
        )

    # =========================================================================
    # Profile edits
    # =========================================================================

    async def update_profile(self, user_id: str, request: UpdateProfileRequest) -> None:
        """Change username and bio. Renames propagate to published phrases."""
        username = request.username.strip()
        bio = request.bio or ""
        if not USERNAME_PATTERN.match(username):
            raise ValidationError("Username must be 3-20 letters, numbers or underscores")
        if len(bio) > BIO_MAX_LENGTH:
            raise ValidationError(f"Bio must be at most {BIO_MAX_LENGTH} characters")

        db = get_db()
        user = await self._load_user(user_id)
        renamed = user.get("username") != username

        if renamed and await db.users.find_one({"username": username}, {"_id": 1}):
            raise Conflict("Username already taken")

        try:
            await db.users.update_one(
                {"_id": user_id},
                {"$set": {"username": username, "bio": bio}, "$max": {"lastModified": utc_now()}}
            )
        except DuplicateKeyError:
            raise Conflict("Username already taken")

        if renamed:
            await db.public_phrases.update_many({"userId": user_id}, {"$set": {"username": username}})
            logger.info(f"User {user_id} renamed to '{username}'")

    async def update_profile_picture(self, user_id: str, image_id: Optional[int]) -> None:
        db = get_db()
        if image_id is not None:
            user = await self._load_user(user_id)
            if image_id not in (user.get("unlockedImageIds") or []):
                raise Forbidden("You do not own this image")

        result = await db.users.update_one(
            {"_id": user_id},
            {"$set": {"profilePictureId": image_id}, "$max": {"lastModified": utc_now()}}
        )
        if result.matched_count == 0:
            raise NotFound("User not found")

    # =========================================================================
    # Game rewards
    # =========================================================================

    async def record_game_result(self, user_id: str, result: GameResult) -> GameResultResponse:
        """Credit one finished minigame: coins, XP, gamesPlayed and achievements in one write."""
        if result.coins_earned > settings.max_game_coins:
            raise ValidationError(f"coinsEarned exceeds {settings.max_game_coins}")
        if result.xp_earned > settings.max_game_xp:
            raise ValidationError(f"xpEarned exceeds {settings.max_game_xp}")

        db = get_db()
        user = await self._load_user(user_id)
        ledger = Ledger(user)
        ledger.grant_coins(result.coins_earned)
        ledger.grant_xp(result.xp_earned)
        ledger.record_stat("gamesPlayed", 1)
        last_modified = await ledger.commit(db)

        logger.info(
            f"User {user_id} game result: score={result.score} "
            f"coins=+{result.coins_earned} xp=+{result.xp_earned}"
        )

        return GameResultResponse(
            coins=ledger.coins,
            player_stats=PlayerStats.model_validate(ledger.player_stats),
            levels_gained=ledger.levels_gained,
            last_modified=last_modified,
            newly_unlocked_achievements=ledger.unlocks,
        )

    # =========================================================================
    # Lookup
    # =========================================================================

    async def search(self, query: str) -> List[SearchableUser]:
        query = (query or "").strip()
        if len(query) < SEARCH_MIN_LENGTH:
            return []

        db = get_db()
        cursor = db.users.find(
            {"username": {"$regex": re.escape(query), "$options": "i"}},
            {"username": 1, "isVerified": 1},
        ).limit(SEARCH_LIMIT)
        return [
            SearchableUser(username=doc["username"], is_verified=doc.get("isVerified", False))
            async for doc in cursor
        ]

    # =========================================================================
    # Admin
    # =========================================================================

    async def list_users(self) -> List[AdminUserView]:
        db = get_db()
        cursor = db.users.find({}, {"username": 1, "role": 1, "isVerified": 1}).sort("username", 1)
        return [
            AdminUserView(
                id=str(doc["_id"]),
                username=doc.get("username", ""),
                role=doc.get("role") or "user",
                is_verified=doc.get("isVerified", False),
            )
            async for doc in cursor
        ]

    async def set_verified(self, user_id: str, is_verified: bool) -> None:
        db = get_db()
        result = await db.users.update_one(
            {"_id": user_id},
            {"$set": {"isVerified": is_verified}, "$max": {"lastModified": utc_now()}}
        )
        if result.matched_count == 0:
            raise NotFound("User not found")
        await db.public_phrases.update_many({"userId": user_id}, {"$set": {"isUserVerified": is_verified}})
        logger.info(f"User {user_id} verified={is_verified}")
