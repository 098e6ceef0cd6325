"""
Phrase Service - Public phrase projection, likes, feed and public profiles.

A public_phrases document exists only while the owner's phrase has
friends or public privacy. The user document stays the source of truth:
publishing writes the privacy mirror (and the publicPhrases counter)
first, then brings the projection in line.
"""

import logging
from typing import Dict, Iterable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId

from pictocat.constants import FEED_LIMIT, SHARED_PRIVACY
from pictocat.database import get_db
from pictocat.errors import NotFound, ValidationError
from pictocat.models.social import (
    FriendshipStatus,
    PublicPhraseView,
    PublicProfileData,
    PublishPhraseRequest,
    PublishPhraseResponse,
)
from pictocat.models.user import Privacy
from pictocat.services.ledger import Ledger

logger = logging.getLogger(__name__)


def privacy_delta(old: str, new: str) -> int:
    """publicPhrases change for a privacy transition."""
    was_shared = old in SHARED_PRIVACY
    is_shared = new in SHARED_PRIVACY
    return int(is_shared) - int(was_shared)


def friendship_status(viewer: dict, target_id: str) -> FriendshipStatus:
    if viewer["_id"] == target_id:
        return FriendshipStatus.SELF
    if target_id in (viewer.get("friends") or []):
        return FriendshipStatus.FRIENDS
    if target_id in (viewer.get("friendRequestsSent") or []):
        return FriendshipStatus.SENT
    if target_id in (viewer.get("friendRequestsReceived") or []):
        return FriendshipStatus.RECEIVED
    return FriendshipStatus.NONE


def _object_id(public_phrase_id: str) -> ObjectId:
    try:
        return ObjectId(public_phrase_id)
    except (InvalidId, TypeError):
        raise ValidationError("Invalid public phrase id")


def to_view(
    doc: dict,
    viewer_id: str,
    author: Optional[dict] = None,
    picture_urls: Optional[Dict[int, str]] = None
) -> PublicPhraseView:
    likes = doc.get("likes") or []
    view = PublicPhraseView(
        public_phrase_id=str(doc["_id"]),
        user_id=doc.get("userId"),
        text=doc.get("text", ""),
        image_url=doc.get("imageUrl", ""),
        image_theme=doc.get("imageTheme", ""),
        privacy=doc.get("privacy") or Privacy.PUBLIC,
        like_count=len(likes),
        is_liked_by_me=viewer_id in likes,
        username=doc.get("username"),
    )
    if author is not None:
        view.username = author.get("username") or view.username
        view.is_user_verified = author.get("isVerified", False)
        view.profile_picture_url = (picture_urls or {}).get(author.get("profilePictureId"))
    return view


class PhraseService:
    """Publishing and the community surfaces built on it."""

    async def _load_user(self, user_id: str) -> dict:
        db = get_db()
        user = await db.users.find_one({"_id": user_id})
        if not user:
            raise NotFound("User not found")
        return user

    async def _picture_urls(self, picture_ids: Iterable[Optional[int]]) -> Dict[int, str]:
        ids = sorted({pid for pid in picture_ids if pid is not None})
        if not ids:
            return {}
        db = get_db()
        cursor = db.cats.find({"numeric_id": {"$in": ids}}, {"numeric_id": 1, "url": 1})
        return {doc["numeric_id"]: doc.get("url") async for doc in cursor}

    # =========================================================================
    # Publishing
    # =========================================================================

    async def publish(self, user_id: str, request: PublishPhraseRequest) -> PublishPhraseResponse:
        """
        Set a phrase's privacy and sync its projection.

        Ledger write first (privacy mirror, counter delta, achievements),
        projection upsert or delete second.
        """
        db = get_db()
        user = await self._load_user(user_id)
        phrase_id = request.phrase.id
        privacy = request.privacy.value

        owned = next((p for p in user.get("phrases") or [] if p.get("id") == phrase_id), None)
        if owned is None:
            raise NotFound("Phrase not found")

        ledger = Ledger(user)
        delta = privacy_delta(owned.get("privacy", Privacy.PRIVATE.value), privacy)
        ledger.set_phrase_privacy(phrase_id, privacy)
        if delta:
            ledger.record_stat("publicPhrases", delta)
        last_modified = await ledger.commit(db)

        key = {"userId": user_id, "phraseId": phrase_id}
        if privacy in SHARED_PRIVACY:
            await db.public_phrases.update_one(
                key,
                {
                    "$set": {
                        **key,
                        "username": user.get("username"),
                        "isUserVerified": user.get("isVerified", False),
                        "text": request.phrase.text or owned.get("text", ""),
                        "imageUrl": request.image.url,
                        "imageTheme": request.image.theme,
                        "privacy": privacy,
                    },
                    "$setOnInsert": {"likes": []},
                },
                upsert=True,
            )
        else:
            await db.public_phrases.delete_one(key)

        logger.info(f"User {user_id} set phrase {phrase_id} to {privacy}")

        return PublishPhraseResponse(
            last_modified=last_modified,
            newly_unlocked_achievements=ledger.unlocks,
        )

    async def toggle_like(self, user_id: str, public_phrase_id: str) -> bool:
        """Flip the caller's like. Returns the new state."""
        db = get_db()
        oid = _object_id(public_phrase_id)

        # Add only if absent; a miss means it was already liked (or the phrase is gone)
        result = await db.public_phrases.update_one(
            {"_id": oid, "likes": {"$ne": user_id}},
            {"$addToSet": {"likes": user_id}},
        )
        if result.matched_count:
            return True

        result = await db.public_phrases.update_one({"_id": oid}, {"$pull": {"likes": user_id}})
        if result.matched_count == 0:
            raise NotFound("Phrase not found")
        return False

    # =========================================================================
    # Community reads
    # =========================================================================

    async def get_feed(self, user_id: str) -> List[PublicPhraseView]:
        """
        Newest visible phrases: all public ones, plus friends-only ones whose
        author currently lists the caller as a friend.
        """
        db = get_db()
        befriended_by = await db.users.distinct("_id", {"friends": user_id})

        cursor = db.public_phrases.find({
            "$or": [
                {"privacy": Privacy.PUBLIC.value},
                {"privacy": Privacy.FRIENDS.value, "userId": {"$in": befriended_by}},
            ]
        }).sort("_id", -1).limit(FEED_LIMIT)
        docs = [doc async for doc in cursor]

        author_ids = list({doc.get("userId") for doc in docs})
        authors = {}
        if author_ids:
            author_cursor = db.users.find(
                {"_id": {"$in": author_ids}},
                {"username": 1, "isVerified": 1, "profilePictureId": 1},
            )
            authors = {author["_id"]: author async for author in author_cursor}

        pictures = await self._picture_urls(a.get("profilePictureId") for a in authors.values())

        return [
            to_view(doc, user_id, authors.get(doc.get("userId"), {}), pictures)
            for doc in docs
            if doc.get("userId") in authors
        ]

    async def get_public_profile(self, user_id: str, username: str) -> PublicProfileData:
        db = get_db()
        viewer = await self._load_user(user_id)
        target = await db.users.find_one({"username": username})
        if not target:
            raise NotFound("User not found")

        target_id = target["_id"]
        status = friendship_status(viewer, target_id)

        visible = [Privacy.PUBLIC.value]
        if status == FriendshipStatus.SELF or user_id in (target.get("friends") or []):
            visible.append(Privacy.FRIENDS.value)

        cursor = db.public_phrases.find(
            {"userId": target_id, "privacy": {"$in": visible}}
        ).sort("_id", -1)
        phrases = [to_view(doc, user_id) async for doc in cursor]

        pictures = await self._picture_urls([target.get("profilePictureId")])

        return PublicProfileData(
            user_id=str(target_id),
            username=target.get("username", username),
            role=target.get("role") or "user",
            is_verified=target.get("isVerified", False),
            bio=target.get("bio") or "",
            phrases=phrases,
            profile_picture_url=pictures.get(target.get("profilePictureId")),
            friendship_status=status,
        )

    # =========================================================================
    # Admin
    # =========================================================================

    async def list_all(self) -> List[PublicPhraseView]:
        db = get_db()
        cursor = db.public_phrases.find({}).sort("_id", -1)
        return [to_view(doc, "") async for doc in cursor]

    async def censor(self, public_phrase_id: str) -> None:
        """Delete a projection and revert the owner's phrase to private."""
        db = get_db()
        doc = await db.public_phrases.find_one_and_delete({"_id": _object_id(public_phrase_id)})
        if not doc:
            raise NotFound("Phrase not found")

        owner = await db.users.find_one({"_id": doc["userId"]})
        if owner is None:
            logger.warning(f"Censored phrase {public_phrase_id} has no owner {doc['userId']}")
            return

        ledger = Ledger(owner)
        ledger.set_phrase_privacy(doc["phraseId"], Privacy.PRIVATE.value)
        ledger.record_stat("publicPhrases", -1)
        try:
            await ledger.commit(db, evaluate=False)
        except NotFound:
            logger.warning(f"Censored phrase {public_phrase_id}: owner phrase {doc['phraseId']} missing")
            return

        logger.info(f"Censored phrase {public_phrase_id} of user {doc['userId']}")
