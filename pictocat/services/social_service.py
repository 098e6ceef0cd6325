"""
Social Service - Friend request / friendship state machine.

Every transition touches two user documents. They are written one after
the other with no rollback: the caller's side first, then the other
user's. A failed second write leaves a dangling request that a reject or
re-send cleans up later.
"""

import logging
from typing import List

from pymongo.errors import PyMongoError

from pictocat.database import get_db
from pictocat.errors import Conflict, InvalidTarget, NotFound
from pictocat.models.achievement import AchievementUnlock
from pictocat.models.social import FriendAction, FriendData, Friend, FriendRequest
from pictocat.services.ledger import Ledger

logger = logging.getLogger(__name__)


def _members(user: dict, field: str) -> List[str]:
    return user.get(field) or []


class SocialService:
    """Friend graph management."""

    async def _load_user(self, user_id: str) -> dict:
        db = get_db()
        user = await db.users.find_one({"_id": user_id})
        if not user:
            raise NotFound("User not found")
        return user

    async def _load_target(self, user_id: str, target_id: str) -> dict:
        if not target_id or target_id == user_id:
            raise InvalidTarget()
        db = get_db()
        target = await db.users.find_one({"_id": target_id})
        if not target:
            raise InvalidTarget("Target user not found")
        return target

    async def _commit_other_side(self, ledger: Ledger, operation: str) -> List[AchievementUnlock]:
        """Second write of a two-document transition. Failures are logged, not raised."""
        db = get_db()
        try:
            await ledger.commit(db)
        except (PyMongoError, NotFound) as e:
            logger.warning(f"{operation}: mirror write to {ledger.user_id} failed: {e}")
            return []
        return ledger.unlocks

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_friend_data(self, user_id: str) -> FriendData:
        db = get_db()
        user = await self._load_user(user_id)

        friends_cursor = db.users.find(
            {"_id": {"$in": _members(user, "friends")}},
            {"username": 1, "isVerified": 1, "role": 1},
        )
        requests_cursor = db.users.find(
            {"_id": {"$in": _members(user, "friendRequestsReceived")}},
            {"username": 1},
        )

        return FriendData(
            friends=[
                Friend(
                    user_id=str(doc["_id"]),
                    username=doc.get("username", ""),
                    is_verified=doc.get("isVerified", False),
                    role=doc.get("role") or "user",
                )
                async for doc in friends_cursor
            ],
            requests=[
                FriendRequest(user_id=str(doc["_id"]), username=doc.get("username", ""))
                async for doc in requests_cursor
            ],
        )

    # =========================================================================
    # Transitions
    # =========================================================================

    async def send_request(self, user_id: str, target_id: str) -> None:
        """None -> Sent(user -> target)."""
        user = await self._load_user(user_id)
        target = await self._load_target(user_id, target_id)

        if target_id in _members(user, "friends") or user_id in _members(target, "friends"):
            raise Conflict("You are already friends")
        if (
            target_id in _members(user, "friendRequestsSent")
            or target_id in _members(user, "friendRequestsReceived")
            or user_id in _members(target, "friendRequestsReceived")
            or user_id in _members(target, "friendRequestsSent")
        ):
            raise Conflict("A friend request already exists")

        db = get_db()
        sender = Ledger(user)
        sender.add_to_set("friendRequestsSent", [target_id])
        await sender.commit(db, evaluate=False)

        receiver = Ledger(target)
        receiver.add_to_set("friendRequestsReceived", [user_id])
        await self._commit_other_side(receiver, "send_request")

        logger.info(f"User {user_id} sent a friend request to {target_id}")

    async def respond(self, user_id: str, requester_id: str, action: FriendAction) -> List[AchievementUnlock]:
        """
        Sent(requester -> user) -> Friends on accept, -> None on reject.

        Reject always cleans both sides up, whatever state they are in.
        Accept requires the pending request on the responder's side.
        """
        user = await self._load_user(user_id)
        if not requester_id or requester_id == user_id:
            raise InvalidTarget()

        accept = action == FriendAction.ACCEPT
        if accept and requester_id not in _members(user, "friendRequestsReceived"):
            raise NotFound("Friend request not found")

        db = get_db()
        requester_doc = await db.users.find_one({"_id": requester_id})

        responder = Ledger(user)
        responder.pull("friendRequestsReceived", [requester_id])
        responder.pull("friendRequestsSent", [requester_id])
        if accept and requester_doc is None:
            # Requester account is gone: drop the dangling request, no friendship
            await responder.commit(db, evaluate=False)
            logger.warning(f"respond: requester {requester_id} no longer exists")
            raise NotFound("User not found")
        if accept:
            responder.add_to_set("friends", [requester_id])
        await responder.commit(db, evaluate=accept)

        if requester_doc:
            requester = Ledger(requester_doc)
            requester.pull("friendRequestsSent", [user_id])
            requester.pull("friendRequestsReceived", [user_id])
            if accept:
                requester.add_to_set("friends", [user_id])
            await self._commit_other_side(requester, "respond")
        else:
            logger.warning(f"respond: requester {requester_id} no longer exists")

        logger.info(f"User {user_id} {action.value}ed friend request from {requester_id}")
        return responder.unlocks

    async def cancel_request(self, user_id: str, target_id: str) -> None:
        """Sent(user -> target) -> None, initiated by the sender."""
        user = await self._load_user(user_id)
        if target_id not in _members(user, "friendRequestsSent"):
            raise NotFound("Friend request not found")

        db = get_db()
        sender = Ledger(user)
        sender.pull("friendRequestsSent", [target_id])
        await sender.commit(db, evaluate=False)

        target = await db.users.find_one({"_id": target_id})
        if target:
            receiver = Ledger(target)
            receiver.pull("friendRequestsReceived", [user_id])
            await self._commit_other_side(receiver, "cancel_request")

        logger.info(f"User {user_id} cancelled friend request to {target_id}")

    async def remove_friend(self, user_id: str, target_id: str) -> None:
        """Friends -> None, both ways. Idempotent."""
        user = await self._load_user(user_id)
        if not target_id or target_id == user_id:
            raise InvalidTarget()

        db = get_db()
        ledger = Ledger(user)
        ledger.pull("friends", [target_id])
        await ledger.commit(db, evaluate=False)

        target = await db.users.find_one({"_id": target_id})
        if target:
            other = Ledger(target)
            other.pull("friends", [user_id])
            await self._commit_other_side(other, "remove_friend")

        logger.info(f"User {user_id} removed friend {target_id}")
