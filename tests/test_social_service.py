"""
Tests for the Social Service

Friend request lifecycle across the two user documents.
"""

from unittest.mock import MagicMock, patch

import pytest
from pymongo.errors import PyMongoError

from pictocat.errors import Conflict, InvalidTarget, NotFound
from pictocat.models.social import FriendAction
from pictocat.services.social_service import SocialService
from tests.conftest import FakeCursor, make_user, update_result


def users_by_id(*docs):
    """find_one side effect resolving {'_id': ...} lookups against fixed docs."""
    index = {doc["_id"]: doc for doc in docs}

    async def find_one(query, *args, **kwargs):
        return index.get(query.get("_id"))

    return find_one


def writes_for(db, user_id):
    return [c[0][1] for c in db.users.update_one.call_args_list if c[0][0]["_id"] == user_id]


@pytest.fixture
def service():
    return SocialService()


class TestSendRequest:
    @pytest.mark.asyncio
    async def test_to_self_rejected(self, service, db):
        db.users.find_one.side_effect = users_by_id(make_user("alice"))

        with patch('pictocat.services.social_service.get_db', return_value=db):
            with pytest.raises(InvalidTarget):
                await service.send_request("alice", "alice")

    @pytest.mark.asyncio
    async def test_unknown_target(self, service, db):
        db.users.find_one.side_effect = users_by_id(make_user("alice"))

        with patch('pictocat.services.social_service.get_db', return_value=db):
            with pytest.raises(InvalidTarget):
                await service.send_request("alice", "ghost")

    @pytest.mark.asyncio
    async def test_writes_both_sides(self, service, db):
        db.users.find_one.side_effect = users_by_id(make_user("alice"), make_user("bob"))

        with patch('pictocat.services.social_service.get_db', return_value=db):
            await service.send_request("alice", "bob")

        assert writes_for(db, "alice")[0]["$addToSet"] == {"friendRequestsSent": {"$each": ["bob"]}}
        assert writes_for(db, "bob")[0]["$addToSet"] == {"friendRequestsReceived": {"$each": ["alice"]}}

    @pytest.mark.asyncio
    async def test_duplicate_request(self, service, db):
        db.users.find_one.side_effect = users_by_id(
            make_user("alice", friendRequestsSent=["bob"]),
            make_user("bob", friendRequestsReceived=["alice"]),
        )

        with patch('pictocat.services.social_service.get_db', return_value=db):
            with pytest.raises(Conflict):
                await service.send_request("alice", "bob")

    @pytest.mark.asyncio
    async def test_reverse_pending_request(self, service, db):
        db.users.find_one.side_effect = users_by_id(
            make_user("alice", friendRequestsReceived=["bob"]),
            make_user("bob", friendRequestsSent=["alice"]),
        )

        with patch('pictocat.services.social_service.get_db', return_value=db):
            with pytest.raises(Conflict):
                await service.send_request("alice", "bob")

    @pytest.mark.asyncio
    async def test_reverse_request_with_lost_mirror(self, service, db):
        # bob -> alice was sent but never reached alice's received set
        db.users.find_one.side_effect = users_by_id(
            make_user("alice"),
            make_user("bob", friendRequestsSent=["alice"]),
        )

        with patch('pictocat.services.social_service.get_db', return_value=db):
            with pytest.raises(Conflict):
                await service.send_request("alice", "bob")

        db.users.update_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_already_friends(self, service, db):
        db.users.find_one.side_effect = users_by_id(
            make_user("alice", friends=["bob"]),
            make_user("bob", friends=["alice"]),
        )

        with patch('pictocat.services.social_service.get_db', return_value=db):
            with pytest.raises(Conflict):
                await service.send_request("alice", "bob")

    @pytest.mark.asyncio
    async def test_mirror_failure_is_logged_not_raised(self, service, db):
        db.users.find_one.side_effect = users_by_id(make_user("alice"), make_user("bob"))
        db.users.update_one.side_effect = [update_result(), PyMongoError("primary stepped down")]

        with patch('pictocat.services.social_service.get_db', return_value=db):
            await service.send_request("alice", "bob")

        assert db.users.update_one.call_count == 2


class TestRespond:
    @pytest.mark.asyncio
    async def test_accept_makes_friends_both_ways(self, service, db):
        db.users.find_one.side_effect = users_by_id(
            make_user("bob", friendRequestsReceived=["alice"]),
            make_user("alice", friendRequestsSent=["bob"]),
        )

        with patch('pictocat.services.social_service.get_db', return_value=db):
            unlocks = await service.respond("bob", "alice", FriendAction.ACCEPT)

        bob = writes_for(db, "bob")[0]
        alice = writes_for(db, "alice")[0]
        assert bob["$addToSet"] == {"friends": {"$each": ["alice"]}}
        assert bob["$pull"]["friendRequestsReceived"] == {"$in": ["alice"]}
        assert alice["$addToSet"] == {"friends": {"$each": ["bob"]}}
        assert alice["$pull"]["friendRequestsSent"] == {"$in": ["bob"]}
        # First friend crosses the social achievement tier
        assert [u.achievement_id for u in unlocks] == ["social_1"]
        assert bob["$set"]["unlockedAchievements.social_1"]["unlockedTier"] == 1

    @pytest.mark.asyncio
    async def test_accept_without_request(self, service, db):
        db.users.find_one.side_effect = users_by_id(make_user("bob"), make_user("alice"))

        with patch('pictocat.services.social_service.get_db', return_value=db):
            with pytest.raises(NotFound):
                await service.respond("bob", "alice", FriendAction.ACCEPT)

        db.users.update_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_accept_from_deleted_requester(self, service, db):
        db.users.find_one.side_effect = users_by_id(make_user("bob", friendRequestsReceived=["ghost"]))

        with patch('pictocat.services.social_service.get_db', return_value=db):
            with pytest.raises(NotFound):
                await service.respond("bob", "ghost", FriendAction.ACCEPT)

        db.users.update_one.assert_called_once()
        update = writes_for(db, "bob")[0]
        assert update["$pull"]["friendRequestsReceived"] == {"$in": ["ghost"]}
        assert "$addToSet" not in update
        assert "$inc" not in update
        assert not any(key.startswith("unlockedAchievements") for key in update.get("$set", {}))

    @pytest.mark.asyncio
    async def test_reject_clears_both_sides(self, service, db):
        db.users.find_one.side_effect = users_by_id(
            make_user("bob", friendRequestsReceived=["alice"]),
            make_user("alice", friendRequestsSent=["bob"]),
        )

        with patch('pictocat.services.social_service.get_db', return_value=db):
            unlocks = await service.respond("bob", "alice", FriendAction.REJECT)

        assert unlocks == []
        for user_id in ("bob", "alice"):
            update = writes_for(db, user_id)[0]
            assert "$addToSet" not in update
            assert "$pull" in update


class TestCancelAndRemove:
    @pytest.mark.asyncio
    async def test_cancel_unknown_request(self, service, db):
        db.users.find_one.side_effect = users_by_id(make_user("alice"))

        with patch('pictocat.services.social_service.get_db', return_value=db):
            with pytest.raises(NotFound):
                await service.cancel_request("alice", "bob")

    @pytest.mark.asyncio
    async def test_cancel_pulls_both_sides(self, service, db):
        db.users.find_one.side_effect = users_by_id(
            make_user("alice", friendRequestsSent=["bob"]),
            make_user("bob", friendRequestsReceived=["alice"]),
        )

        with patch('pictocat.services.social_service.get_db', return_value=db):
            await service.cancel_request("alice", "bob")

        assert writes_for(db, "alice")[0]["$pull"] == {"friendRequestsSent": {"$in": ["bob"]}}
        assert writes_for(db, "bob")[0]["$pull"] == {"friendRequestsReceived": {"$in": ["alice"]}}

    @pytest.mark.asyncio
    async def test_remove_is_idempotent(self, service, db):
        db.users.find_one.side_effect = users_by_id(make_user("alice"), make_user("bob"))

        with patch('pictocat.services.social_service.get_db', return_value=db):
            await service.remove_friend("alice", "bob")

        assert writes_for(db, "alice")[0]["$pull"] == {"friends": {"$in": ["bob"]}}

    @pytest.mark.asyncio
    async def test_remove_self(self, service, db):
        db.users.find_one.side_effect = users_by_id(make_user("alice"))

        with patch('pictocat.services.social_service.get_db', return_value=db):
            with pytest.raises(InvalidTarget):
                await service.remove_friend("alice", "alice")


class TestFriendData:
    @pytest.mark.asyncio
    async def test_lists_friends_and_requests(self, service, db):
        db.users.find_one.side_effect = users_by_id(
            make_user("alice", friends=["bob"], friendRequestsReceived=["carol"])
        )
        db.users.find = MagicMock(side_effect=[
            FakeCursor([{"_id": "bob", "username": "bob", "isVerified": True, "role": "mod"}]),
            FakeCursor([{"_id": "carol", "username": "carol"}]),
        ])

        with patch('pictocat.services.social_service.get_db', return_value=db):
            data = await service.get_friend_data("alice")

        assert [f.username for f in data.friends] == ["bob"]
        assert data.friends[0].is_verified is True
        assert [r.user_id for r in data.requests] == ["carol"]
