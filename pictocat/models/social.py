"""Social Models - Friends, public phrases, feed and public profiles."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from pictocat.models.achievement import AchievementUnlock
from pictocat.models.base import CamelModel
from pictocat.models.user import Privacy, UserRole


class FriendshipStatus(str, Enum):
    SELF = "self"
    FRIENDS = "friends"
    SENT = "sent"
    RECEIVED = "received"
    NONE = "none"


class FriendAction(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"


class Friend(CamelModel):
    user_id: str
    username: str
    is_verified: bool = False
    role: UserRole = UserRole.USER


class FriendRequest(CamelModel):
    user_id: str
    username: str


class FriendData(CamelModel):
    friends: List[Friend] = []
    requests: List[FriendRequest] = []


class TargetUserBody(CamelModel):
    target_user_id: str = Field(..., min_length=1)


class RespondFriendRequestBody(CamelModel):
    target_user_id: str = Field(..., min_length=1)
    response_action: FriendAction


class FriendResponse(CamelModel):
    success: bool = True
    newly_unlocked_achievements: List[AchievementUnlock] = []


class PhraseRef(CamelModel):
    id: str = Field(..., min_length=1)
    text: str = ""


class ImageRef(CamelModel):
    url: str = Field(..., min_length=1)
    theme: str = ""


class PublishPhraseRequest(CamelModel):
    phrase: PhraseRef
    image: ImageRef
    privacy: Privacy


class PublishPhraseResponse(CamelModel):
    success: bool = True
    last_modified: datetime
    newly_unlocked_achievements: List[AchievementUnlock] = []


class LikePhraseRequest(CamelModel):
    public_phrase_id: str = Field(..., min_length=1)


class LikePhraseResponse(CamelModel):
    success: bool = True
    liked: bool


class PublicPhraseView(CamelModel):
    """Feed / profile rendering of a Public Phrase projection."""
    public_phrase_id: str
    user_id: Optional[str] = None
    text: str = ""
    image_url: str = ""
    image_theme: str = ""
    privacy: Privacy = Privacy.PUBLIC
    like_count: int = 0
    is_liked_by_me: bool = False
    username: Optional[str] = None
    is_user_verified: Optional[bool] = None
    profile_picture_url: Optional[str] = None


class PublicProfileData(CamelModel):
    user_id: str
    username: str
    role: UserRole = UserRole.USER
    is_verified: bool = False
    bio: str = ""
    phrases: List[PublicPhraseView] = []
    profile_picture_url: Optional[str] = None
    friendship_status: FriendshipStatus = FriendshipStatus.NONE


class SearchableUser(CamelModel):
    username: str
    is_verified: bool = False
