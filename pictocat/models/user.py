"""User Models - Profile, economy state and phrases."""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field

from pictocat.models.achievement import AchievementUnlock, UserAchievement
from pictocat.models.base import CamelModel
from pictocat.utils.timezone_utils import ensure_utc, utc_now


class UserRole(str, Enum):
    """User roles for RBAC."""
    USER = "user"
    MOD = "mod"
    ADMIN = "admin"


class Privacy(str, Enum):
    PRIVATE = "private"
    FRIENDS = "friends"
    PUBLIC = "public"


class Phrase(CamelModel):
    id: str = Field(..., min_length=1)
    text: str
    selected_image_id: Optional[int] = None
    is_custom: bool = False
    privacy: Privacy = Privacy.PRIVATE


class PlayerStats(CamelModel):
    level: int = Field(1, ge=1)
    xp: int = Field(0, ge=0)
    xp_to_next_level: int = Field(100, gt=0)


class UserStats(CamelModel):
    games_played: int = Field(0, ge=0)
    envelopes_opened: int = Field(0, ge=0)
    public_phrases: int = Field(0, ge=0)


class UserData(CamelModel):
    coins: int = 0
    phrases: List[Phrase] = []
    unlocked_image_ids: List[int] = []
    player_stats: PlayerStats = PlayerStats()
    purchased_upgrades: List[str] = []
    bio: str = ""
    profile_picture_id: Optional[int] = None
    friends: List[str] = []
    friend_requests_sent: List[str] = []
    friend_requests_received: List[str] = []
    unlocked_achievements: Dict[str, UserAchievement] = {}
    stats: UserStats = UserStats()


class UserProfile(CamelModel):
    """Full profile as returned by getUserData and sync."""
    id: str
    username: str
    role: UserRole = UserRole.USER
    is_verified: bool = False
    last_modified: datetime
    data: UserData

    @classmethod
    def from_doc(cls, doc: dict) -> "UserProfile":
        return cls(
            id=str(doc["_id"]),
            username=doc.get("username", ""),
            role=doc.get("role") or UserRole.USER,
            is_verified=doc.get("isVerified", False),
            last_modified=ensure_utc(doc.get("lastModified")) or utc_now(),
            data=UserData.model_validate({
                "coins": doc.get("coins", 0),
                "phrases": doc.get("phrases") or [],
                "unlockedImageIds": doc.get("unlockedImageIds") or [],
                "playerStats": doc.get("playerStats") or {},
                "purchasedUpgrades": doc.get("purchasedUpgrades") or [],
                "bio": doc.get("bio") or "",
                "profilePictureId": doc.get("profilePictureId"),
                "friends": doc.get("friends") or [],
                "friendRequestsSent": doc.get("friendRequestsSent") or [],
                "friendRequestsReceived": doc.get("friendRequestsReceived") or [],
                "unlockedAchievements": doc.get("unlockedAchievements") or {},
                "stats": doc.get("stats") or {},
            }),
        )


class SaveUserDataRequest(CamelModel):
    """Partial save; every field optional, unknown fields ignored."""
    coins: Optional[int] = Field(None, ge=0)
    phrases: Optional[List[Phrase]] = None
    unlocked_image_ids: Optional[List[int]] = None
    player_stats: Optional[PlayerStats] = None
    purchased_upgrades: Optional[List[str]] = None
    stats: Optional[UserStats] = None


class SaveUserDataResponse(CamelModel):
    success: bool = True
    last_modified: datetime
    newly_unlocked_achievements: List[AchievementUnlock] = []


class UpdateProfileRequest(CamelModel):
    username: str
    bio: str = ""


class UpdateProfilePictureRequest(CamelModel):
    image_id: Optional[int] = None


class GameResult(CamelModel):
    """Normalized reward triple handed over by any minigame."""
    score: int = Field(0, ge=0)
    coins_earned: int = Field(0, ge=0)
    xp_earned: int = Field(0, ge=0)


class GameResultResponse(CamelModel):
    coins: int
    player_stats: PlayerStats
    levels_gained: int = 0
    last_modified: datetime
    newly_unlocked_achievements: List[AchievementUnlock] = []


class AdminUserView(CamelModel):
    id: str
    username: str
    role: UserRole = UserRole.USER
    is_verified: bool = False


class SuccessResponse(CamelModel):
    success: bool = True
    message: str = ""
