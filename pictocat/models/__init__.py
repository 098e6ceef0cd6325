"""PictoCat Models Package"""

from pictocat.models.achievement import Achievement, AchievementTier, AchievementUnlock, UserAchievement
from pictocat.models.catalog import CatImage, Envelope, EnvelopeUpdate, Rarity, RarityProbabilities, Upgrade
from pictocat.models.user import PlayerStats, Phrase, Privacy, UserProfile, UserRole, UserStats
from pictocat.models.social import FriendshipStatus, FriendAction, PublicPhraseView

__all__ = [
    "Achievement", "AchievementTier", "AchievementUnlock", "UserAchievement",
    "CatImage", "Envelope", "EnvelopeUpdate", "Rarity", "RarityProbabilities", "Upgrade",
    "PlayerStats", "Phrase", "Privacy", "UserProfile", "UserRole", "UserStats",
    "FriendshipStatus", "FriendAction", "PublicPhraseView",
]
