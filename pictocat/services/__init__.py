"""PictoCat Services Package"""

from pictocat.services.auth_service import AuthService
from pictocat.services.daily_pass_service import DailyPassService
from pictocat.services.phrase_service import PhraseService
from pictocat.services.shop_service import ShopService
from pictocat.services.social_service import SocialService
from pictocat.services.suggestion_service import SuggestionService
from pictocat.services.sync_service import SyncService
from pictocat.services.user_service import UserService

__all__ = [
    "AuthService",
    "DailyPassService",
    "PhraseService",
    "ShopService",
    "SocialService",
    "SuggestionService",
    "SyncService",
    "UserService",
]
