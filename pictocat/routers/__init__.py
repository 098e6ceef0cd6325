"""PictoCat Routers Package"""

from pictocat.routers import (
    achievements,
    admin,
    catalog,
    community,
    daily,
    friends,
    games,
    shop,
    suggestions,
    users,
)

__all__ = [
    "achievements",
    "admin",
    "catalog",
    "community",
    "daily",
    "friends",
    "games",
    "shop",
    "suggestions",
    "users",
]
