"""
PictoCat Constants

Centralized economy values, seed reference data and magic numbers.
"""

import re

# Time windows
DAILY_WINDOW_MS = 24 * 60 * 60 * 1000
SYNC_BUFFER_MS = 1000

# Leveling
INITIAL_XP_TO_NEXT_LEVEL = 100
XP_GROWTH_FACTOR = 1.5

# Daily pass
DAILY_REWARD_IMAGE_COUNT = 2
DAILY_COIN_REWARD_IF_ALL_UNLOCKED = 100

# Profile
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]{3,20}$")
USERNAME_MAX_LENGTH = 20
BIO_MAX_LENGTH = 150
USERNAME_SUFFIX_MIN = 1000
USERNAME_SUFFIX_MAX = 9999
USERNAME_CREATE_ATTEMPTS = 5

# Community
FEED_LIMIT = 50
SEARCH_MIN_LENGTH = 2
SEARCH_LIMIT = 10

# Suggestions
SUGGESTION_COUNT = 5

# Rarities, in cumulative-threshold order
RARITY_ORDER = ("common", "rare", "epic")

# Phrase privacy
PRIVACY_LEVELS = ("private", "friends", "public")
SHARED_PRIVACY = ("friends", "public")

# Counters a ledger may increment
STAT_COUNTERS = ("gamesPlayed", "envelopesOpened", "publicPhrases")

SEED_FLAG_ID = "shop_config"


# =============================================================================
# Initial user data
# =============================================================================

INITIAL_COINS = 500
INITIAL_BIO = "Hi! I'm new to PictoCat."

INITIAL_PHRASES = [
    {"id": "yes", "text": "Yes", "selectedImageId": None, "isCustom": False, "privacy": "private"},
    {"id": "no", "text": "No", "selectedImageId": None, "isCustom": False, "privacy": "private"},
    {"id": "happy", "text": "I feel happy", "selectedImageId": None, "isCustom": False, "privacy": "private"},
    {"id": "sad", "text": "I feel sad", "selectedImageId": None, "isCustom": False, "privacy": "private"},
    {"id": "help", "text": "I need help", "selectedImageId": None, "isCustom": False, "privacy": "private"},
]


def initial_user_data() -> dict:
    """Fresh economy/social state for a just-created user."""
    return {
        "phrases": [dict(p) for p in INITIAL_PHRASES],
        "coins": INITIAL_COINS,
        "unlockedImageIds": [],
        "playerStats": {"level": 1, "xp": 0, "xpToNextLevel": INITIAL_XP_TO_NEXT_LEVEL},
        "purchasedUpgrades": [],
        "bio": INITIAL_BIO,
        "profilePictureId": None,
        "friends": [],
        "friendRequestsSent": [],
        "friendRequestsReceived": [],
        "unlockedAchievements": {},
        "stats": {"gamesPlayed": 0, "envelopesOpened": 0, "publicPhrases": 0},
        "dailyPass": {},
    }


# =============================================================================
# Shop seed data
# =============================================================================

ENVELOPES = {
    "bronze": {
        "name": "Bronze Envelope",
        "description": "One random new cat picture.",
        "baseCost": 75,
        "costIncreasePerLevel": 5,
        "imageCount": 1,
        "color": "from-orange-400 to-yellow-500",
        "xp": 10,
        "rarityProbabilities": {"common": 80, "rare": 15, "epic": 5},
    },
    "silver": {
        "name": "Silver Envelope",
        "description": "Three new cat pictures!",
        "baseCost": 150,
        "costIncreasePerLevel": 10,
        "imageCount": 3,
        "color": "from-slate-400 to-gray-500",
        "xp": 30,
        "rarityProbabilities": {"common": 60, "rare": 30, "epic": 10},
    },
    "gold": {
        "name": "Gold Envelope",
        "description": "Five random new cat pictures!",
        "baseCost": 300,
        "costIncreasePerLevel": 20,
        "imageCount": 5,
        "color": "from-amber-400 to-yellow-500",
        "xp": 80,
        "rarityProbabilities": {"common": 40, "rare": 40, "epic": 20},
    },
}

UPGRADES = {
    "goldenPaw": {
        "name": "Golden Paw",
        "description": "Earn 50% more coins.",
        "cost": 500,
        "levelRequired": 3,
        "icon": "coin",
    },
    "betterBait": {
        "name": "Better Bait",
        "description": "Mice stay visible 250ms longer in Mouse Hunt.",
        "cost": 350,
        "levelRequired": 2,
        "icon": "mouse",
    },
    "extraTime": {
        "name": "Extra Time",
        "description": "Adds 5 seconds to Mouse Hunt.",
        "cost": 700,
        "levelRequired": 5,
        "icon": "time",
    },
    "photographicMemory": {
        "name": "Photographic Memory",
        "description": "Reveals every card for 1.5s at the start of Cat Memory.",
        "cost": 600,
        "levelRequired": 4,
        "icon": "brain",
    },
    "smartyCat": {
        "name": "Smarty Cat",
        "description": "Removes one wrong answer per Cat Trivia question.",
        "cost": 450,
        "levelRequired": 3,
        "icon": "question",
    },
    "xpBoost": {
        "name": "XP Boost",
        "description": "Earn 25% more experience.",
        "cost": 1000,
        "levelRequired": 6,
        "icon": "star",
    },
}

# Catalog rarity assignment applied while seeding
RARE_THEMES = ["Cats in Trouble", "Grumpy Cats"]
EPIC_IMAGE_URLS = [
    "https://media.tenor.com/ldNjzyrqeIMAAAAC/gato-meme.gif",
    "https://i.redd.it/elohtitdb7351.jpg",
    "https://images7.memedroid.com/images/UPLOADED475/64f8c02457e24.jpeg",
]


# =============================================================================
# Achievements
# =============================================================================

ACHIEVEMENTS = [
    {
        "id": "collector_1",
        "name": "Beginner Collector",
        "description": "Unlock your first cats.",
        "category": "Collection",
        "stat": "unlockedImageIds.length",
        "tiers": [
            {"value": 10, "coins": 50, "xp": 20},
            {"value": 25, "coins": 100, "xp": 50},
            {"value": 50, "coins": 250, "xp": 100},
        ],
    },
    {
        "id": "millionaire_1",
        "name": "Feline Saver",
        "description": "Build up a small fortune.",
        "category": "Economy",
        "stat": "coins",
        "tiers": [
            {"value": 1000, "coins": 100, "xp": 50},
            {"value": 5000, "coins": 250, "xp": 100},
            {"value": 10000, "coins": 500, "xp": 200},
        ],
    },
    {
        "id": "envelopes_1",
        "name": "Envelope Opener",
        "description": "The thrill of finding out what's inside.",
        "category": "Economy",
        "stat": "envelopesOpened",
        "tiers": [
            {"value": 5, "coins": 25, "xp": 10},
            {"value": 20, "coins": 100, "xp": 40},
            {"value": 50, "coins": 250, "xp": 100},
        ],
    },
    {
        "id": "social_1",
        "name": "Friendly Cat",
        "description": "Make new friends in the community.",
        "category": "Social",
        "stat": "friends.length",
        "tiers": [
            {"value": 1, "coins": 50, "xp": 25},
            {"value": 5, "coins": 150, "xp": 75},
            {"value": 10, "coins": 300, "xp": 150},
        ],
    },
    {
        "id": "creator_1",
        "name": "Content Creator",
        "description": "Share your phrases with the community.",
        "category": "Social",
        "stat": "publicPhrases",
        "tiers": [
            {"value": 1, "coins": 30, "xp": 15},
            {"value": 5, "coins": 100, "xp": 50},
            {"value": 15, "coins": 250, "xp": 125},
        ],
    },
    {
        "id": "gamer_1",
        "name": "Casual Gamer",
        "description": "Play minigames to win prizes.",
        "category": "Games",
        "stat": "gamesPlayed",
        "tiers": [
            {"value": 5, "coins": 50, "xp": 25},
            {"value": 25, "coins": 200, "xp": 100},
            {"value": 100, "coins": 500, "xp": 250},
        ],
    },
    {
        "id": "leveled_up_1",
        "name": "Leveling Up",
        "description": "Gain experience and level up.",
        "category": "Progression",
        "stat": "playerStats.level",
        "tiers": [
            {"value": 5, "coins": 100, "xp": 0},
            {"value": 10, "coins": 250, "xp": 0},
            {"value": 20, "coins": 500, "xp": 0},
        ],
    },
]
