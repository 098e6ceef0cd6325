"""Catalog Models - Cat images, envelopes (packs) and upgrades."""

from enum import Enum
from typing import Optional

from pydantic import Field, model_validator

from pictocat.models.base import CamelModel


class Rarity(str, Enum):
    """Catalog item rarity tiers (common < rare < epic)."""
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"


class CatImage(CamelModel):
    """Unlockable catalog item."""
    id: int
    url: str
    theme: str = ""
    rarity: Rarity = Rarity.COMMON

    @classmethod
    def from_doc(cls, doc: dict) -> "CatImage":
        return cls(
            id=doc["numeric_id"],
            url=doc.get("url", ""),
            theme=doc.get("theme", ""),
            rarity=doc.get("rarity") or Rarity.COMMON,
        )


class RarityProbabilities(CamelModel):
    common: float = Field(..., ge=0)
    rare: float = Field(..., ge=0)
    epic: float = Field(..., ge=0)


class Envelope(CamelModel):
    """Purchasable gacha pack."""
    id: str
    name: str = ""
    description: str = ""
    base_cost: int = Field(..., ge=0)
    cost_increase_per_level: int = Field(0, ge=0)
    image_count: int = Field(..., ge=1)
    xp: int = Field(0, ge=0)
    color: str = ""
    rarity_probabilities: RarityProbabilities
    current_cost: Optional[int] = None

    def cost_for_level(self, level: int) -> int:
        """baseCost + (level - 1) * costIncreasePerLevel"""
        return self.base_cost + (max(level, 1) - 1) * self.cost_increase_per_level

    @classmethod
    def from_doc(cls, doc: dict) -> "Envelope":
        return cls.model_validate({**doc, "id": doc["_id"]})


class Upgrade(CamelModel):
    """Permanent upgrade, purchasable once."""
    id: str
    name: str = ""
    description: str = ""
    cost: int = Field(..., ge=0)
    level_required: int = Field(1, ge=1)
    icon: str = ""

    @classmethod
    def from_doc(cls, doc: dict) -> "Upgrade":
        return cls.model_validate({**doc, "id": doc["_id"]})


class EnvelopeUpdate(CamelModel):
    """Admin edit of an envelope. Only the listed fields may change."""
    base_cost: Optional[int] = Field(None, ge=0)
    cost_increase_per_level: Optional[int] = Field(None, ge=0)
    image_count: Optional[int] = Field(None, ge=1)
    rarity_probabilities: Optional[RarityProbabilities] = None

    @model_validator(mode="after")
    def probabilities_sum_to_100(self):
        probs = self.rarity_probabilities
        if probs is not None and probs.common + probs.rare + probs.epic != 100:
            raise ValueError("Rarity probabilities must add up to 100")
        return self
