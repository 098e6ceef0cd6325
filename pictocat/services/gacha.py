"""
Gacha Resolver

Rarity-weighted envelope draws over the cat catalog. Pure functions: the
caller loads the catalog and persists whatever comes back.
"""

import random
from typing import Dict, Iterable, List, Optional, Sequence

from pictocat.models.catalog import CatImage, Envelope, Rarity, RarityProbabilities

# Rarities searched, in order, when the rolled one has nothing left
FALLBACK_ORDER: Dict[Rarity, Sequence[Rarity]] = {
    Rarity.EPIC: (Rarity.EPIC, Rarity.RARE, Rarity.COMMON),
    Rarity.RARE: (Rarity.RARE, Rarity.COMMON, Rarity.EPIC),
    Rarity.COMMON: (Rarity.COMMON, Rarity.RARE, Rarity.EPIC),
}


def select_rarity(probabilities: RarityProbabilities, rng: Optional[random.Random] = None) -> Rarity:
    """Roll a rarity against cumulative thresholds (common, rare, then epic as remainder)."""
    rng = rng or random
    roll = rng.random() * 100
    cumulative = probabilities.common
    if roll < cumulative:
        return Rarity.COMMON
    cumulative += probabilities.rare
    if roll < cumulative:
        return Rarity.RARE
    return Rarity.EPIC


def unowned_items(catalog: Iterable[CatImage], owned_ids: Iterable[int]) -> List[CatImage]:
    owned = set(owned_ids)
    return [item for item in catalog if item.id not in owned]


def find_item(
    pool: List[CatImage],
    rarity: Rarity,
    rng: Optional[random.Random] = None
) -> Optional[CatImage]:
    """Pick a random item of the rolled rarity, falling back through FALLBACK_ORDER."""
    rng = rng or random
    for candidate_rarity in FALLBACK_ORDER[rarity]:
        candidates = [item for item in pool if item.rarity == candidate_rarity]
        if candidates:
            return rng.choice(candidates)
    return None


def draw(
    envelope: Envelope,
    already_unlocked_ids: Iterable[int],
    catalog: Iterable[CatImage],
    rng: Optional[random.Random] = None
) -> List[CatImage]:
    """
    Open an envelope.

    Returns up to envelope.image_count new items, never one the user owns
    and never the same item twice. Fewer items come back once the
    unowned pool runs dry.
    """
    rng = rng or random
    pool = unowned_items(catalog, already_unlocked_ids)
    won: List[CatImage] = []

    for _ in range(envelope.image_count):
        if not pool:
            break
        rarity = select_rarity(envelope.rarity_probabilities, rng)
        item = find_item(pool, rarity, rng)
        if item is None:
            break
        won.append(item)
        pool = [candidate for candidate in pool if candidate.id != item.id]

    return won
