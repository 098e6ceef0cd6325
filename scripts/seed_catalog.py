"""
Load cat images into the catalog.

Usage: python scripts/seed_catalog.py cats.json

The file holds a JSON list of {"id", "url", "theme"} objects (an explicit
"rarity" wins over the default assignment). Upserts by numeric_id, so
running it twice is harmless.
"""

import argparse
import asyncio
import json
from pathlib import Path

from motor.motor_asyncio import AsyncIOMotorClient

from pictocat.config import settings
from pictocat.services.shop_service import catalog_rarity


def load_items(path: Path) -> list:
    items = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(items, list):
        raise ValueError("Catalog file must contain a JSON list")
    return items


async def seed(path: Path):
    items = load_items(path)

    print(f"Connecting to MongoDB: {settings.mongodb_database}...")
    client = AsyncIOMotorClient(settings.mongodb_uri)
    db = client[settings.mongodb_database]

    try:
        await client.admin.command("ping")
        print("Connected.")

        inserted = updated = 0
        for item in items:
            numeric_id = int(item.get("numeric_id", item.get("id")))
            url = item["url"]
            theme = item.get("theme", "")
            rarity = item.get("rarity") or catalog_rarity(url, theme).value

            result = await db.cats.update_one(
                {"numeric_id": numeric_id},
                {"$set": {"numeric_id": numeric_id, "url": url, "theme": theme, "rarity": rarity}},
                upsert=True,
            )
            if result.upserted_id is not None:
                inserted += 1
            elif result.modified_count:
                updated += 1

        await db.cats.create_index("numeric_id", unique=True)
        print(f"Done. {inserted} inserted, {updated} updated, {len(items)} total.")
    finally:
        client.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the PictoCat image catalog")
    parser.add_argument("file", type=Path, help="JSON list of cat images")
    args = parser.parse_args()
    asyncio.run(seed(args.file))
