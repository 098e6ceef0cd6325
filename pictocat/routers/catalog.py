"""
Catalog Router

Public, unauthenticated catalog of unlockable cat images.
"""

from typing import List

from fastapi import APIRouter

from pictocat.models.catalog import CatImage
from pictocat.services.shop_service import ShopService

router = APIRouter()
shop_service = ShopService()


@router.get("", response_model=List[CatImage])
async def get_catalog():
    return await shop_service.get_catalog()
