"""Pydantic schemas for Favorites."""
from datetime import datetime
from pydantic import BaseModel


class FavoritePayload(BaseModel):
    user_id: str
    item_type: str  # sermon, event, blog, ministry
    item_id: str


class FavoriteOut(BaseModel):
    favorite_id: str
    user_id: str
    item_type: str
    item_id: str
    created_at: datetime

    model_config = {"from_attributes": True}


class FavoriteListOut(BaseModel):
    user_id: str
    item_ids: list[str]
    favorites: list[FavoriteOut]


class PurgeOut(BaseModel):
    item_type: str
    item_id: str
    removed: int
