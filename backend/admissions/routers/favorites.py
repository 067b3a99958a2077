"""Favorite API routes."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from admissions.database import get_db
from admissions.schemas.favorite import FavoriteListOut, FavoriteOut, FavoritePayload, PurgeOut
from admissions.services import favorite_store

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", status_code=status.HTTP_201_CREATED)
def add_favorite(payload: FavoritePayload, db: Session = Depends(get_db)):
    """Add an item to the user's favorites."""
    favorite_store.add(db, payload.user_id, payload.item_type, payload.item_id)
    return {}


@router.delete("/", status_code=status.HTTP_200_OK)
def remove_favorite(
    user_id: str = Query(...),
    item_type: str = Query(...),
    item_id: str = Query(...),
    db: Session = Depends(get_db),
):
    """Remove an item from the user's favorites."""
    favorite_store.remove(db, user_id, item_type, item_id)
    return {}


@router.get("/", response_model=FavoriteListOut)
def list_favorites(
    user_id: str = Query(...),
    item_type: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """The user's favorites, optionally of one item type."""
    favorites = favorite_store.list_for_user(db, user_id, item_type)
    return FavoriteListOut(
        user_id=user_id,
        item_ids=[f.item_id for f in favorites],
        favorites=[FavoriteOut.model_validate(f) for f in favorites],
    )


@router.delete("/items/{item_type}/{item_id}", response_model=PurgeOut)
def purge_item_favorites(item_type: str, item_id: str, db: Session = Depends(get_db)):
    """Drop all favorites of an item after its owner deleted it."""
    removed = favorite_store.purge_item(db, item_type, item_id)
    return PurgeOut(item_type=item_type, item_id=item_id, removed=removed)
