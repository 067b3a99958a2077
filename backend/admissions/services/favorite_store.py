"""Favorite store: add / remove a user's marker on a sermon, event, blog post or ministry.

A duplicate add raises AlreadyFavoritedError whether it is caught by the
pre-check or by the unique constraint; a remove of something absent raises
NotFavoritedError. Removal is a hard delete, so re-adding behaves exactly
like a first add.
"""
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from admissions.models.favorite import Favorite, ItemType
from admissions.services.errors import (
    AlreadyFavoritedError,
    InvalidItemTypeError,
    NotFavoritedError,
)
from admissions.services.locks import KeyedLockRegistry, run_with_retries

logger = logging.getLogger(__name__)

_favorite_locks = KeyedLockRegistry()


def parse_item_type(item_type) -> ItemType:
    """Validate an item type before touching storage."""
    if isinstance(item_type, ItemType):
        return item_type
    try:
        return ItemType(item_type)
    except ValueError:
        raise InvalidItemTypeError(str(item_type))


def _key(user_id: str, item_type: ItemType, item_id: str) -> str:
    return f"favorite:{user_id}:{item_type.value}:{item_id}"


def _find(db: Session, user_id: str, item_type: ItemType, item_id: str) -> Optional[Favorite]:
    return (
        db.query(Favorite)
        .filter(
            Favorite.user_id == user_id,
            Favorite.item_type == item_type,
            Favorite.item_id == item_id,
        )
        .first()
    )


def add(db: Session, user_id: str, item_type, item_id: str) -> Favorite:
    """Create the favorite; AlreadyFavoritedError if it exists."""
    kind = parse_item_type(item_type)
    key = _key(user_id, kind, item_id)

    def _attempt() -> Favorite:
        if _find(db, user_id, kind, item_id):
            raise AlreadyFavoritedError(kind.value, item_id)
        favorite = Favorite(user_id=user_id, item_type=kind, item_id=item_id)
        db.add(favorite)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise AlreadyFavoritedError(kind.value, item_id) from exc
        return favorite

    with _favorite_locks.hold(key):
        favorite = run_with_retries(db, key, _attempt)

    db.refresh(favorite)
    logger.info("User %s favorited %s %s", user_id, kind.value, item_id)
    return favorite


def remove(db: Session, user_id: str, item_type, item_id: str) -> None:
    """Delete the favorite; NotFavoritedError if there is none."""
    kind = parse_item_type(item_type)
    key = _key(user_id, kind, item_id)

    def _attempt() -> None:
        deleted = (
            db.query(Favorite)
            .filter(
                Favorite.user_id == user_id,
                Favorite.item_type == kind,
                Favorite.item_id == item_id,
            )
            .delete(synchronize_session=False)
        )
        db.commit()
        if not deleted:
            raise NotFavoritedError(kind.value, item_id)
        logger.info("User %s unfavorited %s %s", user_id, kind.value, item_id)

    with _favorite_locks.hold(key):
        run_with_retries(db, key, _attempt)


def list_for_user(db: Session, user_id: str, item_type=None) -> list[Favorite]:
    """The user's favorites, newest first, optionally of one item type."""
    query = db.query(Favorite).filter(Favorite.user_id == user_id)
    if item_type is not None:
        query = query.filter(Favorite.item_type == parse_item_type(item_type))
    return query.order_by(Favorite.created_at.desc(), Favorite.item_id).all()


def favorited_item_ids(db: Session, user_id: str, item_type=None) -> set[str]:
    """Item ids the user has favorited; used to pre-populate toggles."""
    query = db.query(Favorite.item_id).filter(Favorite.user_id == user_id)
    if item_type is not None:
        query = query.filter(Favorite.item_type == parse_item_type(item_type))
    return {row.item_id for row in query.all()}


def purge_item(db: Session, item_type, item_id: str) -> int:
    """Drop every user's favorite of an item that has been deleted."""
    kind = parse_item_type(item_type)
    removed = (
        db.query(Favorite)
        .filter(Favorite.item_type == kind, Favorite.item_id == item_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    logger.info("Purged %d favorite(s) of %s %s", removed, kind.value, item_id)
    return removed
