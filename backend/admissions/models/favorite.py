"""Favorite ORM model: a user's interest marker on a sermon, event, blog post or ministry."""
import uuid
import enum
from sqlalchemy import Column, String, DateTime, Index, UniqueConstraint, Enum as SAEnum
from sqlalchemy.sql import func
from admissions.database import Base


class ItemType(str, enum.Enum):
    sermon = "sermon"
    event = "event"
    blog = "blog"
    ministry = "ministry"


class Favorite(Base):
    __tablename__ = "favorites"

    favorite_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(64), nullable=False)
    item_type = Column(SAEnum(ItemType), nullable=False)
    item_id = Column(String(64), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "item_type", "item_id", name="uq_favorites_user_item"),
        Index("ix_favorites_item", "item_type", "item_id"),
    )
