"""Registration ORM model: one RSVP attempt by a user for an event.

Rows are never deleted: cancelling flips ``status`` and a later re-RSVP
inserts a fresh row. The partial unique index below is what guarantees at
most one live (confirmed or waiting) row per (user_id, event_id), even when
two writers race past the application-level check.
"""
import uuid
import enum
from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Index, Integer, JSON, String, Text,
    CheckConstraint, Enum as SAEnum, text,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from admissions.database import Base


class RegistrationStatus(str, enum.Enum):
    confirmed = "confirmed"
    waiting = "waiting"
    cancelled = "cancelled"


ACTIVE_STATUSES = (RegistrationStatus.confirmed, RegistrationStatus.waiting)

_ACTIVE_ONLY = text("status != 'cancelled'")


class Registration(Base):
    __tablename__ = "registrations"

    registration_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(64), nullable=False)
    event_id = Column(String(36), ForeignKey("events.event_id"), nullable=False)
    status = Column(SAEnum(RegistrationStatus), nullable=False, default=RegistrationStatus.confirmed)
    guest_count = Column(Integer, nullable=False, default=1)
    guest_names = Column(JSON, nullable=True, default=list)
    dietary_restrictions = Column(Text, nullable=True)
    special_requests = Column(Text, nullable=True)
    checked_in = Column(Boolean, nullable=False, default=False)
    checked_in_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    event = relationship("Event", back_populates="registrations")

    __table_args__ = (
        CheckConstraint("guest_count >= 1", name="ck_registrations_guest_count_positive"),
        Index(
            "uq_registrations_active_user_event",
            "user_id",
            "event_id",
            unique=True,
            sqlite_where=_ACTIVE_ONLY,
            postgresql_where=_ACTIVE_ONLY,
        ),
        Index("ix_registrations_event_status", "event_id", "status"),
        Index("ix_registrations_user_id", "user_id"),
    )
