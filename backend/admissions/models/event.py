"""Event ORM model: the schedule and capacity the ledger admits against."""
import uuid
import enum
from sqlalchemy import Boolean, Column, String, DateTime, Integer, Index, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from admissions.database import Base


class EventStatus(str, enum.Enum):
    draft = "draft"
    scheduled = "scheduled"
    cancelled = "cancelled"
    completed = "completed"


class EventCategory(str, enum.Enum):
    service = "service"
    bible_study = "bible-study"
    prayer = "prayer"
    youth = "youth"
    children = "children"
    men = "men"
    women = "women"
    fellowship = "fellowship"
    outreach = "outreach"
    training = "training"


# Events in these states no longer accept reservations
CLOSED_STATUSES = (EventStatus.cancelled, EventStatus.completed)


class Event(Base):
    __tablename__ = "events"

    event_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    start_time_utc = Column(DateTime(timezone=True), nullable=False)
    end_time_utc = Column(DateTime(timezone=True), nullable=False)
    location = Column(String(500), nullable=True)
    category = Column(SAEnum(EventCategory, values_callable=lambda e: [m.value for m in e]),
                      nullable=False, default=EventCategory.service)
    status = Column(SAEnum(EventStatus), nullable=False, default=EventStatus.scheduled)
    capacity = Column(Integer, nullable=True)  # NULL = unlimited
    requires_rsvp = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    registrations = relationship("Registration", back_populates="event")

    __table_args__ = (
        Index("ix_events_start_time_utc", "start_time_utc"),
    )
