"""Pydantic schemas for Events."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class EventCreate(BaseModel):
    title: str
    start_time_utc: datetime
    end_time_utc: datetime
    location: Optional[str] = None
    category: str = "service"
    status: str = "scheduled"
    capacity: Optional[int] = Field(default=None, ge=0)
    requires_rsvp: bool = True


class EventUpdate(BaseModel):
    title: Optional[str] = None
    start_time_utc: Optional[datetime] = None
    end_time_utc: Optional[datetime] = None
    location: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=0)
    requires_rsvp: Optional[bool] = None


class EventOut(BaseModel):
    event_id: str
    title: str
    start_time_utc: datetime
    end_time_utc: datetime
    location: Optional[str] = None
    category: str
    status: str
    capacity: Optional[int] = None
    requires_rsvp: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OccupancyOut(BaseModel):
    event_id: str
    capacity: Optional[int] = None
    confirmed_guests: int
    waiting_guests: int
    seats_remaining: Optional[int] = None

    model_config = {"from_attributes": True}
