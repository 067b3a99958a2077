"""Pydantic schemas for Registrations (RSVPs)."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class ReservePayload(BaseModel):
    user_id: str
    guest_count: int = 1  # range checked by the ledger, not here
    guest_names: list[str] = []
    dietary_restrictions: Optional[str] = None
    special_requests: Optional[str] = None


class UserPayload(BaseModel):
    user_id: str


class RegistrationOut(BaseModel):
    registration_id: str
    user_id: str
    event_id: str
    status: str
    guest_count: int
    guest_names: Optional[list[str]] = None
    dietary_restrictions: Optional[str] = None
    special_requests: Optional[str] = None
    checked_in: bool
    checked_in_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class RegistrationWithEventOut(RegistrationOut):
    event_title: str
    event_start_time_utc: datetime
    event_location: Optional[str] = None


class ReservationOut(BaseModel):
    status: str  # admitted | waitlisted
    registration: RegistrationOut


class CancellationOut(BaseModel):
    status: str = "cancelled"
    registration: RegistrationOut


class RegistrationStatusOut(BaseModel):
    user_id: str
    event_id: str
    status: str  # confirmed | waiting | cancelled | none
