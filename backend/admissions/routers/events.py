"""Event API routes: the event directory the ledger admits against."""
import logging
from datetime import datetime, timezone
from typing import Any, Optional
import pytz
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from admissions.database import get_db
from admissions.models.event import Event, EventCategory, EventStatus
from admissions.schemas.event import EventCreate, EventUpdate, EventOut, OccupancyOut
from admissions.services import registration_ledger

logger = logging.getLogger(__name__)
router = APIRouter()


def _coerce_enums(fields: dict[str, Any]) -> dict[str, Any]:
    """Turn category/status strings into enum members, 400 on unknown values."""
    try:
        if fields.get("category") is not None:
            fields["category"] = EventCategory(fields["category"])
        if fields.get("status") is not None:
            fields["status"] = EventStatus(fields["status"])
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return fields


def _to_utc(value: datetime) -> datetime:
    """Naive input is taken as UTC; offsets are converted so storage only ever holds UTC."""
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)


def _normalize_times(fields: dict[str, Any]) -> dict[str, Any]:
    for name in ("start_time_utc", "end_time_utc"):
        if name not in fields:
            continue
        if fields[name] is None:
            raise HTTPException(status_code=400, detail=f"{name} cannot be null")
        fields[name] = _to_utc(fields[name])
    return fields


def _check_ordering(start: datetime, end: datetime) -> None:
    if end <= start:
        raise HTTPException(status_code=400, detail="end_time_utc must be after start_time_utc")


def _get_or_404(db: Session, event_id: str) -> Event:
    event = db.query(Event).filter(Event.event_id == event_id).first()
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(payload: EventCreate, db: Session = Depends(get_db)):
    """Create an event with its schedule and capacity (NULL capacity = unlimited)."""
    fields = _normalize_times(payload.model_dump())
    _check_ordering(fields["start_time_utc"], fields["end_time_utc"])
    event = Event(**_coerce_enums(fields))
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Created event '%s' (%s) with capacity %s", event.title, event.event_id, event.capacity)
    return event


@router.get("/", response_model=list[EventOut])
def list_events(
    category: Optional[str] = Query(None),
    upcoming: bool = Query(False),
    include_cancelled: bool = Query(False),
    db: Session = Depends(get_db),
):
    """List events by start time, optionally only upcoming ones or one category."""
    query = db.query(Event)
    if category:
        query = query.filter(Event.category == _coerce_enums({"category": category})["category"])
    if upcoming:
        query = query.filter(Event.start_time_utc >= datetime.now(timezone.utc))
    if not include_cancelled:
        query = query.filter(Event.status != EventStatus.cancelled)
    return query.order_by(Event.start_time_utc).all()


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, db: Session = Depends(get_db)):
    """Fetch a single event by ID."""
    return _get_or_404(db, event_id)


@router.patch("/{event_id}", response_model=EventOut)
def update_event(event_id: str, payload: EventUpdate, db: Session = Depends(get_db)):
    """Partial update. A capacity change only affects reservations made afterwards."""
    event = _get_or_404(db, event_id)
    updates = _coerce_enums(_normalize_times(payload.model_dump(exclude_unset=True)))
    if "start_time_utc" in updates or "end_time_utc" in updates:
        _check_ordering(
            updates.get("start_time_utc") or _to_utc(event.start_time_utc),
            updates.get("end_time_utc") or _to_utc(event.end_time_utc),
        )
    for field, value in updates.items():
        setattr(event, field, value)
    db.commit()
    db.refresh(event)
    logger.info("Updated event %s (%s)", event_id, ", ".join(sorted(updates)) or "no changes")
    return event


@router.get("/{event_id}/occupancy", response_model=OccupancyOut)
def get_occupancy(event_id: str, db: Session = Depends(get_db)):
    """Confirmed and waiting guest totals, derived from the registrations."""
    return registration_ledger.event_occupancy(db, event_id)
