"""Registration ledger: admits, waitlists and cancels event RSVPs.

Responsibilities:
- One live (confirmed or waiting) registration per (user, event), backed by
  a partial unique index so a racing duplicate is rejected by storage
- Confirmed guests never exceed the event capacity; the confirmed total is
  always aggregated from the rows, never kept as a separate counter
- A full event waitlists instead of rejecting
- Cancellation is a status change; a later reserve starts fresh
- No automatic waitlist promotion on cancel

Every write for an event runs under that event's lock, reads the event row
FOR UPDATE, and commits or rolls back before returning.
"""
import logging
import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import pytz
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from admissions.models.event import Event, EventStatus, CLOSED_STATUSES
from admissions.models.registration import Registration, RegistrationStatus, ACTIVE_STATUSES
from admissions.services.errors import (
    AlreadyCheckedInError,
    AlreadyRegisteredError,
    CheckInNotOpenError,
    EventClosedError,
    EventNotFoundError,
    InvalidGuestCountError,
    LedgerError,
    NotRegisteredError,
)
from admissions.services.locks import KeyedLockRegistry, run_with_retries

logger = logging.getLogger(__name__)

_event_locks = KeyedLockRegistry()

NO_REGISTRATION = "none"


class ReservationOutcome(str, enum.Enum):
    admitted = "admitted"
    waitlisted = "waitlisted"


@dataclass(frozen=True)
class ReservationResult:
    outcome: ReservationOutcome
    registration: Registration


@dataclass(frozen=True)
class Occupancy:
    event_id: str
    capacity: Optional[int]
    confirmed_guests: int
    waiting_guests: int
    seats_remaining: Optional[int]


def _utcnow() -> datetime:
    return datetime.now(pytz.utc)


def _as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)


def _lock_event(db: Session, event_id: str) -> Event:
    event = db.query(Event).filter(Event.event_id == event_id).with_for_update().first()
    if not event:
        raise EventNotFoundError(event_id)
    return event


def _ensure_open(event: Event) -> None:
    if event.status in CLOSED_STATUSES or _as_utc(event.end_time_utc) <= _utcnow():
        raise EventClosedError(event.event_id)


def _active_registration(db: Session, user_id: str, event_id: str, for_update: bool = False) -> Optional[Registration]:
    query = db.query(Registration).filter(
        Registration.user_id == user_id,
        Registration.event_id == event_id,
        Registration.status.in_(ACTIVE_STATUSES),
    )
    if for_update:
        query = query.with_for_update()
    return query.first()


def _guest_total(db: Session, event_id: str, status: RegistrationStatus) -> int:
    total = (
        db.query(func.coalesce(func.sum(Registration.guest_count), 0))
        .filter(Registration.event_id == event_id, Registration.status == status)
        .scalar()
    )
    return int(total or 0)


def reserve(
    db: Session,
    user_id: str,
    event_id: str,
    guest_count: int = 1,
    guest_names: Optional[list[str]] = None,
    dietary_restrictions: Optional[str] = None,
    special_requests: Optional[str] = None,
) -> ReservationResult:
    """Admit or waitlist a user for an event.

    Raises:
        InvalidGuestCountError: guest_count < 1 (nothing is written).
        EventNotFoundError: the event does not exist.
        EventClosedError: the event has ended, been cancelled or completed.
        AlreadyRegisteredError: the user already holds a live registration.
        ConflictError: contention outlasted the retry budget.
    """
    if guest_count is None or guest_count < 1:
        raise InvalidGuestCountError(guest_count)

    def _attempt() -> tuple[Registration, bool, int, Optional[int]]:
        try:
            event = _lock_event(db, event_id)
            _ensure_open(event)

            if _active_registration(db, user_id, event_id):
                raise AlreadyRegisteredError(user_id, event_id)

            capacity = event.capacity
            confirmed = _guest_total(db, event_id, RegistrationStatus.confirmed)
            admitted = capacity is None or confirmed + guest_count <= capacity

            registration = Registration(
                user_id=user_id,
                event_id=event_id,
                status=RegistrationStatus.confirmed if admitted else RegistrationStatus.waiting,
                guest_count=guest_count,
                guest_names=list(guest_names or []),
                dietary_restrictions=dietary_restrictions,
                special_requests=special_requests,
            )
            db.add(registration)
            try:
                db.commit()
            except IntegrityError as exc:
                # The partial unique index caught a duplicate another writer committed first
                db.rollback()
                raise AlreadyRegisteredError(user_id, event_id) from exc
        except LedgerError:
            db.rollback()
            raise
        return registration, admitted, confirmed, capacity

    # Only the uncommitted unit of work is retried; once committed the reservation stands
    with _event_locks.hold(event_id):
        registration, admitted, confirmed, capacity = run_with_retries(db, f"event:{event_id}", _attempt)

    db.refresh(registration)
    outcome = ReservationOutcome.admitted if admitted else ReservationOutcome.waitlisted
    logger.info(
        "User %s %s for event %s with %d guest(s) (%d/%s confirmed before)",
        user_id, outcome.value, event_id, guest_count, confirmed,
        capacity if capacity is not None else "unlimited",
    )
    return ReservationResult(outcome=outcome, registration=registration)


def cancel(db: Session, user_id: str, event_id: str) -> Registration:
    """Cancel the user's live registration. Waiting registrants are not promoted.

    Raises:
        NotRegisteredError: no confirmed or waiting registration exists.
        ConflictError: contention outlasted the retry budget.
    """

    def _attempt() -> tuple[Registration, RegistrationStatus]:
        registration = _active_registration(db, user_id, event_id, for_update=True)
        if not registration:
            db.rollback()
            raise NotRegisteredError(user_id, event_id)

        previous = registration.status
        registration.status = RegistrationStatus.cancelled
        registration.cancelled_at = _utcnow()
        db.commit()
        return registration, previous

    with _event_locks.hold(event_id):
        registration, previous = run_with_retries(db, f"event:{event_id}", _attempt)

    db.refresh(registration)
    if previous == RegistrationStatus.confirmed:
        logger.info("User %s cancelled for event %s, freeing %d seat(s)", user_id, event_id, registration.guest_count)
    else:
        logger.info("User %s left the waitlist for event %s", user_id, event_id)
    return registration


def status_for(db: Session, user_id: str, event_id: str) -> str:
    """Return confirmed / waiting / cancelled / none for (user, event). Read only."""
    active = _active_registration(db, user_id, event_id)
    if active:
        return active.status.value
    cancelled = (
        db.query(Registration.registration_id)
        .filter(
            Registration.user_id == user_id,
            Registration.event_id == event_id,
            Registration.status == RegistrationStatus.cancelled,
        )
        .first()
    )
    return RegistrationStatus.cancelled.value if cancelled else NO_REGISTRATION


def list_for_user(db: Session, user_id: str, include_cancelled: bool = False) -> list[Registration]:
    """A user's registrations with their events, latest event first."""
    query = (
        db.query(Registration)
        .join(Event)
        .options(joinedload(Registration.event))
        .filter(Registration.user_id == user_id)
    )
    if not include_cancelled:
        query = query.filter(Registration.status.in_(ACTIVE_STATUSES))
    return query.order_by(Event.start_time_utc.desc()).all()


def event_occupancy(db: Session, event_id: str) -> Occupancy:
    """Derived seat counters for an event."""
    event = db.query(Event).filter(Event.event_id == event_id).first()
    if not event:
        raise EventNotFoundError(event_id)

    confirmed = _guest_total(db, event_id, RegistrationStatus.confirmed)
    waiting = _guest_total(db, event_id, RegistrationStatus.waiting)
    remaining = None if event.capacity is None else max(0, event.capacity - confirmed)
    return Occupancy(
        event_id=event_id,
        capacity=event.capacity,
        confirmed_guests=confirmed,
        waiting_guests=waiting,
        seats_remaining=remaining,
    )


def check_in(db: Session, user_id: str, event_id: str) -> Registration:
    """Mark a confirmed registration as checked in once the event has started.

    Raises:
        EventNotFoundError, EventClosedError (event cancelled),
        NotRegisteredError (no confirmed registration),
        CheckInNotOpenError (event not started), AlreadyCheckedInError.
    """

    def _attempt() -> Registration:
        try:
            event = _lock_event(db, event_id)
            if event.status == EventStatus.cancelled:
                raise EventClosedError(event_id)
            registration = _active_registration(db, user_id, event_id, for_update=True)
            if not registration or registration.status != RegistrationStatus.confirmed:
                raise NotRegisteredError(user_id, event_id)
            if registration.checked_in:
                raise AlreadyCheckedInError(registration.registration_id)
            now = _utcnow()
            if now < _as_utc(event.start_time_utc):
                raise CheckInNotOpenError(event_id)
        except LedgerError:
            db.rollback()
            raise

        registration.checked_in = True
        registration.checked_in_at = now
        db.commit()
        return registration

    with _event_locks.hold(event_id):
        registration = run_with_retries(db, f"event:{event_id}", _attempt)

    db.refresh(registration)
    logger.info("User %s checked in to event %s", user_id, event_id)
    return registration
