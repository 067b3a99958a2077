"""Registration (RSVP) API routes: one ledger call per request, outcome relayed unchanged."""
import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from admissions.database import get_db
from admissions.models.registration import Registration
from admissions.schemas.registration import (
    CancellationOut,
    RegistrationOut,
    RegistrationStatusOut,
    RegistrationWithEventOut,
    ReservationOut,
    ReservePayload,
    UserPayload,
)
from admissions.services import registration_ledger

logger = logging.getLogger(__name__)
router = APIRouter()


def _with_event(registration: Registration) -> RegistrationWithEventOut:
    base = RegistrationOut.model_validate(registration).model_dump()
    return RegistrationWithEventOut(
        **base,
        event_title=registration.event.title,
        event_start_time_utc=registration.event.start_time_utc,
        event_location=registration.event.location,
    )


@router.post(
    "/events/{event_id}/registrations",
    response_model=ReservationOut,
    status_code=status.HTTP_201_CREATED,
)
def reserve(event_id: str, payload: ReservePayload, db: Session = Depends(get_db)):
    """RSVP for an event: admitted while seats remain, waitlisted once full."""
    result = registration_ledger.reserve(
        db=db,
        user_id=payload.user_id,
        event_id=event_id,
        guest_count=payload.guest_count,
        guest_names=payload.guest_names,
        dietary_restrictions=payload.dietary_restrictions,
        special_requests=payload.special_requests,
    )
    return ReservationOut(
        status=result.outcome.value,
        registration=RegistrationOut.model_validate(result.registration),
    )


@router.post("/events/{event_id}/registrations/cancel", response_model=CancellationOut)
def cancel(event_id: str, payload: UserPayload, db: Session = Depends(get_db)):
    """Cancel the caller's RSVP. The registration is kept with status 'cancelled'."""
    registration = registration_ledger.cancel(db=db, user_id=payload.user_id, event_id=event_id)
    return CancellationOut(registration=RegistrationOut.model_validate(registration))


@router.get("/events/{event_id}/registrations/status", response_model=RegistrationStatusOut)
def registration_status(event_id: str, user_id: str = Query(...), db: Session = Depends(get_db)):
    """Current RSVP status for a user, or 'none'."""
    return RegistrationStatusOut(
        user_id=user_id,
        event_id=event_id,
        status=registration_ledger.status_for(db, user_id, event_id),
    )


@router.post("/events/{event_id}/registrations/check-in", response_model=RegistrationOut)
def check_in(event_id: str, payload: UserPayload, db: Session = Depends(get_db)):
    """Check in a confirmed attendee once the event has started."""
    return registration_ledger.check_in(db=db, user_id=payload.user_id, event_id=event_id)


@router.get("/registrations", response_model=list[RegistrationWithEventOut])
def list_user_registrations(
    user_id: str = Query(...),
    include_cancelled: bool = Query(False),
    db: Session = Depends(get_db),
):
    """A user's RSVPs with event title, start time and location."""
    registrations = registration_ledger.list_for_user(db, user_id, include_cancelled=include_cancelled)
    return [_with_event(r) for r in registrations]
