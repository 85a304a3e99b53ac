"""Registration and roster API routes: delegates to the capacity ledger.

Only clean results leave these handlers: success bodies carry the status the
ledger assigned, and every business failure is a LedgerError rendered by the
handler in app.main.
"""
import logging
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.participant import RegistrationStatus
from app.schemas.participant import (
    BulkUpdateRequest,
    BulkUpdateResponse,
    ParticipantOut,
    RegisterRequest,
    RegisterResponse,
    RegistrationOut,
)
from app.services import capacity_ledger

logger = logging.getLogger(__name__)
router = APIRouter()

REGISTRATION_MESSAGES = {
    RegistrationStatus.confirmed: "Successfully registered for the event.",
    RegistrationStatus.waitlist: "Event is full. You've been added to the waitlist.",
}


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    """Register for an event; lands on the waitlist when the event is full."""
    result = capacity_ledger.register_participant(
        db=db,
        event_id=payload.event_id,
        name=payload.name,
        email=payload.email,
    )
    return {
        "message": REGISTRATION_MESSAGES[result.participant.status],
        "participant": result.participant,
        "event": result.counters,
    }


@router.get("/events/{event_id}", response_model=list[ParticipantOut])
def get_roster(event_id: UUID, db: Session = Depends(get_db)):
    """Every registration record of an event, oldest first."""
    return capacity_ledger.get_roster(db, event_id)


@router.put("/bulk-update", response_model=BulkUpdateResponse)
def bulk_update(
    payload: BulkUpdateRequest,
    actor: str = Query(..., min_length=1, description="Administrator performing the change"),
    db: Session = Depends(get_db),
):
    """Set every listed participant to one status, all or nothing."""
    result = capacity_ledger.apply_bulk_status_change(
        db=db,
        event_id=payload.event_id,
        participant_ids=payload.ids,
        new_status=payload.status,
        actor=actor,
    )
    return {"participants": result.participants, "event": result.counters}


@router.get("/registrations/{email}", response_model=list[RegistrationOut])
def list_registrations(email: str, db: Session = Depends(get_db)):
    """Registration history for one email address."""
    return capacity_ledger.list_registrations(db, email)
