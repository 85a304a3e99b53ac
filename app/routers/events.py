"""Event catalog API routes: delegates to event_service."""
import logging
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.event import EventCreate, EventUpdate, EventOut
from app.services import event_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    actor: str = Query(..., min_length=1, description="Administrator performing the change"),
    db: Session = Depends(get_db),
):
    """Create a new event with an empty roster."""
    return event_service.create_event(db=db, actor=actor, **payload.model_dump())


@router.get("/", response_model=list[EventOut])
def list_events(db: Session = Depends(get_db)):
    """List live events with their current counters and availability."""
    return event_service.list_events(db)


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: UUID, db: Session = Depends(get_db)):
    """Fetch a single event by ID."""
    return event_service.get_event(db, event_id)


@router.put("/{event_id}", response_model=EventOut)
def update_event(
    event_id: UUID,
    payload: EventUpdate,
    actor: str = Query(..., min_length=1, description="Administrator performing the change"),
    db: Session = Depends(get_db),
):
    """Edit an event (optimistic locking enforced)."""
    updates = payload.model_dump(exclude_unset=True, exclude={"version"})
    return event_service.update_event(
        db=db,
        event_id=event_id,
        actor=actor,
        version=payload.version,
        updates=updates,
    )


@router.delete("/{event_id}", response_model=EventOut)
def delete_event(
    event_id: UUID,
    version: int = Query(..., description="Current event version, for optimistic locking"),
    actor: str = Query(..., min_length=1, description="Administrator performing the change"),
    db: Session = Depends(get_db),
):
    """Soft-delete an event. Registrations are kept."""
    return event_service.delete_event(db=db, event_id=event_id, actor=actor, version=version)
