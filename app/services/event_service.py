"""Event catalog service: create, edit, soft-delete and read events.

Responsibilities:
- Optimistic locking via the version field on every edit/delete
- Mutation ledger (EventMutations) for every write
- Soft delete: deleted events disappear from reads, rosters are kept
- participant_limit may never drop below the confirmed count

Counters (confirmed_count / waitlist_count) belong to the capacity ledger and
are never written here.
"""
import logging
import uuid
from datetime import datetime, date, time, timezone
from typing import Any, Optional

from sqlalchemy.orm import Session

from app.models.event import Event, CatalogStatus
from app.models.event_mutation import EventMutation, ActionType
from app.services.capacity_ledger import get_live_event, load_event_for_update
from app.services.errors import CapacityExceededError, VersionConflictError
from app.services.locks import event_lock

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "title",
    "description",
    "image",
    "event_date",
    "event_time",
    "venue",
    "organiser",
    "participant_limit",
    "catalog_status",
)


def _event_snapshot(event: Event) -> dict[str, Any]:
    """Serialize an event to a JSON-safe dict for the mutation ledger."""
    return {
        "event_id": str(event.event_id),
        "title": event.title,
        "event_date": event.event_date.isoformat() if event.event_date else None,
        "event_time": event.event_time.isoformat() if event.event_time else None,
        "venue": event.venue,
        "participant_limit": event.participant_limit,
        "catalog_status": event.catalog_status.value if event.catalog_status else None,
        "confirmed_count": event.confirmed_count,
        "waitlist_count": event.waitlist_count,
        "deleted": event.deleted_at is not None,
        "version": event.version,
    }


def _check_version(event: Event, version: int) -> None:
    if event.version != version:
        raise VersionConflictError(expected=event.version, got=version)


def create_event(
    db: Session,
    actor: str,
    title: str,
    event_date: date,
    event_time: time,
    venue: str,
    organiser: str,
    participant_limit: int,
    description: str = "",
    image: Optional[str] = None,
    catalog_status: str = "Confirmed",
) -> Event:
    """Create an event with empty counters and log the mutation."""
    if participant_limit <= 0:
        raise ValueError("participant_limit must be a positive integer")

    event = Event(
        title=title,
        description=description,
        image=image,
        event_date=event_date,
        event_time=event_time,
        venue=venue,
        organiser=organiser,
        participant_limit=participant_limit,
        catalog_status=CatalogStatus(catalog_status),
        confirmed_count=0,
        waitlist_count=0,
        version=1,
    )
    db.add(event)
    db.flush()

    db.add(EventMutation(
        event_id=event.event_id,
        actor=actor,
        action_type=ActionType.create,
        before_snapshot=None,
        after_snapshot=_event_snapshot(event),
        idempotency_key=str(uuid.uuid4()),
    ))
    db.commit()
    db.refresh(event)
    logger.info("Created event '%s' (%s) with limit %d by %s", title, event.event_id, participant_limit, actor)
    return event


def update_event(
    db: Session,
    event_id: uuid.UUID,
    actor: str,
    version: int,
    updates: dict[str, Any],
) -> Event:
    """Edit catalog fields with optimistic locking.

    Runs under the event's ledger lock so a limit change cannot interleave
    with an admission decision.
    """
    with event_lock(event_id):
        try:
            event = load_event_for_update(db, event_id)
            _check_version(event, version)

            new_limit = updates.get("participant_limit")
            if new_limit is not None:
                if new_limit <= 0:
                    raise ValueError("participant_limit must be a positive integer")
                if new_limit < event.confirmed_count:
                    raise CapacityExceededError(
                        f"Participant limit cannot drop below the {event.confirmed_count} confirmed participant(s)"
                    )

            before = _event_snapshot(event)

            for field, value in updates.items():
                if field not in EDITABLE_FIELDS:
                    continue
                if value is None and field != "image":
                    continue
                if field == "catalog_status":
                    value = CatalogStatus(value)
                setattr(event, field, value)

            event.version += 1
            event.updated_at = datetime.now(timezone.utc)

            db.add(EventMutation(
                event_id=event.event_id,
                actor=actor,
                action_type=ActionType.update,
                before_snapshot=before,
                after_snapshot=_event_snapshot(event),
                idempotency_key=str(uuid.uuid4()),
            ))
            db.commit()
        except BaseException:
            db.rollback()
            raise

    db.refresh(event)
    logger.info("Updated event %s to version %d", event_id, event.version)
    return event


def delete_event(db: Session, event_id: uuid.UUID, actor: str, version: int) -> Event:
    """Soft-delete an event. Its roster stays in place for history."""
    with event_lock(event_id):
        try:
            event = load_event_for_update(db, event_id)
            _check_version(event, version)

            before = _event_snapshot(event)
            now = datetime.now(timezone.utc)
            event.deleted_at = now
            event.version += 1
            event.updated_at = now

            db.add(EventMutation(
                event_id=event.event_id,
                actor=actor,
                action_type=ActionType.delete,
                before_snapshot=before,
                after_snapshot=_event_snapshot(event),
                idempotency_key=str(uuid.uuid4()),
            ))
            db.commit()
        except BaseException:
            db.rollback()
            raise

    db.refresh(event)
    logger.info("Deleted event %s by %s", event_id, actor)
    return event


def get_event(db: Session, event_id: uuid.UUID) -> Event:
    return get_live_event(db, event_id)


def list_events(db: Session) -> list[Event]:
    """All live events, soonest first."""
    return (
        db.query(Event)
        .filter(Event.deleted_at.is_(None))
        .order_by(Event.event_date, Event.event_time)
        .all()
    )
