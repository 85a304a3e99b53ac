"""Capacity ledger: registration admission and roster status changes.

Responsibilities:
- Admission: Confirmed while confirmed_count < participant_limit, Waitlist otherwise
- Bulk status overrides by an administrator, all-or-nothing
- Counters on Event kept equal to the roster at every commit
- One (event, email) registration per person
- Derived availability (Open / Full / Expired)

Every write runs under the per-event lock (app.services.locks) plus a row lock
on the event, re-reads the counters inside that scope and commits the
participant rows, the counters and the mutation entry in one transaction.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.event import Event, Availability
from app.models.event_mutation import EventMutation, ActionType
from app.models.participant import Participant, RegistrationStatus
from app.services.errors import (
    AlreadyRegisteredError,
    CapacityExceededError,
    CrossEventBatchError,
    EventExpiredError,
    NotFoundError,
)
from app.services.locks import event_lock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventCounters:
    """Counters and availability of an event as of one ledger decision."""
    event_id: uuid.UUID
    participant_limit: int
    confirmed_count: int
    waitlist_count: int
    availability: Availability


@dataclass
class RegistrationResult:
    participant: Participant
    counters: EventCounters


@dataclass
class BulkChangeResult:
    participants: list[Participant]
    counters: EventCounters


def normalize_email(email: str) -> str:
    return email.strip().lower()


def counters_snapshot(event: Event) -> dict[str, Any]:
    return {
        "participant_limit": event.participant_limit,
        "confirmed_count": event.confirmed_count,
        "waitlist_count": event.waitlist_count,
    }


def _counters_at(event: Event, now: datetime) -> EventCounters:
    # Taken inside the lock, before commit expires the row
    return EventCounters(
        event_id=event.event_id,
        participant_limit=event.participant_limit,
        confirmed_count=event.confirmed_count,
        waitlist_count=event.waitlist_count,
        availability=event.availability_at(now),
    )


def _find_registration(db: Session, event_id: uuid.UUID, email: str) -> Optional[Participant]:
    return (
        db.query(Participant)
        .filter(Participant.event_id == event_id, Participant.email == email)
        .first()
    )


def _participant_snapshot(participant: Participant) -> dict[str, Any]:
    return {
        "participant_id": str(participant.participant_id),
        "email": participant.email,
        "status": participant.status.value,
    }


def get_live_event(db: Session, event_id: uuid.UUID) -> Event:
    """Plain read of a non-deleted event."""
    event = db.query(Event).filter(Event.event_id == event_id).first()
    if event is None or event.is_deleted:
        raise NotFoundError()
    return event


def load_event_for_update(db: Session, event_id: uuid.UUID) -> Event:
    """Re-read a non-deleted event with a row lock, bypassing stale identity-map state.

    Callers must already hold event_lock(event_id).
    """
    event = (
        db.query(Event)
        .filter(Event.event_id == event_id)
        .populate_existing()
        .with_for_update()
        .first()
    )
    if event is None or event.is_deleted:
        raise NotFoundError()
    return event


def event_status(event: Event, now: Optional[datetime] = None) -> Availability:
    """Expired once the start time is reached, else Full at the limit, else Open."""
    return event.availability_at(now)


def register_participant(
    db: Session,
    event_id: uuid.UUID,
    name: str,
    email: str,
    now: Optional[datetime] = None,
) -> RegistrationResult:
    """Register one person for one event, overflowing to the waitlist when full.

    Raises:
        NotFoundError: the event does not exist or was deleted.
        AlreadyRegisteredError: a record for (event, email) already exists.
        EventExpiredError: the event has already started.
    """
    email = normalize_email(email)
    if not email:
        raise ValueError("email must not be empty")
    if now is None:
        now = datetime.now(timezone.utc)

    with event_lock(event_id):
        try:
            event = load_event_for_update(db, event_id)

            if _find_registration(db, event_id, email) is not None:
                logger.warning("Duplicate registration for event %s by %s", event_id, email)
                raise AlreadyRegisteredError(event_id, email)

            if event.starts_at <= now:
                raise EventExpiredError(event_id)

            before = counters_snapshot(event)
            if event.confirmed_count < event.participant_limit:
                status = RegistrationStatus.confirmed
                event.confirmed_count += 1
            else:
                status = RegistrationStatus.waitlist
                event.waitlist_count += 1

            participant = Participant(event_id=event_id, name=name.strip(), email=email, status=status)
            db.add(participant)
            db.flush()

            db.add(EventMutation(
                event_id=event_id,
                actor=email,
                action_type=ActionType.register,
                before_snapshot=before,
                after_snapshot={**counters_snapshot(event), "participant": _participant_snapshot(participant)},
                idempotency_key=str(uuid.uuid4()),
            ))
            counters = _counters_at(event, now)
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            # Unique (event_id, email) lost to a writer in another process
            if _find_registration(db, event_id, email) is not None:
                raise AlreadyRegisteredError(event_id, email) from exc
            raise
        except BaseException:
            db.rollback()
            raise

        db.refresh(participant)

    logger.info(
        "Registered %s for event %s as %s (%d/%d confirmed, %d waitlisted)",
        email, event_id, status.value,
        counters.confirmed_count, counters.participant_limit, counters.waitlist_count,
    )
    return RegistrationResult(participant=participant, counters=counters)


def apply_bulk_status_change(
    db: Session,
    event_id: uuid.UUID,
    participant_ids: Iterable[uuid.UUID],
    new_status: RegistrationStatus,
    actor: str,
) -> BulkChangeResult:
    """Move every listed participant of one event to `new_status`, or none of them.

    Participants already at `new_status` are left as they are. Demotions free
    places but never pull anyone off the waitlist.

    Raises:
        NotFoundError: the event is missing, or an id matches no participant.
        CrossEventBatchError: an id belongs to a participant of another event.
        CapacityExceededError: the promotions would push confirmed_count past the limit.
    """
    ids = list(dict.fromkeys(participant_ids))
    if not ids:
        raise ValueError("participant_ids must not be empty")
    new_status = RegistrationStatus(new_status)

    with event_lock(event_id):
        try:
            event = load_event_for_update(db, event_id)

            found = (
                db.query(Participant)
                .filter(Participant.participant_id.in_(ids))
                .populate_existing()
                .with_for_update()
                .all()
            )
            by_id = {p.participant_id: p for p in found}

            missing = [pid for pid in ids if pid not in by_id]
            if missing:
                raise NotFoundError(f"Participant not found: {', '.join(str(pid) for pid in missing)}")

            foreign = [pid for pid in ids if by_id[pid].event_id != event_id]
            if foreign:
                raise CrossEventBatchError(foreign)

            changing = [by_id[pid] for pid in ids if by_id[pid].status != new_status]
            delta = len(changing) if new_status == RegistrationStatus.confirmed else -len(changing)

            if event.confirmed_count + delta > event.participant_limit:
                free = event.participant_limit - event.confirmed_count
                logger.warning(
                    "Rejected bulk confirm of %d participant(s) on event %s: %d place(s) free",
                    len(changing), event_id, free,
                )
                raise CapacityExceededError(
                    f"Only {free} place(s) left; cannot confirm {len(changing)} participant(s)"
                )

            if changing:
                before = {
                    **counters_snapshot(event),
                    "participants": [_participant_snapshot(p) for p in changing],
                }
                for p in changing:
                    p.status = new_status
                event.confirmed_count += delta
                event.waitlist_count -= delta
                db.flush()

                db.add(EventMutation(
                    event_id=event_id,
                    actor=actor,
                    action_type=ActionType.status_change,
                    before_snapshot=before,
                    after_snapshot={
                        **counters_snapshot(event),
                        "participants": [_participant_snapshot(p) for p in changing],
                    },
                    idempotency_key=str(uuid.uuid4()),
                ))
            counters = _counters_at(event, datetime.now(timezone.utc))
            db.commit()
        except BaseException:
            db.rollback()
            raise

        participants = [by_id[pid] for pid in ids]
        for p in participants:
            db.refresh(p)

    logger.info(
        "Bulk status change on event %s by %s: %d of %d participant(s) set to %s",
        event_id, actor, len(changing), len(ids), new_status.value,
    )
    return BulkChangeResult(participants=participants, counters=counters)


def get_roster(db: Session, event_id: uuid.UUID) -> list[Participant]:
    """All registration records of an event, oldest first. Read-only."""
    get_live_event(db, event_id)
    return (
        db.query(Participant)
        .filter(Participant.event_id == event_id)
        .order_by(Participant.created_at)
        .all()
    )


def list_registrations(db: Session, email: str) -> list[Participant]:
    """Registration history of one person across live events, newest first."""
    email = normalize_email(email)
    return (
        db.query(Participant)
        .join(Event, Participant.event_id == Event.event_id)
        .filter(Participant.email == email, Event.deleted_at.is_(None))
        .order_by(Participant.created_at.desc())
        .all()
    )
