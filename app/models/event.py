"""Event ORM model: catalog metadata plus the ledger-maintained counters."""
import uuid
import enum
from datetime import datetime, timezone
from typing import Optional

import pytz
from sqlalchemy import Column, String, Text, Date, Time, DateTime, Integer, CheckConstraint, Enum as SAEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.config import settings
from app.database import Base


class CatalogStatus(str, enum.Enum):
    """Workflow field the administrator picks on the event form."""
    confirmed = "Confirmed"
    waitlist = "Waitlist"


class Availability(str, enum.Enum):
    open = "Open"
    full = "Full"
    expired = "Expired"


class Event(Base):
    __tablename__ = "events"

    event_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    image = Column(String(500), nullable=True)
    event_date = Column(Date, nullable=False)
    event_time = Column(Time, nullable=False)
    venue = Column(String(255), nullable=False)
    organiser = Column(String(255), nullable=False)
    participant_limit = Column(Integer, nullable=False)
    catalog_status = Column(SAEnum(CatalogStatus), nullable=False, default=CatalogStatus.confirmed)
    confirmed_count = Column(Integer, nullable=False, default=0)
    waitlist_count = Column(Integer, nullable=False, default=0)
    version = Column(Integer, nullable=False, default=1)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    participants = relationship("Participant", back_populates="event", order_by="Participant.created_at")

    __table_args__ = (
        CheckConstraint("participant_limit > 0", name="check_participant_limit_positive"),
        CheckConstraint("confirmed_count >= 0", name="check_confirmed_count_non_negative"),
        CheckConstraint("waitlist_count >= 0", name="check_waitlist_count_non_negative"),
        CheckConstraint("confirmed_count <= participant_limit", name="check_confirmed_lte_limit"),
    )

    @property
    def starts_at(self) -> datetime:
        """Event start as an aware UTC datetime (date/time are local to EVENT_TIMEZONE)."""
        tz = pytz.timezone(settings.EVENT_TIMEZONE)
        local = tz.localize(datetime.combine(self.event_date, self.event_time))
        return local.astimezone(timezone.utc)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def availability_at(self, now: Optional[datetime] = None) -> Availability:
        if now is None:
            now = datetime.now(timezone.utc)
        if self.starts_at <= now:
            return Availability.expired
        if self.confirmed_count >= self.participant_limit:
            return Availability.full
        return Availability.open

    @property
    def availability(self) -> Availability:
        return self.availability_at()

    def __repr__(self) -> str:
        return (
            f"<Event(id={self.event_id}, title={self.title}, "
            f"confirmed={self.confirmed_count}/{self.participant_limit}, waitlist={self.waitlist_count})>"
        )
