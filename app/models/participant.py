"""Participant (registration record) ORM model."""
import uuid
import enum
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, Enum as SAEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RegistrationStatus(str, enum.Enum):
    confirmed = "Confirmed"
    waitlist = "Waitlist"


class Participant(Base):
    __tablename__ = "participants"

    participant_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(UUID(as_uuid=True), ForeignKey("events.event_id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False, index=True)  # normalized: stripped, lower-case
    status = Column(SAEnum(RegistrationStatus), nullable=False)
    # Python-side defaults keep sub-second ordering on backends whose now() is per-second
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    event = relationship("Event", back_populates="participants")

    __table_args__ = (
        UniqueConstraint("event_id", "email", name="uq_participant_event_email"),
    )

    def __repr__(self) -> str:
        return f"<Participant(id={self.participant_id}, event={self.event_id}, email={self.email}, status={self.status})>"
