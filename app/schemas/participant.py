"""Pydantic schemas for registrations and roster management."""
from __future__ import annotations
from datetime import date, datetime, time
from uuid import UUID
from pydantic import BaseModel, Field

from app.models.participant import RegistrationStatus
from app.schemas.event import EventCountersOut


class RegisterRequest(BaseModel):
    event_id: UUID
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=1, max_length=320)

    model_config = {"str_strip_whitespace": True}


class ParticipantOut(BaseModel):
    participant_id: UUID
    event_id: UUID
    name: str
    email: str
    status: RegistrationStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RegisterResponse(BaseModel):
    message: str
    participant: ParticipantOut
    event: EventCountersOut


class BulkUpdateRequest(BaseModel):
    event_id: UUID
    ids: list[UUID] = Field(min_length=1)
    status: RegistrationStatus


class BulkUpdateResponse(BaseModel):
    participants: list[ParticipantOut]
    event: EventCountersOut


class RegisteredEventOut(BaseModel):
    event_id: UUID
    title: str
    event_date: date
    event_time: time
    venue: str
    organiser: str

    model_config = {"from_attributes": True}


class RegistrationOut(BaseModel):
    """One entry of a person's registration history."""
    participant_id: UUID
    status: RegistrationStatus
    created_at: datetime
    event: RegisteredEventOut

    model_config = {"from_attributes": True}
