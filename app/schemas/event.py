"""Pydantic schemas for Events."""
from __future__ import annotations
from datetime import date, datetime, time
from uuid import UUID
from typing import Optional
from pydantic import BaseModel, Field

from app.models.event import Availability, CatalogStatus


class EventCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    image: Optional[str] = None
    event_date: date
    event_time: time
    venue: str = Field(min_length=1)
    organiser: str = Field(min_length=1)
    participant_limit: int = Field(gt=0)
    catalog_status: CatalogStatus = CatalogStatus.confirmed


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    image: Optional[str] = None
    event_date: Optional[date] = None
    event_time: Optional[time] = None
    venue: Optional[str] = Field(None, min_length=1)
    organiser: Optional[str] = Field(None, min_length=1)
    participant_limit: Optional[int] = Field(None, gt=0)
    catalog_status: Optional[CatalogStatus] = None
    version: int  # required for optimistic locking


class EventOut(BaseModel):
    event_id: UUID
    title: str
    description: str
    image: Optional[str] = None
    event_date: date
    event_time: time
    starts_at: datetime
    venue: str
    organiser: str
    participant_limit: int
    catalog_status: CatalogStatus
    confirmed_count: int
    waitlist_count: int
    availability: Availability
    version: int
    deleted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class EventCountersOut(BaseModel):
    """Capacity view of an event, as returned alongside ledger writes."""
    event_id: UUID
    participant_limit: int
    confirmed_count: int
    waitlist_count: int
    availability: Availability

    model_config = {"from_attributes": True}
