from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from uuid import UUID
from datetime import datetime
from enum import Enum

# Seat counters are 32-bit integer columns
MAX_SEATS = 2**31 - 1


class EventCategory(str, Enum):
    """Event category enum."""
    conference = "conference"
    workshop = "workshop"
    seminar = "seminar"
    concert = "concert"
    sports = "sports"
    festival = "festival"


class RSVPStatus(str, Enum):
    going = "going"
    interested = "interested"
    declined = "declined"
    cancelled = "cancelled"


class EventCreate(BaseModel):
    """New event. Available seats are derived from capacity and cannot be supplied."""
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    category: EventCategory = EventCategory.conference
    venue: str = Field(..., min_length=1, max_length=255)
    date: datetime
    capacity: int = Field(0, ge=0, le=MAX_SEATS)
    price: float = Field(0, ge=0)
    organizer: str = Field(..., min_length=1, max_length=255)
    image_url: Optional[str] = Field(None, alias="imageUrl", max_length=1024)

    class Config:
        populate_by_name = True
        str_strip_whitespace = True


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[EventCategory] = None
    venue: Optional[str] = Field(None, min_length=1, max_length=255)
    date: Optional[datetime] = None
    capacity: Optional[int] = Field(None, ge=0, le=MAX_SEATS)
    price: Optional[float] = Field(None, ge=0)
    organizer: Optional[str] = Field(None, min_length=1, max_length=255)
    image_url: Optional[str] = Field(None, alias="imageUrl", max_length=1024)

    class Config:
        populate_by_name = True
        str_strip_whitespace = True


class EventOut(BaseModel):
    id: UUID
    title: str
    description: Optional[str]
    category: EventCategory
    venue: str
    date: datetime
    capacity: int
    available_seats: int
    price: float
    organizer: str
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EventListResponse(BaseModel):
    events: List[EventOut]
    total: int


class EventMutationResponse(BaseModel):
    message: str
    event: EventOut


class MessageResponse(BaseModel):
    message: str


class EventSummary(BaseModel):
    """Parent event context attached to schedule items and RSVPs."""
    id: UUID
    title: str
    date: datetime
    venue: str

    class Config:
        from_attributes = True


class ScheduleCreate(BaseModel):
    """Schedule item payload. Timestamps stay raw so the interval validator reports them."""
    event_id: Optional[UUID] = Field(None, alias="eventId")
    title: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = Field(None, max_length=2000)
    speaker: Optional[str] = Field(None, max_length=120)
    location: Optional[str] = Field(None, max_length=160)
    start_time: Optional[Any] = Field(None, alias="startTime")
    end_time: Optional[Any] = Field(None, alias="endTime")

    class Config:
        populate_by_name = True
        str_strip_whitespace = True


class ScheduleUpdate(BaseModel):
    event_id: Optional[UUID] = Field(None, alias="eventId")
    title: Optional[str] = Field(None, min_length=1, max_length=120)
    description: Optional[str] = Field(None, max_length=2000)
    speaker: Optional[str] = Field(None, max_length=120)
    location: Optional[str] = Field(None, max_length=160)
    start_time: Optional[Any] = Field(None, alias="startTime")
    end_time: Optional[Any] = Field(None, alias="endTime")

    class Config:
        populate_by_name = True
        str_strip_whitespace = True


class ScheduleOut(BaseModel):
    id: UUID
    event_id: UUID
    title: str
    description: Optional[str]
    speaker: Optional[str]
    location: Optional[str]
    start_time: datetime
    end_time: datetime
    created_at: datetime
    updated_at: datetime
    event: Optional[EventSummary] = None

    class Config:
        from_attributes = True


class ScheduleMutationResponse(BaseModel):
    message: str
    schedule: ScheduleOut


class RSVPCreate(BaseModel):
    """
    RSVP submission. ``guests`` is accepted raw and coerced by the reservation
    manager; name and email fall back to the caller's identity claims.
    """
    event_id: Optional[UUID] = Field(None, alias="eventId")
    name: Optional[str] = Field(None, max_length=120)
    email: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=32)
    status: RSVPStatus = RSVPStatus.going
    guests: Optional[Any] = None
    notes: Optional[str] = Field(None, max_length=2000)

    class Config:
        populate_by_name = True
        str_strip_whitespace = True


class RSVPUpdate(BaseModel):
    status: Optional[RSVPStatus] = None
    guests: Optional[Any] = None
    notes: Optional[str] = Field(None, max_length=2000)
    phone: Optional[str] = Field(None, max_length=32)

    class Config:
        str_strip_whitespace = True


class RSVPOut(BaseModel):
    id: UUID
    event_id: UUID
    user_id: str
    name: str
    email: str
    phone: str
    status: RSVPStatus
    guests: int
    notes: str
    seats_held: int
    created_at: datetime
    updated_at: datetime
    event: Optional[EventSummary] = None

    class Config:
        from_attributes = True


class RSVPMutationResponse(BaseModel):
    message: str
    rsvp: RSVPOut
    event_published: bool = False


class ReminderRequest(BaseModel):
    subject: Optional[str] = Field(None, max_length=100)
    message: Optional[str] = None
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    topic_arn: Optional[str] = Field(None, alias="topicArn")

    class Config:
        populate_by_name = True


class ReminderResponse(BaseModel):
    message: str
    metadata: Dict[str, Any]
