"""Database models package."""
from app.db.models.event import Event, EventCategory
from app.db.models.schedule import ScheduleItem
from app.db.models.rsvp import RSVP, RSVPStatusEnum

__all__ = ["Event", "EventCategory", "ScheduleItem", "RSVP", "RSVPStatusEnum"]
