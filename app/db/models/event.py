from sqlalchemy import Column, Integer, String, Text, DateTime, Numeric, Enum, Index, CheckConstraint, Uuid
import uuid
from sqlalchemy.orm import relationship
from app.db.session import Base, utcnow
import enum


class EventCategory(str, enum.Enum):
    """Event category enum."""
    conference = "conference"
    workshop = "workshop"
    seminar = "seminar"
    concert = "concert"
    sports = "sports"
    festival = "festival"


class Event(Base):
    __tablename__ = "events"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(Enum(EventCategory), nullable=False, default=EventCategory.conference)
    venue = Column(String(255), nullable=False)
    date = Column(DateTime(timezone=True), nullable=False)
    capacity = Column(Integer, nullable=False, default=0)
    # Seats not yet held by a "going" RSVP; only the capacity ledger writes it
    available_seats = Column(Integer, nullable=False, default=0)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    organizer = Column(String(255), nullable=False)
    image_url = Column(String(1024), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    schedule_items = relationship("ScheduleItem", back_populates="event", passive_deletes=True)
    rsvps = relationship("RSVP", back_populates="event", passive_deletes=True)

    __table_args__ = (
        CheckConstraint("capacity >= 0", name="ck_event_capacity_non_negative"),
        CheckConstraint("available_seats >= 0", name="ck_event_available_non_negative"),
        CheckConstraint("available_seats <= capacity", name="ck_event_available_lte_capacity"),
        Index('idx_event_date', 'date'),
        Index('idx_event_category', 'category'),
        Index('idx_event_created_at', 'created_at'),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, available={self.available_seats}/{self.capacity})>"
