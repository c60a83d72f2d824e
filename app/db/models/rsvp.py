from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum, Index, UniqueConstraint, CheckConstraint, Uuid
import uuid
from sqlalchemy.orm import relationship
from app.db.session import Base, utcnow
import enum


class RSVPStatusEnum(str, enum.Enum):
    going = "going"
    interested = "interested"
    declined = "declined"
    cancelled = "cancelled"


class RSVP(Base):
    __tablename__ = "rsvps"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(Uuid(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(255), nullable=False)
    name = Column(String(120), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=False, default="")
    status = Column(Enum(RSVPStatusEnum), default=RSVPStatusEnum.going, nullable=False)
    guests = Column(Integer, nullable=False, default=0)
    notes = Column(Text, nullable=False, default="")
    # Seats this record currently holds in the event's capacity ledger
    seats_held = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    event = relationship("Event", back_populates="rsvps")

    # Unique constraint is the dedup contract for the upsert
    __table_args__ = (
        UniqueConstraint('event_id', 'user_id', name='uq_event_user_rsvp'),
        CheckConstraint("guests >= 0", name="ck_rsvp_guests_non_negative"),
        CheckConstraint("seats_held >= 0", name="ck_rsvp_seats_held_non_negative"),
        Index('idx_rsvp_user', 'user_id'),
        Index('idx_rsvp_event', 'event_id'),
    )
