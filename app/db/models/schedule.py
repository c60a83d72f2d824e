from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index, CheckConstraint, Uuid
import uuid
from sqlalchemy.orm import relationship
from app.db.session import Base, utcnow


class ScheduleItem(Base):
    __tablename__ = "schedule_items"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(Uuid(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)
    speaker = Column(String(120), nullable=True)
    location = Column(String(160), nullable=True)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    # Set client-side with microsecond precision; breaks start_time ties in insertion order
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    event = relationship("Event", back_populates="schedule_items")

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_schedule_interval"),
        Index('idx_schedule_event_start', 'event_id', 'start_time'),
    )
