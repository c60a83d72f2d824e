"""
Event persistence and cached event reads.

The cached readers feed the public listing endpoints only; admission
decisions always go through the capacity ledger, which reads the row itself.
"""
from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, List
from datetime import datetime
from app.db.models.event import Event, EventCategory
from app.db.models.rsvp import RSVP
from app.db.models.schedule import ScheduleItem
from app.cache.cache_decorators import cached
from app.cache.redis_client import cache
from app.services.intervals import format_timestamp


def event_to_dict(ev: Event) -> dict:
    return {
        'id': str(ev.id),
        'title': ev.title,
        'description': ev.description,
        'category': ev.category.value if ev.category else None,
        'venue': ev.venue,
        'date': format_timestamp(ev.date),
        'capacity': ev.capacity,
        'available_seats': ev.available_seats,
        'price': float(ev.price) if ev.price is not None else 0.0,
        'organizer': ev.organizer,
        'image_url': ev.image_url,
        'created_at': format_timestamp(ev.created_at),
        'updated_at': format_timestamp(ev.updated_at),
    }


async def invalidate_event_cache() -> None:
    """Drop cached event listings and details; seat counts changed."""
    await cache.delete_pattern("events:list:*")
    await cache.delete_pattern("events:count:*")
    await cache.delete_pattern("events:detail:*")


async def create_event(db: AsyncSession, values: dict) -> Event:
    """
    Stage a new event. Its seats all start out available.

    Args:
        db: Database session
        values: Event columns, without available_seats

    Returns:
        Flushed Event object
    """
    ev = Event(**values)
    ev.available_seats = ev.capacity
    db.add(ev)
    await db.flush()
    return ev


async def get_event_row(db: AsyncSession, event_id, for_update: bool = False) -> Optional[Event]:
    q = select(Event).where(Event.id == event_id).execution_options(populate_existing=True)
    if for_update:
        q = q.with_for_update()
    res = await db.execute(q)
    return res.scalars().first()


async def event_exists(db: AsyncSession, event_id) -> bool:
    res = await db.execute(select(Event.id).where(Event.id == event_id))
    return res.scalar() is not None


async def update_event(db: AsyncSession, ev: Event, fields: dict) -> Event:
    for key, value in fields.items():
        setattr(ev, key, value)
    await db.flush()
    return ev


async def delete_event(db: AsyncSession, ev: Event) -> None:
    """Delete an event together with its schedule items and RSVPs."""
    await db.execute(delete(ScheduleItem).where(ScheduleItem.event_id == ev.id))
    await db.execute(delete(RSVP).where(RSVP.event_id == ev.id))
    await db.delete(ev)
    await db.flush()


def _filtered(q, category: Optional[str], starts_after: Optional[datetime], starts_before: Optional[datetime]):
    if category:
        q = q.where(Event.category == EventCategory(category))
    if starts_after:
        q = q.where(Event.date >= starts_after)
    if starts_before:
        q = q.where(Event.date <= starts_before)
    return q


@cached('events:list', expire=60)
async def list_events(
    db: AsyncSession,
    limit: int = 50,
    offset: int = 0,
    category: Optional[str] = None,
    starts_after: Optional[datetime] = None,
    starts_before: Optional[datetime] = None,
) -> List[dict]:
    """
    List events ordered by date with pagination and filtering.
    Returns a list of event dictionaries for caching compatibility.
    """
    q = _filtered(select(Event), category, starts_after, starts_before)
    q = q.order_by(Event.date.asc(), Event.created_at.asc()).limit(limit).offset(offset)
    res = await db.execute(q)
    return [event_to_dict(ev) for ev in res.scalars().all()]


@cached('events:count', expire=60)
async def count_events(
    db: AsyncSession,
    category: Optional[str] = None,
    starts_after: Optional[datetime] = None,
    starts_before: Optional[datetime] = None,
) -> int:
    """Count events matching the same filters as list_events."""
    q = _filtered(select(func.count(Event.id)), category, starts_after, starts_before)
    res = await db.execute(q)
    return res.scalar() or 0


@cached('events:detail', expire=60)
async def get_event(db: AsyncSession, event_id) -> Optional[dict]:
    ev = await get_event_row(db, event_id)
    if ev:
        return event_to_dict(ev)
    return None
