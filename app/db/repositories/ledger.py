"""
Single-statement seat counter updates.

Each function is one conditional UPDATE ... RETURNING so concurrent writers,
on any number of server instances, serialise on the event row inside the
database. ``None`` means no row matched: either the event is gone or the
guard rejected the change; callers tell the two apart.
"""
from typing import Optional
from sqlalchemy import update, case
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models.event import Event


async def take_seats(db: AsyncSession, event_id, seats: int) -> Optional[int]:
    """Decrement available seats by ``seats`` only if that many are free."""
    stmt = (
        update(Event)
        .where(Event.id == event_id)
        .where(Event.available_seats >= seats)
        .values(available_seats=Event.available_seats - seats)
        .returning(Event.available_seats)
        .execution_options(synchronize_session=False)
    )
    res = await db.execute(stmt)
    return res.scalar_one_or_none()


async def return_seats(db: AsyncSession, event_id, seats: int) -> Optional[int]:
    """Increment available seats by ``seats``, clamped to capacity."""
    restored = Event.available_seats + seats
    stmt = (
        update(Event)
        .where(Event.id == event_id)
        .values(available_seats=case((restored > Event.capacity, Event.capacity), else_=restored))
        .returning(Event.available_seats)
        .execution_options(synchronize_session=False)
    )
    res = await db.execute(stmt)
    return res.scalar_one_or_none()


async def set_capacity(db: AsyncSession, event_id, new_capacity: int) -> Optional[int]:
    """Change capacity, shifting available seats by the same amount; refused if held seats would not fit."""
    held = Event.capacity - Event.available_seats
    stmt = (
        update(Event)
        .where(Event.id == event_id)
        .where(held <= new_capacity)
        .values(
            capacity=new_capacity,
            available_seats=Event.available_seats + (new_capacity - Event.capacity),
        )
        .returning(Event.available_seats)
        .execution_options(synchronize_session=False)
    )
    res = await db.execute(stmt)
    return res.scalar_one_or_none()
