from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload
from typing import Optional, List
from datetime import datetime
from app.db.models.schedule import ScheduleItem


def agenda_query(event_id=None):
    """Schedule items by start time with their event; equal start times keep insertion order."""
    q = (
        select(ScheduleItem)
        .options(joinedload(ScheduleItem.event))
        .execution_options(populate_existing=True)
    )
    if event_id is not None:
        q = q.where(ScheduleItem.event_id == event_id)
    return q.order_by(ScheduleItem.start_time.asc(), ScheduleItem.created_at.asc(), ScheduleItem.id.asc())


async def create_schedule(db: AsyncSession, event_id, values: dict) -> ScheduleItem:
    item = ScheduleItem(event_id=event_id, **values)
    db.add(item)
    await db.flush()
    return item


async def get_schedule(db: AsyncSession, schedule_id) -> Optional[ScheduleItem]:
    q = (
        select(ScheduleItem)
        .where(ScheduleItem.id == schedule_id)
        .options(selectinload(ScheduleItem.event))
        .execution_options(populate_existing=True)
    )
    res = await db.execute(q)
    return res.scalars().first()


async def update_schedule(db: AsyncSession, item: ScheduleItem, fields: dict) -> ScheduleItem:
    for key, value in fields.items():
        setattr(item, key, value)
    await db.flush()
    return item


async def delete_schedule(db: AsyncSession, item: ScheduleItem) -> None:
    await db.delete(item)
    await db.flush()


async def find_overlapping(
    db: AsyncSession,
    event_id,
    start_time: datetime,
    end_time: datetime,
    exclude_id=None,
) -> List[ScheduleItem]:
    """Items of the event whose half-open interval intersects [start_time, end_time)."""
    q = select(ScheduleItem).where(
        ScheduleItem.event_id == event_id,
        ScheduleItem.start_time < end_time,
        ScheduleItem.end_time > start_time,
    )
    if exclude_id is not None:
        q = q.where(ScheduleItem.id != exclude_id)
    res = await db.execute(q)
    return list(res.scalars().all())
