"""
RSVP persistence.

The (event_id, user_id) unique constraint is the dedup contract: a record is
claimed with INSERT ... ON CONFLICT DO NOTHING and then locked, so concurrent
submissions for the same pair serialise on one row instead of racing a
read-then-write.
"""
from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from typing import Optional, List
from app.db.models.rsvp import RSVP, RSVPStatusEnum

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _insert_for(db: AsyncSession):
    dialect = db.get_bind().dialect.name
    try:
        return _INSERTS[dialect]
    except KeyError:
        raise NotImplementedError(f"RSVP upsert is not supported on the {dialect} dialect")


async def claim_rsvp(db: AsyncSession, event_id, user_id: str, values: dict) -> bool:
    """
    Insert a record for (event_id, user_id) unless one exists.

    The new row holds no seats yet. Returns True when a row was inserted.
    """
    insert = _insert_for(db)
    stmt = (
        insert(RSVP)
        .values(event_id=event_id, user_id=user_id, seats_held=0, **values)
        .on_conflict_do_nothing(index_elements=["event_id", "user_id"])
    )
    res = await db.execute(stmt)
    return res.rowcount == 1


async def lock_rsvp_for_user(db: AsyncSession, event_id, user_id: str) -> Optional[RSVP]:
    q = (
        select(RSVP)
        .where(RSVP.event_id == event_id, RSVP.user_id == user_id)
        .options(selectinload(RSVP.event))
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    res = await db.execute(q)
    return res.scalars().first()


async def get_rsvp(db: AsyncSession, rsvp_id, for_update: bool = False) -> Optional[RSVP]:
    q = (
        select(RSVP)
        .where(RSVP.id == rsvp_id)
        .options(selectinload(RSVP.event))
        .execution_options(populate_existing=True)
    )
    if for_update:
        q = q.with_for_update()
    res = await db.execute(q)
    return res.scalars().first()


async def update_rsvp(db: AsyncSession, rsvp: RSVP, fields: dict) -> RSVP:
    for key, value in fields.items():
        setattr(rsvp, key, value)
    await db.flush()
    return rsvp


async def delete_rsvp(db: AsyncSession, rsvp: RSVP) -> None:
    await db.delete(rsvp)
    await db.flush()


async def list_rsvps(
    db: AsyncSession,
    event_id=None,
    status: Optional[RSVPStatusEnum] = None,
    user_id: Optional[str] = None,
) -> List[RSVP]:
    q = select(RSVP).options(selectinload(RSVP.event)).execution_options(populate_existing=True)
    if event_id is not None:
        q = q.where(RSVP.event_id == event_id)
    if status is not None:
        q = q.where(RSVP.status == status)
    if user_id is not None:
        q = q.where(RSVP.user_id == user_id)
    q = q.order_by(RSVP.created_at.desc(), RSVP.id.desc())
    res = await db.execute(q)
    return list(res.scalars().all())
