from sqlalchemy.ext.asyncio import AsyncSession
from app.schemas import EventCreate, EventUpdate
from app.core.exceptions import EventNotFound
from app.core.logging import logger
from app.db.models.event import Event, EventCategory
from app.db.repositories import (
    create_event as db_create_event,
    get_event as db_get_event,
    get_event_row,
    update_event as db_update_event,
    delete_event as db_delete_event,
    list_events as db_list_events,
    count_events as db_count_events,
    invalidate_event_cache,
)
from app.db.session import run_atomic
from app.events.publisher import publish_event_safely
from app.services.capacity_ledger import CapacityLedger
from app.services.intervals import ensure_utc
from typing import List, Optional, Tuple
from datetime import datetime


class EventService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.ledger = CapacityLedger(session)

    async def create_event(self, payload: EventCreate) -> Event:
        values = payload.model_dump()
        values["category"] = EventCategory(payload.category.value)
        values["date"] = ensure_utc(payload.date)

        event = await run_atomic(self.session, db_create_event, self.session, values)
        logger.info(f"Event {event.id} created with capacity {event.capacity}")
        await invalidate_event_cache()
        await publish_event_safely("event.created", {"event_id": str(event.id)})
        return event

    async def get_event(self, event_id) -> dict:
        ev = await run_atomic(self.session, db_get_event, self.session, event_id)
        if not ev:
            raise EventNotFound()
        return ev

    async def update_event(self, event_id, payload: EventUpdate) -> Event:
        """
        Update descriptive fields; a capacity change goes through the ledger
        so seats already held are preserved.
        """
        changes = payload.model_dump(exclude_unset=True)
        capacity = changes.pop("capacity", None)
        if changes.get("category") is not None:
            changes["category"] = EventCategory(changes["category"].value)
        if changes.get("date") is not None:
            changes["date"] = ensure_utc(changes["date"])
        changes = {k: v for k, v in changes.items() if v is not None or k in ("description", "image_url")}

        async def work() -> Event:
            if capacity is not None:
                await self.ledger.resize(event_id, capacity)
            ev = await get_event_row(self.session, event_id)
            if ev is None:
                raise EventNotFound()
            return await db_update_event(self.session, ev, changes)

        event = await run_atomic(self.session, work)
        logger.info(f"Event {event.id} updated")
        await invalidate_event_cache()
        return event

    async def delete_event(self, event_id) -> None:
        async def work() -> None:
            ev = await get_event_row(self.session, event_id)
            if ev is None:
                raise EventNotFound()
            await db_delete_event(self.session, ev)

        await run_atomic(self.session, work)
        logger.info(f"Event {event_id} deleted with its schedule and RSVPs")
        await invalidate_event_cache()
        await publish_event_safely("event.deleted", {"event_id": str(event_id)})

    async def list_events_paginated(
        self,
        skip: int,
        limit: int,
        category: Optional[str],
        starts_after: Optional[datetime],
        starts_before: Optional[datetime],
    ) -> Tuple[int, List[dict]]:
        """
        List events with pagination support.
        Returns tuple of (total_count, events).
        """
        async def work() -> Tuple[int, List[dict]]:
            total = await db_count_events(
                self.session,
                category=category,
                starts_after=starts_after,
                starts_before=starts_before,
            )
            events = await db_list_events(
                self.session,
                limit=limit,
                offset=skip,
                category=category,
                starts_after=starts_after,
                starts_before=starts_before,
            )
            return total, events

        return await run_atomic(self.session, work)
