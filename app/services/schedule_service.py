from typing import AsyncIterator, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.core.exceptions import EventNotFound, ScheduleNotFound, ScheduleOverlap, ValidationError
from app.core.logging import logger
from app.db.models.schedule import ScheduleItem
from app.db.repositories import (
    agenda_query,
    create_schedule as db_create_schedule,
    get_schedule as db_get_schedule,
    update_schedule as db_update_schedule,
    delete_schedule as db_delete_schedule,
    find_overlapping,
    get_event_row,
    event_exists,
)
from app.db.session import run_atomic
from app.events.publisher import publish_event_safely
from app.schemas import ScheduleCreate, ScheduleUpdate
from app.services.intervals import validate_interval

DETAIL_FIELDS = ("title", "description", "speaker", "location")


class ScheduleAgenda:
    """
    Schedule items of one event (or all events) ordered by start time.

    Iterating streams rows from a fresh query, so the agenda can be iterated
    any number of times and always reflects the stored items.
    """

    def __init__(self, session: AsyncSession, event_id=None):
        self.session = session
        self.event_id = event_id

    def __aiter__(self) -> AsyncIterator[ScheduleItem]:
        return self._stream()

    async def _stream(self) -> AsyncIterator[ScheduleItem]:
        result = await self.session.stream_scalars(agenda_query(self.event_id))
        async for item in result:
            yield item

    async def to_list(self) -> List[ScheduleItem]:
        return [item async for item in self]


class ScheduleService:
    def __init__(self, session: AsyncSession):
        self.session = session

    def agenda(self, event_id=None) -> ScheduleAgenda:
        return ScheduleAgenda(self.session, event_id)

    async def list_by_event(self, event_id=None) -> List[ScheduleItem]:
        return await run_atomic(self.session, self.agenda(event_id).to_list)

    async def get_schedule(self, schedule_id) -> ScheduleItem:
        item = await run_atomic(self.session, db_get_schedule, self.session, schedule_id)
        if item is None:
            raise ScheduleNotFound()
        return item

    async def create_schedule(self, payload: ScheduleCreate) -> ScheduleItem:
        """
        Create a schedule item for an existing event.

        Raises:
            ValidationError: If eventId is missing or the interval is invalid
            EventNotFound: If the event does not exist
            ScheduleOverlap: If overlap rejection is enabled and the slot is taken
        """
        if payload.event_id is None:
            raise ValidationError("eventId is required")
        start_time, end_time = validate_interval(payload.start_time, payload.end_time)

        async def work() -> ScheduleItem:
            await self._require_event(payload.event_id)
            await self._check_overlap(payload.event_id, start_time, end_time)
            values = {field: getattr(payload, field) for field in DETAIL_FIELDS}
            item = await db_create_schedule(
                self.session,
                payload.event_id,
                dict(values, start_time=start_time, end_time=end_time),
            )
            return await db_get_schedule(self.session, item.id)

        item = await run_atomic(self.session, work)
        logger.info(f"Schedule item {item.id} created for event {item.event_id}")
        await publish_event_safely("schedule.created", {"schedule_id": str(item.id), "event_id": str(item.event_id)})
        return item

    async def update_schedule(self, schedule_id, payload: ScheduleUpdate) -> ScheduleItem:
        """
        Apply a partial update. The interval is re-validated whenever either
        bound is supplied, against the stored value of the other bound.
        """
        changes = payload.model_dump(exclude_unset=True)

        async def work() -> ScheduleItem:
            item = await db_get_schedule(self.session, schedule_id)
            if item is None:
                raise ScheduleNotFound()

            fields = {
                k: v for k, v in changes.items()
                if k in DETAIL_FIELDS and not (k == "title" and v is None)
            }
            moved = changes.get("event_id") is not None and changes["event_id"] != item.event_id
            if moved:
                await self._require_event(changes["event_id"])
                fields["event_id"] = changes["event_id"]

            start_time, end_time = item.start_time, item.end_time
            if "start_time" in changes or "end_time" in changes:
                start_time, end_time = validate_interval(
                    changes.get("start_time", item.start_time),
                    changes.get("end_time", item.end_time),
                )
                fields.update(start_time=start_time, end_time=end_time)

            if settings.SCHEDULE_REJECT_OVERLAPS and (moved or "start_time" in fields):
                target_event = fields.get("event_id", item.event_id)
                if not moved:
                    await self._require_event(target_event)
                await self._check_overlap(target_event, start_time, end_time, exclude_id=item.id)

            await db_update_schedule(self.session, item, fields)
            # Reload so the attached event follows an event_id move
            return await db_get_schedule(self.session, item.id)

        item = await run_atomic(self.session, work)
        logger.info(f"Schedule item {item.id} updated")
        await publish_event_safely("schedule.updated", {"schedule_id": str(item.id), "event_id": str(item.event_id)})
        return item

    async def delete_schedule(self, schedule_id) -> ScheduleItem:
        """Remove a schedule item and return the removed record."""
        async def work() -> ScheduleItem:
            item = await db_get_schedule(self.session, schedule_id)
            if item is None:
                raise ScheduleNotFound()
            await db_delete_schedule(self.session, item)
            return item

        item = await run_atomic(self.session, work)
        logger.info(f"Schedule item {item.id} deleted")
        await publish_event_safely("schedule.deleted", {"schedule_id": str(item.id), "event_id": str(item.event_id)})
        return item

    async def _require_event(self, event_id) -> None:
        # The event row is locked while overlaps are checked so concurrent
        # edits to one agenda serialise.
        if settings.SCHEDULE_REJECT_OVERLAPS:
            found = await get_event_row(self.session, event_id, for_update=True) is not None
        else:
            found = await event_exists(self.session, event_id)
        if not found:
            raise EventNotFound("Associated event not found")

    async def _check_overlap(self, event_id, start_time, end_time, exclude_id: Optional[object] = None) -> None:
        if not settings.SCHEDULE_REJECT_OVERLAPS:
            return
        clashes = await find_overlapping(self.session, event_id, start_time, end_time, exclude_id)
        if clashes:
            raise ScheduleOverlap(f"Schedule item overlaps '{clashes[0].title}'")
