"""
Unit tests for the schedule store.
"""
import pytest
from uuid import uuid4

from app.core.exceptions import (
    EventNotFound,
    InvalidInterval,
    MalformedTimestamp,
    ScheduleNotFound,
    ScheduleOverlap,
    ValidationError,
)
from app.schemas import ScheduleCreate, ScheduleUpdate
from app.services.schedule_service import ScheduleService


def slot(event_id, title, start, end, **extra) -> ScheduleCreate:
    return ScheduleCreate(
        event_id=event_id,
        title=title,
        start_time=f"2030-05-01T{start}:00Z",
        end_time=f"2030-05-01T{end}:00Z",
        **extra,
    )


@pytest.mark.unit
@pytest.mark.asyncio
class TestCreateSchedule:

    async def test_create(self, db_session, test_event):
        item = await ScheduleService(db_session).create_schedule(
            slot(test_event.id, "Keynote", "09:00", "10:00", speaker="Ada", location="Hall A")
        )

        assert item.id is not None
        assert item.event_id == test_event.id
        assert item.speaker == "Ada"

    async def test_end_must_follow_start(self, db_session, test_event):
        with pytest.raises(InvalidInterval):
            await ScheduleService(db_session).create_schedule(slot(test_event.id, "Bad", "10:00", "10:00"))

    async def test_malformed_time(self, db_session, test_event):
        payload = ScheduleCreate(event_id=test_event.id, title="Bad", start_time="soon", end_time="later")

        with pytest.raises(MalformedTimestamp):
            await ScheduleService(db_session).create_schedule(payload)

    async def test_event_id_required(self, db_session):
        with pytest.raises(ValidationError, match="eventId"):
            await ScheduleService(db_session).create_schedule(slot(None, "Orphan", "09:00", "10:00"))

    async def test_unknown_event(self, db_session):
        with pytest.raises(EventNotFound, match="Associated event not found"):
            await ScheduleService(db_session).create_schedule(slot(uuid4(), "Orphan", "09:00", "10:00"))

    async def test_overlaps_allowed_by_default(self, db_session, test_event):
        service = ScheduleService(db_session)
        await service.create_schedule(slot(test_event.id, "Track A", "09:00", "10:00"))

        await service.create_schedule(slot(test_event.id, "Track B", "09:30", "10:30"))

        assert len(await service.list_by_event(test_event.id)) == 2

    async def test_overlaps_rejected_when_enabled(self, db_session, test_event, settings_override):
        settings_override(SCHEDULE_REJECT_OVERLAPS=True)
        event_id = test_event.id
        service = ScheduleService(db_session)
        await service.create_schedule(slot(event_id, "Track A", "09:00", "10:00"))

        with pytest.raises(ScheduleOverlap, match="Track A"):
            await service.create_schedule(slot(event_id, "Track B", "09:30", "10:30"))

        # back-to-back is fine
        await service.create_schedule(slot(event_id, "Track C", "10:00", "11:00"))


@pytest.mark.unit
@pytest.mark.asyncio
class TestAgenda:

    async def test_ordered_by_start_time_then_insertion(self, db_session, test_event):
        event_id = test_event.id
        service = ScheduleService(db_session)
        await service.create_schedule(slot(event_id, "Lunch", "12:00", "13:00"))
        await service.create_schedule(slot(event_id, "Workshop 1", "09:00", "10:00"))
        await service.create_schedule(slot(event_id, "Workshop 2", "09:00", "09:30"))

        titles = [item.title for item in await service.list_by_event(event_id)]

        assert titles == ["Workshop 1", "Workshop 2", "Lunch"]

    async def test_agenda_is_restartable(self, db_session, test_event):
        service = ScheduleService(db_session)
        await service.create_schedule(slot(test_event.id, "Only", "09:00", "10:00"))
        agenda = service.agenda(test_event.id)

        first = [item.title async for item in agenda]
        second = [item.title async for item in agenda]

        assert first == second == ["Only"]

    async def test_filter_by_event(self, db_session, test_events):
        first_id, second_id = test_events[0].id, test_events[1].id
        service = ScheduleService(db_session)
        await service.create_schedule(slot(first_id, "A", "09:00", "10:00"))
        await service.create_schedule(slot(second_id, "B", "08:00", "09:00"))

        assert [i.title for i in await service.list_by_event(first_id)] == ["A"]
        assert [i.title for i in await service.list_by_event()] == ["B", "A"]

    async def test_empty_for_unknown_event(self, db_session):
        assert await ScheduleService(db_session).list_by_event(uuid4()) == []


@pytest.mark.unit
@pytest.mark.asyncio
class TestUpdateAndDelete:

    async def test_partial_update(self, db_session, test_schedule):
        schedule_id = test_schedule.id

        item = await ScheduleService(db_session).update_schedule(
            schedule_id, ScheduleUpdate(speaker="Grace", title=None)
        )

        assert item.speaker == "Grace"
        assert item.title == "Opening Keynote"

    async def test_new_end_checked_against_stored_start(self, db_session, test_schedule):
        with pytest.raises(InvalidInterval):
            await ScheduleService(db_session).update_schedule(
                test_schedule.id, ScheduleUpdate(end_time="2030-05-01T08:00:00Z")
            )

    async def test_move_to_unknown_event(self, db_session, test_schedule):
        with pytest.raises(EventNotFound):
            await ScheduleService(db_session).update_schedule(test_schedule.id, ScheduleUpdate(event_id=uuid4()))

    async def test_update_unknown_item(self, db_session):
        with pytest.raises(ScheduleNotFound):
            await ScheduleService(db_session).update_schedule(uuid4(), ScheduleUpdate(title="x"))

    async def test_update_overlap_excludes_itself(self, db_session, test_schedule, settings_override):
        settings_override(SCHEDULE_REJECT_OVERLAPS=True)

        item = await ScheduleService(db_session).update_schedule(
            test_schedule.id, ScheduleUpdate(end_time="2030-05-01T10:30:00Z")
        )

        assert item.end_time.hour == 10

    async def test_delete(self, db_session, test_schedule):
        schedule_id = test_schedule.id
        service = ScheduleService(db_session)

        removed = await service.delete_schedule(schedule_id)

        assert removed.id == schedule_id
        with pytest.raises(ScheduleNotFound):
            await service.get_schedule(schedule_id)

    async def test_delete_unknown_item(self, db_session):
        with pytest.raises(ScheduleNotFound):
            await ScheduleService(db_session).delete_schedule(uuid4())
