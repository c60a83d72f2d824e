"""
Unit tests for the capacity ledger.
"""
import pytest
from uuid import uuid4

from app.core.exceptions import CapacityExceeded, EventNotFound, ValidationError
from app.db.models.rsvp import RSVPStatusEnum
from app.db.repositories import get_event_row
from app.services.capacity_ledger import CapacityLedger, seat_cost


async def available(db_session, event_id) -> int:
    ev = await get_event_row(db_session, event_id)
    return ev.available_seats


@pytest.mark.unit
class TestSeatCost:

    def test_going_costs_attendee_plus_guests(self):
        assert seat_cost(RSVPStatusEnum.going, 0) == 1
        assert seat_cost("going", 3) == 4

    @pytest.mark.parametrize("status", ["interested", "declined", "cancelled"])
    def test_other_statuses_cost_nothing(self, status):
        assert seat_cost(status, 5) == 0


@pytest.mark.unit
@pytest.mark.asyncio
class TestTryReserve:

    async def test_reserve_takes_seats(self, db_session, test_event):
        ledger = CapacityLedger(db_session)

        held = await ledger.try_reserve(test_event.id, 0, 3, RSVPStatusEnum.going)

        assert held == 4
        assert await available(db_session, test_event.id) == 6

    async def test_reserve_exactly_remaining_seats(self, db_session, test_event):
        ledger = CapacityLedger(db_session)

        await ledger.try_reserve(test_event.id, 0, 9, RSVPStatusEnum.going)

        assert await available(db_session, test_event.id) == 0

    async def test_reserve_beyond_capacity_is_rejected(self, db_session, test_event):
        event_id = test_event.id
        ledger = CapacityLedger(db_session)
        await ledger.try_reserve(event_id, 0, 5, RSVPStatusEnum.going)

        with pytest.raises(CapacityExceeded):
            await ledger.try_reserve(event_id, 0, 4, RSVPStatusEnum.going)

        assert await available(db_session, event_id) == 4

    async def test_same_cost_changes_nothing(self, db_session, test_event):
        ledger = CapacityLedger(db_session)
        await ledger.try_reserve(test_event.id, 0, 2, RSVPStatusEnum.going)

        held = await ledger.try_reserve(test_event.id, 3, 2, RSVPStatusEnum.going)

        assert held == 3
        assert await available(db_session, test_event.id) == 7

    async def test_declining_releases_held_seats(self, db_session, test_event):
        ledger = CapacityLedger(db_session)
        await ledger.try_reserve(test_event.id, 0, 3, RSVPStatusEnum.going)

        held = await ledger.try_reserve(test_event.id, 4, 3, RSVPStatusEnum.declined)

        assert held == 0
        assert await available(db_session, test_event.id) == 10

    async def test_unknown_event(self, db_session):
        ledger = CapacityLedger(db_session)

        with pytest.raises(EventNotFound):
            await ledger.try_reserve(uuid4(), 0, 0, RSVPStatusEnum.going)
        with pytest.raises(EventNotFound):
            await ledger.try_reserve(uuid4(), 0, 0, RSVPStatusEnum.interested)


@pytest.mark.unit
@pytest.mark.asyncio
class TestReleaseAndResize:

    async def test_release_is_clamped_to_capacity(self, db_session, test_event):
        ledger = CapacityLedger(db_session)
        await ledger.try_reserve(test_event.id, 0, 1, RSVPStatusEnum.going)

        remaining = await ledger.release(test_event.id, 5)

        assert remaining == 10

    async def test_release_unknown_event(self, db_session):
        with pytest.raises(EventNotFound):
            await CapacityLedger(db_session).release(uuid4(), 1)

    async def test_resize_keeps_held_seats(self, db_session, test_event):
        ledger = CapacityLedger(db_session)
        await ledger.try_reserve(test_event.id, 0, 3, RSVPStatusEnum.going)

        assert await ledger.resize(test_event.id, 20) == 16
        assert await ledger.resize(test_event.id, 4) == 0

        ev = await get_event_row(db_session, test_event.id)
        assert ev.capacity == 4

    async def test_resize_below_held_seats_is_rejected(self, db_session, test_event):
        ledger = CapacityLedger(db_session)
        await ledger.try_reserve(test_event.id, 0, 5, RSVPStatusEnum.going)

        with pytest.raises(CapacityExceeded):
            await ledger.resize(test_event.id, 5)

    async def test_negative_capacity(self, db_session, test_event):
        with pytest.raises(ValidationError):
            await CapacityLedger(db_session).resize(test_event.id, -1)
