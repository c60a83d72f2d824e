"""
Unit tests for transaction boundaries and storage error mapping.
"""
import asyncio
import pytest
from sqlalchemy.exc import DataError, IntegrityError, OperationalError

from app.core.exceptions import ConflictError, EventNotFound, TransientStorageError, ValidationError
from app.db.repositories import get_event_row, take_seats
from app.db.session import run_atomic


@pytest.mark.unit
@pytest.mark.asyncio
class TestRunAtomic:

    async def test_commits_on_success(self, db_session, test_event, session_factory):
        event_id = test_event.id

        remaining = await run_atomic(db_session, take_seats, db_session, event_id, 3)

        assert remaining == 7
        async with session_factory() as other:
            ev = await get_event_row(other, event_id)
            assert ev.available_seats == 7

    async def test_rolls_back_on_domain_error(self, db_session, test_event):
        event_id = test_event.id

        async def work():
            await take_seats(db_session, event_id, 3)
            raise EventNotFound()

        with pytest.raises(EventNotFound):
            await run_atomic(db_session, work)

        ev = await get_event_row(db_session, event_id)
        assert ev.available_seats == 10

    async def test_timeout_is_transient(self, db_session, settings_override):
        settings_override(STORAGE_TIMEOUT_SECONDS=0.01)

        async def slow():
            await asyncio.sleep(1)

        with pytest.raises(TransientStorageError) as exc_info:
            await run_atomic(db_session, slow)

        assert exc_info.value.status_code == 503
        assert exc_info.value.retry_after == 1

    async def test_connection_failure_is_transient(self, db_session):
        async def broken():
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

        with pytest.raises(TransientStorageError):
            await run_atomic(db_session, broken)

    async def test_integrity_error_is_conflict(self, db_session):
        async def duplicate():
            raise IntegrityError("INSERT", {}, Exception("duplicate key"))

        with pytest.raises(ConflictError) as exc_info:
            await run_atomic(db_session, duplicate)

        assert exc_info.value.status_code == 409

    @pytest.mark.parametrize("error", [
        OverflowError("Python int too large to convert to SQLite INTEGER"),
        DataError("UPDATE events", {}, Exception("value out of range for type integer")),
    ])
    async def test_out_of_range_value_is_validation_error(self, db_session, test_event, error):
        event_id = test_event.id

        async def overflow():
            await take_seats(db_session, event_id, 3)
            raise error

        with pytest.raises(ValidationError) as exc_info:
            await run_atomic(db_session, overflow)

        assert exc_info.value.status_code == 400
        ev = await get_event_row(db_session, event_id)
        assert ev.available_seats == 10
