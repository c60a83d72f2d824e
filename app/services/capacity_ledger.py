"""
Event capacity ledger.

The single authority for ``events.available_seats``. Operations run inside
the caller's transaction and touch the counter only through the conditional
updates in ``app.db.repositories.ledger``.
"""
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models.rsvp import RSVPStatusEnum
from app.db.repositories import take_seats, return_seats, set_capacity, event_exists
from app.core.exceptions import CapacityExceeded, EventNotFound, ValidationError
from app.core.logging import audit_logger


def seat_cost(status, guests: int) -> int:
    """Seats a reservation consumes: the attendee plus guests when going, otherwise none."""
    if RSVPStatusEnum(status) == RSVPStatusEnum.going:
        return 1 + guests
    return 0


class CapacityLedger:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def try_reserve(self, event_id, previous_seats: int, new_guests: int, new_status) -> int:
        """
        Move a reservation from holding ``previous_seats`` to the cost of (new_status, new_guests).

        Returns:
            Seats the reservation holds afterwards

        Raises:
            EventNotFound: If the event does not exist
            CapacityExceeded: If the extra seats are not available
        """
        new_seats = seat_cost(new_status, new_guests)
        delta = new_seats - previous_seats

        if delta > 0:
            remaining = await take_seats(self.session, event_id, delta)
            if remaining is None:
                if not await event_exists(self.session, event_id):
                    raise EventNotFound()
                audit_logger.info(f"Rejected {delta} seat(s) for event {event_id}: capacity exceeded")
                raise CapacityExceeded(f"Event does not have {delta} available seat(s)")
            audit_logger.info(f"Reserved {delta} seat(s) for event {event_id}, {remaining} left")
        elif delta < 0:
            await self.release(event_id, -delta)
        elif not await event_exists(self.session, event_id):
            raise EventNotFound()

        return new_seats

    async def release(self, event_id, seats: int) -> int:
        """
        Give ``seats`` back to the event, never exceeding its capacity.

        Returns:
            Available seats afterwards
        """
        remaining = await return_seats(self.session, event_id, seats)
        if remaining is None:
            raise EventNotFound()
        audit_logger.info(f"Released {seats} seat(s) for event {event_id}, {remaining} left")
        return remaining

    async def resize(self, event_id, new_capacity: int) -> int:
        """Change an event's capacity while keeping every held seat."""
        if new_capacity < 0:
            raise ValidationError("Capacity cannot be negative")
        remaining = await set_capacity(self.session, event_id, new_capacity)
        if remaining is None:
            if not await event_exists(self.session, event_id):
                raise EventNotFound()
            raise CapacityExceeded("More seats are already reserved than the new capacity allows")
        audit_logger.info(f"Capacity of event {event_id} set to {new_capacity}, {remaining} available")
        return remaining
