"""
RSVP reservation manager.

Keeps exactly one RSVP per (event, user) and keeps the event's seat counter
in step with it. Each operation is a single transaction: the record is
claimed or locked first, the ledger delta is applied from the seats that
record already holds, then the record is written. A rejected admission rolls
the whole transaction back.
"""
from typing import Any, List, Optional, Tuple
from pydantic import validate_email
from pydantic_core import PydanticCustomError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.core.exceptions import (
    ConflictError,
    EventNotFound,
    InvalidGuestCount,
    MissingAttendeeInfo,
    RSVPNotFound,
    ValidationError,
)
from app.core.logging import logger
from app.core.permissions import Principal, require_rsvp_access, visible_owner
from app.db.models.rsvp import RSVP, RSVPStatusEnum
from app.db.repositories import (
    claim_rsvp,
    lock_rsvp_for_user,
    get_rsvp as db_get_rsvp,
    update_rsvp as db_update_rsvp,
    delete_rsvp as db_delete_rsvp,
    list_rsvps as db_list_rsvps,
    event_exists,
    invalidate_event_cache,
)
from app.db.session import run_atomic
from app.events.publisher import publish_event_safely
from app.schemas import RSVPCreate, RSVPUpdate, RSVPStatus
from app.services.capacity_ledger import CapacityLedger

# Seats are stored as 32-bit integers and a going RSVP costs 1 + guests
MAX_GUESTS = 2**31 - 2


def coerce_guest_count(value: Any) -> int:
    """
    Lenient guest count used on submission.

    Missing, non-numeric and fractional values become 0. Negative integers
    are returned unchanged so the caller can reject them.

    Raises:
        InvalidGuestCount: If the count is above MAX_GUESTS
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        count = value
    elif isinstance(value, float) and value.is_integer():
        count = int(value)
    elif isinstance(value, str):
        try:
            count = int(value.strip())
        except ValueError:
            return 0
    else:
        return 0
    if count > MAX_GUESTS:
        raise InvalidGuestCount(f"Guest count cannot exceed {MAX_GUESTS}")
    return count


def parse_guest_count(value: Any) -> int:
    """
    Strict guest count used on updates.

    Raises:
        InvalidGuestCount: Unless value is an integer or integer string between 0 and MAX_GUESTS
    """
    if isinstance(value, bool):
        raise InvalidGuestCount()
    if isinstance(value, int):
        count = value
    elif isinstance(value, float) and value.is_integer():
        count = int(value)
    elif isinstance(value, str):
        try:
            count = int(value.strip())
        except ValueError:
            raise InvalidGuestCount()
    else:
        raise InvalidGuestCount()
    if count < 0:
        raise InvalidGuestCount()
    if count > MAX_GUESTS:
        raise InvalidGuestCount(f"Guest count cannot exceed {MAX_GUESTS}")
    return count


def normalise_email(email: str) -> str:
    try:
        _, address = validate_email(email)
    except PydanticCustomError:
        raise ValidationError("Email must be valid")
    return address.lower()


def _status(value) -> RSVPStatusEnum:
    return RSVPStatusEnum(value.value if isinstance(value, RSVPStatus) else value)


class RSVPService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.ledger = CapacityLedger(session)

    async def submit(self, payload: RSVPCreate, principal: Principal) -> Tuple[RSVP, bool]:
        """
        Create or update the caller's RSVP for an event.

        Re-submitting the same status and guest count is a no-op on the
        ledger: seats are charged from what the record already holds.

        Returns:
            The stored RSVP and whether its domain event was published

        Raises:
            ValidationError: eventId missing, bad email, negative guests
            MissingAttendeeInfo: No name/email in the request or identity claims
            EventNotFound: If the event does not exist
            CapacityExceeded: If the seats are not available; nothing is written
        """
        if payload.event_id is None:
            raise ValidationError("eventId is required")

        name = (payload.name or principal.name or "").strip()
        email = (payload.email or principal.email or "").strip()
        if not name or not email:
            raise MissingAttendeeInfo()

        if settings.STRICT_GUEST_COUNT_ON_SUBMIT:
            guests = parse_guest_count(0 if payload.guests is None else payload.guests)
        else:
            guests = coerce_guest_count(payload.guests)
        if guests < 0:
            raise InvalidGuestCount("Guest count cannot be negative")

        event_id = payload.event_id
        status = _status(payload.status)
        fields = {
            "name": name,
            "email": normalise_email(email),
            "phone": payload.phone or "",
            "status": status,
            "guests": guests,
            "notes": payload.notes or "",
        }

        async def work() -> Tuple[RSVP, bool]:
            if not await event_exists(self.session, event_id):
                raise EventNotFound()
            created = await claim_rsvp(self.session, event_id, principal.user_id, fields)
            rsvp = await lock_rsvp_for_user(self.session, event_id, principal.user_id)
            if rsvp is None:
                raise ConflictError()
            seats = await self.ledger.try_reserve(event_id, rsvp.seats_held, guests, status)
            rsvp = await db_update_rsvp(self.session, rsvp, dict(fields, seats_held=seats))
            return rsvp, created

        rsvp, created = await run_atomic(self.session, work)
        logger.info(
            f"RSVP {rsvp.id} {'created' if created else 'updated'} for user {principal.user_id} "
            f"on event {event_id}: {status.value}, {guests} guest(s)"
        )
        await invalidate_event_cache()
        published = await publish_event_safely("rsvp.saved", {
            "rsvp_id": str(rsvp.id),
            "event_id": str(event_id),
            "user_id": principal.user_id,
            "status": status.value,
            "guests": guests,
        })
        return rsvp, published

    async def get_rsvp(self, rsvp_id, principal: Principal) -> RSVP:
        rsvp = await run_atomic(self.session, db_get_rsvp, self.session, rsvp_id)
        if rsvp is None:
            raise RSVPNotFound()
        require_rsvp_access(principal, rsvp.user_id)
        return rsvp

    async def update_rsvp(self, rsvp_id, principal: Principal, payload: RSVPUpdate) -> Tuple[RSVP, bool]:
        """
        Update status, guests, notes or phone of an RSVP owned by the caller
        (or any RSVP, for administrators).

        A status or guest change re-applies the ledger delta exactly as submit does.
        """
        changes = payload.model_dump(exclude_unset=True)

        async def work() -> RSVP:
            rsvp = await db_get_rsvp(self.session, rsvp_id, for_update=True)
            if rsvp is None:
                raise RSVPNotFound()
            require_rsvp_access(principal, rsvp.user_id)

            fields = {}
            if "guests" in changes:
                fields["guests"] = parse_guest_count(changes["guests"])
            if changes.get("status") is not None:
                fields["status"] = _status(changes["status"])
            for key in ("notes", "phone"):
                if key in changes:
                    fields[key] = changes[key] or ""

            if "guests" in fields or "status" in fields:
                fields["seats_held"] = await self.ledger.try_reserve(
                    rsvp.event_id,
                    rsvp.seats_held,
                    fields.get("guests", rsvp.guests),
                    fields.get("status", rsvp.status),
                )
            return await db_update_rsvp(self.session, rsvp, fields)

        rsvp = await run_atomic(self.session, work)
        logger.info(f"RSVP {rsvp.id} updated by {principal.user_id}: {rsvp.status.value}, {rsvp.guests} guest(s)")
        await invalidate_event_cache()
        published = await publish_event_safely("rsvp.saved", {
            "rsvp_id": str(rsvp.id),
            "event_id": str(rsvp.event_id),
            "user_id": rsvp.user_id,
            "status": rsvp.status.value,
            "guests": rsvp.guests,
        })
        return rsvp, published

    async def delete_rsvp(self, rsvp_id, principal: Principal) -> Tuple[RSVP, bool]:
        """Remove an RSVP and give its seats back to the event."""
        async def work() -> RSVP:
            rsvp = await db_get_rsvp(self.session, rsvp_id, for_update=True)
            if rsvp is None:
                raise RSVPNotFound()
            require_rsvp_access(principal, rsvp.user_id)
            if rsvp.seats_held:
                await self.ledger.release(rsvp.event_id, rsvp.seats_held)
            await db_delete_rsvp(self.session, rsvp)
            return rsvp

        rsvp = await run_atomic(self.session, work)
        logger.info(f"RSVP {rsvp.id} deleted by {principal.user_id}, released {rsvp.seats_held} seat(s)")
        await invalidate_event_cache()
        published = await publish_event_safely("rsvp.deleted", {
            "rsvp_id": str(rsvp.id),
            "event_id": str(rsvp.event_id),
            "user_id": rsvp.user_id,
        })
        return rsvp, published

    async def list_rsvps(
        self,
        principal: Principal,
        event_id=None,
        status: Optional[RSVPStatus] = None,
    ) -> List[RSVP]:
        """RSVPs matching the filters; non-administrators only ever see their own."""
        return await run_atomic(
            self.session,
            db_list_rsvps,
            self.session,
            event_id=event_id,
            status=_status(status) if status is not None else None,
            user_id=visible_owner(principal),
        )
