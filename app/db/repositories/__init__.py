"""
Repository layer for database operations.

Repositories stage changes (flush) and never commit; services decide the
transaction boundary through ``app.db.session.run_atomic``.
"""
from app.db.repositories.events import (
    create_event,
    get_event,
    get_event_row,
    event_exists,
    update_event,
    delete_event,
    list_events,
    count_events,
    invalidate_event_cache,
)
from app.db.repositories.ledger import take_seats, return_seats, set_capacity
from app.db.repositories.schedules import (
    agenda_query,
    create_schedule,
    get_schedule,
    update_schedule,
    delete_schedule,
    find_overlapping,
)
from app.db.repositories.rsvps import (
    claim_rsvp,
    lock_rsvp_for_user,
    get_rsvp,
    update_rsvp,
    delete_rsvp,
    list_rsvps,
)

__all__ = [
    "create_event", "get_event", "get_event_row", "event_exists", "update_event",
    "delete_event", "list_events", "count_events", "invalidate_event_cache",
    "take_seats", "return_seats", "set_capacity",
    "agenda_query", "create_schedule", "get_schedule", "update_schedule",
    "delete_schedule", "find_overlapping",
    "claim_rsvp", "lock_rsvp_for_user", "get_rsvp",
    "update_rsvp", "delete_rsvp", "list_rsvps",
]
