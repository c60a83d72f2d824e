from fastapi import APIRouter, Depends, Query, status
from app.schemas import (
    EventCreate,
    EventUpdate,
    EventOut,
    EventCategory,
    EventListResponse,
    EventMutationResponse,
    MessageResponse,
)
from app.db.session import get_session
from app.services.event_service import EventService
from app.services.intervals import ensure_utc
from app.auth import admin_required
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from datetime import datetime
from uuid import UUID

router = APIRouter(prefix="/events", tags=["events"])

def get_event_service(session: AsyncSession = Depends(get_session)) -> EventService:
    return EventService(session)

@router.get("", response_model=EventListResponse)
async def get_events(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    per_page: int = Query(20, ge=1, le=100, description="Number of items per page"),
    starts_after: Optional[datetime] = Query(None, description="Filter events starting after this datetime"),
    starts_before: Optional[datetime] = Query(None, description="Filter events starting before this datetime"),
    category: Optional[EventCategory] = Query(None, description="Filter by event category"),
    event_service: EventService = Depends(get_event_service)
):
    """
    List events ordered by date.
    - page: Page number, 1-indexed (default: 1)
    - per_page: Number of items per page (default: 20, max: 100)
    - starts_after / starts_before: ISO-8601 bounds on the event date
    - category: conference, workshop, seminar, concert, sports or festival
    """
    skip = (page - 1) * per_page
    total, events = await event_service.list_events_paginated(
        skip=skip,
        limit=per_page,
        category=category.value if category else None,
        starts_after=ensure_utc(starts_after) if starts_after else None,
        starts_before=ensure_utc(starts_before) if starts_before else None,
    )
    return EventListResponse(events=events, total=total)

@router.get("/{event_id}", response_model=EventOut)
async def get_event_detail(
    event_id: UUID,
    event_service: EventService = Depends(get_event_service)
):
    return await event_service.get_event(event_id)

@router.post("", response_model=EventMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    payload: EventCreate,
    admin=Depends(admin_required),
    event_service: EventService = Depends(get_event_service)
):
    ev = await event_service.create_event(payload)
    return {"message": "Event created successfully", "event": ev}

@router.put("/{event_id}", response_model=EventMutationResponse)
async def update_event_endpoint(
    event_id: UUID,
    payload: EventUpdate,
    admin=Depends(admin_required),
    event_service: EventService = Depends(get_event_service)
):
    """Update an event. A new capacity keeps the seats already held by RSVPs."""
    ev = await event_service.update_event(event_id, payload)
    return {"message": "Event updated successfully", "event": ev}

@router.delete("/{event_id}", response_model=MessageResponse)
async def delete_event_endpoint(
    event_id: UUID,
    admin=Depends(admin_required),
    event_service: EventService = Depends(get_event_service)
):
    await event_service.delete_event(event_id)
    return {"message": "Event deleted successfully"}
