from fastapi import APIRouter, Depends, Query, status
from app.schemas import ScheduleCreate, ScheduleUpdate, ScheduleOut, ScheduleMutationResponse
from app.db.session import get_session
from app.services.schedule_service import ScheduleService
from app.auth import admin_required
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

router = APIRouter(prefix="/schedules", tags=["schedules"])

def get_schedule_service(session: AsyncSession = Depends(get_session)) -> ScheduleService:
    return ScheduleService(session)

@router.get("", response_model=List[ScheduleOut])
async def get_schedules(
    event_id: Optional[UUID] = Query(None, alias="eventId", description="Only items of this event"),
    schedule_service: ScheduleService = Depends(get_schedule_service)
):
    """Schedule items ordered by start time, then by creation."""
    return await schedule_service.list_by_event(event_id)

@router.get("/{schedule_id}", response_model=ScheduleOut)
async def get_schedule_detail(
    schedule_id: UUID,
    schedule_service: ScheduleService = Depends(get_schedule_service)
):
    return await schedule_service.get_schedule(schedule_id)

@router.post("", response_model=ScheduleMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_schedule_endpoint(
    payload: ScheduleCreate,
    admin=Depends(admin_required),
    schedule_service: ScheduleService = Depends(get_schedule_service)
):
    item = await schedule_service.create_schedule(payload)
    return {"message": "Schedule item created successfully", "schedule": item}

@router.put("/{schedule_id}", response_model=ScheduleMutationResponse)
async def update_schedule_endpoint(
    schedule_id: UUID,
    payload: ScheduleUpdate,
    admin=Depends(admin_required),
    schedule_service: ScheduleService = Depends(get_schedule_service)
):
    item = await schedule_service.update_schedule(schedule_id, payload)
    return {"message": "Schedule item updated successfully", "schedule": item}

@router.delete("/{schedule_id}", response_model=ScheduleMutationResponse)
async def delete_schedule_endpoint(
    schedule_id: UUID,
    admin=Depends(admin_required),
    schedule_service: ScheduleService = Depends(get_schedule_service)
):
    item = await schedule_service.delete_schedule(schedule_id)
    return {"message": "Schedule item deleted successfully", "schedule": item}
