from fastapi import APIRouter, Depends, Query, Request, status
from app.schemas import RSVPCreate, RSVPUpdate, RSVPOut, RSVPStatus, RSVPMutationResponse
from app.db.session import get_session
from app.services.rsvp_service import RSVPService
from app.auth import get_current_principal
from app.core.config import settings
from app.core.permissions import Principal
from app.core.rate_limit import limiter
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

router = APIRouter(prefix="/rsvps", tags=["rsvps"])

def get_rsvp_service(session: AsyncSession = Depends(get_session)) -> RSVPService:
    return RSVPService(session)

@router.post("", response_model=RSVPMutationResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.RSVP_RATE_LIMIT)
async def submit_rsvp_endpoint(
    request: Request,
    payload: RSVPCreate,
    principal: Principal = Depends(get_current_principal),
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    """
    Create or update the caller's RSVP for an event.

    Submitting again for the same event updates the existing RSVP; seats are
    only charged for the difference.
    """
    rsvp, published = await rsvp_service.submit(payload, principal)
    return {"message": "RSVP saved successfully", "rsvp": rsvp, "event_published": published}

@router.get("", response_model=List[RSVPOut])
async def get_rsvps(
    event_id: Optional[UUID] = Query(None, alias="eventId"),
    rsvp_status: Optional[RSVPStatus] = Query(None, alias="status"),
    principal: Principal = Depends(get_current_principal),
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    """List RSVPs. Administrators see every match, other callers only their own."""
    return await rsvp_service.list_rsvps(principal, event_id=event_id, status=rsvp_status)

@router.get("/{rsvp_id}", response_model=RSVPOut)
async def get_rsvp_detail(
    rsvp_id: UUID,
    principal: Principal = Depends(get_current_principal),
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    return await rsvp_service.get_rsvp(rsvp_id, principal)

@router.put("/{rsvp_id}", response_model=RSVPMutationResponse)
async def update_rsvp_endpoint(
    rsvp_id: UUID,
    payload: RSVPUpdate,
    principal: Principal = Depends(get_current_principal),
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    rsvp, published = await rsvp_service.update_rsvp(rsvp_id, principal, payload)
    return {"message": "RSVP updated successfully", "rsvp": rsvp, "event_published": published}

@router.delete("/{rsvp_id}", response_model=RSVPMutationResponse)
async def delete_rsvp_endpoint(
    rsvp_id: UUID,
    principal: Principal = Depends(get_current_principal),
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    rsvp, published = await rsvp_service.delete_rsvp(rsvp_id, principal)
    return {"message": "RSVP deleted successfully", "rsvp": rsvp, "event_published": published}
