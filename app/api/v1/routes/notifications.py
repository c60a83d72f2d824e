from fastapi import APIRouter, Depends, Request, status
from app.schemas import ReminderRequest, ReminderResponse
from app.services.notification_service import NotificationService
from app.core.config import settings
from app.core.rate_limit import limiter

router = APIRouter(prefix="/notifications", tags=["notifications"])

def get_notification_service() -> NotificationService:
    return NotificationService()

@router.post("/reminders", response_model=ReminderResponse, status_code=status.HTTP_202_ACCEPTED)
@limiter.limit(settings.REMINDER_RATE_LIMIT)
async def send_reminder_endpoint(
    request: Request,
    payload: ReminderRequest,
    notification_service: NotificationService = Depends(get_notification_service)
):
    """
    Send an event reminder by SMS or to an SNS topic.

    Exactly one destination is used; a topic wins over a phone number.
    """
    metadata = await notification_service.send_reminder(
        payload.message,
        subject=payload.subject,
        phone_number=payload.phone_number,
        topic_arn=payload.topic_arn,
    )
    return {"message": "Reminder queued successfully", "metadata": metadata}
