"""
Reminder dispatch through Amazon SNS.

Runs in mock mode when USE_MOCK_SNS is set or AWS credentials are absent:
requests are validated and logged but nothing is delivered.
"""
from typing import Any, Dict, Optional
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import run_in_threadpool
from app.core.config import settings
from app.core.exceptions import DispatchError, ValidationError
from app.core.logging import logger

_client = None


def get_sns_client():
    """Return a cached SNS client for the configured region."""
    global _client
    if _client is None:
        _client = boto3.client(
            "sns",
            region_name=settings.AWS_REGION,
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        )
    return _client


def build_publish_params(
    message: Optional[str],
    subject: Optional[str] = None,
    phone_number: Optional[str] = None,
    topic_arn: Optional[str] = None,
) -> Dict[str, str]:
    """
    Validate a reminder and build the SNS Publish arguments.

    A topic takes precedence over a phone number when both are given.
    """
    if not message:
        raise ValidationError("A message body is required to publish an SNS notification")
    if not phone_number and not topic_arn:
        raise ValidationError("Provide either phoneNumber or topicArn to route the notification")

    params = {"Message": message}
    if subject:
        params["Subject"] = subject
    if topic_arn:
        params["TopicArn"] = topic_arn
    else:
        params["PhoneNumber"] = phone_number
    return params


class NotificationService:
    def __init__(self, client_factory=get_sns_client):
        self.client_factory = client_factory

    async def send_reminder(
        self,
        message: Optional[str],
        subject: Optional[str] = None,
        phone_number: Optional[str] = None,
        topic_arn: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Publish a reminder and return dispatch metadata.

        Raises:
            ValidationError: If the message or the destination is missing
            DispatchError: If SNS rejects or cannot receive the message
        """
        params = build_publish_params(message, subject, phone_number, topic_arn)

        if settings.sns_mock_mode:
            logger.info(f"SNS mock mode enabled. Skipping publish to {params.get('TopicArn') or params.get('PhoneNumber')}")
            return {"mock": True}

        try:
            response = await run_in_threadpool(self.client_factory().publish, **params)
        except (BotoCoreError, ClientError) as e:
            logger.warning(f"SNS publish failed: {e}")
            raise DispatchError(f"Failed to send reminder: {e}") from e

        logger.info(f"Reminder published to SNS with message id {response.get('MessageId')}")
        metadata = {"mock": False, "message_id": response.get("MessageId")}
        if response.get("SequenceNumber"):
            metadata["sequence_number"] = response["SequenceNumber"]
        return metadata
