"""
Unit tests for reminder dispatch.
"""
import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from app.core.exceptions import DispatchError, ValidationError
from app.services.notification_service import NotificationService, build_publish_params


class FakeSNSClient:
    def __init__(self, response=None, error=None):
        self.response = response or {"MessageId": "msg-1"}
        self.error = error
        self.calls = []

    def publish(self, **params):
        self.calls.append(params)
        if self.error:
            raise self.error
        return self.response


@pytest.mark.unit
class TestBuildPublishParams:

    def test_phone_destination(self):
        params = build_publish_params("See you at 9", subject="Reminder", phone_number="+254700000000")

        assert params == {"Message": "See you at 9", "Subject": "Reminder", "PhoneNumber": "+254700000000"}

    def test_topic_wins_over_phone(self):
        params = build_publish_params("Hi", phone_number="+254700000000", topic_arn="arn:aws:sns:us-east-1:1:t")

        assert params["TopicArn"] == "arn:aws:sns:us-east-1:1:t"
        assert "PhoneNumber" not in params

    def test_message_required(self):
        with pytest.raises(ValidationError, match="message body is required"):
            build_publish_params("", phone_number="+254700000000")

    def test_destination_required(self):
        with pytest.raises(ValidationError, match="phoneNumber or topicArn"):
            build_publish_params("Hi")


@pytest.mark.unit
@pytest.mark.asyncio
class TestSendReminder:

    async def test_mock_mode_skips_delivery(self, settings_override):
        settings_override(USE_MOCK_SNS=True)
        client = FakeSNSClient()

        metadata = await NotificationService(lambda: client).send_reminder("Hi", phone_number="+254700000000")

        assert metadata == {"mock": True}
        assert client.calls == []

    async def test_live_publish(self, settings_override):
        settings_override(USE_MOCK_SNS=False, AWS_ACCESS_KEY_ID="key", AWS_SECRET_ACCESS_KEY="secret")
        client = FakeSNSClient({"MessageId": "msg-42", "SequenceNumber": "7"})

        metadata = await NotificationService(lambda: client).send_reminder(
            "Doors open at 9", subject="Reminder", topic_arn="arn:aws:sns:us-east-1:1:t"
        )

        assert metadata == {"mock": False, "message_id": "msg-42", "sequence_number": "7"}
        assert client.calls == [{"Message": "Doors open at 9", "Subject": "Reminder", "TopicArn": "arn:aws:sns:us-east-1:1:t"}]

    async def test_missing_credentials_fall_back_to_mock(self, settings_override):
        settings_override(USE_MOCK_SNS=False, AWS_ACCESS_KEY_ID=None, AWS_SECRET_ACCESS_KEY=None)

        metadata = await NotificationService(FakeSNSClient).send_reminder("Hi", phone_number="+254700000000")

        assert metadata["mock"] is True

    @pytest.mark.parametrize("error", [
        ClientError({"Error": {"Code": "InvalidParameter", "Message": "bad number"}}, "Publish"),
        EndpointConnectionError(endpoint_url="https://sns.us-east-1.amazonaws.com"),
    ])
    async def test_transport_failure(self, settings_override, error):
        settings_override(USE_MOCK_SNS=False, AWS_ACCESS_KEY_ID="key", AWS_SECRET_ACCESS_KEY="secret")

        with pytest.raises(DispatchError) as exc_info:
            await NotificationService(lambda: FakeSNSClient(error=error)).send_reminder(
                "Hi", phone_number="+254700000000"
            )

        assert exc_info.value.status_code == 502
