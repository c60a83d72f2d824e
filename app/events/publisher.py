import asyncio
import json
from aio_pika import connect_robust, Message, ExchangeType
from aio_pika.exceptions import AMQPError
from app.core.config import settings
from app.core.logging import logger

EXCHANGE_NAME = "eventsphere.events"

_connection = None
_channel = None


async def get_rabbit_connection():
    global _connection, _channel
    if _connection and not _connection.is_closed:
        return _connection, _channel
    _connection = await connect_robust(settings.RABBITMQ_URL)
    _channel = await _connection.channel()
    return _connection, _channel


async def publish_event(routing_key: str, payload: dict):
    _, channel = await get_rabbit_connection()
    exchange = await channel.declare_exchange(EXCHANGE_NAME, ExchangeType.TOPIC, durable=True)
    body = json.dumps(payload, default=str).encode()
    message = Message(body, content_type="application/json")
    await exchange.publish(message, routing_key=routing_key)


async def publish_event_safely(routing_key: str, payload: dict) -> bool:
    """
    Publish after a committed write without letting the broker affect the caller.

    Bounded by PUBLISH_TIMEOUT_SECONDS. Returns whether the message was
    handed to the broker; failures are logged, never raised.
    """
    if not settings.EVENT_PUBLISHING_ENABLED:
        return False
    try:
        await asyncio.wait_for(
            publish_event(routing_key, {"type": routing_key, **payload}),
            timeout=settings.PUBLISH_TIMEOUT_SECONDS,
        )
        return True
    except (asyncio.TimeoutError, AMQPError, OSError) as e:
        logger.warning(f"Publishing {routing_key} failed: {e!r}")
        return False
