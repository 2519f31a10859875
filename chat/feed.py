# chat/feed.py
"""
Live change feed for chat messages.

Every inserted Message is pushed to the channel-layer group of its room as
``{"type": "message.insert", "message": <payload>}``. Delivery is
at-least-once and unordered relative to the snapshot a session loads, so
consumers dedup by id and order by (created_at, id).
"""
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)

INSERT_EVENT = "message.insert"


def room_group_name(room_id):
    return f"chat_{room_id}"


def message_payload(message):
    """JSON-safe row image of a message, the shape the feed carries."""
    return {
        "id": message.pk,
        "chat_id": message.chat_room_id,
        "sender_id": str(message.sender_id),
        "content": message.content,
        "is_read": message.is_read,
        "created_at": message.created_at.isoformat(),
    }


def publish_message(message, channel_layer=None):
    """Send one insert event to the room group. Returns False if no layer is configured."""
    channel_layer = channel_layer or get_channel_layer()
    if channel_layer is None:
        logger.warning(f"[CHAT] No channel layer configured; message {message.pk} not broadcast")
        return False

    async_to_sync(channel_layer.group_send)(
        room_group_name(message.chat_room_id),
        {
            "type": INSERT_EVENT,
            "message": message_payload(message),
        },
    )
    return True
