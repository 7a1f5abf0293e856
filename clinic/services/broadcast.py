"""
Channels group names and a best-effort ``group_send`` wrapper.

HTTP views push realtime events through here; a failing channel layer
is logged and never fails the request that triggered it.
"""
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)

UPDATES_GROUP = "updates"


def conversation_group(user_a_id, user_b_id) -> str:
    low, high = sorted([int(user_a_id), int(user_b_id)])
    return f"chat.{low}.{high}"


def user_group(user_id) -> str:
    return f"user.{int(user_id)}"


def send(group: str, event: dict) -> bool:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return False
    try:
        async_to_sync(channel_layer.group_send)(group, event)
        return True
    except Exception:
        logger.warning("broadcast to %s failed", group, exc_info=True)
        return False
