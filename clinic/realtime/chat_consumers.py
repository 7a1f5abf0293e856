import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer

from clinic.exceptions import ClinicError
from clinic.services import messaging, presence
from clinic.services.broadcast import conversation_group

logger = logging.getLogger(__name__)


async def _ws_error(ws, code: int, message: str, *, close: bool = False):
    """Send an error frame; 4xxx are client errors, 5xxx server errors."""
    payload = {"type": "error", "code": code, "message": message}
    try:
        await ws.send(json.dumps(payload))
    finally:
        if close:
            await ws.close(code=code)


class MessageThreadConsumer(AsyncWebsocketConsumer):
    """Live feed for one conversation between the caller and ``peer_id``.

    Pushes ``message.created`` and ``message.updated`` events and accepts
    ``{"type": "send", "content": "..."}`` frames.  The caller counts as
    online while the socket is open; every frame received, including
    ``{"type": "ping"}``, refreshes that presence.
    """

    async def connect(self):
        user = self.scope.get("user")
        if not (user and user.is_authenticated):
            await self.close(code=4003)
            return

        peer_id = self.scope["url_route"]["kwargs"].get("peer_id")
        try:
            peer = await database_sync_to_async(messaging.get_peer)(user, peer_id)
        except ClinicError:
            await self.close(code=4001)
            return

        self.user = user
        self.peer_id = peer.id
        self.group_name = conversation_group(user.id, peer.id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await database_sync_to_async(presence.mark_online)(user.id, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)
            await database_sync_to_async(presence.mark_offline)(self.user.id, self.channel_name)

    async def receive(self, text_data=None, bytes_data=None):
        await database_sync_to_async(presence.touch)(self.user.id, self.channel_name)
        if not text_data:
            return
        try:
            data = json.loads(text_data)
        except ValueError:
            await _ws_error(self, 4000, "invalid_json")
            return
        if isinstance(data, dict) and data.get("type") == "ping":
            await self.send(json.dumps({"type": "pong"}))
            return
        if not isinstance(data, dict) or data.get("type") != "send":
            await _ws_error(self, 4002, "unsupported_type")
            return
        content = data.get("content", "")
        if not isinstance(content, str):
            await _ws_error(self, 4004, "empty_message")
            return

        try:
            # The service broadcasts message.created to this group
            msg = await database_sync_to_async(messaging.send_message)(self.user, self.peer_id, content)
        except ClinicError as e:
            await _ws_error(self, 4000 if e.status_code < 500 else 5000, e.message)
            return
        except Exception:
            logger.exception("websocket send failed")
            await _ws_error(self, 5000, "server_error")
            return
        await self.send(json.dumps({"type": "ack", "ok": True, "id": str(msg.id)}))

    async def message_created(self, event):
        await self.send(json.dumps({"type": "message.created", "message": event.get("message")}))

    async def message_updated(self, event):
        await self.send(json.dumps({
            "type": "message.updated",
            "ids": event.get("ids", []),
            "readAt": event.get("readAt"),
            "readerId": event.get("readerId"),
        }))
