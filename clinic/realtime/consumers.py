import json

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer

from clinic.services import notifications
from clinic.services.broadcast import UPDATES_GROUP, user_group


class UpdatesConsumer(AsyncWebsocketConsumer):
    """Dashboard refresh feed shared by every connected client."""

    async def connect(self):
        await self.channel_layer.group_add(UPDATES_GROUP, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "message": "connected"}))

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(UPDATES_GROUP, self.channel_name)

    async def broadcast_refresh(self, event):
        # event: {"type": "broadcast.refresh", "ts": "...", "keys": [...]}
        await self.send(json.dumps(event))


class NotificationsConsumer(AsyncWebsocketConsumer):
    """Pushes the caller's unread notification count."""

    async def connect(self):
        user = self.scope.get("user")
        if not (user and user.is_authenticated):
            await self.close(code=4003)
            return
        self.group_name = user_group(user.id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()
        count = await database_sync_to_async(notifications.unread_count)(user)
        await self.send(json.dumps({"type": "unread", "count": count}))

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def notification_unread(self, event):
        await self.send(json.dumps({"type": "unread", "count": event.get("count", 0)}))
