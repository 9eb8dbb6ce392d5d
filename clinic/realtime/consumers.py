import json
from channels.generic.websocket import AsyncWebsocketConsumer

from .events import GROUP


class UpdatesConsumer(AsyncWebsocketConsumer):
    """Pushes refresh events to dashboards whenever patients or payments change."""
    GROUP = GROUP

    async def connect(self):
        user = self.scope.get("user")
        if not (user and getattr(user, "is_authenticated", False)):
            await self.close(code=4401)
            return
        await self.channel_layer.group_add(self.GROUP, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "message": "connected"}))

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(self.GROUP, self.channel_name)

    async def broadcast_refresh(self, event):
        # event: {"type": "broadcast.refresh", "version": int, "ts": "...", "keys": [...]}
        await self.send(json.dumps(event))
