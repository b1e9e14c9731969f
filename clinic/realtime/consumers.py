import json

from channels.generic.websocket import AsyncWebsocketConsumer

from clinic.services.queue import QUEUE_GROUP


class QueueConsumer(AsyncWebsocketConsumer):
    """Pushes queue changes to signed-in staff screens."""
    GROUP = QUEUE_GROUP

    async def connect(self):
        user = self.scope.get('user')
        if not (user and user.is_authenticated):
            await self.close()
            return
        await self.channel_layer.group_add(self.GROUP, self.channel_name)
        await self.accept()
        await self.send(json.dumps({'type': 'welcome', 'message': 'connected'}))

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(self.GROUP, self.channel_name)

    async def queue_update(self, event):
        # event: {"type": "queue.update", "event": "status", "queueId": 1, "status": "called", ...}
        await self.send(json.dumps(event))

    async def broadcast_refresh(self, event):
        # event: {"type": "broadcast.refresh", "version": int, "ts": "...", "keys": [...]}
        await self.send(json.dumps(event))
