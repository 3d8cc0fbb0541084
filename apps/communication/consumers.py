import json
from channels.generic.websocket import AsyncWebsocketConsumer
from channels.db import database_sync_to_async

from .models import Notification
from .services import notification_group_name


class NotificationConsumer(AsyncWebsocketConsumer):
    """
    WebSocket consumer for real-time notifications.
    """

    async def connect(self):
        """Handle WebSocket connection."""
        self.user = self.scope.get('user')

        if self.user is None or not self.user.is_authenticated:
            await self.close()
            return

        # Join user's notification group
        self.notification_group_name = notification_group_name(self.user.id)
        await self.channel_layer.group_add(
            self.notification_group_name,
            self.channel_name
        )

        await self.accept()
        await self.send_unread_count()

    async def disconnect(self, close_code):
        """Handle WebSocket disconnection."""
        if hasattr(self, 'notification_group_name'):
            await self.channel_layer.group_discard(
                self.notification_group_name,
                self.channel_name
            )

    async def receive(self, text_data):
        """Handle incoming WebSocket messages."""
        try:
            data = json.loads(text_data)
        except json.JSONDecodeError:
            await self.send(text_data=json.dumps({
                'type': 'error',
                'message': 'Invalid JSON format'
            }))
            return

        message_type = data.get('type')
        if message_type == 'mark_read':
            await self.mark_notifications_read(data.get('notification_ids', []))
            await self.send_unread_count()
        elif message_type == 'get_unread_count':
            await self.send_unread_count()

    # Event handlers for group messages
    async def send_notification(self, event):
        """Send notification to WebSocket."""
        await self.send(text_data=json.dumps({
            'type': 'notification',
            'notification': event['notification']
        }))

    async def send_unread_count(self):
        count = await self.get_unread_count()
        await self.send(text_data=json.dumps({
            'type': 'unread_count',
            'count': count
        }))

    # Database operations
    @database_sync_to_async
    def get_unread_count(self):
        return Notification.objects.filter(recipient=self.user, is_read=False).count()

    @database_sync_to_async
    def mark_notifications_read(self, notification_ids):
        """Mark specific notifications as read."""
        if notification_ids:
            Notification.objects.filter(
                id__in=notification_ids,
                recipient=self.user
            ).update(is_read=True)
