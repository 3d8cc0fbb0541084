"""
WebSocket routing configuration.
"""

from django.urls import path

from apps.communication.consumers import NotificationConsumer

websocket_urlpatterns = [
    # Real-time notifications WebSocket
    path('ws/notifications/', NotificationConsumer.as_asgi()),
]
