from django.urls import path

from .consumers import NotificationsConsumer, UpdatesConsumer
from .chat_consumers import MessageThreadConsumer

websocket_urlpatterns = [
    path("ws/updates/", UpdatesConsumer.as_asgi()),
    path("ws/notifications/", NotificationsConsumer.as_asgi()),
    path("ws/messages/<str:peer_id>/", MessageThreadConsumer.as_asgi()),
]
