"""
ASGI entrypoint for the WeCare clinic backend.

HTTP goes to Django; WebSocket connections go through Channels with the
clinic consumers from ``clinic.realtime.routing``.  Settings must be
configured and Django set up before the consumers are imported.
"""
import os

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "wecare.settings")

import django  # noqa: E402
django.setup()  # noqa: E402

from channels.auth import AuthMiddlewareStack  # noqa: E402
from channels.routing import ProtocolTypeRouter, URLRouter  # noqa: E402
from django.core.asgi import get_asgi_application  # noqa: E402

from clinic.realtime.auth import QueryTokenAuthMiddleware  # noqa: E402
from clinic.realtime.routing import websocket_urlpatterns  # noqa: E402

django_asgi_app = get_asgi_application()

# Session auth first (admin site), then ?token= for API clients
application = ProtocolTypeRouter({
    "http": django_asgi_app,
    "websocket": AuthMiddlewareStack(QueryTokenAuthMiddleware(URLRouter(websocket_urlpatterns))),
})
