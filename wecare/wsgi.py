"""
WSGI config for the WeCare clinic backend.

Exposes the WSGI callable as a module-level variable named ``application``.
Plain HTTP deployments (gunicorn, uwsgi) use this; WebSocket routes need
the ASGI entrypoint in :mod:`wecare.asgi`.
"""
import os

from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'wecare.settings')

application = get_wsgi_application()
