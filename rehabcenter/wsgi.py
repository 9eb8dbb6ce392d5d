"""
WSGI config for the rehabcenter project.

Exposes the WSGI callable as ``application`` for gunicorn/uwsgi.  The
websocket update channel needs the ASGI entrypoint in ``asgi.py``
instead; plain WSGI deployments simply get no live refresh events.
"""
import os

from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'rehabcenter.settings')

application = get_wsgi_application()
