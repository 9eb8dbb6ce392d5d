"""
Server-side half of the live update channel.

Views call :func:`broadcast_refresh` after a write; every connected
:class:`~clinic.realtime.consumers.UpdatesConsumer` receives the list of
collection keys that changed and refetches them.  Cached aggregates that
depend on those collections are dropped at the same time.
"""
from __future__ import annotations

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.core.cache import cache
from django.utils import timezone

logger = logging.getLogger(__name__)

GROUP = "updates"
DASHBOARD_CACHE_KEY = "dashboard:stats"


def broadcast_refresh(*keys: str) -> None:
    cache.delete(DASHBOARD_CACHE_KEY)
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    now = timezone.now()
    event = {"type": "broadcast.refresh", "version": int(now.timestamp()), "ts": now.isoformat(), "keys": list(keys)[:50]}
    try:
        async_to_sync(channel_layer.group_send)(GROUP, event)
    except Exception:
        logger.warning("refresh broadcast failed for %s", keys, exc_info=True)
