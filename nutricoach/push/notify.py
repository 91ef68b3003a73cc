# -*- coding: utf-8 -*-
"""Push notification fan-out.

Delivery transport is not implemented: each subscription gets a log line with
the payload that would have been sent.
"""

from __future__ import annotations

import logging
from typing import Optional
from uuid import uuid4

from ..config import settings
from ..errors import PushNotConfigured
from .models import PushPayload, PushResult
from .storage import list_subscriptions

logger = logging.getLogger(__name__)


def send_push_notification(
    *,
    client_id: str,
    title: str,
    body: str,
    url: Optional[str] = None,
) -> PushResult:
    subscriptions = list_subscriptions(client_id)
    if not subscriptions:
        logger.info("No push subscriptions for client %s", client_id)
        return PushResult(sent=0, total=0)

    if not settings.vapid_public_key or not settings.vapid_private_key:
        raise PushNotConfigured()

    payload = PushPayload(title=title, body=body, url=url or "/dashboard", id=str(uuid4()))
    sent = 0
    for sub in subscriptions:
        logger.info("Would send push to %s: %s", sub.endpoint, payload.model_dump_json())
        sent += 1

    logger.info("Sent %d/%d notifications to client %s", sent, len(subscriptions), client_id)
    return PushResult(sent=sent, total=len(subscriptions))


def notify_quietly(*, client_id: str, title: str, body: str, url: Optional[str] = None) -> Optional[PushResult]:
    """Best-effort variant used after the primary write already succeeded."""
    try:
        return send_push_notification(client_id=client_id, title=title, body=body, url=url)
    except Exception as exc:
        logger.warning("Push notification to client %s failed: %s", client_id, exc)
        return None
