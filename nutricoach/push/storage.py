# -*- coding: utf-8 -*-
"""Push subscription registry (SQLite)."""

from __future__ import annotations

from typing import List
from uuid import uuid4

from ..app_db import iso_now, use_conn
from ..clients.storage import require_client
from .models import PushSubscription, PushSubscriptionRequest


def register_subscription(request: PushSubscriptionRequest) -> PushSubscription:
    require_client(request.client_id)
    with use_conn() as c:
        c.execute(
            """
            INSERT INTO push_subscriptions (id, client_id, endpoint, p256dh, auth, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(client_id, endpoint) DO UPDATE SET
                p256dh = excluded.p256dh,
                auth = excluded.auth
            """,
            (str(uuid4()), request.client_id, request.endpoint, request.p256dh, request.auth, iso_now()),
        )
        row = c.execute(
            "SELECT * FROM push_subscriptions WHERE client_id = ? AND endpoint = ?",
            (request.client_id, request.endpoint),
        ).fetchone()
    return PushSubscription.model_validate(dict(row))


def list_subscriptions(client_id: str) -> List[PushSubscription]:
    with use_conn() as c:
        rows = c.execute(
            "SELECT * FROM push_subscriptions WHERE client_id = ? ORDER BY created_at ASC",
            (client_id,),
        ).fetchall()
    return [PushSubscription.model_validate(dict(r)) for r in rows]
