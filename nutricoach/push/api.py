# -*- coding: utf-8 -*-
"""Push notification endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from ..envelope import FunctionResult, FunctionRoute, ok
from .models import PushNotificationRequest, PushSubscription, PushSubscriptionRequest
from .notify import send_push_notification
from .storage import register_subscription

router = APIRouter(prefix="/api/push", tags=["Push"])
functions = APIRouter(prefix="/api/functions", tags=["Functions"], route_class=FunctionRoute)


@router.post("/subscriptions", response_model=PushSubscription, summary="Register a push subscription")
def post_subscription(request: PushSubscriptionRequest):
    return register_subscription(request)


@functions.post("/send-push-notification", response_model=FunctionResult)
def send_push_notification_api(request: PushNotificationRequest):
    result = send_push_notification(
        client_id=request.client_id,
        title=request.title,
        body=request.body,
        url=request.url,
    )
    message = None if result.total else "No subscriptions found"
    return ok(result.model_dump(), message=message)
