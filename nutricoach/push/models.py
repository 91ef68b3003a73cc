# -*- coding: utf-8 -*-
"""Push notifications — Pydantic models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class PushSubscriptionRequest(BaseModel):
    client_id: str = Field(..., min_length=1)
    endpoint: str = Field(..., min_length=1)
    p256dh: Optional[str] = None
    auth: Optional[str] = None


class PushSubscription(BaseModel):
    id: str
    client_id: str
    endpoint: str
    p256dh: Optional[str] = None
    auth: Optional[str] = None
    created_at: str


class PushNotificationRequest(BaseModel):
    client_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)
    url: Optional[str] = None


class PushPayload(BaseModel):
    title: str
    body: str
    url: str = "/dashboard"
    id: str


class PushResult(BaseModel):
    sent: int
    total: int
