# -*- coding: utf-8 -*-
"""Client registry endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from .models import Client, ClientUpsertRequest, DailyLog, DailyLogRequest
from .storage import add_daily_log, require_client, upsert_client

router = APIRouter(prefix="/api/clients", tags=["Clients"])


@router.put("", response_model=Client, summary="Create or update a client")
def put_client(request: ClientUpsertRequest):
    return upsert_client(request)


@router.get("/{client_id}", response_model=Client, summary="Get a client")
def get_client_api(client_id: str):
    return require_client(client_id)


@router.post("/{client_id}/daily-logs", response_model=DailyLog, summary="Record a daily log")
def post_daily_log(client_id: str, request: DailyLogRequest):
    return add_daily_log(client_id, request)
