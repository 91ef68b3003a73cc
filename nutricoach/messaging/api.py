# -*- coding: utf-8 -*-
"""Messaging endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from ..envelope import FunctionResult, FunctionRoute, ok
from .models import (
    AutomatedMessageRequest,
    MessageListResponse,
    MessageTemplate,
    MessageType,
    TemplateUpsertRequest,
)
from .motivation import send_daily_motivation
from .service import send_automated_message
from .storage import list_messages, list_templates, mark_read, upsert_template

router = APIRouter(prefix="/api", tags=["Messages"])
functions = APIRouter(prefix="/api/functions", tags=["Functions"], route_class=FunctionRoute)


@functions.post("/send-automated-message", response_model=FunctionResult)
def send_automated_message_api(request: AutomatedMessageRequest):
    message = send_automated_message(
        client_id=request.client_id,
        template_name=request.template_name,
        variables=request.variables,
    )
    return ok({"message": message.model_dump(mode="json")})


@router.get("/messages/{client_id}", response_model=MessageListResponse, summary="List client messages")
def list_client_messages(
    client_id: str,
    message_type: Optional[MessageType] = Query(default=None),
    limit: int = Query(default=100, ge=1, le=500),
):
    messages = list_messages(client_id, message_type=message_type, limit=limit)
    return MessageListResponse(client_id=client_id, count=len(messages), messages=messages)


@router.post("/messages/{message_id}/read", summary="Mark a message as read")
def mark_message_read(message_id: str):
    if not mark_read(message_id):
        raise HTTPException(status_code=404, detail="Message not found")
    return {"status": "ok"}


@router.put("/templates", response_model=MessageTemplate, summary="Create or update a message template")
def put_template(request: TemplateUpsertRequest):
    return upsert_template(
        name=request.name,
        template=request.template,
        trigger_event=request.trigger_event,
        is_active=request.is_active,
    )


@router.get("/templates", response_model=List[MessageTemplate], summary="List message templates")
def get_templates():
    return list_templates()


@functions.post("/daily-motivation-sender", response_model=FunctionResult)
def daily_motivation_sender_api():
    summary = send_daily_motivation()
    return ok(summary.model_dump(mode="json"), message=summary.message)
