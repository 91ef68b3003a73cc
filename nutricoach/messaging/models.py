# -*- coding: utf-8 -*-
"""Messaging — Pydantic models."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class SenderType(str, Enum):
    system = "system"
    admin = "admin"
    client = "client"


class MessageType(str, Enum):
    automated = "automated"
    manual = "manual"
    retargeting = "retargeting"
    assessment_request = "assessment_request"
    motivation = "motivation"


class Message(BaseModel):
    id: str
    client_id: str
    sender_type: SenderType
    message_type: MessageType
    content: str
    attachment_url: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    is_read: bool = False
    created_at: str


class MessageListResponse(BaseModel):
    client_id: str
    count: int
    messages: List[Message]


class MessageTemplate(BaseModel):
    id: str
    name: str
    template: str
    trigger_event: Optional[str] = None
    is_active: bool = True
    created_at: str


class TemplateUpsertRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    template: str = Field(..., min_length=1)
    trigger_event: Optional[str] = Field(None, max_length=128)
    is_active: bool = True


class AutomatedMessageRequest(BaseModel):
    client_id: str = Field(..., min_length=1)
    template_name: str = Field(..., min_length=1)
    variables: Dict[str, Any] = Field(default_factory=dict)


class MotivationSummary(BaseModel):
    sent: int
    clients_reached: int
    message: str
