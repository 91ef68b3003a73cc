# -*- coding: utf-8 -*-
"""Review cards — Pydantic models."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..workflow.models import WorkflowStage


class CardType(str, Enum):
    health_assessment = "health_assessment"
    stress_card = "stress_card"
    sleep_card = "sleep_card"
    action_plan = "action_plan"
    diet_plan = "diet_plan"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    CardType.health_assessment: "Health Assessment Card",
    CardType.stress_card: "Stress Assessment Card",
    CardType.sleep_card: "Sleep Quality Card",
    CardType.action_plan: "Health Action Plan",
    CardType.diet_plan: "Diet Plan",
}


class CardStatus(str, Enum):
    pending = "pending"
    edited = "edited"
    sent = "sent"


ACTIVE_STATUSES = (CardStatus.pending, CardStatus.edited)


class PendingReviewCard(BaseModel):
    id: str
    client_id: str
    client_name: Optional[str] = None
    card_type: CardType
    generated_content: Dict[str, Any] = Field(default_factory=dict)
    status: CardStatus
    workflow_stage: WorkflowStage
    ai_generated_at: str
    created_at: str
    edited_at: Optional[str] = None
    sent_at: Optional[str] = None
    reviewed_by: Optional[str] = None


class CardListResponse(BaseModel):
    count: int
    cards: List[PendingReviewCard] = Field(default_factory=list)


class CardEditRequest(BaseModel):
    generated_content: Dict[str, Any]


class GeneratedCard(BaseModel):
    """What a generator hands back to its caller."""

    card_id: str
    card_type: CardType
    assessment_id: Optional[str] = None
    ai_generated: bool = True
    content: Dict[str, Any] = Field(default_factory=dict)


class SendCardRequest(BaseModel):
    card_id: str = Field(..., min_length=1)
    reviewed_by: Optional[str] = None
    display_name: Optional[str] = None


class DeliveryResult(BaseModel):
    card_id: str
    client_id: str
    card_type: CardType
    already_sent: bool = False
    message_id: Optional[str] = None
    message: str


class HealthCardRequest(BaseModel):
    client_id: str = Field(..., min_length=1)
    client_name: str = Field(..., min_length=1)
    form_data: Dict[str, Any] = Field(default_factory=dict)


class ActionPlanCardRequest(BaseModel):
    client_id: str = Field(..., min_length=1)
    client_name: str = Field(..., min_length=1)
    goals: Optional[str] = None


class DietPlanCardRequest(BaseModel):
    client_id: str = Field(..., min_length=1)
    client_name: str = Field(..., min_length=1)
    target_kcal: Optional[float] = Field(None, gt=0)
    dietary_type: Optional[str] = None
