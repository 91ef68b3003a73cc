# -*- coding: utf-8 -*-
"""Card generation, review queue and delivery endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..ai import get_ai_factory
from ..ai.client import AIClientFactory
from ..assessments.models import GenerateAssessmentRequest
from ..envelope import FunctionResult, FunctionRoute, ok
from .dispatch import send_card_to_client
from .health import generate_health_card
from .models import (
    ActionPlanCardRequest,
    CardEditRequest,
    CardListResponse,
    CardType,
    DietPlanCardRequest,
    GeneratedCard,
    HealthCardRequest,
    PendingReviewCard,
    SendCardRequest,
)
from .storage import edit_card, get_card, list_active_cards
from .visual import generate_action_plan_card, generate_diet_plan_card
from .wellness import SLEEP, STRESS, generate_report_card

router = APIRouter(prefix="/api/review", tags=["Review"])
functions = APIRouter(prefix="/api/functions", tags=["Functions"], route_class=FunctionRoute)


def _generated(card: GeneratedCard, message: str) -> FunctionResult:
    return ok(card.model_dump(mode="json"), message=message)


@functions.post("/generate-health-assessment", response_model=FunctionResult)
def generate_health_assessment_api(
    request: HealthCardRequest,
    ai_factory: AIClientFactory = Depends(get_ai_factory),
):
    card = generate_health_card(
        client_id=request.client_id,
        client_name=request.client_name,
        form_data=request.form_data,
        ai=ai_factory(allow_mock=False),
    )
    return _generated(card, "Health assessment generated and pending admin review")


@functions.post("/generate-stress-assessment", response_model=FunctionResult)
def generate_stress_assessment_api(
    request: GenerateAssessmentRequest,
    ai_factory: AIClientFactory = Depends(get_ai_factory),
):
    card = generate_report_card(
        STRESS,
        client_id=request.client_id,
        client_name=request.client_name,
        form_data=request.form_data,
        ai=ai_factory(allow_mock=True, mock_title=STRESS.title),
    )
    return _generated(card, "Stress assessment generated and pending admin review")


@functions.post("/generate-sleep-assessment", response_model=FunctionResult)
def generate_sleep_assessment_api(
    request: GenerateAssessmentRequest,
    ai_factory: AIClientFactory = Depends(get_ai_factory),
):
    card = generate_report_card(
        SLEEP,
        client_id=request.client_id,
        client_name=request.client_name,
        form_data=request.form_data,
        ai=ai_factory(allow_mock=True, mock_title=SLEEP.title),
    )
    return _generated(card, "Sleep assessment generated and pending admin review")


@functions.post("/generate-action-plan-card", response_model=FunctionResult)
def generate_action_plan_card_api(
    request: ActionPlanCardRequest,
    ai_factory: AIClientFactory = Depends(get_ai_factory),
):
    card = generate_action_plan_card(
        client_id=request.client_id,
        client_name=request.client_name,
        goals=request.goals,
        ai=ai_factory(allow_mock=False),
    )
    return _generated(card, "Action plan card generated and pending admin review")


@functions.post("/generate-diet-plan-card", response_model=FunctionResult)
def generate_diet_plan_card_api(
    request: DietPlanCardRequest,
    ai_factory: AIClientFactory = Depends(get_ai_factory),
):
    card = generate_diet_plan_card(
        client_id=request.client_id,
        client_name=request.client_name,
        target_kcal=request.target_kcal,
        dietary_type=request.dietary_type,
        ai=ai_factory(allow_mock=False),
    )
    return _generated(card, "Diet plan card generated and pending admin review")


@functions.post("/send-card-to-client", response_model=FunctionResult)
def send_card_to_client_api(request: SendCardRequest):
    result = send_card_to_client(
        request.card_id,
        reviewed_by=request.reviewed_by,
        display_name=request.display_name,
    )
    return ok(result.model_dump(mode="json"), message=result.message)


@router.get("/cards", response_model=CardListResponse, summary="List cards awaiting review")
def list_cards(
    client_id: Optional[str] = Query(default=None),
    card_type: Optional[CardType] = Query(default=None),
):
    cards = list_active_cards(client_id=client_id, card_type=card_type)
    return CardListResponse(count=len(cards), cards=cards)


@router.get("/cards/{card_id}", response_model=PendingReviewCard, summary="Get a card")
def get_review_card(card_id: str):
    return get_card(card_id)


@router.patch("/cards/{card_id}", response_model=PendingReviewCard, summary="Edit a card before sending")
def patch_review_card(card_id: str, request: CardEditRequest):
    return edit_card(card_id, request.generated_content)
