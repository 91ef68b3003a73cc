# -*- coding: utf-8 -*-
"""Image-backed cards: action plan pictogram and diet plan table."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..ai import AIClient
from ..app_db import iso_now
from ..clients.storage import require_client
from ..workflow.models import WorkflowStage
from .models import CardType, GeneratedCard
from .storage import insert_card

logger = logging.getLogger(__name__)

DEFAULT_TARGET_KCAL = 1800
IMAGE_SIZE = "1024x1024"


def _action_plan_prompt(client_name: str, goals: str) -> str:
    return f"""Create a visual action plan pictogram for {client_name}'s health goals: {goals}.

Generate a clean, professional pictogram with 5-7 key action items. Each item should have:
- A simple icon representation
- Short actionable text (3-5 words)
- Clear visual flow from top to bottom

Focus on: nutrition, exercise, sleep, hydration, stress management.

Style: Minimalist, professional, wellness-themed colors (greens, blues), easy to understand at a glance."""


def _diet_plan_prompt(client_name: str, target_kcal: float, dietary_type: str) -> str:
    return f"""Create a professional diet plan table image for {client_name}.

Target Calories: {target_kcal} kcal/day
Dietary Type: {dietary_type}

Generate a clean table with columns:
- Meal Time
- Meal Name
- Portion Size
- Calories (kcal)

Include: Breakfast, Lunch, Evening Snack, Dinner
Total daily calories should equal {target_kcal} kcal

Style: Professional table format, clean typography, wellness colors (green theme), easy to read. Include total row at bottom."""


def _store(client_id: str, card_type: CardType, stage: WorkflowStage, content: Dict[str, Any]) -> GeneratedCard:
    card_id = insert_card(
        client_id=client_id,
        card_type=card_type,
        generated_content=content,
        workflow_stage=stage,
    )
    logger.info("%s card generated for client %s, card ID: %s", card_type.display_name, client_id, card_id)
    return GeneratedCard(card_id=card_id, card_type=card_type, content=content)


def generate_action_plan_card(
    *,
    client_id: str,
    client_name: str,
    ai: AIClient,
    goals: Optional[str] = None,
) -> GeneratedCard:
    client = require_client(client_id)
    goals = goals or client.goals
    image_url = ai.generate_image(_action_plan_prompt(client_name, goals or "General wellness"), size=IMAGE_SIZE)
    content = {
        "client_name": client_name,
        "goals": goals,
        "action_plan_image": image_url,
        "generated_at": iso_now(),
    }
    return _store(client_id, CardType.action_plan, WorkflowStage.action_plan_generated, content)


def generate_diet_plan_card(
    *,
    client_id: str,
    client_name: str,
    ai: AIClient,
    target_kcal: Optional[float] = None,
    dietary_type: Optional[str] = None,
) -> GeneratedCard:
    client = require_client(client_id)
    kcal = target_kcal or client.target_kcal or DEFAULT_TARGET_KCAL
    image_url = ai.generate_image(_diet_plan_prompt(client_name, kcal, dietary_type or "Balanced"), size=IMAGE_SIZE)
    content: Dict[str, Any] = {
        "client_name": client_name,
        "target_kcal": kcal,
        "diet_plan_image": image_url,
        "generated_at": iso_now(),
    }
    if dietary_type:
        content["dietary_type"] = dietary_type
    return _store(client_id, CardType.diet_plan, WorkflowStage.diet_plan_generated, content)
