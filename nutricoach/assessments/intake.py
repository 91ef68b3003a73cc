# -*- coding: utf-8 -*-
"""Client form intake.

The submitted form is normalised to the keys the generators read, the
originating request is closed, and exactly one generator runs.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from ..ai.client import AIClientFactory
from ..cards.health import generate_health_card
from ..cards.models import GeneratedCard
from ..cards.wellness import SLEEP, STRESS, generate_report_card
from ..errors import GenerationFailed, NutricoachError
from .models import AssessmentType
from .storage import mark_request_completed

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Assessment submitted and generated successfully."
FAILURE_HINT = "Assessment saved, but AI generation failed. Please contact support."


def _map_sleep(form: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "sleepHours": form.get("actual_sleep_hours"),
        "sleepTime": form.get("bedtime_usual"),
        "wakeTime": form.get("wake_time_usual"),
        "sleepQuality": form.get("overall_sleep_quality_rating"),
        "energyLevels": form.get("daytime_sleepiness_frequency"),
    }


def _map_stress(form: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "workStressLevel": form.get("stress_level_work") or form.get("stress_level_general") or 5,
        "sleepQuality": form.get("stress_impact_sleep_quality") or 5,
        "stressTriggers": form.get("main_stress_triggers") or "Not specified",
        "copingMechanisms": form.get("current_coping_mechanisms") or "None",
        "physicalSymptoms": form.get("stress_physical_symptoms") or "None",
    }


def _map_health(form: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "height": form.get("height"),
        "weight": form.get("weight"),
        "sleep_hours": form.get("average_sleep_hours"),
        "stress_level": form.get("daily_stress_level"),
        "medical_conditions": form.get("existing_medical_conditions") or "None",
        "fixed_sleep_time": form.get("consistent_sleep_schedule") == "yes",
    }


_MAPPERS = {
    AssessmentType.sleep_assessment: _map_sleep,
    AssessmentType.stress_assessment: _map_stress,
    AssessmentType.health_assessment: _map_health,
}


def map_form_data(assessment_type: AssessmentType, form_data: Dict[str, Any]) -> Dict[str, Any]:
    """Original answers plus the generator keys derived from them."""
    mapped = dict(form_data)
    mapped.update(_MAPPERS[assessment_type](form_data))
    return mapped


def _generate(
    assessment_type: AssessmentType,
    *,
    client_id: str,
    client_name: str,
    form_data: Dict[str, Any],
    ai_factory: AIClientFactory,
) -> GeneratedCard:
    if assessment_type == AssessmentType.health_assessment:
        return generate_health_card(
            client_id=client_id,
            client_name=client_name,
            form_data=form_data,
            ai=ai_factory(allow_mock=False),
        )
    report = STRESS if assessment_type == AssessmentType.stress_assessment else SLEEP
    return generate_report_card(
        report,
        client_id=client_id,
        client_name=client_name,
        form_data=form_data,
        ai=ai_factory(allow_mock=True, mock_title=report.title),
    )


def submit_client_assessment(
    *,
    request_id: str,
    assessment_type: str,
    client_id: str,
    client_name: str,
    form_data: Dict[str, Any],
    ai_factory: AIClientFactory,
) -> GeneratedCard:
    """Close the request and run its generator.

    Raises UnknownAssessmentType before touching anything, RequestNotFound when
    the request does not exist, and GenerationFailed when the generator fails
    (the request stays completed in that case).
    """
    kind = AssessmentType.parse(assessment_type)
    logger.info("Submitting client assessment: request=%s type=%s client=%s", request_id, kind.value, client_id)
    mapped = map_form_data(kind, form_data)

    mark_request_completed(request_id)
    logger.info("Request %s marked as completed", request_id)

    try:
        card = _generate(
            kind,
            client_id=client_id,
            client_name=client_name,
            form_data=mapped,
            ai_factory=ai_factory,
        )
    except NutricoachError as exc:
        logger.error("AI generation for request %s failed: %s", request_id, exc.message)
        raise GenerationFailed(
            f"Assessment saved, but AI generation failed: {exc.message}",
            hint=FAILURE_HINT,
        ) from exc
    except Exception as exc:
        logger.exception("AI generation for request %s crashed", request_id)
        raise GenerationFailed(
            f"Assessment saved, but AI generation failed: {exc or 'AI Generation Error'}",
            hint=FAILURE_HINT,
        ) from exc

    logger.info("AI card %s generated for request %s", card.card_id, request_id)
    return card
