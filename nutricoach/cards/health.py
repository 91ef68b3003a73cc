# -*- coding: utf-8 -*-
"""Health assessment card generator."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Optional

from ..ai import AIClient, parse_or_fallback
from ..app_db import iso_now
from ..assessments.models import AssessmentKind
from ..assessments.storage import latest_assessment
from ..clients.storage import latest_daily_log, require_client
from ..workflow.models import WorkflowStage
from .metrics import BodyMetrics, compute_body_metrics
from .models import CardType, GeneratedCard
from .storage import persist_assessment_card

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert nutritionist creating professional health assessments. "
    "Always respond in valid JSON."
)


def _num(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _gender(value: Any) -> Optional[str]:
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip().lower()


def _build_prompt(
    client_name: str,
    metrics: BodyMetrics,
    goals: str,
    form_data: Dict[str, Any],
    activity_minutes: float,
    water_intake: float,
) -> str:
    return f"""You are a certified nutritionist analyzing a client's health assessment. Generate a comprehensive, professional health assessment report in JSON format.

**Client Information:**
- Name: {client_name}
- Age: {metrics.age}
- Gender: {metrics.gender}
- Height: {metrics.height} cm
- Weight: {metrics.weight} kg
- BMI: {metrics.bmi}
- BMR: {metrics.bmr} kcal
- Ideal Weight: {metrics.ideal_weight} kg
- Recommended Calorie Intake: {metrics.calorie_intake} kcal
- Recommended Protein Intake: {metrics.protein_intake} g
- Goals: {goals}
- Activity Level: {activity_minutes} min/day
- Sleep: {form_data.get("sleep_hours") or 7} hrs/night
- Water Intake: {water_intake} liters/day
- Stress Level: {form_data.get("stress_level") or 5}/10
- Medical Conditions: {form_data.get("medical_conditions") or "None"}

Return a valid JSON object with the following structure (do not include markdown formatting around the JSON):
{{
  "client_details": {{"name": "{client_name}", "age": number, "gender": "string"}},
  "key_findings": {{"height": number, "weight": number, "bmi": number, "bmr": number,
                    "ideal_weight": number, "calorie_intake": number, "protein_intake": number}},
  "medical_history": {{"conditions": ["string"], "medications": ["string"], "allergies": ["string"]}},
  "lifestyle": {{"diet": "string", "exercise": "string", "sleep": "string", "stress_level": "string"}},
  "health_goals": ["string"],
  "recommendations": ["string"],
  "ai_analysis": "string (full Markdown formatted detailed analysis text)",
  "summary": "string (brief summary)"
}}
"""


def generate_health_card(
    *,
    client_id: str,
    client_name: str,
    form_data: Dict[str, Any],
    ai: AIClient,
) -> GeneratedCard:
    logger.info("Generating health assessment for client %s", client_id)
    client = require_client(client_id)
    latest_log = latest_daily_log(client_id)
    previous = latest_assessment(client_id, AssessmentKind.health)
    previous_form = previous.form_responses if previous else {}

    height = _num(form_data.get("height")) or _num(form_data.get("height_cm")) or _num(previous_form.get("height"))
    height = height or client.height_cm
    # submitted answers first; logs and the client record only fill gaps
    weight = _num(form_data.get("weight")) or _num(form_data.get("weight_kg"))
    weight = weight or (latest_log.weight_kg if latest_log else None) or client.last_weight_kg
    gender = client.gender.value if client.gender else _gender(form_data.get("gender"))
    metrics = compute_body_metrics(
        height_cm=height,
        weight_kg=weight,
        age=client.age or _num(form_data.get("age")),
        gender=gender,
        target_kcal=client.target_kcal,
    )

    activity = (latest_log.activity_minutes if latest_log else None) or 0
    water = (latest_log.water_intake_l if latest_log else None) or 2
    prompt = _build_prompt(client_name, metrics, client.goals or "General wellness", form_data, activity, water)

    raw = ai.chat(
        [{"role": "system", "content": SYSTEM_PROMPT}, {"role": "user", "content": prompt}],
        json_mode=True,
    )
    content, structured = parse_or_fallback(raw)
    if not structured:
        logger.warning("Health assessment for client %s stored as raw analysis text", client_id)

    # computed figures win over whatever the model reported
    reported = content.get("key_findings")
    key_findings = dict(reported) if isinstance(reported, dict) else {}
    key_findings.update(metrics.key_findings())
    key_findings.setdefault("medical_condition", form_data.get("medical_conditions") or "")
    content["key_findings"] = key_findings
    content.setdefault("client_details", {"name": client_name, "age": metrics.age, "gender": metrics.gender})
    content["lifestyle_patterns"] = {
        "physical_activity": activity,
        "stress_level": form_data.get("stress_level") or 5,
        "sleep_hours": form_data.get("sleep_hours") or 7,
        "water_intake": water,
        "fixed_sleep_time": bool(form_data.get("fixed_sleep_time")),
    }
    content["generated_at"] = iso_now()

    assessment, card_id = persist_assessment_card(
        client_id=client_id,
        kind=AssessmentKind.health,
        form_responses=form_data,
        assessment_data=content,
        ai_generated=True,
        card_type=CardType.health_assessment,
        card_content=content,
        workflow_stage=WorkflowStage.health_assessment_generated,
        file_name=f"Health Assessment - {client_name} - {date.today().isoformat()}",
        notes="AI-generated health assessment",
    )
    logger.info("Health assessment %s saved, card %s pending review", assessment.id, card_id)
    return GeneratedCard(
        card_id=card_id,
        card_type=CardType.health_assessment,
        assessment_id=assessment.id,
        ai_generated=True,
        content=content,
    )
