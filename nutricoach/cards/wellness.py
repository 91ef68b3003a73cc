# -*- coding: utf-8 -*-
"""Stress and sleep assessment generators.

Both produce a markdown report. Without AI credentials the factory hands back
a mock client; its output is stored with ``ai_generated: false`` so reviewers
can tell it apart.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict

from ..ai import AIClient, parse_or_fallback
from ..app_db import iso_now
from ..assessments.models import AssessmentKind
from ..workflow.models import WorkflowStage
from .models import CardType, GeneratedCard
from .storage import persist_assessment_card

logger = logging.getLogger(__name__)


def _stress_prompt(client_name: str, form: Dict[str, Any]) -> str:
    return f"""You are a wellness expert analyzing stress levels for {client_name}.

Based on the following stress assessment data:
- Work Stress Level: {form.get("workStressLevel")}/10
- Sleep Quality (due to stress): {form.get("sleepQuality")}/10
- Main Stress Triggers: {form.get("stressTriggers")}
- Current Coping Mechanisms: {form.get("copingMechanisms")}
- Physical Symptoms: {form.get("physicalSymptoms") or "None reported"}

Please provide a comprehensive stress assessment report including:
1. Overall Stress Analysis
2. Key Stress Factors Identified
3. Impact on Health and Wellbeing
4. Recommended Stress Management Techniques (5-7 specific, actionable strategies)
5. Lifestyle Modifications
6. When to Seek Professional Help

Format the response as a professional assessment report in markdown."""


def _sleep_prompt(client_name: str, form: Dict[str, Any]) -> str:
    return f"""You are a sleep health expert analyzing sleep patterns for {client_name}.

Based on the following sleep assessment data:
- Average Sleep Hours: {form.get("sleepHours")} hours
- Bedtime: {form.get("sleepTime")}
- Wake Time: {form.get("wakeTime")}
- Sleep Quality: {form.get("sleepQuality")}/10
- Pre-Bed Routine: {form.get("preBedRoutine") or "Not specified"}
- Screen Time Before Sleep: {form.get("screenTime") or "Not specified"}
- Sleep Disruptions: {form.get("sleepDisruptions") or "None reported"}
- Daytime Energy Levels: {form.get("energyLevels")}/10

Please provide a comprehensive sleep hygiene assessment report including:
1. Sleep Pattern Analysis
2. Sleep Quality Evaluation
3. Factors Affecting Sleep
4. Sleep Hygiene Recommendations (7-10 specific, actionable strategies)
5. Bedtime Routine Optimization
6. Environmental Adjustments
7. When to Consult a Sleep Specialist

Format the response as a professional assessment report in markdown."""


@dataclass(frozen=True)
class ReportKind:
    kind: AssessmentKind
    card_type: CardType
    workflow_stage: WorkflowStage
    title: str
    system_prompt: str
    build_prompt: Callable[[str, Dict[str, Any]], str]


STRESS = ReportKind(
    kind=AssessmentKind.stress,
    card_type=CardType.stress_card,
    workflow_stage=WorkflowStage.stress_card_sent,
    title="Stress Assessment",
    system_prompt="You are an expert wellness consultant specializing in stress management and mental health.",
    build_prompt=_stress_prompt,
)

SLEEP = ReportKind(
    kind=AssessmentKind.sleep,
    card_type=CardType.sleep_card,
    workflow_stage=WorkflowStage.sleep_card_sent,
    title="Sleep Assessment",
    system_prompt=(
        "You are an expert sleep consultant specializing in sleep hygiene and circadian rhythm optimization."
    ),
    build_prompt=_sleep_prompt,
)


def generate_report_card(
    report: ReportKind,
    *,
    client_id: str,
    client_name: str,
    form_data: Dict[str, Any],
    ai: AIClient,
) -> GeneratedCard:
    logger.info("Generating %s for client %s", report.title.lower(), client_id)
    text = ai.chat(
        [
            {"role": "system", "content": report.system_prompt},
            {"role": "user", "content": report.build_prompt(client_name, form_data)},
        ]
    )
    ai_generated = not ai.is_mock

    card_content: Dict[str, Any] = {
        "client_name": client_name,
        "form_responses": form_data,
        "assessment_text": text,
    }
    # a model that answers in JSON anyway still yields a usable card
    parsed, structured = parse_or_fallback(text) if text.lstrip().startswith(("{", "```")) else ({}, False)
    if structured:
        card_content.update({k: v for k, v in parsed.items() if k not in card_content})
    card_content["generated_at"] = iso_now()
    if not ai_generated:
        card_content["ai_generated"] = False

    assessment, card_id = persist_assessment_card(
        client_id=client_id,
        kind=report.kind,
        form_responses=form_data,
        assessment_data={"report": text},
        ai_generated=ai_generated,
        card_type=report.card_type,
        card_content=card_content,
        workflow_stage=report.workflow_stage,
    )
    logger.info("%s %s saved, card %s pending review", report.title, assessment.id, card_id)
    return GeneratedCard(
        card_id=card_id,
        card_type=report.card_type,
        assessment_id=assessment.id,
        ai_generated=ai_generated,
        content=card_content,
    )
