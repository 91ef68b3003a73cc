# -*- coding: utf-8 -*-
"""Scheduled workflow actions.

``trigger_workflow_stage`` and earlier automation runs leave a ``next_action``
with a due time on the client's state. A sweep picks up every action whose
due time has passed, posts the stage message, advances the stage and
schedules the follow-up for the client's service type.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

from ..app_db import db_conn, parse_iso
from ..messaging.models import MessageType, SenderType
from ..messaging.render import render_template
from ..messaging.storage import insert_message
from .models import (
    AutomationResult,
    AutomationSummary,
    ClientWorkflowState,
    ServiceType,
    WorkflowStage,
)
from .storage import add_history, list_scheduled_actions, update_state

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduledStep:
    message: str
    stage: WorkflowStage
    next_action: Optional[str] = None
    delay: Optional[timedelta] = None


STEPS: Dict[Tuple[ServiceType, str], ScheduledStep] = {
    (ServiceType.consultation, "send_health_assessment"): ScheduledStep(
        "Hi {name}! It's time to complete your health assessment. "
        "This will help us create your personalized wellness plan.",
        WorkflowStage.health_assessment_sent,
        "follow_up_assessment",
        timedelta(hours=24),
    ),
    (ServiceType.hundred_days, "send_health_assessment"): ScheduledStep(
        "Hi {name}! Welcome to the 100-Day Program! Let's start with your health assessment.",
        WorkflowStage.health_assessment_sent,
        "send_stress_card",
        timedelta(hours=2.5),
    ),
    (ServiceType.hundred_days, "send_stress_card"): ScheduledStep(
        "Hi {name}! Time to complete your stress assessment. "
        "This helps us understand your stress patterns better.",
        WorkflowStage.stress_card_sent,
        "send_sleep_card",
        timedelta(hours=3.5),
    ),
    (ServiceType.hundred_days, "send_sleep_card"): ScheduledStep(
        "Hi {name}! Let's assess your sleep patterns. Good sleep is crucial for your wellness journey!",
        WorkflowStage.sleep_card_sent,
        "prepare_action_plan",
        timedelta(days=2),
    ),
}


def is_action_due(state: ClientWorkflowState, now: datetime) -> bool:
    due_at = parse_iso(state.next_action_due_at)
    return due_at is not None and due_at <= now


def _run_step(state: ClientWorkflowState, name: str, now: datetime) -> AutomationResult:
    action = state.next_action or ""
    step = STEPS.get((state.service_type, action))
    stage = step.stage if step else state.workflow_stage
    next_action = step.next_action if step else None
    due_at = (now + step.delay).isoformat() if step and step.delay else None
    message_id = None

    with db_conn() as conn:
        if step:
            message = insert_message(
                client_id=state.client_id,
                sender_type=SenderType.system,
                message_type=MessageType.automated,
                content=render_template(step.message, {"name": name}),
                conn=conn,
            )
            message_id = message.id
        else:
            # no message for this action; clear it so it is not picked up again
            logger.info("No scheduled step for %s/%s, clearing action", state.service_type.value, action)
        update_state(
            state.client_id,
            workflow_stage=stage,
            stage_completed_at=now.isoformat(),
            next_action=next_action,
            next_action_due_at=due_at,
            conn=conn,
        )
        add_history(
            client_id=state.client_id,
            workflow_stage=stage,
            action=action,
            triggered_by="system",
            conn=conn,
        )

    return AutomationResult(
        client_id=state.client_id,
        status="success",
        action=action,
        workflow_stage=stage,
        message_id=message_id,
    )


def process_workflow_automation(*, now: Optional[datetime] = None) -> AutomationSummary:
    now = now or datetime.now(timezone.utc)

    results: List[AutomationResult] = []
    for state, name in list_scheduled_actions():
        try:
            if not is_action_due(state, now):
                continue
            logger.info("Processing workflow for client %s, action: %s", state.client_id, state.next_action)
            results.append(_run_step(state, name, now))
        except Exception as exc:
            logger.exception("Error processing workflow for client %s", state.client_id)
            results.append(
                AutomationResult(
                    client_id=state.client_id,
                    status="error",
                    action=state.next_action,
                    error=str(exc) or "Unknown error",
                )
            )

    logger.info("Workflow automation complete: %d processed", len(results))
    return AutomationSummary(processed=len(results), results=results)
