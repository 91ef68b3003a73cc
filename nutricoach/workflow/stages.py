# -*- coding: utf-8 -*-
"""Manual workflow stage transitions."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Tuple

from ..app_db import db_conn
from ..errors import WorkflowStateNotFound
from .models import ServiceType, TriggerStageResult, WorkflowStage
from .storage import add_history, get_state, update_state

logger = logging.getLogger(__name__)

# stage -> (next action, delay); service-specific rules live in next_action_for
_STAGE_ACTIONS: Dict[WorkflowStage, Tuple[str, timedelta]] = {
    WorkflowStage.consultation_scheduled: ("send_health_assessment", timedelta(minutes=30)),
    WorkflowStage.health_assessment_sent: ("send_stress_card", timedelta(hours=2.5)),
    WorkflowStage.stress_card_sent: ("send_sleep_card", timedelta(hours=3.5)),
    WorkflowStage.sleep_card_sent: ("prepare_action_plan", timedelta(days=2)),
}


def next_action_for(
    stage: WorkflowStage,
    service_type: ServiceType,
    now: datetime,
) -> Tuple[Optional[str], Optional[str]]:
    action = _STAGE_ACTIONS.get(stage)
    if action is None:
        return None, None
    if stage == WorkflowStage.health_assessment_sent and service_type != ServiceType.hundred_days:
        return None, None
    name, delay = action
    return name, (now + delay).isoformat()


def trigger_workflow_stage(
    *,
    client_id: str,
    stage: WorkflowStage,
    triggered_by: Optional[str] = None,
    now: Optional[datetime] = None,
) -> TriggerStageResult:
    now = now or datetime.now(timezone.utc)
    logger.info("Manually triggering workflow stage for client %s: %s", client_id, stage.value)

    with db_conn() as conn:
        state = get_state(client_id, conn=conn)
        if state is None:
            raise WorkflowStateNotFound(client_id)
        next_action, due_at = next_action_for(stage, state.service_type, now)
        update_state(
            client_id,
            workflow_stage=stage,
            stage_completed_at=now.isoformat(),
            next_action=next_action,
            next_action_due_at=due_at,
            conn=conn,
        )
        add_history(
            client_id=client_id,
            workflow_stage=stage,
            action=f"Manual trigger: {stage.value}",
            triggered_by=triggered_by or "admin",
            conn=conn,
        )

    return TriggerStageResult(workflow_stage=stage, next_action=next_action, next_action_due_at=due_at)
