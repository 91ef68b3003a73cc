# -*- coding: utf-8 -*-
"""Workflow endpoints: state, history, stage triggers, scheduled actions and retargeting."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter

from ..envelope import FunctionResult, FunctionRoute, ok
from .models import (
    ClientWorkflowState,
    TriggerStageRequest,
    WorkflowHistoryEntry,
    WorkflowStateUpsertRequest,
)
from .automation import process_workflow_automation
from .retargeting import run_retargeting_sweep
from .stages import trigger_workflow_stage
from .storage import list_history, require_state, upsert_state

router = APIRouter(prefix="/api/workflow", tags=["Workflow"])
functions = APIRouter(prefix="/api/functions", tags=["Functions"], route_class=FunctionRoute)


@router.get("/{client_id}", response_model=ClientWorkflowState, summary="Get a client's workflow state")
def get_workflow_state(client_id: str):
    return require_state(client_id)


@router.put("/{client_id}", response_model=ClientWorkflowState, summary="Create or replace workflow state")
def put_workflow_state(client_id: str, request: WorkflowStateUpsertRequest):
    return upsert_state(client_id, request)


@router.get("/{client_id}/history", response_model=List[WorkflowHistoryEntry], summary="Workflow history")
def get_workflow_history(client_id: str):
    return list_history(client_id)


@functions.post("/trigger-workflow-stage", response_model=FunctionResult)
def trigger_workflow_stage_api(request: TriggerStageRequest):
    result = trigger_workflow_stage(
        client_id=request.client_id,
        stage=request.stage,
        triggered_by=request.triggered_by,
    )
    return ok(result.model_dump(mode="json"))


@functions.post("/send-retargeting-messages", response_model=FunctionResult)
def send_retargeting_messages_api():
    summary = run_retargeting_sweep()
    return ok(summary.model_dump(mode="json"))


@functions.post("/process-workflow-automation", response_model=FunctionResult)
def process_workflow_automation_api():
    summary = process_workflow_automation()
    return ok(summary.model_dump(mode="json"))
