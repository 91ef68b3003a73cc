# -*- coding: utf-8 -*-
"""Client workflow — Pydantic models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class ServiceType(str, Enum):
    consultation = "consultation"
    hundred_days = "hundred_days"


class WorkflowStage(str, Enum):
    consultation_scheduled = "consultation_scheduled"
    health_assessment_generated = "health_assessment_generated"
    health_assessment_sent = "health_assessment_sent"
    stress_card_sent = "stress_card_sent"
    sleep_card_sent = "sleep_card_sent"
    action_plan_generated = "action_plan_generated"
    action_plan_sent = "action_plan_sent"
    diet_plan_generated = "diet_plan_generated"
    diet_plan_sent = "diet_plan_sent"
    grocery_list_sent = "grocery_list_sent"
    consultation_complete = "consultation_complete"
    soft_retargeting_active = "soft_retargeting_active"
    program_active = "program_active"


class RetargetingFrequency(str, Enum):
    weekly = "weekly"
    bi_weekly = "bi-weekly"
    monthly = "monthly"

    @property
    def gap_days(self) -> int:
        return _GAP_DAYS[self]

    @classmethod
    def parse(cls, value: Optional[str]) -> "RetargetingFrequency":
        """Lenient parse: unset or unrecognized values mean monthly."""
        try:
            return cls(value)
        except ValueError:
            return cls.monthly


_GAP_DAYS = {
    RetargetingFrequency.weekly: 7,
    RetargetingFrequency.bi_weekly: 14,
    RetargetingFrequency.monthly: 30,
}


class ClientWorkflowState(BaseModel):
    client_id: str
    service_type: ServiceType
    workflow_stage: WorkflowStage
    retargeting_enabled: bool = False
    retargeting_frequency: Optional[str] = None
    retargeting_last_sent: Optional[str] = None
    next_action: Optional[str] = None
    next_action_due_at: Optional[str] = None
    stage_completed_at: Optional[str] = None
    updated_at: str


class WorkflowStateUpsertRequest(BaseModel):
    service_type: ServiceType
    workflow_stage: WorkflowStage
    retargeting_enabled: bool = False
    retargeting_frequency: Optional[RetargetingFrequency] = None
    retargeting_last_sent: Optional[datetime] = Field(None, description="ISO8601 timestamp")


class WorkflowHistoryEntry(BaseModel):
    id: str
    client_id: str
    workflow_stage: WorkflowStage
    action: str
    triggered_by: str
    triggered_at: str


class TriggerStageRequest(BaseModel):
    client_id: str = Field(..., min_length=1)
    stage: WorkflowStage
    triggered_by: Optional[str] = None


class TriggerStageResult(BaseModel):
    workflow_stage: WorkflowStage
    next_action: Optional[str] = None
    next_action_due_at: Optional[str] = None


class RetargetingResult(BaseModel):
    client_id: str
    status: str = Field(..., description="success | skipped | error")
    days_since_last_sent: Optional[int] = None
    message_id: Optional[str] = None
    error: Optional[str] = None


class RetargetingSummary(BaseModel):
    eligible: int
    sent: int
    results: List[RetargetingResult] = Field(default_factory=list)


class AutomationResult(BaseModel):
    client_id: str
    status: str = Field(..., description="success | error")
    action: Optional[str] = None
    workflow_stage: Optional[WorkflowStage] = None
    message_id: Optional[str] = None
    error: Optional[str] = None


class AutomationSummary(BaseModel):
    processed: int
    results: List[AutomationResult] = Field(default_factory=list)
