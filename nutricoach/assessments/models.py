# -*- coding: utf-8 -*-
"""Assessments — Pydantic models."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..errors import UnknownAssessmentType


class AssessmentKind(str, Enum):
    health = "health"
    stress = "stress"
    sleep = "sleep"


class AssessmentType(str, Enum):
    """Form types a client can be asked to fill in."""

    health_assessment = "health_assessment"
    stress_assessment = "stress_assessment"
    sleep_assessment = "sleep_assessment"

    @classmethod
    def parse(cls, value: Any) -> "AssessmentType":
        try:
            return cls(value)
        except ValueError:
            raise UnknownAssessmentType(value) from None

    @property
    def kind(self) -> AssessmentKind:
        return AssessmentKind(self.value.split("_", 1)[0])

    @property
    def title(self) -> str:
        return _TITLES[self][0]

    @property
    def description(self) -> str:
        return _TITLES[self][1]


_TITLES = {
    AssessmentType.health_assessment: (
        "Health Assessment",
        "Please complete your health assessment form to help us create a personalized plan for you.",
    ),
    AssessmentType.stress_assessment: (
        "Stress Assessment",
        "Please complete your stress assessment to help us understand your current stress levels.",
    ),
    AssessmentType.sleep_assessment: (
        "Sleep Assessment",
        "Please complete your sleep assessment to help us improve your sleep quality.",
    ),
}


class RequestStatus(str, Enum):
    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"


class AssessmentRequest(BaseModel):
    id: str
    client_id: str
    assessment_type: AssessmentKind
    status: RequestStatus
    requested_by: Optional[str] = None
    notes: Optional[str] = None
    requested_at: str
    completed_at: Optional[str] = None


class Assessment(BaseModel):
    id: str
    client_id: str
    assessment_type: AssessmentKind
    form_responses: Dict[str, Any] = Field(default_factory=dict)
    assessment_data: Dict[str, Any] = Field(default_factory=dict)
    ai_generated: bool = True
    file_name: Optional[str] = None
    notes: Optional[str] = None
    created_at: str


class AssessmentListResponse(BaseModel):
    client_id: str
    count: int
    assessments: List[Assessment] = Field(default_factory=list)


class RequestAssessmentRequest(BaseModel):
    client_id: str = Field(..., min_length=1)
    # validated by AssessmentType.parse so the envelope carries the domain message
    assessment_type: str = Field(..., min_length=1)
    notes: Optional[str] = Field(None, max_length=2000)
    requested_by: Optional[str] = None


class SubmitAssessmentRequest(BaseModel):
    request_id: str = Field(..., min_length=1)
    assessment_type: str = Field(..., min_length=1)
    client_id: str = Field(..., min_length=1)
    client_name: str = Field(..., min_length=1)
    form_data: Dict[str, Any] = Field(default_factory=dict)


class GenerateAssessmentRequest(BaseModel):
    client_id: str = Field(..., min_length=1)
    client_name: str = Field(..., min_length=1)
    form_data: Dict[str, Any] = Field(default_factory=dict)
