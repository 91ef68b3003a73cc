# -*- coding: utf-8 -*-
"""Assessment request and intake endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..ai import get_ai_factory
from ..ai.client import AIClientFactory
from ..envelope import FunctionResult, FunctionRoute, ok
from .intake import SUCCESS_MESSAGE, submit_client_assessment
from .models import (
    AssessmentKind,
    AssessmentListResponse,
    AssessmentRequest,
    RequestAssessmentRequest,
    RequestStatus,
    SubmitAssessmentRequest,
)
from .service import request_assessment
from .storage import list_assessments, list_requests

router = APIRouter(prefix="/api/clients", tags=["Assessments"])
functions = APIRouter(prefix="/api/functions", tags=["Functions"], route_class=FunctionRoute)


@functions.post("/request-assessment", response_model=FunctionResult)
def request_assessment_api(request: RequestAssessmentRequest):
    created = request_assessment(
        client_id=request.client_id,
        assessment_type=request.assessment_type,
        notes=request.notes,
        requested_by=request.requested_by,
    )
    return ok({"request": created.model_dump(mode="json")}, message="Assessment request sent to client successfully")


@functions.post("/submit-client-assessment", response_model=FunctionResult)
def submit_client_assessment_api(
    request: SubmitAssessmentRequest,
    ai_factory: AIClientFactory = Depends(get_ai_factory),
):
    card = submit_client_assessment(
        request_id=request.request_id,
        assessment_type=request.assessment_type,
        client_id=request.client_id,
        client_name=request.client_name,
        form_data=request.form_data,
        ai_factory=ai_factory,
    )
    return ok(card.model_dump(mode="json"), message=SUCCESS_MESSAGE)


@router.get(
    "/{client_id}/assessment-requests",
    response_model=List[AssessmentRequest],
    summary="List assessment requests",
)
def get_assessment_requests(client_id: str, status: Optional[RequestStatus] = Query(default=None)):
    return list_requests(client_id, status=status)


@router.get("/{client_id}/assessments", response_model=AssessmentListResponse, summary="List submitted assessments")
def get_assessments(
    client_id: str,
    assessment_type: Optional[AssessmentKind] = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200),
):
    items = list_assessments(client_id, kind=assessment_type, limit=limit)
    return AssessmentListResponse(client_id=client_id, count=len(items), assessments=items)
