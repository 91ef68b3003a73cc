# -*- coding: utf-8 -*-
"""Assessment requests and submitted assessments (SQLite)."""

from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional
from uuid import uuid4

from ..app_db import dumps, iso_now, loads, use_conn
from ..errors import RequestNotFound
from .models import Assessment, AssessmentKind, AssessmentRequest, RequestStatus


def _row_to_assessment(row: sqlite3.Row) -> Assessment:
    r = dict(row)
    return Assessment(
        id=r["id"],
        client_id=r["client_id"],
        assessment_type=r["assessment_type"],
        form_responses=loads(r.get("form_responses")),
        assessment_data=loads(r.get("assessment_data")),
        ai_generated=bool(r.get("ai_generated")),
        file_name=r.get("file_name"),
        notes=r.get("notes"),
        created_at=r["created_at"],
    )


# ---- requests ----


def create_request(
    *,
    client_id: str,
    kind: AssessmentKind,
    requested_by: Optional[str] = None,
    notes: Optional[str] = None,
    conn: Optional[sqlite3.Connection] = None,
) -> AssessmentRequest:
    request = AssessmentRequest(
        id=str(uuid4()),
        client_id=client_id,
        assessment_type=kind,
        status=RequestStatus.pending,
        requested_by=requested_by,
        notes=notes,
        requested_at=iso_now(),
    )
    with use_conn(conn) as c:
        c.execute(
            """
            INSERT INTO assessment_requests (
                id, client_id, assessment_type, status, requested_by, notes, requested_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                request.id,
                request.client_id,
                request.assessment_type.value,
                request.status.value,
                request.requested_by,
                request.notes,
                request.requested_at,
            ),
        )
    return request


def get_request(request_id: str) -> Optional[AssessmentRequest]:
    with use_conn() as c:
        row = c.execute("SELECT * FROM assessment_requests WHERE id = ?", (request_id,)).fetchone()
    return AssessmentRequest.model_validate(dict(row)) if row else None


def mark_request_completed(request_id: str) -> str:
    """Set the request ``completed``; returns ``completed_at``."""
    completed_at = iso_now()
    with use_conn() as c:
        updated = c.execute(
            "UPDATE assessment_requests SET status = ?, completed_at = ? WHERE id = ?",
            (RequestStatus.completed.value, completed_at, request_id),
        ).rowcount
    if not updated:
        raise RequestNotFound(request_id)
    return completed_at


def list_requests(client_id: str, *, status: Optional[RequestStatus] = None) -> List[AssessmentRequest]:
    sql = "SELECT * FROM assessment_requests WHERE client_id = ?"
    params: List[Any] = [client_id]
    if status is not None:
        sql += " AND status = ?"
        params.append(status.value)
    sql += " ORDER BY requested_at DESC, rowid DESC"
    with use_conn() as c:
        rows = c.execute(sql, params).fetchall()
    return [AssessmentRequest.model_validate(dict(r)) for r in rows]


# ---- assessments ----


def insert_assessment(
    *,
    client_id: str,
    kind: AssessmentKind,
    form_responses: Dict[str, Any],
    assessment_data: Dict[str, Any],
    ai_generated: bool,
    file_name: Optional[str] = None,
    notes: Optional[str] = None,
    conn: Optional[sqlite3.Connection] = None,
) -> Assessment:
    assessment = Assessment(
        id=str(uuid4()),
        client_id=client_id,
        assessment_type=kind,
        form_responses=form_responses,
        assessment_data=assessment_data,
        ai_generated=ai_generated,
        file_name=file_name,
        notes=notes,
        created_at=iso_now(),
    )
    with use_conn(conn) as c:
        c.execute(
            """
            INSERT INTO assessments (
                id, client_id, assessment_type, form_responses, assessment_data,
                ai_generated, file_name, notes, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                assessment.id,
                assessment.client_id,
                assessment.assessment_type.value,
                dumps(assessment.form_responses),
                dumps(assessment.assessment_data),
                int(assessment.ai_generated),
                assessment.file_name,
                assessment.notes,
                assessment.created_at,
            ),
        )
    return assessment


def latest_assessment(client_id: str, kind: AssessmentKind) -> Optional[Assessment]:
    with use_conn() as c:
        row = c.execute(
            """
            SELECT * FROM assessments
            WHERE client_id = ? AND assessment_type = ?
            ORDER BY created_at DESC, rowid DESC LIMIT 1
            """,
            (client_id, kind.value),
        ).fetchone()
    return _row_to_assessment(row) if row else None


def list_assessments(client_id: str, *, kind: Optional[AssessmentKind] = None, limit: int = 50) -> List[Assessment]:
    sql = "SELECT * FROM assessments WHERE client_id = ?"
    params: List[Any] = [client_id]
    if kind is not None:
        sql += " AND assessment_type = ?"
        params.append(kind.value)
    sql += " ORDER BY created_at DESC, rowid DESC LIMIT ?"
    params.append(limit)
    with use_conn() as c:
        rows = c.execute(sql, params).fetchall()
    return [_row_to_assessment(r) for r in rows]
