# -*- coding: utf-8 -*-
"""Client workflow storage helpers (SQLite)."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from ..app_db import iso_now, use_conn
from ..clients.storage import require_client
from ..errors import WorkflowStateNotFound
from .models import (
    ClientWorkflowState,
    ServiceType,
    WorkflowHistoryEntry,
    WorkflowStage,
    WorkflowStateUpsertRequest,
)

RETARGETING_STAGES = (WorkflowStage.consultation_complete, WorkflowStage.soft_retargeting_active)


def _iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def _row_to_state(row: sqlite3.Row) -> ClientWorkflowState:
    r = dict(row)
    r["retargeting_enabled"] = bool(r.get("retargeting_enabled"))
    return ClientWorkflowState.model_validate(r)


def _with_names(rows: List[sqlite3.Row]) -> List[Tuple[ClientWorkflowState, str]]:
    out: List[Tuple[ClientWorkflowState, str]] = []
    for row in rows:
        r = dict(row)
        name = r.pop("client_name")
        r["retargeting_enabled"] = bool(r.get("retargeting_enabled"))
        out.append((ClientWorkflowState.model_validate(r), name))
    return out


def upsert_state(client_id: str, request: WorkflowStateUpsertRequest) -> ClientWorkflowState:
    require_client(client_id)
    frequency = request.retargeting_frequency.value if request.retargeting_frequency else None
    with use_conn() as c:
        c.execute(
            """
            INSERT INTO client_workflow_state (
                client_id, service_type, workflow_stage, retargeting_enabled,
                retargeting_frequency, retargeting_last_sent, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(client_id) DO UPDATE SET
                service_type = excluded.service_type,
                workflow_stage = excluded.workflow_stage,
                retargeting_enabled = excluded.retargeting_enabled,
                retargeting_frequency = excluded.retargeting_frequency,
                retargeting_last_sent = excluded.retargeting_last_sent,
                updated_at = excluded.updated_at
            """,
            (
                client_id,
                request.service_type.value,
                request.workflow_stage.value,
                int(request.retargeting_enabled),
                frequency,
                _iso(request.retargeting_last_sent),
                iso_now(),
            ),
        )
        row = c.execute("SELECT * FROM client_workflow_state WHERE client_id = ?", (client_id,)).fetchone()
    return _row_to_state(row)


def get_state(client_id: str, *, conn: Optional[sqlite3.Connection] = None) -> Optional[ClientWorkflowState]:
    with use_conn(conn) as c:
        row = c.execute("SELECT * FROM client_workflow_state WHERE client_id = ?", (client_id,)).fetchone()
    return _row_to_state(row) if row else None


def require_state(client_id: str) -> ClientWorkflowState:
    state = get_state(client_id)
    if state is None:
        raise WorkflowStateNotFound(client_id)
    return state


def update_state(
    client_id: str,
    *,
    conn: Optional[sqlite3.Connection] = None,
    **fields: Any,
) -> bool:
    """Update the given columns; returns False when the client has no state row."""
    if not fields:
        return False
    values: Dict[str, Any] = {}
    for key, value in fields.items():
        values[key] = value.value if isinstance(value, WorkflowStage) else value
    values["updated_at"] = iso_now()
    assignments = ", ".join(f"{key} = ?" for key in values)
    with use_conn(conn) as c:
        updated = c.execute(
            f"UPDATE client_workflow_state SET {assignments} WHERE client_id = ?",
            (*values.values(), client_id),
        ).rowcount
    return updated > 0


def list_retargeting_candidates() -> List[Tuple[ClientWorkflowState, str]]:
    """Eligible consultation leads, each paired with the client's display name."""
    placeholders = ", ".join("?" for _ in RETARGETING_STAGES)
    with use_conn() as c:
        rows = c.execute(
            f"""
            SELECT s.*, c.name AS client_name
            FROM client_workflow_state s
            JOIN clients c ON c.id = s.client_id
            WHERE s.service_type = ?
              AND s.workflow_stage IN ({placeholders})
              AND s.retargeting_enabled = 1
            ORDER BY s.client_id
            """,
            (ServiceType.consultation.value, *(stage.value for stage in RETARGETING_STAGES)),
        ).fetchall()
    return _with_names(rows)


def add_history(
    *,
    client_id: str,
    workflow_stage: WorkflowStage,
    action: str,
    triggered_by: str,
    conn: Optional[sqlite3.Connection] = None,
) -> WorkflowHistoryEntry:
    entry = WorkflowHistoryEntry(
        id=str(uuid4()),
        client_id=client_id,
        workflow_stage=workflow_stage,
        action=action,
        triggered_by=triggered_by,
        triggered_at=iso_now(),
    )
    with use_conn(conn) as c:
        c.execute(
            """
            INSERT INTO workflow_history (id, client_id, workflow_stage, action, triggered_by, triggered_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                entry.id,
                entry.client_id,
                entry.workflow_stage.value,
                entry.action,
                entry.triggered_by,
                entry.triggered_at,
            ),
        )
    return entry


def list_history(client_id: str) -> List[WorkflowHistoryEntry]:
    with use_conn() as c:
        rows = c.execute(
            "SELECT * FROM workflow_history WHERE client_id = ? ORDER BY triggered_at DESC, rowid DESC",
            (client_id,),
        ).fetchall()
    return [WorkflowHistoryEntry.model_validate(dict(r)) for r in rows]


def list_scheduled_actions() -> List[Tuple[ClientWorkflowState, str]]:
    """States with a pending next action, each paired with the client's display name."""
    with use_conn() as c:
        rows = c.execute(
            """
            SELECT s.*, c.name AS client_name
            FROM client_workflow_state s
            JOIN clients c ON c.id = s.client_id
            WHERE s.next_action IS NOT NULL
              AND s.next_action_due_at IS NOT NULL
            ORDER BY s.next_action_due_at, s.client_id
            """
        ).fetchall()
    return _with_names(rows)
