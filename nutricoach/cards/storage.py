# -*- coding: utf-8 -*-
"""Pending-review card storage helpers (SQLite)."""

from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from ..app_db import db_conn, dumps, iso_now, loads, use_conn
from ..assessments.models import Assessment, AssessmentKind
from ..assessments.storage import insert_assessment
from ..errors import CardNotFound, InvalidCardTransition
from ..workflow.models import WorkflowStage
from .models import ACTIVE_STATUSES, CardStatus, CardType, PendingReviewCard

_SELECT_CARD = """
    SELECT p.*, c.name AS client_name
    FROM pending_review_cards p
    LEFT JOIN clients c ON c.id = p.client_id
"""


def _row_to_card(row: sqlite3.Row) -> PendingReviewCard:
    r = dict(row)
    return PendingReviewCard(
        id=r["id"],
        client_id=r["client_id"],
        client_name=r.get("client_name"),
        card_type=r["card_type"],
        generated_content=loads(r.get("generated_content")),
        status=r["status"],
        workflow_stage=r["workflow_stage"],
        ai_generated_at=r["ai_generated_at"],
        created_at=r["created_at"],
        edited_at=r.get("edited_at"),
        sent_at=r.get("sent_at"),
        reviewed_by=r.get("reviewed_by"),
    )


def insert_card(
    *,
    client_id: str,
    card_type: CardType,
    generated_content: Dict[str, Any],
    workflow_stage: WorkflowStage,
    conn: Optional[sqlite3.Connection] = None,
) -> str:
    card_id = str(uuid4())
    now = iso_now()
    with use_conn(conn) as c:
        c.execute(
            """
            INSERT INTO pending_review_cards (
                id, client_id, card_type, generated_content, status,
                workflow_stage, ai_generated_at, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                card_id,
                client_id,
                card_type.value,
                dumps(generated_content),
                CardStatus.pending.value,
                workflow_stage.value,
                now,
                now,
            ),
        )
    return card_id


def persist_assessment_card(
    *,
    client_id: str,
    kind: AssessmentKind,
    form_responses: Dict[str, Any],
    assessment_data: Dict[str, Any],
    ai_generated: bool,
    card_type: CardType,
    card_content: Dict[str, Any],
    workflow_stage: WorkflowStage,
    file_name: Optional[str] = None,
    notes: Optional[str] = None,
) -> Tuple[Assessment, str]:
    """Write the Assessment and its review card together, or neither."""
    with db_conn() as conn:
        assessment = insert_assessment(
            client_id=client_id,
            kind=kind,
            form_responses=form_responses,
            assessment_data=assessment_data,
            ai_generated=ai_generated,
            file_name=file_name,
            notes=notes,
            conn=conn,
        )
        card_id = insert_card(
            client_id=client_id,
            card_type=card_type,
            generated_content=card_content,
            workflow_stage=workflow_stage,
            conn=conn,
        )
    return assessment, card_id


def get_card(card_id: str, *, conn: Optional[sqlite3.Connection] = None) -> PendingReviewCard:
    with use_conn(conn) as c:
        row = c.execute(_SELECT_CARD + " WHERE p.id = ?", (card_id,)).fetchone()
    if not row:
        raise CardNotFound(card_id)
    return _row_to_card(row)


def list_active_cards(
    *,
    client_id: Optional[str] = None,
    card_type: Optional[CardType] = None,
) -> List[PendingReviewCard]:
    """Cards awaiting review, newest generation first."""
    sql = _SELECT_CARD + " WHERE p.status IN ({})".format(", ".join("?" for _ in ACTIVE_STATUSES))
    params: List[Any] = [s.value for s in ACTIVE_STATUSES]
    if client_id:
        sql += " AND p.client_id = ?"
        params.append(client_id)
    if card_type is not None:
        sql += " AND p.card_type = ?"
        params.append(card_type.value)
    sql += " ORDER BY p.ai_generated_at DESC, p.rowid DESC"
    with use_conn() as c:
        rows = c.execute(sql, params).fetchall()
    return [_row_to_card(r) for r in rows]


def edit_card(card_id: str, generated_content: Dict[str, Any]) -> PendingReviewCard:
    with db_conn() as conn:
        card = get_card(card_id, conn=conn)
        if card.status == CardStatus.sent:
            raise InvalidCardTransition(f"Card {card_id} was already sent and can no longer be edited")
        conn.execute(
            """
            UPDATE pending_review_cards
            SET generated_content = ?, status = ?, edited_at = ?
            WHERE id = ? AND status != ?
            """,
            (dumps(generated_content), CardStatus.edited.value, iso_now(), card_id, CardStatus.sent.value),
        )
        return get_card(card_id, conn=conn)


def mark_sent(
    card_id: str,
    *,
    reviewed_by: Optional[str] = None,
    conn: Optional[sqlite3.Connection] = None,
) -> bool:
    """Move the card to ``sent``; False when it was already sent."""
    with use_conn(conn) as c:
        updated = c.execute(
            """
            UPDATE pending_review_cards
            SET status = ?, sent_at = ?, reviewed_by = ?
            WHERE id = ? AND status != ?
            """,
            (CardStatus.sent.value, iso_now(), reviewed_by, card_id, CardStatus.sent.value),
        ).rowcount
    return updated > 0
