# -*- coding: utf-8 -*-
"""App database — SQLite helpers.

Multi-step flows pass an open connection down to the storage helpers so that
their writes commit (or roll back) together.
"""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Optional

from .config import settings
from .errors import PersistenceError


def connect(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS clients (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        email TEXT,
        age INTEGER,
        gender TEXT,
        goals TEXT,
        height_cm REAL,
        last_weight_kg REAL,
        target_kcal REAL,
        status TEXT NOT NULL DEFAULT 'active',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS daily_logs (
        id TEXT PRIMARY KEY,
        client_id TEXT NOT NULL,
        log_date TEXT NOT NULL,
        weight_kg REAL,
        activity_minutes REAL,
        water_intake_l REAL,
        created_at TEXT NOT NULL,
        FOREIGN KEY(client_id) REFERENCES clients(id) ON DELETE CASCADE
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_daily_logs_client_date ON daily_logs(client_id, log_date DESC);",
    """
    CREATE TABLE IF NOT EXISTS assessment_requests (
        id TEXT PRIMARY KEY,
        client_id TEXT NOT NULL,
        assessment_type TEXT NOT NULL,
        status TEXT NOT NULL,
        requested_by TEXT,
        notes TEXT,
        requested_at TEXT NOT NULL,
        completed_at TEXT,
        FOREIGN KEY(client_id) REFERENCES clients(id) ON DELETE CASCADE
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_assessment_requests_client ON assessment_requests(client_id, requested_at DESC);",
    """
    CREATE TABLE IF NOT EXISTS assessments (
        id TEXT PRIMARY KEY,
        client_id TEXT NOT NULL,
        assessment_type TEXT NOT NULL,
        form_responses TEXT NOT NULL,
        assessment_data TEXT NOT NULL,
        ai_generated INTEGER NOT NULL,
        file_name TEXT,
        notes TEXT,
        created_at TEXT NOT NULL,
        FOREIGN KEY(client_id) REFERENCES clients(id) ON DELETE CASCADE
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_assessments_client_type ON assessments(client_id, assessment_type, created_at DESC);",
    """
    CREATE TABLE IF NOT EXISTS pending_review_cards (
        id TEXT PRIMARY KEY,
        client_id TEXT NOT NULL,
        card_type TEXT NOT NULL,
        generated_content TEXT NOT NULL,
        status TEXT NOT NULL,
        workflow_stage TEXT NOT NULL,
        ai_generated_at TEXT NOT NULL,
        created_at TEXT NOT NULL,
        edited_at TEXT,
        sent_at TEXT,
        reviewed_by TEXT,
        FOREIGN KEY(client_id) REFERENCES clients(id) ON DELETE CASCADE
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_cards_status_generated ON pending_review_cards(status, ai_generated_at DESC);",
    """
    CREATE TABLE IF NOT EXISTS messages (
        id TEXT PRIMARY KEY,
        client_id TEXT NOT NULL,
        sender_type TEXT NOT NULL,
        message_type TEXT NOT NULL,
        content TEXT NOT NULL,
        attachment_url TEXT,
        metadata TEXT NOT NULL,
        is_read INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        FOREIGN KEY(client_id) REFERENCES clients(id) ON DELETE CASCADE
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_messages_client_type_created ON messages(client_id, message_type, created_at DESC);",
    """
    CREATE TABLE IF NOT EXISTS client_workflow_state (
        client_id TEXT PRIMARY KEY,
        service_type TEXT NOT NULL,
        workflow_stage TEXT NOT NULL,
        retargeting_enabled INTEGER NOT NULL DEFAULT 0,
        retargeting_frequency TEXT,
        retargeting_last_sent TEXT,
        next_action TEXT,
        next_action_due_at TEXT,
        stage_completed_at TEXT,
        updated_at TEXT NOT NULL,
        FOREIGN KEY(client_id) REFERENCES clients(id) ON DELETE CASCADE
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS workflow_history (
        id TEXT PRIMARY KEY,
        client_id TEXT NOT NULL,
        workflow_stage TEXT NOT NULL,
        action TEXT NOT NULL,
        triggered_by TEXT NOT NULL,
        triggered_at TEXT NOT NULL,
        FOREIGN KEY(client_id) REFERENCES clients(id) ON DELETE CASCADE
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS message_templates (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL UNIQUE,
        template TEXT NOT NULL,
        trigger_event TEXT,
        is_active INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS push_subscriptions (
        id TEXT PRIMARY KEY,
        client_id TEXT NOT NULL,
        endpoint TEXT NOT NULL,
        p256dh TEXT,
        auth TEXT,
        created_at TEXT NOT NULL,
        UNIQUE (client_id, endpoint),
        FOREIGN KEY(client_id) REFERENCES clients(id) ON DELETE CASCADE
    );
    """,
)


def init_app_db(db_path: Path) -> None:
    conn = connect(db_path)
    try:
        cur = conn.cursor()
        for statement in _SCHEMA:
            cur.execute(statement)
        conn.commit()
    finally:
        conn.close()


@contextmanager
def db_conn(db_path: Path | None = None) -> Iterator[sqlite3.Connection]:
    conn = connect(db_path or settings.app_db_path)
    try:
        yield conn
        conn.commit()
    except sqlite3.Error as exc:
        conn.rollback()
        raise PersistenceError(f"Database error: {exc}") from exc
    except BaseException:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def use_conn(conn: Optional[sqlite3.Connection] = None) -> Iterator[sqlite3.Connection]:
    """Reuse the caller's connection (and its transaction), or open a new one."""
    if conn is not None:
        yield conn
        return
    with db_conn() as own:
        yield own


def iso_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def dumps(value: Any) -> str:
    return json.dumps(value if value is not None else {}, ensure_ascii=False)


def loads(raw: Optional[str], default: Any = None) -> Any:
    if not raw:
        return {} if default is None else default
    try:
        return json.loads(raw)
    except ValueError:
        return {} if default is None else default
