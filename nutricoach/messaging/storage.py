# -*- coding: utf-8 -*-
"""Messaging storage helpers (SQLite)."""

from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional
from uuid import uuid4

from ..app_db import dumps, iso_now, loads, use_conn
from ..errors import TemplateNotFound
from .models import Message, MessageTemplate, MessageType, SenderType


def _row_to_message(row: sqlite3.Row) -> Message:
    r = dict(row)
    return Message(
        id=r["id"],
        client_id=r["client_id"],
        sender_type=r["sender_type"],
        message_type=r["message_type"],
        content=r["content"],
        attachment_url=r.get("attachment_url"),
        metadata=loads(r.get("metadata")),
        is_read=bool(r.get("is_read")),
        created_at=r["created_at"],
    )


def insert_message(
    *,
    client_id: str,
    sender_type: SenderType,
    message_type: MessageType,
    content: str,
    attachment_url: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
    conn: Optional[sqlite3.Connection] = None,
) -> Message:
    message = Message(
        id=str(uuid4()),
        client_id=client_id,
        sender_type=sender_type,
        message_type=message_type,
        content=content,
        attachment_url=attachment_url,
        metadata=metadata or {},
        is_read=False,
        created_at=iso_now(),
    )
    with use_conn(conn) as c:
        c.execute(
            """
            INSERT INTO messages (
                id, client_id, sender_type, message_type, content,
                attachment_url, metadata, is_read, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, 0, ?)
            """,
            (
                message.id,
                message.client_id,
                message.sender_type.value,
                message.message_type.value,
                message.content,
                message.attachment_url,
                dumps(message.metadata),
                message.created_at,
            ),
        )
    return message


def list_messages(
    client_id: str,
    *,
    message_type: Optional[MessageType] = None,
    limit: int = 100,
    conn: Optional[sqlite3.Connection] = None,
) -> List[Message]:
    sql = "SELECT * FROM messages WHERE client_id = ?"
    params: List[Any] = [client_id]
    if message_type is not None:
        sql += " AND message_type = ?"
        params.append(message_type.value)
    sql += " ORDER BY created_at DESC, rowid DESC LIMIT ?"
    params.append(limit)
    with use_conn(conn) as c:
        rows = c.execute(sql, params).fetchall()
    return [_row_to_message(r) for r in rows]


def recent_contents(
    client_id: str,
    message_type: MessageType,
    *,
    limit: int = 5,
    conn: Optional[sqlite3.Connection] = None,
) -> List[str]:
    return [m.content for m in list_messages(client_id, message_type=message_type, limit=limit, conn=conn)]


def mark_read(message_id: str) -> bool:
    with use_conn() as c:
        updated = c.execute("UPDATE messages SET is_read = 1 WHERE id = ?", (message_id,)).rowcount
    return updated > 0


# ---- templates ----


def _row_to_template(row: sqlite3.Row) -> MessageTemplate:
    r = dict(row)
    return MessageTemplate(
        id=r["id"],
        name=r["name"],
        template=r["template"],
        trigger_event=r.get("trigger_event"),
        is_active=bool(r.get("is_active")),
        created_at=r["created_at"],
    )


def upsert_template(
    *,
    name: str,
    template: str,
    trigger_event: Optional[str] = None,
    is_active: bool = True,
) -> MessageTemplate:
    with use_conn() as c:
        c.execute(
            """
            INSERT INTO message_templates (id, name, template, trigger_event, is_active, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(name) DO UPDATE SET
                template = excluded.template,
                trigger_event = excluded.trigger_event,
                is_active = excluded.is_active
            """,
            (str(uuid4()), name, template, trigger_event, int(is_active), iso_now()),
        )
        row = c.execute("SELECT * FROM message_templates WHERE name = ?", (name,)).fetchone()
    return _row_to_template(row)


def get_active_template(name: str) -> MessageTemplate:
    with use_conn() as c:
        row = c.execute(
            "SELECT * FROM message_templates WHERE name = ? AND is_active = 1",
            (name,),
        ).fetchone()
    if not row:
        raise TemplateNotFound(name)
    return _row_to_template(row)


def list_templates() -> List[MessageTemplate]:
    with use_conn() as c:
        rows = c.execute("SELECT * FROM message_templates ORDER BY name ASC").fetchall()
    return [_row_to_template(r) for r in rows]


def list_active_templates(trigger_event: str) -> List[MessageTemplate]:
    with use_conn() as c:
        rows = c.execute(
            "SELECT * FROM message_templates WHERE trigger_event = ? AND is_active = 1 ORDER BY name ASC",
            (trigger_event,),
        ).fetchall()
    return [_row_to_template(r) for r in rows]
