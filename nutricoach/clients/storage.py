# -*- coding: utf-8 -*-
"""Clients storage helpers (SQLite)."""

from __future__ import annotations

import sqlite3
from typing import List, Optional
from uuid import uuid4

from ..app_db import iso_now, use_conn
from ..errors import ClientNotFound
from .models import Client, ClientStatus, ClientUpsertRequest, DailyLog, DailyLogRequest


def upsert_client(request: ClientUpsertRequest) -> Client:
    client_id = request.id or str(uuid4())
    now = iso_now()
    gender = request.gender.value if request.gender else None
    with use_conn() as c:
        c.execute(
            """
            INSERT INTO clients (
                id, name, email, age, gender, goals, height_cm, last_weight_kg,
                target_kcal, status, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                name = excluded.name,
                email = excluded.email,
                age = excluded.age,
                gender = excluded.gender,
                goals = excluded.goals,
                height_cm = excluded.height_cm,
                last_weight_kg = excluded.last_weight_kg,
                target_kcal = excluded.target_kcal,
                status = excluded.status,
                updated_at = excluded.updated_at
            """,
            (
                client_id,
                request.name,
                request.email,
                request.age,
                gender,
                request.goals,
                request.height_cm,
                request.last_weight_kg,
                request.target_kcal,
                request.status.value,
                now,
                now,
            ),
        )
        row = c.execute("SELECT * FROM clients WHERE id = ?", (client_id,)).fetchone()
    return Client.model_validate(dict(row))


def get_client(client_id: str, *, conn: Optional[sqlite3.Connection] = None) -> Optional[Client]:
    with use_conn(conn) as c:
        row = c.execute("SELECT * FROM clients WHERE id = ?", (client_id,)).fetchone()
    return Client.model_validate(dict(row)) if row else None


def require_client(client_id: str, *, conn: Optional[sqlite3.Connection] = None) -> Client:
    client = get_client(client_id, conn=conn)
    if client is None:
        raise ClientNotFound(client_id)
    return client


def list_active_clients() -> List[Client]:
    with use_conn() as c:
        rows = c.execute(
            "SELECT * FROM clients WHERE status = ? ORDER BY name ASC, id ASC",
            (ClientStatus.active.value,),
        ).fetchall()
    return [Client.model_validate(dict(r)) for r in rows]


def add_daily_log(client_id: str, request: DailyLogRequest) -> DailyLog:
    require_client(client_id)
    log = DailyLog(
        id=str(uuid4()),
        client_id=client_id,
        log_date=request.log_date[:10],
        weight_kg=request.weight_kg,
        activity_minutes=request.activity_minutes,
        water_intake_l=request.water_intake_l,
        created_at=iso_now(),
    )
    with use_conn() as c:
        c.execute(
            """
            INSERT INTO daily_logs (
                id, client_id, log_date, weight_kg, activity_minutes, water_intake_l, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                log.id,
                log.client_id,
                log.log_date,
                log.weight_kg,
                log.activity_minutes,
                log.water_intake_l,
                log.created_at,
            ),
        )
    return log


def latest_daily_log(client_id: str) -> Optional[DailyLog]:
    with use_conn() as c:
        row = c.execute(
            "SELECT * FROM daily_logs WHERE client_id = ? ORDER BY log_date DESC, rowid DESC LIMIT 1",
            (client_id,),
        ).fetchone()
    return DailyLog.model_validate(dict(row)) if row else None
