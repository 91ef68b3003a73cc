# -*- coding: utf-8 -*-
"""Soft retargeting for dormant consultation leads.

A sweep walks every eligible client, skips those contacted within their
frequency window and otherwise posts one educational tip, avoiding the texts
sent most recently.
"""

from __future__ import annotations

import logging
import math
import random
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from ..app_db import db_conn, parse_iso
from ..messaging.models import MessageType, SenderType
from ..messaging.render import render_template
from ..messaging.storage import insert_message, recent_contents
from .models import (
    ClientWorkflowState,
    RetargetingFrequency,
    RetargetingResult,
    RetargetingSummary,
    WorkflowStage,
)
from .storage import list_retargeting_candidates, update_state

logger = logging.getLogger(__name__)

RECENT_WINDOW = 5

EDUCATIONAL_TEMPLATES = (
    "Hi {name}! 💡 Quick tip: Start your day with a glass of warm water and lemon to boost digestion and metabolism.",
    "Hi {name}! 🥗 Remember: Fill half your plate with colorful vegetables for maximum nutrition and fiber.",
    "Hi {name}! 🏃‍♀️ Movement matters! Even a 10-minute walk after meals can improve digestion and blood sugar levels.",
    "Hi {name}! 😴 Quality sleep is essential for weight management. Aim for 7-8 hours of consistent sleep each night.",
    "Hi {name}! 💧 Staying hydrated helps control hunger. Drink a glass of water before meals to feel fuller.",
    "Hi {name}! 🥑 Healthy fats like avocados, nuts, and olive oil support hormone balance and satiety.",
    "Hi {name}! 🧘‍♀️ Stress management is key. Try 5 minutes of deep breathing or meditation daily.",
    "Hi {name}! 🍽️ Mindful eating tip: Chew your food slowly and put your fork down between bites.",
    "Hi {name}! 🥚 Protein at breakfast helps maintain stable energy levels throughout the day.",
    "Hi {name}! 🌞 Get some sunlight! 15 minutes of morning sun helps regulate your circadian rhythm and mood.",
)


def days_since(last_sent: Optional[str], now: datetime) -> float:
    """Whole days elapsed since ``last_sent``; infinite when never sent."""
    sent_at = parse_iso(last_sent)
    if sent_at is None:
        return math.inf
    return float(math.floor((now - sent_at).total_seconds() / 86400))


def is_due(state: ClientWorkflowState, now: datetime) -> bool:
    gap = RetargetingFrequency.parse(state.retargeting_frequency).gap_days
    return days_since(state.retargeting_last_sent, now) >= gap


def select_message(
    name: str,
    recent: Sequence[str],
    rng: random.Random,
    templates: Sequence[str] = EDUCATIONAL_TEMPLATES,
) -> str:
    """Pick a rendered tip that is not among ``recent``.

    When every candidate was sent recently the first shuffled template is used.
    """
    shuffled = list(templates)
    rng.shuffle(shuffled)
    recent_set = set(recent)
    for template in shuffled:
        content = render_template(template, {"name": name})
        if content not in recent_set:
            return content
    return render_template(shuffled[0], {"name": name})


def _send_one(state: ClientWorkflowState, name: str, now: datetime, rng: random.Random) -> str:
    with db_conn() as conn:
        recent = recent_contents(state.client_id, MessageType.retargeting, limit=RECENT_WINDOW, conn=conn)
        content = select_message(name, recent, rng)
        message = insert_message(
            client_id=state.client_id,
            sender_type=SenderType.system,
            message_type=MessageType.retargeting,
            content=content,
            conn=conn,
        )
        update_state(
            state.client_id,
            retargeting_last_sent=now.isoformat(),
            workflow_stage=WorkflowStage.soft_retargeting_active,
            conn=conn,
        )
    return message.id


def run_retargeting_sweep(
    *,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> RetargetingSummary:
    now = now or datetime.now(timezone.utc)
    rng = rng or random.Random()

    candidates = list_retargeting_candidates()
    logger.info("Found %d clients eligible for retargeting", len(candidates))

    results: List[RetargetingResult] = []
    for state, name in candidates:
        days = None
        try:
            elapsed = days_since(state.retargeting_last_sent, now)
            days = None if math.isinf(elapsed) else int(elapsed)
            if not is_due(state, now):
                logger.info("Skipping client %s - message sent %s days ago", state.client_id, days)
                results.append(
                    RetargetingResult(client_id=state.client_id, status="skipped", days_since_last_sent=days)
                )
                continue
            message_id = _send_one(state, name, now, rng)
        except Exception as exc:
            logger.exception("Error sending retargeting message to client %s", state.client_id)
            results.append(
                RetargetingResult(
                    client_id=state.client_id,
                    status="error",
                    days_since_last_sent=days,
                    error=str(exc) or "Unknown error",
                )
            )
            continue
        logger.info("Sent retargeting message to client %s", state.client_id)
        results.append(
            RetargetingResult(
                client_id=state.client_id,
                status="success",
                days_since_last_sent=days,
                message_id=message_id,
            )
        )

    sent = sum(1 for r in results if r.status == "success")
    logger.info("Retargeting sweep complete: %d/%d sent", sent, len(candidates))
    return RetargetingSummary(eligible=len(candidates), sent=sent, results=results)
