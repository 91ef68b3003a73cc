# -*- coding: utf-8 -*-
"""Daily motivation messages for active clients."""

from __future__ import annotations

import logging
import random
from typing import Optional

from ..app_db import db_conn
from ..clients.storage import list_active_clients
from ..errors import NoActiveTemplates
from .models import MessageType, MotivationSummary, SenderType
from .render import render_template
from .storage import insert_message, list_active_templates

logger = logging.getLogger(__name__)

MORNING_EVENT = "daily_morning"


def send_daily_motivation(
    *,
    rng: Optional[random.Random] = None,
    trigger_event: str = MORNING_EVENT,
) -> MotivationSummary:
    """Send one randomly chosen template to every active client.

    All messages are written in a single transaction.
    """
    rng = rng or random.Random()

    clients = list_active_clients()
    if not clients:
        logger.info("No active clients found")
        return MotivationSummary(sent=0, clients_reached=0, message="No active clients to send messages to")

    templates = list_active_templates(trigger_event)
    if not templates:
        raise NoActiveTemplates(trigger_event)

    with db_conn() as conn:
        for client in clients:
            template = rng.choice(templates)
            insert_message(
                client_id=client.id,
                sender_type=SenderType.system,
                message_type=MessageType.motivation,
                content=render_template(template.template, {"name": client.name}),
                metadata={"template_name": template.name},
                conn=conn,
            )

    logger.info("Sent %d %s motivation messages", len(clients), trigger_event)
    return MotivationSummary(
        sent=len(clients),
        clients_reached=len(clients),
        message=f"Sent {len(clients)} morning motivation messages",
    )
