# -*- coding: utf-8 -*-
"""Delivery of reviewed cards to the client."""

from __future__ import annotations

import logging
from typing import Optional

from ..app_db import db_conn, iso_now
from ..messaging.models import MessageType, SenderType
from ..messaging.storage import insert_message
from ..push.notify import notify_quietly
from ..workflow.storage import add_history, update_state
from .models import CardType, DeliveryResult, PendingReviewCard
from .storage import get_card, mark_sent

logger = logging.getLogger(__name__)

_IMAGE_KEYS = ("action_plan_image", "diet_plan_image")


def _message_content(card_type: CardType) -> str:
    name = card_type.display_name
    return (
        f"Your {name} is ready! Your dietitian has reviewed and sent your personalized {name.lower()}. "
        "View it in your dashboard to see your detailed health insights and recommendations."
    )


def _attachment_url(card: PendingReviewCard) -> Optional[str]:
    for key in _IMAGE_KEYS:
        value = card.generated_content.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def _follow_up(card: PendingReviewCard, reviewed_by: Optional[str]) -> None:
    """Advance the client's workflow and notify; failures are logged only."""
    try:
        with db_conn() as conn:
            if update_state(
                card.client_id,
                workflow_stage=card.workflow_stage,
                stage_completed_at=iso_now(),
                conn=conn,
            ):
                add_history(
                    client_id=card.client_id,
                    workflow_stage=card.workflow_stage,
                    action=f"{card.card_type.display_name} sent",
                    triggered_by=reviewed_by or "admin",
                    conn=conn,
                )
    except Exception as exc:
        logger.warning("Workflow update after sending card %s failed: %s", card.id, exc)

    notify_quietly(
        client_id=card.client_id,
        title=f"{card.card_type.display_name} ready",
        body="Your dietitian has sent you a new card",
    )


def send_card_to_client(
    card_id: str,
    *,
    reviewed_by: Optional[str] = None,
    display_name: Optional[str] = None,
) -> DeliveryResult:
    card = get_card(card_id)
    label = display_name or card.card_type.display_name
    logger.info("Sending card %s (%s) to client %s", card_id, label, card.client_id)

    with db_conn() as conn:
        if not mark_sent(card_id, reviewed_by=reviewed_by, conn=conn):
            logger.info("Card %s was already sent, nothing to do", card_id)
            return DeliveryResult(
                card_id=card_id,
                client_id=card.client_id,
                card_type=card.card_type,
                already_sent=True,
                message=f"{label} was already sent",
            )
        message = insert_message(
            client_id=card.client_id,
            sender_type=SenderType.system,
            message_type=MessageType.automated,
            content=_message_content(card.card_type),
            attachment_url=_attachment_url(card),
            metadata={"card_id": card_id, "card_type": card.card_type.value},
            conn=conn,
        )

    _follow_up(card, reviewed_by)
    recipient = card.client_name or card.client_id
    logger.info("Card %s sent to client %s", card_id, card.client_id)
    return DeliveryResult(
        card_id=card_id,
        client_id=card.client_id,
        card_type=card.card_type,
        message_id=message.id,
        message=f"{label} sent to {recipient}",
    )
