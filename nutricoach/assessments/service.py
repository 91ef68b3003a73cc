# -*- coding: utf-8 -*-
"""Assessment requests sent to clients."""

from __future__ import annotations

import logging
from typing import Optional

from ..app_db import db_conn
from ..clients.storage import require_client
from ..messaging.models import MessageType, SenderType
from ..messaging.storage import insert_message
from ..push.notify import notify_quietly
from .models import AssessmentRequest, AssessmentType
from .storage import create_request

logger = logging.getLogger(__name__)


def request_assessment(
    *,
    client_id: str,
    assessment_type: str,
    notes: Optional[str] = None,
    requested_by: Optional[str] = None,
) -> AssessmentRequest:
    """Create a pending request and tell the client about it."""
    kind = AssessmentType.parse(assessment_type)
    logger.info("Requesting %s for client %s", kind.value, client_id)

    with db_conn() as conn:
        require_client(client_id, conn=conn)
        request = create_request(
            client_id=client_id,
            kind=kind.kind,
            requested_by=requested_by,
            notes=notes or "Requested via admin dashboard",
            conn=conn,
        )
        insert_message(
            client_id=client_id,
            sender_type=SenderType.system,
            message_type=MessageType.assessment_request,
            content=(
                f"📋 **{kind.title} Requested**\n\n{kind.description}\n\n"
                "Click the button below to get started."
            ),
            metadata={
                "assessment_type": kind.value,
                "request_id": request.id,
                "assessment_title": kind.title,
            },
            conn=conn,
        )

    notify_quietly(
        client_id=client_id,
        title=f"{kind.title} Requested",
        body="Please complete your assessment form",
    )
    logger.info("Assessment request %s created", request.id)
    return request
