# -*- coding: utf-8 -*-
"""Templated automated messages."""

from __future__ import annotations

import logging
from typing import Any, Dict

from ..clients.storage import require_client
from .models import Message, MessageType, SenderType
from .render import render_template
from .storage import get_active_template, insert_message

logger = logging.getLogger(__name__)


def send_automated_message(*, client_id: str, template_name: str, variables: Dict[str, Any]) -> Message:
    require_client(client_id)
    template = get_active_template(template_name)
    content = render_template(template.template, variables)
    message = insert_message(
        client_id=client_id,
        sender_type=SenderType.system,
        message_type=MessageType.manual,
        content=content,
        metadata={
            "template_name": template_name,
            "variables": variables,
            "trigger_event": template.trigger_event,
        },
    )
    logger.info("Automated message %s sent to client %s (template=%s)", message.id, client_id, template_name)
    return message
