# -*- coding: utf-8 -*-
"""Domain errors.

Every error carries a user-facing ``message``. Function endpoints turn these
into a ``{"success": false, "error": ...}`` body with HTTP 200; resource
endpoints map them to status codes (see ``envelope.install_error_handlers``).
"""

from __future__ import annotations

from typing import Optional


class NutricoachError(Exception):
    status_code = 500

    def __init__(self, message: str, *, hint: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint


# ---- validation ----


class InvalidRequest(NutricoachError):
    status_code = 400


class UnknownAssessmentType(InvalidRequest):
    def __init__(self, value: object) -> None:
        super().__init__(f"Unknown assessment type: {value}")
        self.value = value


# ---- lookups ----


class NotFoundError(NutricoachError):
    status_code = 404


class ClientNotFound(NotFoundError):
    def __init__(self, client_id: str) -> None:
        super().__init__(f"Client not found: {client_id}")


class RequestNotFound(NotFoundError):
    def __init__(self, request_id: str) -> None:
        super().__init__(f"Assessment request not found: {request_id}")


class CardNotFound(NotFoundError):
    def __init__(self, card_id: str) -> None:
        super().__init__(f"Card not found: {card_id}")


class TemplateNotFound(NotFoundError):
    def __init__(self, name: str) -> None:
        super().__init__("Template not found")
        self.name = name


class NoActiveTemplates(NotFoundError):
    def __init__(self, trigger_event: str) -> None:
        super().__init__(f"No active templates for trigger event: {trigger_event}")
        self.trigger_event = trigger_event


class WorkflowStateNotFound(NotFoundError):
    def __init__(self, client_id: str) -> None:
        super().__init__(f"Workflow state not found for client: {client_id}")


# ---- state ----


class InvalidCardTransition(NutricoachError):
    status_code = 409


# ---- upstream ----


class UpstreamError(NutricoachError):
    status_code = 502


class PersistenceError(UpstreamError):
    pass


class AIConfigError(UpstreamError):
    status_code = 500


class AIProviderError(UpstreamError):
    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.provider_status = status_code


class AIRateLimited(AIProviderError):
    status_code = 429

    def __init__(self) -> None:
        super().__init__("Rate limit exceeded. Please try again in a moment.", status_code=429)


class AIQuotaExceeded(AIProviderError):
    status_code = 402

    def __init__(self) -> None:
        super().__init__("AI usage limit reached. Please add credits to continue.", status_code=402)


class GenerationFailed(UpstreamError):
    """Raised by the intake handler after the request was already completed."""


class PushNotConfigured(NutricoachError):
    def __init__(self) -> None:
        super().__init__("Push notifications not configured")
