# -*- coding: utf-8 -*-
"""AI provider clients.

Generators receive an ``AIClient`` and never look at credentials themselves:
``build_ai_client`` picks the live OpenAI-compatible client or the labelled
mock once, from configuration.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

import httpx

from ..config import settings
from ..errors import AIConfigError, AIProviderError

logger = logging.getLogger(__name__)

Messages = List[Dict[str, str]]

MOCK_NOTICE = "*Note: This is a placeholder response as the AI service is currently unavailable.*"


class AIClient:
    """Interface shared by the live and mock clients."""

    is_mock = False

    def chat(self, messages: Messages, *, json_mode: bool = False) -> str:
        raise NotImplementedError

    def generate_image(self, prompt: str, *, size: str = "1024x1024") -> str:
        raise NotImplementedError


class OpenAIClient(AIClient):
    def __init__(
        self,
        *,
        api_key: Optional[str],
        base_url: str,
        chat_model: str,
        image_model: str,
        timeout: float,
        temperature: float,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.chat_model = chat_model
        self.image_model = image_model
        self.timeout = timeout
        self.temperature = temperature
        self._transport = transport

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise AIConfigError("OPENAI_API_KEY not configured")
        url = f"{self.base_url}{path}"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                resp = client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            raise AIProviderError(f"AI provider unreachable: {exc}") from exc

        if resp.status_code >= 400:
            snippet = (resp.text or "").replace("\n", " ").strip()[:200]
            logger.error("AI request to %s failed: %s %s", path, resp.status_code, snippet)
            raise AIProviderError(
                f"AI generation failed: {resp.status_code}",
                status_code=resp.status_code,
            )
        try:
            data = resp.json()
        except ValueError as exc:
            raise AIProviderError("AI provider returned a non-JSON response") from exc
        if not isinstance(data, dict):
            raise AIProviderError("AI provider returned an unexpected payload")
        return data

    def chat(self, messages: Messages, *, json_mode: bool = False) -> str:
        payload: Dict[str, Any] = {
            "model": self.chat_model,
            "messages": messages,
            "temperature": self.temperature,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}
        data = self._post("/chat/completions", payload)
        choices = data.get("choices") or []
        content = ""
        if choices and isinstance(choices[0], dict):
            content = (choices[0].get("message") or {}).get("content") or ""
        if not content.strip():
            raise AIProviderError("No response from AI")
        return content

    def generate_image(self, prompt: str, *, size: str = "1024x1024") -> str:
        payload = {"model": self.image_model, "prompt": prompt, "n": 1, "size": size}
        data = self._post("/images/generations", payload)
        items = data.get("data") or []
        url = items[0].get("url") if items and isinstance(items[0], dict) else None
        if not url:
            raise AIProviderError("No image generated from AI")
        return url


class MockAIClient(AIClient):
    """Offline stand-in; output is labelled so reviewers can tell it apart."""

    is_mock = True

    def __init__(self, title: str = "Assessment") -> None:
        self.title = title

    def chat(self, messages: Messages, *, json_mode: bool = False) -> str:
        prompt = messages[-1]["content"] if messages else ""
        answers = [line.strip() for line in prompt.splitlines() if line.strip().startswith("- ")]
        lines = [
            f"## {self.title} (Mock)",
            "",
            "Preliminary analysis based on the submitted answers:",
            *answers,
            "",
            "Recommendations will be completed by your dietitian during review.",
            "",
            MOCK_NOTICE,
        ]
        return "\n".join(lines)

    def generate_image(self, prompt: str, *, size: str = "1024x1024") -> str:
        raise AIConfigError("Image generation is not available without AI credentials")


AIClientFactory = Callable[..., AIClient]


def build_ai_client(
    *,
    allow_mock: bool = False,
    mock_title: str = "Assessment",
    transport: Optional[httpx.BaseTransport] = None,
) -> AIClient:
    mode = settings.ai_mode
    if allow_mock and (mode == "mock" or (mode == "auto" and not settings.openai_api_key)):
        logger.warning("AI credentials unavailable, using mock content for %s", mock_title)
        return MockAIClient(mock_title)
    return OpenAIClient(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        chat_model=settings.chat_model,
        image_model=settings.image_model,
        timeout=settings.ai_timeout,
        temperature=settings.ai_temperature,
        transport=transport,
    )


def get_ai_factory() -> AIClientFactory:
    """FastAPI dependency; tests override it to inject stub clients."""
    return build_ai_client
