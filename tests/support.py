# -*- coding: utf-8 -*-
"""Shared fixtures: a fresh database per test and stub AI clients."""

from __future__ import annotations

import json
import shutil
import tempfile
import unittest
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import httpx

from nutricoach.ai.client import AIClient, OpenAIClient
from nutricoach.app_db import init_app_db
from nutricoach.clients.models import ClientUpsertRequest
from nutricoach.clients.storage import upsert_client
from nutricoach.config import settings

_OVERRIDDEN = (
    "data_root",
    "app_db_path",
    "openai_api_key",
    "ai_mode",
    "vapid_public_key",
    "vapid_private_key",
)


class DatabaseTestCase(unittest.TestCase):
    """Each test gets its own SQLite file; settings are restored afterwards."""

    def setUp(self) -> None:
        self._saved = {name: getattr(settings, name) for name in _OVERRIDDEN}
        self._tmp = Path(tempfile.mkdtemp(prefix="nutricoach-case-"))
        settings.data_root = self._tmp
        settings.app_db_path = self._tmp / "nutricoach.db"
        settings.openai_api_key = None
        settings.ai_mode = "auto"
        settings.vapid_public_key = None
        settings.vapid_private_key = None
        init_app_db(settings.app_db_path)

    def tearDown(self) -> None:
        for name, value in self._saved.items():
            setattr(settings, name, value)
        shutil.rmtree(self._tmp, ignore_errors=True)

    def make_client(self, name: str = "Asha", **fields: Any) -> str:
        return upsert_client(ClientUpsertRequest(name=name, **fields)).id


class ScriptedAI(AIClient):
    """Returns canned replies and records every prompt."""

    def __init__(self, replies: Optional[List[str]] = None, image_url: str = "https://img.example/plan.png") -> None:
        self.replies = list(replies or [])
        self.image_url = image_url
        self.calls: List[Dict[str, Any]] = []

    def chat(self, messages, *, json_mode: bool = False) -> str:
        self.calls.append({"messages": messages, "json_mode": json_mode})
        if not self.replies:
            raise AssertionError("unexpected chat call")
        return self.replies.pop(0)

    def generate_image(self, prompt: str, *, size: str = "1024x1024") -> str:
        self.calls.append({"prompt": prompt, "size": size})
        return self.image_url


def factory_for(ai: AIClient) -> Callable[..., AIClient]:
    def _factory(**_kwargs: Any) -> AIClient:
        return ai

    return _factory


def openai_client(handler: Callable[[httpx.Request], httpx.Response], api_key: str = "sk-test") -> OpenAIClient:
    return OpenAIClient(
        api_key=api_key,
        base_url="https://ai.example/v1",
        chat_model="gpt-4o-mini",
        image_model="dall-e-3",
        timeout=5,
        temperature=0.7,
        transport=httpx.MockTransport(handler),
    )


def chat_reply(content: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})


def request_json(request: httpx.Request) -> Dict[str, Any]:
    return json.loads(request.content.decode("utf-8"))
