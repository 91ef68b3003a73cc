# -*- coding: utf-8 -*-
"""AI provider access (chat + image generation) and output parsing."""

from .client import AIClient, MockAIClient, OpenAIClient, build_ai_client, get_ai_factory
from .parsing import parse_model_json, parse_or_fallback

__all__ = [
    "AIClient",
    "MockAIClient",
    "OpenAIClient",
    "build_ai_client",
    "get_ai_factory",
    "parse_model_json",
    "parse_or_fallback",
]
