from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List


class Settings:
    """Centralized configuration for the coaching backend."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        data_root_default = base_dir.parent / "data"

        self.data_root: Path = Path(
            os.environ.get("NUTRICOACH_DATA_ROOT") or data_root_default
        ).expanduser()
        self.app_db_path: Path = Path(
            os.environ.get("NUTRICOACH_DB_PATH") or (self.data_root / "nutricoach.db")
        ).expanduser()

        # ---- AI provider (OpenAI-compatible) ----
        self.openai_api_key: str | None = os.environ.get("OPENAI_API_KEY") or None
        self.openai_base_url: str = os.environ.get(
            "OPENAI_BASE_URL", "https://api.openai.com/v1"
        )
        self.chat_model: str = os.environ.get("NUTRICOACH_CHAT_MODEL", "gpt-4o-mini")
        self.image_model: str = os.environ.get("NUTRICOACH_IMAGE_MODEL", "dall-e-3")
        self.ai_timeout: float = float(os.environ.get("NUTRICOACH_AI_TIMEOUT", "60"))
        self.ai_temperature: float = float(os.environ.get("NUTRICOACH_AI_TEMPERATURE", "0.7"))
        # auto: mock only where a generator allows it and no key is set.
        # mock: always mock where allowed. live: never mock.
        self.ai_mode: str = (os.environ.get("NUTRICOACH_AI_MODE") or "auto").strip().lower()

        # ---- Push notifications (delivery is logged, not transported) ----
        self.vapid_public_key: str | None = os.environ.get("VAPID_PUBLIC_KEY") or None
        self.vapid_private_key: str | None = os.environ.get("VAPID_PRIVATE_KEY") or None

        self.log_level: str = os.environ.get("NUTRICOACH_LOG_LEVEL", "INFO").upper()

        cors = os.environ.get("NUTRICOACH_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
