from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from dotenv import load_dotenv


OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_OPENROUTER_MODEL = "deepseek/deepseek-chat-v3.1:free"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"


def _get_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Process configuration, read once and passed to whoever needs it."""

    openai_api_key: Optional[str] = None
    openai_model: str = DEFAULT_OPENAI_MODEL
    openrouter_api_key: Optional[str] = None
    openrouter_model: str = DEFAULT_OPENROUTER_MODEL
    openrouter_site_url: Optional[str] = None
    openrouter_site_name: Optional[str] = None
    ai_timeout_seconds: Optional[float] = None
    max_upload_mb: int = 20
    upload_preview_chars: int = 20000
    cors_origins: Tuple[str, ...] = field(default_factory=lambda: ("*",))
    log_level: str = "INFO"

    @property
    def provider(self) -> Optional[str]:
        # OpenRouter wins when both keys are present
        if self.openrouter_api_key:
            return "openrouter"
        if self.openai_api_key:
            return "openai"
        return None

    @property
    def ai_enabled(self) -> bool:
        return self.provider is not None

    @property
    def api_key(self) -> Optional[str]:
        if self.provider == "openrouter":
            return self.openrouter_api_key
        return self.openai_api_key

    @property
    def model(self) -> str:
        if self.provider == "openrouter":
            return self.openrouter_model
        return self.openai_model

    @property
    def base_url(self) -> Optional[str]:
        return OPENROUTER_BASE_URL if self.provider == "openrouter" else None

    @property
    def default_headers(self) -> Dict[str, str]:
        if self.provider != "openrouter":
            return {}
        headers = {}
        if self.openrouter_site_url:
            headers["HTTP-Referer"] = self.openrouter_site_url
        if self.openrouter_site_name:
            headers["X-Title"] = self.openrouter_site_name
        return headers

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


def load_settings() -> Settings:
    """Build settings from the environment (and a local .env file if present)."""
    load_dotenv()
    origins = os.getenv("CORS_ORIGINS", "*")
    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        openai_model=os.getenv("OPENAI_MODEL") or DEFAULT_OPENAI_MODEL,
        openrouter_api_key=os.getenv("OPENROUTER_API_KEY") or None,
        openrouter_model=os.getenv("OPENROUTER_MODEL") or DEFAULT_OPENROUTER_MODEL,
        openrouter_site_url=os.getenv("OPENROUTER_SITE_URL") or None,
        openrouter_site_name=os.getenv("OPENROUTER_SITE_NAME") or None,
        ai_timeout_seconds=_get_float("AI_TIMEOUT_SECONDS"),
        max_upload_mb=_get_int("MAX_UPLOAD_MB", 20),
        upload_preview_chars=_get_int("UPLOAD_PREVIEW_CHARS", 20000),
        cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()) or ("*",),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
