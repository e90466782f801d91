"""
Purpose: Environment-driven settings. Loads .env from the repo root first,
then reads a frozen Settings snapshot the UI and controller share.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

QUESTIONS_PER_SESSION = 6
HISTORY_LIMIT = 10


def ensure_env_loaded() -> None:
    project_root = Path(__file__).resolve().parents[2]
    env_path = project_root / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)
    else:
        load_dotenv(override=False)


ensure_env_loaded()


@dataclass(frozen=True)
class Settings:
    store_backend: str = "memory"
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    tts_model: str = "gpt-4o-mini-tts"
    tts_voice: str = "alloy"
    stt_model: str = "whisper-1"
    http_timeout: float = 30.0

    @property
    def uses_supabase(self) -> bool:
        return self.store_backend == "supabase"

    @property
    def speech_enabled(self) -> bool:
        return bool(self.openai_api_key)


def load_settings() -> Settings:
    backend = (os.getenv("STORE_BACKEND") or "memory").strip().lower()
    if backend not in ("memory", "supabase"):
        raise ValueError(
            f"STORE_BACKEND must be 'memory' or 'supabase', got {backend!r}"
        )
    return Settings(
        store_backend=backend,
        supabase_url=os.getenv("SUPABASE_URL") or None,
        supabase_key=os.getenv("SUPABASE_KEY") or None,
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        tts_model=os.getenv("OPENAI_TTS_MODEL", "gpt-4o-mini-tts"),
        tts_voice=os.getenv("OPENAI_TTS_VOICE", "alloy"),
        stt_model=os.getenv("OPENAI_STT_MODEL", "whisper-1"),
        http_timeout=float(os.getenv("HTTP_TIMEOUT", "30")),
    )


settings = load_settings()
