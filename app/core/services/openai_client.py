"""
Purpose: Thin client wrapper around the OpenAI SDK for the speech features.
One place for auth, retries and model options; speech.py / voice.py do the
request shaping.

Testing: Mock SDK calls; assert retries and byte/text normalization.
"""

from __future__ import annotations
import time

from openai import OpenAI
from openai import APIError, RateLimitError, APITimeoutError

from ..utils.logger import get_logger
from .speech import tts_bytes
from .voice import transcribe_wav_bytes

logger = get_logger("services.openai_client")

RETRY_DELAYS = (0.5, 1.0, 2.0, 4.0)


class OpenAISpeechClient:
    def __init__(
        self,
        api_key: str,
        *,
        tts_model: str = "gpt-4o-mini-tts",
        tts_voice: str = "alloy",
        stt_model: str = "whisper-1",
        client=None,
    ):
        self.api_key = api_key
        if not self.api_key and client is None:
            raise RuntimeError("Missing OPENAI_API_KEY")
        self.tts_model = tts_model
        self.tts_voice = tts_voice
        self.stt_model = stt_model
        if client is not None:
            self.client = client
        else:
            try:
                self.client = OpenAI(api_key=self.api_key)
            except Exception as e:
                raise RuntimeError(f"Failed to initialize OpenAI client: {e}") from e

    def _with_retries(self, fn, *args, **kwargs):
        for delay in RETRY_DELAYS:
            try:
                return fn(*args, **kwargs)
            except (RateLimitError, APITimeoutError, APIError) as e:
                logger.warning("OpenAI call failed (%s); retrying in %.1fs", e, delay)
                time.sleep(delay)
        return fn(*args, **kwargs)

    def transcribe(self, wav_bytes: bytes) -> str:
        return self._with_retries(
            transcribe_wav_bytes, wav_bytes, self, model=self.stt_model
        )

    def synthesize(self, text: str) -> bytes:
        return self._with_retries(
            tts_bytes, text, self, voice=self.tts_voice, model=self.tts_model
        )
