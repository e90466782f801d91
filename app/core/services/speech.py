"""
Purpose: text-to-speech integration. Reads interview questions aloud.
"""

from __future__ import annotations


def _clip(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return text[: max_chars - 1].rstrip() + "…"


def tts_bytes(
    text: str,
    speech,
    *,
    voice: str = "alloy",
    model: str = "gpt-4o-mini-tts",
    max_chars: int = 1200,
) -> bytes:
    """
    Return raw MP3 bytes. Tries the streaming path; falls back to non-streaming
    on SDKs without with_streaming_response.
    """
    safe = _clip((text or "").strip(), max_chars)
    if not safe:
        return b""

    client = getattr(speech, "client", speech)
    endpoint = client.audio.speech

    if hasattr(endpoint, "with_streaming_response"):
        with endpoint.with_streaming_response.create(
            model=model, voice=voice, input=safe
        ) as resp:
            return b"".join(resp.iter_bytes())

    resp = endpoint.create(model=model, voice=voice, input=safe)
    if hasattr(resp, "content"):
        return resp.content
    return resp.read()
