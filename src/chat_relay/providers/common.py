from __future__ import annotations

from chat_relay.models import TranscriptEntry


def to_chat_messages(
    transcript: list[TranscriptEntry],
    prompt: str,
    *,
    model_role: str = "assistant",
) -> list[dict]:
    """Convert a transcript plus the new prompt to user/assistant chat messages."""
    out: list[dict] = []
    for entry in transcript:
        role = model_role if entry.role == "model" else "user"
        out.append({"role": role, "content": entry.content})
    out.append({"role": "user", "content": prompt})
    return out


def status_error_message(status_code: int, detail: str) -> str:
    detail = " ".join(str(detail).split())
    if detail:
        return f"HTTP {status_code}: {detail}"
    return f"HTTP {status_code}"
