from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal

Speaker = Literal["user", "assistant"]
ModelRole = Literal["user", "model"]

_PLACEHOLDER_KEYS = {
    "your_api_key_here",
    "your-api-key",
    "your_gemini_api_key",
    "your_openai_api_key",
    "your_anthropic_api_key",
    "changeme",
}


class ErrorKind(str, Enum):
    INVALID_CREDENTIAL = "invalid_credential"
    MODEL_UNAVAILABLE = "model_unavailable"
    QUOTA_EXCEEDED = "quota_exceeded"
    PERMISSION_DENIED = "permission_denied"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ChatTurn:
    id: str
    uid: str
    seq: int
    role: Speaker
    text: str
    created_at: str


@dataclass(frozen=True)
class TranscriptEntry:
    role: ModelRole
    content: str


@dataclass(frozen=True)
class GenerationBudget:
    max_output_tokens: int
    temperature: float
    top_k: int
    top_p: float


@dataclass(frozen=True)
class RecordOutcome:
    turn_id: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class Classification:
    kind: ErrorKind
    user_message: str
    raw_message: str


@dataclass(frozen=True)
class InvocationResult:
    text: str
    is_demo: bool = False
    failure: Classification | None = None

    @property
    def success(self) -> bool:
        return self.failure is None


@dataclass(frozen=True)
class Credentials:
    api_key: str
    env_var: str

    @property
    def is_configured(self) -> bool:
        key = (self.api_key or "").strip()
        if not key:
            return False
        return key.lower() not in _PLACEHOLDER_KEYS
