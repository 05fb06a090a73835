from __future__ import annotations

import httpx
from loguru import logger

from chat_relay.errors import ModelInvocationError
from chat_relay.models import ErrorKind, GenerationBudget, TranscriptEntry
from chat_relay.providers.common import status_error_message

_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


def _to_gemini_contents(transcript: list[TranscriptEntry], prompt: str) -> list[dict]:
    contents = [
        {"role": entry.role, "parts": [{"text": entry.content}]}
        for entry in transcript
    ]
    contents.append({"role": "user", "parts": [{"text": prompt}]})
    return contents


def _extract_text(data: dict) -> str:
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(str(p.get("text", "")) for p in parts if isinstance(p, dict))


def _no_text_reason(data: dict) -> str:
    """Explain a 200 response without reply text, e.g. a safety block."""
    feedback = data.get("promptFeedback") or {}
    if feedback.get("blockReason"):
        return f"prompt blocked ({feedback['blockReason']})"
    candidates = data.get("candidates") or []
    if not candidates:
        return "no candidates returned"
    finish_reason = candidates[0].get("finishReason")
    if finish_reason:
        return f"generation stopped ({finish_reason})"
    return "empty reply"


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            return str(error.get("message", ""))
    return response.text


class GeminiProvider:
    """Generative Language API client (``models/{model}:generateContent``)."""

    def __init__(
        self,
        api_key: str,
        *,
        timeout: float = 30.0,
        base_url: str = _GEMINI_BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._timeout = timeout
        self._base_url = base_url.rstrip("/")
        self._transport = transport

    async def generate(
        self,
        model: str,
        system_prompt: str,
        transcript: list[TranscriptEntry],
        prompt: str,
        budget: GenerationBudget,
    ) -> str:
        url = f"{self._base_url}/models/{model}:generateContent"
        headers = {
            "x-goog-api-key": self._api_key,
            "Content-Type": "application/json",
        }
        payload: dict = {
            "contents": _to_gemini_contents(transcript, prompt),
            "generationConfig": {
                "maxOutputTokens": budget.max_output_tokens,
                "temperature": budget.temperature,
                "topK": budget.top_k,
                "topP": budget.top_p,
            },
        }
        if system_prompt:
            payload["systemInstruction"] = {"parts": [{"text": system_prompt}]}

        logger.debug(
            f"API request: model={model}, max_output_tokens={budget.max_output_tokens}, "
            f"history={len(transcript)}"
        )
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as ex:
            raise ModelInvocationError(f"Gemini request failed: {ex}") from ex

        if response.status_code >= 400:
            raise ModelInvocationError(
                status_error_message(response.status_code, _error_detail(response)),
                status_code=response.status_code,
            )

        data = response.json()
        text = _extract_text(data)
        if not text.strip():
            raise ModelInvocationError(
                f"Gemini sent no reply text: {_no_text_reason(data)}",
                kind=ErrorKind.UNKNOWN.value,
            )
        logger.debug(f"API response: status={response.status_code}, text_len={len(text)}")
        return text
