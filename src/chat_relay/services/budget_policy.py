from __future__ import annotations

from chat_relay.models import GenerationBudget

BASE_OUTPUT_TOKENS = 200
DETAILED_OUTPUT_TOKENS = 400
DETAIL_KEYWORD = "detail"

TEMPERATURE = 0.7
TOP_K = 40
TOP_P = 0.95


def compute_budget(prompt_text: str) -> GenerationBudget:
    """Pick generation limits for one prompt. Pure; depends only on the text."""
    wants_detail = DETAIL_KEYWORD in (prompt_text or "").lower()
    return GenerationBudget(
        max_output_tokens=DETAILED_OUTPUT_TOKENS if wants_detail else BASE_OUTPUT_TOKENS,
        temperature=TEMPERATURE,
        top_k=TOP_K,
        top_p=TOP_P,
    )
