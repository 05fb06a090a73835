from __future__ import annotations

from chat_relay.errors import ModelInvocationError
from chat_relay.models import Classification, ErrorKind

# Checked in order; the first rule with a matching substring wins.
_SUBSTRING_RULES: list[tuple[tuple[str, ...], ErrorKind]] = [
    (("API key", "401"), ErrorKind.INVALID_CREDENTIAL),
    (("model", "404"), ErrorKind.MODEL_UNAVAILABLE),
    (("quota", "429"), ErrorKind.QUOTA_EXCEEDED),
    (("permission", "403"), ErrorKind.PERMISSION_DENIED),
]

_STATUS_KINDS: dict[int, ErrorKind] = {
    401: ErrorKind.INVALID_CREDENTIAL,
    404: ErrorKind.MODEL_UNAVAILABLE,
    429: ErrorKind.QUOTA_EXCEEDED,
    403: ErrorKind.PERMISSION_DENIED,
}

_USER_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.INVALID_CREDENTIAL: "there's an issue with the API key; check configuration",
    ErrorKind.MODEL_UNAVAILABLE: "the model configuration needs to be updated",
    ErrorKind.QUOTA_EXCEEDED: "the request quota has been exceeded",
    ErrorKind.PERMISSION_DENIED: "access was denied; check permissions",
}


def _raw_message(raw_error: BaseException | str | None) -> str:
    if raw_error is None:
        return ""
    if isinstance(raw_error, str):
        return raw_error
    text = str(raw_error)
    return text or type(raw_error).__name__


def _structured_kind(raw_error: BaseException | str | None) -> ErrorKind | None:
    if not isinstance(raw_error, ModelInvocationError):
        return None
    if raw_error.kind:
        try:
            return ErrorKind(raw_error.kind)
        except ValueError:
            pass
    if raw_error.status_code is not None:
        return _STATUS_KINDS.get(raw_error.status_code)
    return None


def _substring_kind(message: str) -> ErrorKind:
    for needles, kind in _SUBSTRING_RULES:
        if any(needle in message for needle in needles):
            return kind
    return ErrorKind.UNKNOWN


def classify(raw_error: BaseException | str | None) -> Classification:
    """Map an invocation failure to a kind and a message safe to show users.

    Structured status codes from a ModelInvocationError decide first; plain
    exceptions fall back to matching on their message text. Never raises.
    """
    message = _raw_message(raw_error)
    kind = _structured_kind(raw_error)
    if kind is None:
        kind = _substring_kind(message)
    if kind is ErrorKind.UNKNOWN:
        user_message = f"a technical issue occurred: {message}"
    else:
        user_message = _USER_MESSAGES[kind]
    return Classification(kind=kind, user_message=user_message, raw_message=message)


def fallback_reply(classification: Classification) -> str:
    """Reply text stored and shown in place of a model answer."""
    if classification.kind is ErrorKind.UNKNOWN:
        text = classification.user_message
        return text[:1].upper() + text[1:]
    return f"Sorry, I ran into a technical issue: {classification.user_message}."
