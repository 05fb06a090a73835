from __future__ import annotations


class RelayError(Exception):
    """Base class for errors raised inside the relay."""


class MissingInputError(RelayError, ValueError):
    def __init__(self, message: str = "Prompt and UID required"):
        super().__init__(message)


class StoreError(RelayError):
    """A read or write against the message store failed."""


class ModelInvocationError(RelayError):
    """The model capability failed to produce a reply.

    ``status_code`` carries the remote HTTP status when one is known, and
    ``kind`` an explicit failure kind when the provider already knows it.
    Either one takes precedence over matching on the message text.
    """

    def __init__(self, message: str, *, status_code: int | None = None, kind: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.kind = kind
