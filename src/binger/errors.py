from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_TARGET = "INVALID_TARGET"
    TARGET_NOT_CONFIGURED = "TARGET_NOT_CONFIGURED"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"


class BingerError(Exception):
    """Raised by request handlers for all expected failure conditions.

    Caught by server.py and serialised into the JSON error envelope.
    Transport failures from the upstream layer are plain ``httpx`` errors
    and are never wrapped in this type below the handler level.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.recoverable = recoverable

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "suggestion": self.suggestion,
                "recoverable": self.recoverable,
            }
        }
