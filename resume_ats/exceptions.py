"""Exception taxonomy for the resume analysis engine.

Only ``ValidationError`` is allowed to reach callers of the merge engine.
Every other error is absorbed locally by the fallback ladder.
"""

from enum import Enum
from typing import Optional


class ATSEngineError(Exception):
    """Base class for all engine errors."""
    pass


class ValidationReason(Enum):
    """Why an input was rejected."""
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    INJECTION_DETECTED = "injection_detected"
    NOT_A_STRING = "not_a_string"


class ValidationError(ATSEngineError):
    """Raised when resume or job description text is rejected before processing."""

    def __init__(self, reason: ValidationReason, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message

    def to_dict(self) -> dict:
        return {"error": "ValidationError", "reason": self.reason.value, "message": self.message}


class ServiceUnavailable(ATSEngineError):
    """Raised when the AI provider cannot produce a usable analysis."""

    def __init__(self, message: str, attempts: int = 0, key_rotations: int = 0):
        super().__init__(message)
        self.message = message
        self.attempts = attempts
        self.key_rotations = key_rotations


class ParseError(ATSEngineError):
    """Raised when an AI response holds no usable JSON object."""

    def __init__(self, message: str, raw_response: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.raw_response = raw_response


class CacheError(ATSEngineError):
    """Raised by the durable cache store when it cannot be reached or decoded."""
    pass
