"""
Input Normalizer

Cleans and validates raw resume / job description text before it reaches
the scorer or the AI prompt. Pure and deterministic; safe to call from any
thread.
"""
import logging
import re

from resume_ats.exceptions import ValidationError, ValidationReason

logger = logging.getLogger(__name__)


RESUME_MIN_LENGTH = 100
RESUME_MAX_LENGTH = 30000
JOB_DESCRIPTION_MIN_LENGTH = 0
JOB_DESCRIPTION_MAX_LENGTH = 10000

# C0/C1 control characters except tab (\x09) and newline (\x0a)
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]")
# Real tags only; a bare "<50ms" or ">99%" is resume content
_HTML_TAG = re.compile(r"</?[A-Za-z][^<>\n]*>")
_HORIZONTAL_WS = re.compile(r"[ \t\f\v\u00a0]+")
_BLANK_LINES = re.compile(r"\n{3,}")

# Inputs are embedded in a remote model prompt; any of these is a hard reject
INJECTION_PATTERNS = [
    re.compile(r"\b(ignore|disregard|forget)\s+(all\s+)?(previous|prior|above|all)\s+(instructions|prompts|rules)\b", re.IGNORECASE),
    re.compile(r"\byou\s+are\s+now\s+(a|an|the)\b", re.IGNORECASE),
    re.compile(
        r"^\s*(system|assistant)\s*:\s*(you\s+(are|must|will|should)|ignore|disregard|forget|act\s+as|pretend|respond|rate|score|give|output|return|assign|from\s+now\s+on)\b",
        re.IGNORECASE | re.MULTILINE,
    ),
    re.compile(r"\[/?INST\]", re.IGNORECASE),
    re.compile(r"<\|im_(start|end)\|>", re.IGNORECASE),
    re.compile(r"<<\s*/?SYS\s*>>", re.IGNORECASE),
]


def contains_injection(text: str) -> bool:
    """Check text against the known prompt-injection patterns."""
    return any(pattern.search(text) for pattern in INJECTION_PATTERNS)


def normalize(text, min_len: int = RESUME_MIN_LENGTH, max_len: int = RESUME_MAX_LENGTH) -> str:
    """
    Clean and validate a block of text.

    Control characters are stripped (newline and tab survive), injection
    patterns are rejected, HTML tags are removed, horizontal whitespace
    runs collapse to a single space and three or more newlines collapse
    to one blank line. Length bounds apply to the cleaned text.

    Args:
        text: Raw input text
        min_len: Minimum length after cleaning
        max_len: Maximum length after cleaning

    Returns:
        Normalized text

    Raises:
        ValidationError: NOT_A_STRING, INJECTION_DETECTED, TOO_SHORT or TOO_LONG
    """
    if not isinstance(text, str):
        raise ValidationError(
            ValidationReason.NOT_A_STRING,
            f"Expected text, got {type(text).__name__}",
        )

    cleaned = _CONTROL_CHARS.sub("", text.replace("\r\n", "\n").replace("\r", "\n"))

    if contains_injection(cleaned):
        logger.warning("Rejected input matching a prompt-injection pattern")
        raise ValidationError(
            ValidationReason.INJECTION_DETECTED,
            "Input contains disallowed instruction patterns",
        )

    cleaned = _HTML_TAG.sub(" ", cleaned)
    cleaned = _HORIZONTAL_WS.sub(" ", cleaned)
    cleaned = "\n".join(line.strip() for line in cleaned.split("\n"))
    cleaned = _BLANK_LINES.sub("\n\n", cleaned).strip()

    if len(cleaned) < min_len:
        raise ValidationError(
            ValidationReason.TOO_SHORT,
            f"Text must be at least {min_len} characters (got {len(cleaned)})",
        )
    if len(cleaned) > max_len:
        raise ValidationError(
            ValidationReason.TOO_LONG,
            f"Text must be at most {max_len} characters (got {len(cleaned)})",
        )

    return cleaned


def normalize_resume(text) -> str:
    """Normalize resume text with resume length bounds."""
    return normalize(text, RESUME_MIN_LENGTH, RESUME_MAX_LENGTH)


def normalize_job_description(text) -> str:
    """Normalize an optional job description. ``None`` becomes an empty string."""
    if text is None:
        return ""
    return normalize(text, JOB_DESCRIPTION_MIN_LENGTH, JOB_DESCRIPTION_MAX_LENGTH)
