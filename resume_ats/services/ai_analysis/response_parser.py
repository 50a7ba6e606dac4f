"""
AI response parsing: parse, then validate the top-level shape, then default
field by field.

Structurally invalid responses (no JSON object, a non-object top level,
a missing or non-numeric atsScore) are rejected with ParseError. Anything
below the top level is repaired: scores are clamped and lists are capped
by the schema validators, missing fields get defaults.
"""
import json
import logging
from typing import Any, List, Optional

from pydantic import ValidationError as PydanticValidationError

from resume_ats.exceptions import ParseError
from resume_ats.schemas import (
    CATEGORIES,
    ActionableStep,
    AnalysisMetadata,
    AnalysisResult,
    AnalysisSource,
    CategoryBreakdown,
    KeywordAnalysis,
)

logger = logging.getLogger(__name__)


def extract_json_object(text: str) -> Optional[str]:
    """
    Return the first balanced ``{...}`` substring.

    Braces inside JSON string literals (including escaped quotes) do not
    count towards the balance.
    """
    start = text.find('{')
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for position in range(start, len(text)):
        char = text[position]
        if in_string:
            if escaped:
                escaped = False
            elif char == '\\':
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
            if depth == 0:
                return text[start:position + 1]
    return None


def parse_json_response(text: str) -> Any:
    """
    Parse JSON from a free-form model response.

    Tries the first balanced object first, then the whole response.

    Raises:
        ParseError: If neither parses
    """
    if not isinstance(text, str) or not text.strip():
        raise ParseError("Empty AI response", raw_response=text if isinstance(text, str) else None)

    candidate = extract_json_object(text)
    if candidate is not None:
        try:
            return json.loads(candidate)
        except json.JSONDecodeError as e:
            logger.debug(f"Balanced JSON candidate did not parse: {e}")

    try:
        return json.loads(text.strip())
    except json.JSONDecodeError as e:
        raise ParseError(f"AI response is not valid JSON: {e}", raw_response=text[:500]) from e


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _first_list(raw: dict, *names: str) -> List[Any]:
    for name in names:
        value = _as_list(raw.get(name))
        if value:
            return value
    return []


def _parse_breakdown(raw: Any) -> dict:
    raw = raw if isinstance(raw, dict) else {}
    breakdown = {}
    for category in CATEGORIES:
        entry = raw.get(category)
        entry = entry if isinstance(entry, dict) else {}
        breakdown[category] = CategoryBreakdown(
            score=entry.get('score'),
            details=_first_list(entry, 'details', 'found'),
            suggestions=_first_list(entry, 'suggestions', 'issues', 'missing'),
        )
    return breakdown


def _parse_steps(raw: Any) -> List[ActionableStep]:
    return [ActionableStep.model_validate(step) for step in _as_list(raw) if isinstance(step, dict)]


def parse_ats_response(
    text: str,
    has_job_description: bool,
    prompt_version: Optional[str] = None,
    **metadata: Any,
) -> AnalysisResult:
    """
    Turn a raw model response into an AnalysisResult (source "ai").

    Args:
        text: Raw provider response
        has_job_description: Whether a job description was supplied; without
            one the job match score is always absent
        prompt_version: Prompt version recorded in metadata
        **metadata: Extra AnalysisMetadata fields (attempts, key_rotations)

    Returns:
        Validated AnalysisResult

    Raises:
        ParseError: If the response has no usable top-level structure
    """
    data = parse_json_response(text)

    if not isinstance(data, dict):
        raise ParseError(f"Top-level JSON is {type(data).__name__}, expected object", raw_response=text[:500])
    if not _is_number(data.get('atsScore')):
        raise ParseError("atsScore missing or not a number", raw_response=text[:500])

    job_match = data.get('jobMatchScore')
    if not has_job_description or not _is_number(job_match):
        job_match = None

    keyword_raw = data.get('keywordAnalysis')

    try:
        return AnalysisResult(
            ats_score=data['atsScore'],
            job_match_score=job_match,
            breakdown=_parse_breakdown(data.get('breakdown')),
            keyword_analysis=(
                KeywordAnalysis.model_validate(keyword_raw) if isinstance(keyword_raw, dict) else KeywordAnalysis()
            ),
            strengths=_as_list(data.get('strengths')),
            critical_issues=_as_list(data.get('criticalIssues')),
            actionable_steps=_parse_steps(data.get('actionableSteps')),
            recommendations=_as_list(data.get('recommendations')),
            overall_assessment=data.get('overallAssessment'),
            metadata=AnalysisMetadata(
                source=AnalysisSource.AI,
                prompt_version=prompt_version,
                has_job_description=has_job_description,
                **metadata,
            ),
        )
    except PydanticValidationError as e:
        raise ParseError(f"AI response failed validation: {e}", raw_response=text[:500]) from e
