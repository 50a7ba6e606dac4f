"""
Pydantic schemas for resume analysis results.

Every score is clamped to [0, 100] and every list is deduplicated
(order-preserving) and length-capped by the validators below, so no
construction path can produce an out-of-range result.
"""
import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# Category keys, in the order the rule-based scorer evaluates them
CATEGORIES = (
    "contactInfo",
    "structure",
    "content",
    "keywords",
    "formatting",
    "experience",
    "education",
    "skills",
)

MAX_STRENGTHS = 8
MAX_CRITICAL_ISSUES = 8
MAX_ACTIONABLE_STEPS = 10
MAX_RECOMMENDATIONS = 10
MAX_CATEGORY_ITEMS = 10
MAX_KEYWORDS = 20

PRIORITIES = ("high", "medium", "low")


def clamp_score(value: Any) -> int:
    """Coerce anything to an integer score in [0, 100]; garbage becomes 0."""
    if isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    return int(max(0, min(100, round(number))))


def dedupe_and_cap(items: Optional[Iterable[Any]], cap: int) -> List[str]:
    """Keep the first occurrence of each non-empty string, up to ``cap`` items."""
    if items is None or isinstance(items, (str, bytes, dict)):
        return []
    result = []
    seen = set()
    for item in items:
        if not isinstance(item, str):
            continue
        text = item.strip()
        if not text or text in seen:
            continue
        seen.add(text)
        result.append(text)
        if len(result) >= cap:
            break
    return result


class CamelModel(BaseModel):
    """Immutable model serialized with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class AnalysisSource(str, Enum):
    """Which analysis path produced a result."""
    AI = "ai"
    RULES = "rules"
    HYBRID = "hybrid"
    FALLBACK = "fallback"


class CategoryBreakdown(CamelModel):
    """Score and feedback for a single resume category"""
    score: int = Field(default=0, description="Category score 0-100")
    max_score: int = Field(default=100, description="Always 100")
    details: List[str] = Field(default_factory=list, description="What was found")
    suggestions: List[str] = Field(default_factory=list, description="How to improve")

    @field_validator("score", mode="before")
    @classmethod
    def _clamp_score(cls, v):
        return clamp_score(v)

    @field_validator("max_score", mode="before")
    @classmethod
    def _fixed_max_score(cls, v):
        return 100

    @field_validator("details", "suggestions", mode="before")
    @classmethod
    def _cap_lists(cls, v):
        return dedupe_and_cap(v, MAX_CATEGORY_ITEMS)


class KeywordAnalysis(CamelModel):
    """Keyword coverage summary"""
    present_keywords: List[str] = Field(default_factory=list)
    missing_keywords: List[str] = Field(default_factory=list)
    keyword_density: str = Field(default="Not analyzed")
    industry_alignment: str = Field(default="General")

    @field_validator("present_keywords", "missing_keywords", mode="before")
    @classmethod
    def _cap_lists(cls, v):
        return dedupe_and_cap(v, MAX_KEYWORDS)

    @field_validator("keyword_density", "industry_alignment", mode="before")
    @classmethod
    def _text_or_default(cls, v, info):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        if not isinstance(v, str) or not v.strip():
            return "Not analyzed" if info.field_name == "keyword_density" else "General"
        return v.strip()


class ActionableStep(CamelModel):
    """A single prioritized improvement"""
    priority: Literal["high", "medium", "low"] = "medium"
    category: str = "general"
    action: str = ""
    impact: str = ""

    @field_validator("priority", mode="before")
    @classmethod
    def _known_priority(cls, v):
        if isinstance(v, str) and v.strip().lower() in PRIORITIES:
            return v.strip().lower()
        return "medium"

    @field_validator("category", "action", "impact", mode="before")
    @classmethod
    def _as_text(cls, v, info):
        if not isinstance(v, str) or not v.strip():
            return "general" if info.field_name == "category" else ""
        return v.strip()


class AnalysisMetadata(CamelModel):
    """Provenance of an analysis result"""
    source: AnalysisSource
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    prompt_version: Optional[str] = None
    has_job_description: bool = False
    cached: bool = False
    attempts: Optional[int] = None
    key_rotations: Optional[int] = None
    ai_score: Optional[int] = None
    rules_score: Optional[int] = None


class AnalysisResult(CamelModel):
    """Complete ATS analysis, treated as a value object"""
    ats_score: int = Field(..., description="Overall ATS score 0-100")
    job_match_score: Optional[int] = Field(None, description="Job match score 0-100, absent without a job description")
    breakdown: Dict[str, CategoryBreakdown] = Field(default_factory=dict)
    keyword_analysis: KeywordAnalysis = Field(default_factory=KeywordAnalysis)
    strengths: List[str] = Field(default_factory=list)
    critical_issues: List[str] = Field(default_factory=list)
    actionable_steps: List[ActionableStep] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    overall_assessment: str = Field(default="Analysis completed")
    metadata: AnalysisMetadata

    @field_validator("ats_score", mode="before")
    @classmethod
    def _clamp_ats_score(cls, v):
        return clamp_score(v)

    @field_validator("job_match_score", mode="before")
    @classmethod
    def _clamp_job_match_score(cls, v):
        if v is None:
            return None
        return clamp_score(v)

    @field_validator("breakdown", mode="after")
    @classmethod
    def _complete_breakdown(cls, v):
        # Exactly one entry per known category, in canonical order
        return {category: v.get(category, CategoryBreakdown()) for category in CATEGORIES}

    @field_validator("strengths", mode="before")
    @classmethod
    def _cap_strengths(cls, v):
        return dedupe_and_cap(v, MAX_STRENGTHS)

    @field_validator("critical_issues", mode="before")
    @classmethod
    def _cap_critical_issues(cls, v):
        return dedupe_and_cap(v, MAX_CRITICAL_ISSUES)

    @field_validator("recommendations", mode="before")
    @classmethod
    def _cap_recommendations(cls, v):
        return dedupe_and_cap(v, MAX_RECOMMENDATIONS)

    @field_validator("actionable_steps", mode="after")
    @classmethod
    def _cap_steps(cls, v):
        steps = []
        seen = set()
        for step in v:
            if not step.action or step.action in seen:
                continue
            seen.add(step.action)
            steps.append(step)
            if len(steps) >= MAX_ACTIONABLE_STEPS:
                break
        return steps

    @field_validator("overall_assessment", mode="before")
    @classmethod
    def _assessment_text(cls, v):
        if not isinstance(v, str) or not v.strip():
            return "Analysis completed"
        return v.strip()

    @property
    def source(self) -> AnalysisSource:
        return self.metadata.source

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the camelCase JSON structure."""
        return self.model_dump(by_alias=True, mode="json")
