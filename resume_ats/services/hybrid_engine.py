"""
Hybrid Merge Engine

Combines the rule-based scorer and the AI analysis client into one result.
Validation errors are the only failures a caller ever sees; everything else
degrades through a four-tier ladder:

    HYBRID      AI and rules both succeeded; scores blended 60/40
    AI_ONLY     rules failed; AI result passed through unchanged
    RULES_ONLY  AI failed; rule analysis reshaped into the shared schema
    EMERGENCY   both failed; minimal keyword heuristic
"""
import logging
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from resume_ats.exceptions import ServiceUnavailable
from resume_ats.schemas import (
    CATEGORIES,
    ActionableStep,
    AnalysisMetadata,
    AnalysisResult,
    AnalysisSource,
    CategoryBreakdown,
    KeywordAnalysis,
    dedupe_and_cap,
)
from resume_ats.services.ai_analysis.client import AIAnalysisClient
from resume_ats.services.ats_scorer import RuleAnalysis, RuleBasedScorer
from resume_ats.services.input_normalizer import normalize_job_description, normalize_resume

logger = logging.getLogger(__name__)


AI_WEIGHT = 0.6
RULES_WEIGHT = 0.4
MERGED_CATEGORY_ITEMS = 5

EMERGENCY_BASE_SCORE = 30
EMERGENCY_PHONE_PATTERN = re.compile(r"\d{3}[-.]?\d{3}[-.]?\d{4}")
EMERGENCY_CATEGORY_SCORE = 50
EMERGENCY_FORMATTING_SCORE = 70


class AnalysisTier(Enum):
    """Which rung of the fallback ladder produced a result."""
    HYBRID = "hybrid"
    AI_ONLY = "ai_only"
    RULES_ONLY = "rules_only"
    EMERGENCY = "emergency"


class TieredResult(BaseModel):
    """An AnalysisResult tagged with the tier that produced it"""
    model_config = ConfigDict(frozen=True)

    tier: AnalysisTier
    result: AnalysisResult


def blend_scores(ai_score: int, rules_score: int) -> int:
    """round(0.6 * ai + 0.4 * rules). Integer inputs never land on .5."""
    return int(round(ai_score * AI_WEIGHT + rules_score * RULES_WEIGHT))


def merge_category(ai: CategoryBreakdown, rules: CategoryBreakdown) -> CategoryBreakdown:
    return CategoryBreakdown(
        score=blend_scores(ai.score, rules.score),
        details=dedupe_and_cap(ai.details + rules.details, MERGED_CATEGORY_ITEMS),
        suggestions=dedupe_and_cap(ai.suggestions + rules.suggestions, MERGED_CATEGORY_ITEMS),
    )


def build_hybrid_result(ai: AnalysisResult, rules: RuleAnalysis, has_job_description: bool) -> AnalysisResult:
    """
    Blend an AI result with a rule analysis.

    Scores are blended overall and per category. List fields are the
    order-preserving union (AI first), capped by the schema. AI keyword
    analysis is kept unless it came back empty.
    """
    rules_result = rules.to_analysis_result(has_job_description=has_job_description)

    keyword_analysis = ai.keyword_analysis
    if not keyword_analysis.present_keywords and not keyword_analysis.missing_keywords:
        keyword_analysis = rules_result.keyword_analysis

    return AnalysisResult(
        ats_score=blend_scores(ai.ats_score, rules.ats_score),
        job_match_score=ai.job_match_score,
        breakdown={
            category: merge_category(ai.breakdown[category], rules_result.breakdown[category])
            for category in CATEGORIES
        },
        keyword_analysis=keyword_analysis,
        strengths=ai.strengths + rules.strengths,
        critical_issues=ai.critical_issues + rules.weaknesses,
        actionable_steps=list(ai.actionable_steps) + list(rules_result.actionable_steps),
        recommendations=ai.recommendations + rules.recommendations,
        overall_assessment=ai.overall_assessment,
        metadata=ai.metadata.model_copy(update={
            'source': AnalysisSource.HYBRID,
            'timestamp': datetime.now(timezone.utc),
            'ai_score': ai.ats_score,
            'rules_score': rules.ats_score,
        }),
    )


def build_emergency_result(resume_text: str, has_job_description: bool = False) -> AnalysisResult:
    """Minimal heuristic result used when both analysis paths failed."""
    text = resume_text.lower()
    score = EMERGENCY_BASE_SCORE
    if '@' in text:
        score += 15
    if EMERGENCY_PHONE_PATTERN.search(text):
        score += 10
    if 'experience' in text:
        score += 15
    if 'education' in text:
        score += 10
    if 'skills' in text:
        score += 10

    breakdown = {
        category: CategoryBreakdown(
            score=EMERGENCY_FORMATTING_SCORE if category == 'formatting' else EMERGENCY_CATEGORY_SCORE,
        )
        for category in CATEGORIES
    }

    return AnalysisResult(
        ats_score=score,
        job_match_score=None,
        breakdown=breakdown,
        keyword_analysis=KeywordAnalysis(keyword_density='Unable to analyze', industry_alignment='Unknown'),
        strengths=['Resume content detected'],
        critical_issues=['Full analysis unavailable'],
        actionable_steps=[ActionableStep(
            priority='high',
            category='general',
            action='Please try again or contact support',
            impact='Get complete analysis',
        )],
        recommendations=['Try uploading again'],
        overall_assessment='Basic analysis completed. Please try again for detailed results.',
        metadata=AnalysisMetadata(source=AnalysisSource.FALLBACK, has_job_description=has_job_description),
    )


def resolve_tier(
    ai_result: Optional[AnalysisResult],
    rule_analysis: Optional[RuleAnalysis],
    resume_text: str,
    has_job_description: bool,
) -> TieredResult:
    """Pick the ladder rung from whichever analyses succeeded."""
    if ai_result is not None and rule_analysis is not None:
        return TieredResult(
            tier=AnalysisTier.HYBRID,
            result=build_hybrid_result(ai_result, rule_analysis, has_job_description),
        )
    if ai_result is not None:
        return TieredResult(tier=AnalysisTier.AI_ONLY, result=ai_result)
    if rule_analysis is not None:
        return TieredResult(
            tier=AnalysisTier.RULES_ONLY,
            result=rule_analysis.to_analysis_result(has_job_description=has_job_description),
        )
    return TieredResult(
        tier=AnalysisTier.EMERGENCY,
        result=build_emergency_result(resume_text, has_job_description),
    )


class HybridAnalysisEngine:
    """
    Entry point for resume analysis.

    Thread-safe as long as the injected scorer and client are; the engine
    itself holds no mutable state.
    """

    def __init__(self, scorer: RuleBasedScorer, ai_client: Optional[AIAnalysisClient] = None):
        """
        Args:
            scorer: Rule-based scorer
            ai_client: AI analysis client; None runs rules only
        """
        self.scorer = scorer
        self.ai_client = ai_client

    def combine(self, resume_text: str, job_description: Optional[str] = None) -> AnalysisResult:
        """
        Analyze a resume; never fails except on invalid input.

        Args:
            resume_text: Raw resume text (100-30000 chars after cleaning)
            job_description: Optional raw job description (up to 10000 chars)

        Returns:
            AnalysisResult from the highest tier that succeeded

        Raises:
            ValidationError: If either input is rejected by the normalizer
        """
        return self.combine_tiered(resume_text, job_description).result

    analyze = combine

    def combine_tiered(self, resume_text: str, job_description: Optional[str] = None) -> TieredResult:
        """Same as combine, but also reports which tier produced the result."""
        resume = normalize_resume(resume_text)
        job = normalize_job_description(job_description)
        has_job = bool(job)

        ai_result = self._run_ai(resume, job)
        rule_analysis = self._run_rules(resume)

        tiered = resolve_tier(ai_result, rule_analysis, resume, has_job)
        logger.info(
            f"Resume analysis completed via {tiered.tier.value} tier, score {tiered.result.ats_score}",
            extra={'tier': tiered.tier.value, 'ats_score': tiered.result.ats_score},
        )
        return tiered

    def score_rules_only(self, resume_text: str) -> AnalysisResult:
        """Rule-based scoring of raw text, without the AI path."""
        return self.scorer.score_resume(normalize_resume(resume_text))

    def health_status(self) -> dict:
        """AI path and cache health."""
        if self.ai_client is None:
            return {'ai': {'initialized': False}, 'cache': None}
        cache = self.ai_client.cache
        return {
            'ai': self.ai_client.get_health_status(),
            'cache': cache.stats() if cache is not None else None,
        }

    def close(self):
        """Release background resources."""
        if self.ai_client is not None and self.ai_client.cache is not None:
            self.ai_client.cache.shutdown()

    def _run_ai(self, resume: str, job: str) -> Optional[AnalysisResult]:
        if self.ai_client is None:
            return None
        try:
            return self.ai_client.analyze(resume, job)
        except ServiceUnavailable as e:
            logger.warning(
                f"AI analysis unavailable, falling back to rules: {e.message}",
                extra={'attempts': e.attempts, 'key_rotations': e.key_rotations},
            )
        except Exception as e:
            logger.exception(f"Unexpected AI analysis failure: {e}")
        return None

    def _run_rules(self, resume: str) -> Optional[RuleAnalysis]:
        try:
            return self.scorer.analyze(resume)
        except Exception as e:
            logger.exception(f"Rule-based scoring failed: {e}")
        return None
