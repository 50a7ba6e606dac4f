"""
Rule-Based ATS Scorer

Deterministic 0-100 ATS score computed from text patterns across eight
categories. This is the system of record whenever the AI path is
unavailable, so it never raises for string input.
"""
import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from resume_ats.schemas import (
    ActionableStep,
    AnalysisMetadata,
    AnalysisResult,
    AnalysisSource,
    CategoryBreakdown,
    KeywordAnalysis,
)
from resume_ats.services.ats_scorer import category_analyzers as analyzers
from resume_ats.services.ats_scorer import feedback
from resume_ats.services.ats_scorer.vocabulary import CATEGORY_WEIGHTS

logger = logging.getLogger(__name__)


class RuleAnalysis(BaseModel):
    """Native rule-based analysis before reshaping into an AnalysisResult"""
    ats_score: int = Field(..., ge=0, le=100)
    categories: Dict[str, analyzers.CategoryResult]
    keyword_analysis: KeywordAnalysis
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    actionable_feedback: List[ActionableStep] = Field(default_factory=list)
    next_steps: List[str] = Field(default_factory=list)

    def to_analysis_result(self, has_job_description: bool = False) -> AnalysisResult:
        """
        Reshape into the shared result schema.

        Fields only the AI path can fill (job match score) stay absent.
        Category suggestions are the recommendations for that category's
        issues; next steps follow the prioritized feedback as low-priority
        general steps.
        """
        breakdown = {
            name: CategoryBreakdown(
                score=result.score,
                details=result.details,
                suggestions=[feedback.recommendation_for_issue(issue) for issue in result.issues],
            )
            for name, result in self.categories.items()
        }
        steps = list(self.actionable_feedback) + [
            ActionableStep(
                priority='low',
                category='general',
                action=step,
                impact='Improves overall ATS compatibility',
            )
            for step in self.next_steps
        ]
        return AnalysisResult(
            ats_score=self.ats_score,
            job_match_score=None,
            breakdown=breakdown,
            keyword_analysis=self.keyword_analysis,
            strengths=self.strengths,
            critical_issues=self.weaknesses,
            actionable_steps=steps,
            recommendations=self.recommendations,
            overall_assessment=f"ATS Score: {self.ats_score}/100",
            metadata=AnalysisMetadata(
                source=AnalysisSource.RULES,
                has_job_description=has_job_description,
            ),
        )


def composite_score(scores: Dict[str, int]) -> int:
    """
    Weighted sum of category scores, clamped to [0, 100], rounded half up.

    Decimal arithmetic keeps ties such as 52.5 from drifting to 52.4999.
    """
    weighted = sum(
        Decimal(scores.get(category, 0)) * Decimal(str(weight))
        for category, weight in CATEGORY_WEIGHTS.items()
    )
    weighted = max(Decimal(0), min(Decimal(100), weighted))
    return int(weighted.quantize(Decimal(1), rounding=ROUND_HALF_UP))


class RuleBasedScorer:
    """
    Service for deterministic, pattern-based resume scoring.

    Each category is scored by an independent pure analyzer; the composite
    uses CATEGORY_WEIGHTS, where content and keywords carry 2-5x the weight
    of formatting or education.
    """

    def __init__(self, current_year: Optional[int] = None):
        """
        Args:
            current_year: Year used for the education recency bonus.
                Defaults to the current calendar year at analysis time.
        """
        self.current_year = current_year

    def analyze(self, text: str) -> RuleAnalysis:
        """
        Run all category analyzers over normalized resume text.

        Args:
            text: Normalized resume text

        Returns:
            RuleAnalysis with per-category results and feedback
        """
        lower = text.lower()
        year = self.current_year or datetime.now().year

        keyword_result = analyzers.analyze_keywords(lower, text)
        categories = {
            'contactInfo': analyzers.analyze_contact_info(lower, text),
            'structure': analyzers.analyze_structure(lower, text),
            'content': analyzers.analyze_content(lower, text),
            'keywords': keyword_result,
            'formatting': analyzers.analyze_formatting(lower, text),
            'experience': analyzers.analyze_experience(lower, text),
            'education': analyzers.analyze_education(lower, text, year),
            'skills': analyzers.analyze_skills(lower, text),
        }

        final_score = composite_score({name: result.score for name, result in categories.items()})
        logger.debug(f"Rule-based analysis completed, score: {final_score}")

        return RuleAnalysis(
            ats_score=final_score,
            categories=categories,
            keyword_analysis=feedback.build_keyword_analysis(keyword_result),
            strengths=feedback.collect_strengths(categories),
            weaknesses=feedback.collect_weaknesses(categories),
            recommendations=feedback.build_recommendations(categories),
            actionable_feedback=feedback.build_actionable_feedback(final_score, categories),
            next_steps=feedback.next_steps(final_score),
        )

    def score_resume(self, text: str, has_job_description: bool = False) -> AnalysisResult:
        """Score resume text and return the shared result schema (source "rules")."""
        return self.analyze(text).to_analysis_result(has_job_description=has_job_description)
