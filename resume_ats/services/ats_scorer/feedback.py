"""
Feedback generation for rule-based analyses.

Turns category findings into recommendations, prioritized steps and a
keyword summary.
"""
from typing import Dict, List

from resume_ats.schemas import ActionableStep, KeywordAnalysis
from resume_ats.services.ats_scorer import vocabulary as vocab
from resume_ats.services.ats_scorer.category_analyzers import CategoryResult, KeywordCategoryResult


MAX_ACTIONABLE_FEEDBACK = 5
MAX_NEXT_STEPS = 5


def recommendation_for_issue(issue: str) -> str:
    return vocab.ISSUE_RECOMMENDATIONS.get(issue, vocab.DEFAULT_RECOMMENDATION)


def collect_strengths(categories: Dict[str, CategoryResult]) -> List[str]:
    """All positive findings, in category order."""
    return [detail for result in categories.values() for detail in result.details]


def collect_weaknesses(categories: Dict[str, CategoryResult]) -> List[str]:
    """All issues, in category order."""
    return [issue for result in categories.values() for issue in result.issues]


def build_recommendations(categories: Dict[str, CategoryResult]) -> List[str]:
    """One recommendation per issue, deduplicated, in category order."""
    recommendations = []
    for issue in collect_weaknesses(categories):
        recommendation = recommendation_for_issue(issue)
        if recommendation not in recommendations:
            recommendations.append(recommendation)
    return recommendations


def build_actionable_feedback(final_score: int, categories: Dict[str, CategoryResult]) -> List[ActionableStep]:
    """
    Prioritized improvements driven by score thresholds.

    Args:
        final_score: Composite rule-based score
        categories: Category results keyed by category name

    Returns:
        Up to five ActionableStep items, highest priority first
    """
    feedback = []

    if final_score < 60:
        feedback.append(ActionableStep(
            priority='high',
            category='overall',
            action='Focus on adding quantifiable achievements and industry keywords',
            impact='Can improve ATS score by 20-30 points',
        ))

    if categories['content'].score < 70:
        feedback.append(ActionableStep(
            priority='high',
            category='content',
            action='Add more action verbs and quantifiable results',
            impact='Significantly improves resume impact and ATS parsing',
        ))

    if categories['keywords'].score < 60:
        feedback.append(ActionableStep(
            priority='medium',
            category='keywords',
            action='Include more industry-specific keywords and skills',
            impact='Improves matching with job requirements',
        ))

    return feedback[:MAX_ACTIONABLE_FEEDBACK]


def next_steps(final_score: int) -> List[str]:
    """General next steps for the score band."""
    if final_score >= 80:
        steps = vocab.NEXT_STEPS_STRONG
    elif final_score >= 60:
        steps = vocab.NEXT_STEPS_GOOD
    else:
        steps = vocab.NEXT_STEPS_WEAK
    return list(steps[:MAX_NEXT_STEPS])


def build_keyword_analysis(keywords: KeywordCategoryResult) -> KeywordAnalysis:
    """Summarize keyword coverage for the detected industry."""
    if keywords.industry == vocab.DEFAULT_INDUSTRY:
        alignment = 'General'
    else:
        alignment = f"{keywords.industry.capitalize()} ({len(keywords.matched_keywords)} industry keywords)"
    return KeywordAnalysis(
        present_keywords=keywords.matched_keywords,
        missing_keywords=keywords.missing_keywords,
        keyword_density=f"{keywords.density:.1f}%",
        industry_alignment=alignment,
    )
