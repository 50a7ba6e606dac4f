"""
Rule-Based ATS Scorer Package

Deterministic resume scoring from text patterns.

Sub-modules:
- vocabulary: keyword tables, patterns and category weights
- category_analyzers: one pure analyzer per resume category
- feedback: recommendations, prioritized steps and keyword summary
- rule_based_scorer: composite scoring and reshaping into AnalysisResult
"""

from resume_ats.services.ats_scorer.rule_based_scorer import RuleAnalysis, RuleBasedScorer, composite_score
from resume_ats.services.ats_scorer.category_analyzers import CategoryResult, extract_section

__all__ = [
    'RuleAnalysis',
    'RuleBasedScorer',
    'composite_score',
    'CategoryResult',
    'extract_section',
]
