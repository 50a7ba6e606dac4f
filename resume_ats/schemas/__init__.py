"""Pydantic schemas for analysis results."""

from resume_ats.schemas.analysis_schema import (
    CATEGORIES,
    ActionableStep,
    AnalysisMetadata,
    AnalysisResult,
    AnalysisSource,
    CategoryBreakdown,
    KeywordAnalysis,
    clamp_score,
    dedupe_and_cap,
)

__all__ = [
    'CATEGORIES',
    'ActionableStep',
    'AnalysisMetadata',
    'AnalysisResult',
    'AnalysisSource',
    'CategoryBreakdown',
    'KeywordAnalysis',
    'clamp_score',
    'dedupe_and_cap',
]
