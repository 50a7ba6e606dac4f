"""
Unit tests for analysis schemas
Tests score clamping, list caps and camelCase serialization
"""
import pytest

from resume_ats.schemas import (
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


def _result(**overrides):
    fields = {
        "ats_score": 70,
        "metadata": AnalysisMetadata(source=AnalysisSource.RULES),
    }
    fields.update(overrides)
    return AnalysisResult(**fields)


@pytest.mark.unit
class TestClampScore:
    """Tests for score coercion"""

    @pytest.mark.parametrize("value,expected", [
        (50, 50),
        (-10, 0),
        (150, 100),
        (72.6, 73),
        ("88", 88),
        (None, 0),
        ("n/a", 0),
        (True, 0),
        (float("nan"), 0),
        (float("inf"), 0),
    ])
    def test_clamp_score(self, value, expected):
        assert clamp_score(value) == expected


@pytest.mark.unit
class TestDedupeAndCap:
    """Tests for list normalization"""

    def test_order_preserving_dedupe(self):
        assert dedupe_and_cap(["b", "a", "b", " a ", "c"], 10) == ["b", "a", "c"]

    def test_cap(self):
        assert dedupe_and_cap([str(i) for i in range(20)], 8) == [str(i) for i in range(8)]

    def test_non_strings_and_blanks_dropped(self):
        assert dedupe_and_cap(["x", 3, None, "", "  ", {"a": 1}], 5) == ["x"]

    def test_non_list_values(self):
        assert dedupe_and_cap("single string", 5) == []
        assert dedupe_and_cap(None, 5) == []


@pytest.mark.unit
class TestAnalysisResult:
    """Tests for the result value object"""

    def test_scores_clamped(self):
        result = _result(ats_score=140, job_match_score=-3)
        assert result.ats_score == 100
        assert result.job_match_score == 0

    def test_breakdown_always_complete(self):
        result = _result(breakdown={"skills": CategoryBreakdown(score=90), "unknown": CategoryBreakdown()})
        assert tuple(result.breakdown) == CATEGORIES
        assert result.breakdown["skills"].score == 90
        assert result.breakdown["education"].score == 0

    def test_max_score_fixed(self):
        assert CategoryBreakdown(score=40, max_score=60).max_score == 100

    def test_list_caps(self):
        result = _result(
            strengths=[f"s{i}" for i in range(12)],
            critical_issues=[f"c{i}" for i in range(12)],
            recommendations=[f"r{i}" for i in range(15)],
            actionable_steps=[ActionableStep(action=f"a{i}") for i in range(15)],
        )
        assert len(result.strengths) == 8
        assert len(result.critical_issues) == 8
        assert len(result.recommendations) == 10
        assert len(result.actionable_steps) == 10

    def test_steps_deduplicated_by_action(self):
        result = _result(actionable_steps=[
            ActionableStep(priority="high", action="Add metrics"),
            ActionableStep(priority="low", action="Add metrics"),
            ActionableStep(action=""),
        ])
        assert [step.priority for step in result.actionable_steps] == ["high"]

    def test_unknown_priority_defaults_to_medium(self):
        assert ActionableStep(priority="URGENT", action="x").priority == "medium"
        assert ActionableStep(priority="High", action="x").priority == "high"

    def test_keyword_analysis_defaults(self):
        analysis = KeywordAnalysis(keyword_density="", industry_alignment=None)
        assert analysis.keyword_density == "Not analyzed"
        assert analysis.industry_alignment == "General"

    def test_frozen(self):
        result = _result()
        with pytest.raises(Exception):
            result.ats_score = 10

    def test_to_dict_camel_case(self):
        data = _result(job_match_score=None).to_dict()
        assert data["atsScore"] == 70
        assert data["jobMatchScore"] is None
        assert set(data["breakdown"]) == set(CATEGORIES)
        assert data["breakdown"]["contactInfo"]["maxScore"] == 100
        assert data["keywordAnalysis"]["keywordDensity"] == "Not analyzed"
        assert data["metadata"]["source"] == "rules"
        assert "criticalIssues" in data
        assert "overallAssessment" in data

    def test_round_trip_from_camel_case(self):
        original = _result(strengths=["Clear layout"])
        restored = AnalysisResult.model_validate(original.model_dump(mode="json", by_alias=True))
        assert restored.strengths == ["Clear layout"]
        assert restored.source is AnalysisSource.RULES
