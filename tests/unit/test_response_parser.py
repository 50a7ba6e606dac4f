"""
Unit tests for AI response parsing
Tests JSON extraction, top-level validation and field repair
"""
import json

import pytest

from resume_ats.exceptions import ParseError
from resume_ats.schemas import CATEGORIES, AnalysisSource
from resume_ats.services.ai_analysis.response_parser import (
    extract_json_object,
    parse_ats_response,
    parse_json_response,
)


@pytest.mark.unit
class TestExtractJsonObject:
    """Tests for balanced-brace extraction"""

    def test_object_in_prose(self):
        assert extract_json_object('Sure! {"a": 1} Hope that helps {"b": 2}') == '{"a": 1}'

    def test_braces_inside_strings(self):
        text = 'prefix {"note": "use {braces} and \\"quotes\\" }", "n": {"x": 1}} suffix'
        extracted = extract_json_object(text)
        assert json.loads(extracted) == {"note": 'use {braces} and "quotes" }', "n": {"x": 1}}

    def test_unbalanced(self):
        assert extract_json_object('{"a": {"b": 1}') is None
        assert extract_json_object('no json here') is None


@pytest.mark.unit
class TestParseJsonResponse:
    """Tests for JSON parsing fallbacks"""

    def test_whole_text_fallback(self):
        assert parse_json_response('  [1, 2, 3]  ') == [1, 2, 3]

    @pytest.mark.parametrize("text", ["", "   ", "not json at all", '{"broken": }'])
    def test_unparseable(self, text):
        with pytest.raises(ParseError):
            parse_json_response(text)


@pytest.mark.unit
class TestParseAtsResponse:
    """Tests for response to AnalysisResult conversion"""

    def test_valid_response(self, valid_ai_text):
        result = parse_ats_response(valid_ai_text, has_job_description=True, prompt_version="v2.0", attempts=1)
        assert result.ats_score == 82
        assert result.job_match_score == 74
        assert result.source is AnalysisSource.AI
        assert result.metadata.prompt_version == "v2.0"
        assert result.metadata.attempts == 1
        assert result.keyword_analysis.present_keywords == ["python", "aws", "kubernetes"]
        assert result.breakdown["structure"].suggestions == ["Add a summary"]
        assert result.actionable_steps[0].priority == "high"

    def test_job_match_absent_without_job_description(self, valid_ai_text):
        result = parse_ats_response(valid_ai_text, has_job_description=False)
        assert result.job_match_score is None
        assert result.metadata.has_job_description is False

    def test_non_numeric_job_match_dropped(self):
        result = parse_ats_response('{"atsScore": 70, "jobMatchScore": "high"}', has_job_description=True)
        assert result.job_match_score is None

    def test_scores_clamped(self):
        text = '{"atsScore": 135, "breakdown": {"skills": {"score": -20}, "content": {"score": "77"}}}'
        result = parse_ats_response(text, has_job_description=False)
        assert result.ats_score == 100
        assert result.breakdown["skills"].score == 0
        assert result.breakdown["content"].score == 77

    def test_missing_fields_defaulted(self):
        result = parse_ats_response('{"atsScore": 64.4}', has_job_description=False)
        assert result.ats_score == 64
        assert tuple(result.breakdown) == CATEGORIES
        assert result.strengths == []
        assert result.overall_assessment == "Analysis completed"
        assert result.keyword_analysis.keyword_density == "Not analyzed"

    def test_alternate_breakdown_keys(self):
        text = '{"atsScore": 50, "breakdown": {"contactInfo": {"score": 60, "found": ["Email"], "missing": ["Phone"]}}}'
        result = parse_ats_response(text, has_job_description=False)
        assert result.breakdown["contactInfo"].details == ["Email"]
        assert result.breakdown["contactInfo"].suggestions == ["Phone"]

    def test_lists_capped(self):
        payload = {"atsScore": 50, "strengths": [f"s{i}" for i in range(20)]}
        result = parse_ats_response(json.dumps(payload), has_job_description=False)
        assert len(result.strengths) == 8

    @pytest.mark.parametrize("text", [
        '[80, 75]',
        '"just a string"',
        '{"jobMatchScore": 80}',
        '{"atsScore": "eighty"}',
        '{"atsScore": true}',
        '{"atsScore": null}',
    ])
    def test_structurally_invalid(self, text):
        with pytest.raises(ParseError):
            parse_ats_response(text, has_job_description=True)
