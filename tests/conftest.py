"""Pytest configuration and fixtures."""

import json
import os
import sys
from unittest.mock import MagicMock

import pytest

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from resume_ats.services.input_normalizer import normalize_resume


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without network or Redis")


# ============================================================================
# Resume texts
# ============================================================================

STRONG_RESUME = """Alex Rivera
alex.rivera@riveradev.io | (415) 555-0199 | linkedin.com/in/alexrivera | github.com/arivera
Location: San Francisco, CA | https://riveradev.io

Professional Summary
Senior Software Engineer with 8 years of experience building cloud platforms.

Work Experience
Senior Software Engineer, Acme Technologies Inc - Jan 2020 - Present
- Led a team of 6 engineers and was promoted to tech lead in 2021
- Improved API latency by 40% across 12 microservices
- Reduced infrastructure cost by $250,000 per year using AWS and Docker
- Designed and implemented CI/CD pipelines with Jenkins, cutting release time 3x
- Mentored 5 developers and collaborated with product on agile scrum delivery

Software Developer, Beta Solutions LLC - 2016 - 2019
- Developed REST API services in Python and Django serving over 2 million users
- Built React and TypeScript dashboards used by 300 customers
- Optimized PostgreSQL queries, improving report speed by 60%
- Automated deployments on Kubernetes and Linux

Education
Bachelor of Science in Computer Science, State University, 2016
GPA: 3.7, Dean's List, cum laude

Skills
Python, JavaScript, TypeScript, Java, Go, React, Angular, Node, Django, Flask,
SQL, PostgreSQL, Redis, MongoDB, AWS, Docker, Kubernetes, Git, Linux, Bash
Leadership, communication, teamwork, analytical problem solving
Expert in Python, proficient in Go

Projects
Open source contributor to a cloud database framework

Achievements
AWS Certified Solutions Architect, completed advanced training workshop
"""

# Email, phone and the three core section words; no metrics, verbs or keywords
SCENARIO_RESUME = """Jane Doe
jane.doe@gmail.com
555-123-4567

Experience
Worked at a local bakery serving customers and handling the register every day.

Education
Studied general subjects at a community program in the evening after work shifts.

Skills
Baking, customer service, cash handling
"""

JOB_DESCRIPTION = """We are hiring a Senior Software Engineer with Python, AWS and Kubernetes experience
to build cloud services in an agile team."""


@pytest.fixture
def strong_resume():
    """Normalized, well-optimized tech resume."""
    return normalize_resume(STRONG_RESUME)


@pytest.fixture
def scenario_resume():
    """Normalized minimal resume with contact info and core section words only."""
    return normalize_resume(SCENARIO_RESUME)


@pytest.fixture
def raw_strong_resume():
    return STRONG_RESUME


@pytest.fixture
def raw_scenario_resume():
    return SCENARIO_RESUME


@pytest.fixture
def job_description():
    return JOB_DESCRIPTION


# ============================================================================
# AI provider fakes
# ============================================================================

VALID_AI_RESPONSE = {
    "atsScore": 82,
    "jobMatchScore": 74,
    "breakdown": {
        "contactInfo": {"score": 90, "details": ["Email and phone present"], "suggestions": []},
        "structure": {"score": 85, "details": ["Clear sections"], "suggestions": ["Add a summary"]},
        "content": {"score": 80, "details": ["Quantified achievements"], "suggestions": []},
        "keywords": {"score": 75, "details": ["Cloud keywords"], "suggestions": ["Add Terraform"]},
        "formatting": {"score": 88, "details": [], "suggestions": []},
        "experience": {"score": 84, "details": ["8 years"], "suggestions": []},
        "education": {"score": 70, "details": ["BS Computer Science"], "suggestions": []},
        "skills": {"score": 86, "details": ["Broad stack"], "suggestions": []},
    },
    "keywordAnalysis": {
        "presentKeywords": ["python", "aws", "kubernetes"],
        "missingKeywords": ["terraform"],
        "keywordDensity": "3.1%",
        "industryAlignment": "Tech",
    },
    "strengths": ["Strong quantified impact", "Modern cloud stack"],
    "criticalIssues": ["No Terraform experience listed"],
    "actionableSteps": [
        {"priority": "high", "category": "keywords", "action": "Add Terraform", "impact": "Better job match"},
    ],
    "recommendations": ["Mention infrastructure as code"],
    "overallAssessment": "Strong technical resume.",
}


class FakeProvider:
    """Scripted text generation provider.

    Each call pops the next scripted item: strings are returned, exceptions
    are raised. The last item repeats once the script runs out.
    """

    model_name = "fake-model"

    def __init__(self, *script):
        self.script = list(script)
        self.calls = []

    def generate(self, prompt, api_key, timeout):
        self.calls.append({"prompt": prompt, "api_key": api_key, "timeout": timeout})
        item = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(item, BaseException):
            raise item
        return item

    @property
    def api_keys_used(self):
        return [call["api_key"] for call in self.calls]


@pytest.fixture
def valid_ai_text():
    """Model response wrapping valid JSON in prose and a code fence."""
    return "Here is the analysis:\n```json\n" + json.dumps(VALID_AI_RESPONSE) + "\n```"


@pytest.fixture
def fake_provider_factory():
    return FakeProvider


@pytest.fixture
def sleep_recorder():
    """Sleep function that records delays instead of sleeping."""
    delays = []

    def sleep(seconds):
        delays.append(seconds)

    sleep.delays = delays
    return sleep


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start=1_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


# ============================================================================
# Redis
# ============================================================================

@pytest.fixture
def fake_redis():
    """MagicMock Redis connection backed by a dict."""
    store = {}
    conn = MagicMock()
    conn.store = store
    conn.get.side_effect = lambda key: store.get(key)

    def _set(key, value, ex=None):
        store[key] = value
        return True

    conn.set.side_effect = _set
    conn.delete.side_effect = lambda key: 1 if store.pop(key, None) is not None else 0
    conn.ping.return_value = True
    return conn
