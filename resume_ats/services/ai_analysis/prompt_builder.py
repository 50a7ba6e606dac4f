"""
ATS analysis prompt.

The prompt pins one JSON object with exact field names. The provider gives
no schema guarantee, so the response parser never relies on it.
"""

PROMPT_VERSION = "v2.0"


_CATEGORY_DESCRIPTIONS = [
    ("contactInfo", "email, phone, LinkedIn, location and links"),
    ("structure", "standard section headers, ordering and length"),
    ("content", "action verbs, quantified achievements and bullet points"),
    ("keywords", "industry keywords and density"),
    ("formatting", "ATS-safe characters, bullets and spacing"),
    ("experience", "titles, employment dates, employers and progression"),
    ("education", "degrees, institutions, honors and certifications"),
    ("skills", "skills list size, technical/soft balance and proficiency"),
]


def _breakdown_schema() -> str:
    entries = []
    for name, focus in _CATEGORY_DESCRIPTIONS:
        entries.append(
            f'    "{name}": {{\n'
            f'      "score": <number 0-100, {focus}>,\n'
            f'      "details": ["what was found"],\n'
            f'      "suggestions": ["specific improvements"]\n'
            f'    }}'
        )
    return ",\n".join(entries)


def _job_section(job_description: str) -> str:
    if not job_description:
        return ""
    return f"""
JOB DESCRIPTION TO MATCH:
{job_description}

ADDITIONAL ANALYSIS REQUIRED:
- Calculate job match score (0-100)
- Identify matching keywords
- List missing keywords from job description
- Provide tailored recommendations for this specific job
"""


def build_ats_prompt(resume_text: str, job_description: str = "") -> str:
    """
    Build the ATS analysis prompt.

    Args:
        resume_text: Normalized resume text
        job_description: Normalized job description, may be empty

    Returns:
        Prompt text
    """
    job_match_hint = "<number 0-100>" if job_description else "null"

    return f"""You are an expert ATS (Applicant Tracking System) analyzer. Analyze the following resume for ATS compatibility and provide a comprehensive assessment.

PROMPT VERSION: {PROMPT_VERSION}

RESUME TEXT:
{resume_text}
{_job_section(job_description)}
Provide your analysis in the following EXACT JSON format (no additional text, no markdown):

{{
  "atsScore": <number 0-100>,
  "jobMatchScore": {job_match_hint},
  "breakdown": {{
{_breakdown_schema()}
  }},
  "keywordAnalysis": {{
    "presentKeywords": ["keywords found in resume"],
    "missingKeywords": ["important keywords missing"],
    "keywordDensity": "<assessment>",
    "industryAlignment": "<detected industry>"
  }},
  "strengths": ["top resume strengths, at most 8"],
  "criticalIssues": ["high-priority problems to fix, at most 8"],
  "actionableSteps": [
    {{
      "priority": "high|medium|low",
      "category": "content|format|keywords|structure",
      "action": "specific action to take",
      "impact": "expected improvement"
    }}
  ],
  "recommendations": ["general improvement recommendations, at most 10"],
  "overallAssessment": "<2-3 sentence summary>"
}}

SCORING GUIDELINES:
- 90-100: Excellent ATS compatibility, likely to pass most systems
- 70-89: Good compatibility with minor improvements needed
- 50-69: Moderate compatibility, significant improvements recommended
- Below 50: Poor compatibility, major revisions needed

Focus on:
1. Standard section headers (Experience, Education, Skills)
2. Keyword optimization for ATS parsing
3. Quantifiable achievements with metrics
4. Action verbs at the start of bullet points
5. Clean formatting without tables/graphics
6. Complete contact information
7. Relevant skills matching industry standards"""
