"""
Category analyzers for the rule-based ATS scorer.

Each analyzer is a pure function over the lower-cased text and the
original-cased text and returns a CategoryResult. Scores are bounded to
[0, 100]; issues are reported as strings rather than negative scores
wherever the scoring rules allow.
"""
import re
from typing import List, Optional

from pydantic import BaseModel, Field

from resume_ats.services.ats_scorer import vocabulary as vocab


class CategoryResult(BaseModel):
    """Native result of one category analyzer"""
    score: int = Field(..., ge=0, le=100)
    details: List[str] = Field(default_factory=list, description="Positive findings")
    issues: List[str] = Field(default_factory=list, description="Problems found")


class KeywordCategoryResult(CategoryResult):
    """Keyword analyzer result with the detected industry"""
    industry: str = Field(default=vocab.DEFAULT_INDUSTRY)
    matched_keywords: List[str] = Field(default_factory=list)
    missing_keywords: List[str] = Field(default_factory=list)
    density: float = Field(default=0.0, ge=0)


def _bounded(score: int) -> int:
    return max(0, min(score, 100))


def _count_present(text: str, keywords: List[str]) -> int:
    return sum(1 for keyword in keywords if keyword in text)


def _word_count(text: str) -> int:
    return len(text.split())


def extract_section(original_text: str, headers: List[str]) -> Optional[str]:
    """
    Extract a section body by header.

    The first header (in list order) found anywhere in the text starts the
    section; it runs to the nearest following boundary header or the end
    of the text. Headers are assumed not to nest.

    Args:
        original_text: Resume text in original case
        headers: Header aliases, tried in order

    Returns:
        Section text including its header, or None if no header is present
    """
    lower = original_text.lower()
    for header in headers:
        start = lower.find(header.lower())
        if start == -1:
            continue
        end = _next_section_index(lower, start + len(header))
        return original_text[start:end]
    return None


def _next_section_index(lower_text: str, from_index: int) -> int:
    end = len(lower_text)
    for header in vocab.SECTION_BOUNDARY_HEADERS:
        index = lower_text.find(header, from_index)
        if index != -1 and index < end:
            end = index
    return end


def analyze_contact_info(text: str, original_text: str) -> CategoryResult:
    """Email, phone, LinkedIn, location, links and GitHub."""
    score = 0
    details = []
    issues = []

    email = vocab.EMAIL_PATTERN.search(original_text)
    if email:
        score += 25
        details.append(f"Professional email found: {email.group(0)}")
        domain = email.group(0).split('@')[1].lower()
        if domain not in vocab.FREEMAIL_DOMAINS:
            score += 5
            details.append('Custom domain email (professional)')
    else:
        issues.append('Missing email address')

    if vocab.PHONE_PATTERN.search(original_text):
        score += 20
        details.append('Phone number provided')
    else:
        issues.append('Missing phone number')

    if 'linkedin' in text:
        score += 15
        details.append('LinkedIn profile included')
    else:
        issues.append('Missing LinkedIn profile')

    if any(keyword in text for keyword in vocab.LOCATION_KEYWORDS):
        score += 15
        details.append('Location information provided')

    if vocab.URL_PATTERN.search(original_text):
        score += 10
        details.append('Portfolio/website links included')

    if 'github' in text:
        score += 15
        details.append('GitHub profile included')

    return CategoryResult(score=_bounded(score), details=details, issues=issues)


def analyze_structure(text: str, original_text: str) -> CategoryResult:
    """Standard sections, section ordering and overall length."""
    score = 0
    details = []
    issues = []

    sections_found = 0
    for section, aliases in vocab.SECTION_HEADERS.items():
        if any(alias in text for alias in aliases):
            sections_found += 1
            score += 15
            details.append(f"{section.capitalize()} section identified")

    if sections_found < 3:
        issues.append('Missing key resume sections')

    experience_index = text.find('experience')
    education_index = text.find('education')
    if experience_index > 0 and education_index > experience_index:
        score += 10
        details.append('Logical section ordering (Experience before Education)')

    words = _word_count(original_text)
    low, high = vocab.OPTIMAL_WORD_RANGE
    if low <= words <= high:
        score += 10
        details.append(f"Optimal length: {words} words")
    elif words < low:
        issues.append(f"Resume too short (under {low} words)")
    elif words > vocab.MAX_WORD_COUNT:
        issues.append(f"Resume too long (over {vocab.MAX_WORD_COUNT} words)")

    return CategoryResult(score=_bounded(score), details=details, issues=issues)


def count_quantifiers(original_text: str) -> int:
    """Total matches across all quantifier patterns."""
    return sum(len(pattern.findall(original_text)) for pattern in vocab.QUANTIFIER_PATTERNS)


def analyze_content(text: str, original_text: str) -> CategoryResult:
    """Action verbs, quantified achievements, bullets and weak language."""
    score = 0
    details = []
    issues = []

    verb_count = _count_present(text, vocab.ACTION_VERBS)
    if verb_count >= 10:
        score += 25
        details.append(f"Strong action verbs used: {verb_count} found")
    elif verb_count >= 5:
        score += 15
        details.append(f"Good action verb usage: {verb_count} found")
    else:
        issues.append('Limited use of action verbs')

    quantifier_count = count_quantifiers(original_text)
    if quantifier_count >= 5:
        score += 30
        details.append(f"Excellent quantification: {quantifier_count} metrics found")
    elif quantifier_count >= 3:
        score += 20
        details.append(f"Good quantification: {quantifier_count} metrics found")
    elif quantifier_count >= 1:
        score += 10
        details.append(f"Some quantification: {quantifier_count} metrics found")
    else:
        issues.append('No quantifiable achievements found')

    bullets = (
        len(vocab.BULLET_CHARS_PATTERN.findall(original_text))
        + len(vocab.DASH_BULLET_PATTERN.findall(original_text))
    )
    if bullets >= 8:
        score += 15
        details.append(f"Well-structured with {bullets} bullet points")
    elif bullets >= 4:
        score += 10
        details.append(f"Good structure with {bullets} bullet points")

    for pattern, label in vocab.WEAK_LANGUAGE_PATTERNS:
        if len(pattern.findall(original_text)) > vocab.WEAK_PATTERN_LIMIT:
            score -= vocab.WEAK_PATTERN_PENALTY
            issues.append(f"Avoid overusing: {label}")

    return CategoryResult(score=_bounded(score), details=details, issues=issues)


def detect_industry(text: str):
    """
    Pick the industry vocabulary with the most hits.

    Returns:
        Tuple of (industry, matched keywords). Ties keep the industry
        checked first; no hits at all yields the default industry.
    """
    industry = vocab.DEFAULT_INDUSTRY
    matched: List[str] = []
    for candidate, keywords in vocab.INDUSTRY_KEYWORDS.items():
        hits = [keyword for keyword in keywords if keyword in text]
        if len(hits) > len(matched):
            industry = candidate
            matched = hits
    return industry, matched


def analyze_keywords(text: str, original_text: str) -> KeywordCategoryResult:
    """Industry alignment, keyword density, tech depth and soft skills."""
    score = 0
    details = []
    issues = []

    industry, matched = detect_industry(text)
    hit_count = len(matched)
    if hit_count >= 8:
        score += 30
        details.append(f"Strong {industry} industry alignment: {hit_count} relevant keywords")
    elif hit_count >= 5:
        score += 20
        details.append(f"Good {industry} industry alignment: {hit_count} relevant keywords")
    elif hit_count >= 3:
        score += 10
        details.append(f"Some {industry} industry alignment: {hit_count} relevant keywords")
    else:
        issues.append('Limited industry-specific keywords')

    density = hit_count / max(_word_count(original_text), 1) * 100
    low, high = vocab.OPTIMAL_KEYWORD_DENSITY
    if low <= density <= high:
        score += 15
        details.append(f"Optimal keyword density: {density:.1f}%")
    elif density > high:
        score -= 5
        issues.append('Keyword stuffing detected')

    if industry == 'tech':
        languages = _count_present(text, vocab.PROGRAMMING_LANGUAGES)
        if languages >= 3:
            score += 15
            details.append(f"Multiple programming languages: {languages} found")
        frameworks = _count_present(text, vocab.FRAMEWORKS)
        if frameworks >= 2:
            score += 10
            details.append(f"Modern frameworks: {frameworks} found")

    soft_skills = _count_present(text, vocab.SOFT_SKILLS)
    if soft_skills >= 3:
        score += 10
        details.append(f"Good soft skills representation: {soft_skills} found")

    missing = []
    if industry in vocab.INDUSTRY_KEYWORDS:
        missing = [keyword for keyword in vocab.INDUSTRY_KEYWORDS[industry] if keyword not in matched]

    return KeywordCategoryResult(
        score=_bounded(score),
        details=details,
        issues=issues,
        industry=industry,
        matched_keywords=matched,
        missing_keywords=missing,
        density=round(density, 1),
    )


def analyze_experience(text: str, original_text: str) -> CategoryResult:
    """Titles, employment dates, employers, progression and tenure language."""
    score = 0
    details = []
    issues = []

    titles = len(vocab.JOB_TITLE_PATTERN.findall(original_text))
    if titles >= 3:
        score += 20
        details.append(f"Clear job progression: {titles} professional titles")
    elif titles >= 1:
        score += 10
        details.append(f"Professional titles present: {titles} found")

    dates = sum(len(pattern.findall(original_text)) for pattern in vocab.DATE_RANGE_PATTERNS)
    if dates >= 2:
        score += 15
        details.append(f"Clear employment timeline: {dates} date ranges")
    elif dates >= 1:
        score += 8
        details.append('Some employment dates provided')
    else:
        issues.append('Missing employment dates')

    if _count_present(text, vocab.COMPANY_INDICATORS) >= 2:
        score += 15
        details.append('Multiple companies/organizations mentioned')

    if any(word in text for word in vocab.PROGRESSION_WORDS):
        score += 20
        details.append('Career progression demonstrated')

    depth = 5 * _count_present(text, vocab.EXPERIENCE_DEPTH_WORDS)
    score += min(depth, 20)
    if depth > 0:
        details.append('Experience depth communicated')

    return CategoryResult(score=_bounded(score), details=details, issues=issues)


def _degree_mentioned(text: str, degree: str) -> bool:
    if len(degree) <= vocab.DEGREE_ACRONYM_MAX_LENGTH:
        return re.search(rf"\b{re.escape(degree)}\b", text) is not None
    return degree in text


def analyze_education(text: str, original_text: str, current_year: int) -> CategoryResult:
    """Degrees, institutions, GPA, honors, certifications and recency."""
    score = 0
    details = []
    issues = []

    degrees = sum(1 for degree in vocab.DEGREE_KEYWORDS if _degree_mentioned(text, degree))
    if degrees >= 1:
        score += 25
        details.append(f"Education credentials: {degrees} degree(s) mentioned")
    else:
        issues.append('No formal education mentioned')

    if any(keyword in text for keyword in vocab.INSTITUTION_KEYWORDS):
        score += 15
        details.append('Educational institution mentioned')

    gpa_match = vocab.GPA_PATTERN.search(original_text)
    if gpa_match:
        gpa = float(gpa_match.group(1))
        if gpa >= 3.5:
            score += 15
            details.append(f"High GPA mentioned: {gpa}")
        elif gpa >= 3.0:
            score += 10
            details.append(f"GPA mentioned: {gpa}")

    if any(honor in text for honor in vocab.HONORS_KEYWORDS):
        score += 20
        details.append('Academic honors mentioned')

    if _count_present(text, vocab.CERTIFICATION_KEYWORDS) >= 2:
        score += 15
        details.append('Additional certifications/training mentioned')

    recent_years = [str(current_year - offset) for offset in range(3)]
    if any(year in original_text for year in recent_years):
        score += 10
        details.append('Recent education mentioned')

    return CategoryResult(score=_bounded(score), details=details, issues=issues)


def analyze_stack_depth(text: str):
    """Score technology-stack depth; returns (score capped at 30, details)."""
    score = 0
    details = []
    for stack, technologies in vocab.TECH_STACKS.items():
        found = _count_present(text, technologies)
        if found >= 3:
            score += 10
            details.append(f"Strong {stack} skills: {found} technologies")
        elif found >= 2:
            score += 5
            details.append(f"Good {stack} skills: {found} technologies")
    return min(score, vocab.STACK_DEPTH_CAP), details


def count_skill_items(section: Optional[str]) -> int:
    """Estimate listed skills as the largest split count over known separators."""
    if section is None:
        return 0
    return max(len(section.split(separator)) for separator in vocab.SKILL_SEPARATORS)


def analyze_skills(text: str, original_text: str) -> CategoryResult:
    """Skills list size, technical/soft balance, stack depth and proficiency."""
    score = 0
    details = []
    issues = []

    skill_count = count_skill_items(extract_section(original_text, vocab.SKILLS_SECTION_HEADERS))
    if skill_count >= 10:
        score += 25
        details.append(f"Comprehensive skills list: {skill_count} skills")
    elif skill_count >= 6:
        score += 20
        details.append(f"Good skills coverage: {skill_count} skills")
    elif skill_count >= 3:
        score += 10
        details.append(f"Basic skills listed: {skill_count} skills")
    else:
        issues.append('Limited skills section')

    technical = _count_present(text, vocab.TECHNICAL_SKILL_KEYWORDS)
    soft = _count_present(text, vocab.SOFT_SKILL_KEYWORDS)
    if technical >= 3 and soft >= 2:
        score += 20
        details.append('Good balance of technical and soft skills')
    elif technical >= 2 or soft >= 2:
        score += 10
        details.append('Skills categories represented')

    depth_score, depth_details = analyze_stack_depth(text)
    score += depth_score
    details.extend(depth_details)

    if any(word in text for word in vocab.PROFICIENCY_WORDS):
        score += 15
        details.append('Skill proficiency levels indicated')

    return CategoryResult(score=_bounded(score), details=details, issues=issues)


def analyze_formatting(text: str, original_text: str) -> CategoryResult:
    """ATS-safe characters, bullet consistency and spacing."""
    score = vocab.FORMATTING_BASELINE
    details = []
    issues = []

    problematic = sum(1 for char in vocab.PROBLEMATIC_CHARS if char in original_text)
    if problematic == 0:
        score += 15
        details.append('ATS-friendly characters used')
    else:
        score -= problematic * 5
        issues.append(f"{problematic} problematic characters found")

    if len(vocab.FORMATTING_BULLET_PATTERN.findall(original_text)) >= 5:
        score += 10
        details.append('Consistent bullet point usage')

    if len(vocab.DOUBLE_SPACE_PATTERN.findall(original_text)) < 3:
        score += 10
        details.append('Clean spacing')
    else:
        issues.append('Inconsistent spacing detected')

    # Fonts cannot be detected from plain text
    score += 15
    details.append('Standard formatting assumed')

    return CategoryResult(score=_bounded(score), details=details, issues=issues)
