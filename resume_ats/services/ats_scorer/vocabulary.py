"""
Scoring vocabularies and weights for the rule-based ATS scorer.

Kept as plain data so vocabularies and weights can be tested and tuned
independently of the analyzers that consume them.
"""
import re


# ============================================================================
# Composite weights (sum to 1.0)
# ============================================================================

CATEGORY_WEIGHTS = {
    'contactInfo': 0.10,
    'structure': 0.15,
    'content': 0.25,
    'keywords': 0.20,
    'formatting': 0.05,
    'experience': 0.15,
    'education': 0.05,
    'skills': 0.05,
}


# ============================================================================
# Contact information
# ============================================================================

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
PHONE_PATTERN = re.compile(r"(\+?1[-.\s]?)?\(?([0-9]{3})\)?[-.\s]?([0-9]{3})[-.\s]?([0-9]{4})")
URL_PATTERN = re.compile(r"https?://\S+")

FREEMAIL_DOMAINS = ['gmail.com', 'outlook.com', 'yahoo.com', 'hotmail.com']
LOCATION_KEYWORDS = ['address', 'city', 'state', 'zip', 'location', 'based in', 'located in']


# ============================================================================
# Structure
# ============================================================================

# Canonical section -> header aliases, in evaluation order
SECTION_HEADERS = {
    'experience': ['experience', 'work experience', 'professional experience', 'employment', 'work history'],
    'education': ['education', 'academic background', 'qualifications'],
    'skills': ['skills', 'technical skills', 'core competencies', 'expertise'],
    'summary': ['summary', 'profile', 'objective', 'about', 'professional summary'],
    'projects': ['projects', 'key projects', 'notable projects'],
    'achievements': ['achievements', 'accomplishments', 'awards', 'honors'],
}

# Headers that terminate an extracted section
SECTION_BOUNDARY_HEADERS = ['experience', 'education', 'skills', 'projects', 'achievements', 'summary']

SKILLS_SECTION_HEADERS = ['skills', 'technical skills', 'core competencies']

OPTIMAL_WORD_RANGE = (300, 800)
MAX_WORD_COUNT = 1200


# ============================================================================
# Content quality
# ============================================================================

ACTION_VERBS = [
    'achieved', 'improved', 'increased', 'decreased', 'reduced', 'managed', 'led',
    'developed', 'created', 'implemented', 'designed', 'built', 'optimized',
    'streamlined', 'automated', 'launched', 'delivered', 'executed', 'coordinated',
    'supervised', 'trained', 'mentored', 'collaborated', 'analyzed', 'researched',
    'established', 'initiated', 'transformed', 'enhanced', 'accelerated',
]

# Each match counts once towards the quantification tally
QUANTIFIER_PATTERNS = [
    re.compile(r"\d+%"),
    re.compile(r"\$[\d,]+"),
    re.compile(r"\d+x\b", re.IGNORECASE),
    re.compile(r"increased.*by.*\d+", re.IGNORECASE),
    re.compile(r"reduced.*by.*\d+", re.IGNORECASE),
    re.compile(r"improved.*by.*\d+", re.IGNORECASE),
    re.compile(r"\d+\s*(?:million|thousand|billion|k|m|b)\b", re.IGNORECASE),
    re.compile(r"over \d+", re.IGNORECASE),
    re.compile(r"up to \d+", re.IGNORECASE),
    re.compile(r"\d+\s*(?:years?|months?|weeks?)\b", re.IGNORECASE),
    re.compile(r"\d+\s*(?:people|employees|team members|clients|customers)\b", re.IGNORECASE),
]

BULLET_CHARS_PATTERN = re.compile(r"[•·▪▫‣⁃]")
DASH_BULLET_PATTERN = re.compile(r"^\s*[-*]\s", re.MULTILINE)

# (pattern, label); more than WEAK_PATTERN_LIMIT matches costs WEAK_PATTERN_PENALTY
WEAK_LANGUAGE_PATTERNS = [
    (re.compile(r"\bi\b", re.IGNORECASE), 'First person pronouns'),
    (re.compile(r"responsible for", re.IGNORECASE), 'Passive language'),
    (re.compile(r"duties included", re.IGNORECASE), 'Duty-focused language'),
]
WEAK_PATTERN_LIMIT = 2
WEAK_PATTERN_PENALTY = 5


# ============================================================================
# Keyword / industry alignment
# ============================================================================

# Checked in this order; ties keep the earlier industry
INDUSTRY_KEYWORDS = {
    'tech': [
        'javascript', 'python', 'react', 'node', 'aws', 'docker', 'kubernetes', 'sql',
        'mongodb', 'git', 'agile', 'scrum', 'api', 'microservices', 'devops', 'ci/cd',
        'typescript', 'angular', 'vue', 'spring', 'django', 'flask', 'postgresql',
        'redis', 'elasticsearch',
    ],
    'business': [
        'management', 'strategy', 'analysis', 'leadership', 'project management',
        'stakeholder', 'budget', 'roi', 'kpi', 'process improvement', 'team lead',
        'cross-functional', 'vendor management', 'risk management',
    ],
    'marketing': [
        'seo', 'sem', 'social media', 'content marketing', 'email marketing', 'analytics',
        'conversion', 'brand', 'campaign', 'digital marketing', 'ppc', 'google ads',
        'facebook ads', 'marketing automation',
    ],
    'finance': [
        'financial analysis', 'budgeting', 'forecasting', 'excel', 'financial modeling',
        'accounting', 'gaap', 'sox', 'audit', 'compliance', 'risk assessment',
        'investment', 'portfolio',
    ],
    'sales': [
        'sales', 'crm', 'lead generation', 'prospecting', 'closing', 'quota', 'pipeline',
        'account management', 'relationship building', 'negotiation', 'salesforce',
        'hubspot',
    ],
}

DEFAULT_INDUSTRY = 'general'
OPTIMAL_KEYWORD_DENSITY = (2.0, 5.0)

PROGRAMMING_LANGUAGES = ['javascript', 'python', 'java', 'c++', 'c#', 'php', 'ruby', 'go', 'rust', 'swift', 'kotlin']
FRAMEWORKS = ['react', 'angular', 'vue', 'node', 'express', 'django', 'flask', 'spring', 'laravel']
SOFT_SKILLS = ['leadership', 'communication', 'teamwork', 'problem solving', 'analytical', 'creative', 'adaptable']


# ============================================================================
# Experience
# ============================================================================

JOB_TITLE_PATTERN = re.compile(
    r"\b(?:manager|director|lead|senior|principal|architect|engineer|developer|analyst|specialist|coordinator|supervisor)\b",
    re.IGNORECASE,
)

DATE_RANGE_PATTERNS = [
    re.compile(r"\b20\d{2}\s*[-–—]\s*(?:20\d{2}|present|current)\b", re.IGNORECASE),
    re.compile(r"\b(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\s+20\d{2}", re.IGNORECASE),
]

COMPANY_INDICATORS = ['inc', 'llc', 'corp', 'ltd', 'company', 'technologies', 'solutions', 'systems', 'group']
PROGRESSION_WORDS = ['promoted', 'advanced', 'progressed', 'grew', 'expanded role']
EXPERIENCE_DEPTH_WORDS = ['years', 'experience', 'background', 'expertise']


# ============================================================================
# Education
# ============================================================================

DEGREE_KEYWORDS = [
    'bachelor', 'master', 'phd', 'doctorate', 'associate', 'diploma', 'certificate',
    'bs', 'ba', 'ms', 'ma', 'mba',
]
# Short acronyms only count as whole words ("ms" must not match "systems")
DEGREE_ACRONYM_MAX_LENGTH = 3

INSTITUTION_KEYWORDS = ['university', 'college', 'institute', 'school', 'academy']
GPA_PATTERN = re.compile(r"gpa[:\s]*([3-4]\.\d+)", re.IGNORECASE)
HONORS_KEYWORDS = ['magna cum laude', 'summa cum laude', 'cum laude', 'honors', "dean's list", 'phi beta kappa']
CERTIFICATION_KEYWORDS = ['certified', 'certification', 'coursework', 'training', 'workshop']


# ============================================================================
# Skills
# ============================================================================

SKILL_SEPARATORS = [',', '•', '·', '|', '\n', ';']
TECHNICAL_SKILL_KEYWORDS = ['programming', 'software', 'database', 'framework', 'api', 'cloud', 'analytics']
SOFT_SKILL_KEYWORDS = ['leadership', 'communication', 'teamwork', 'management', 'analytical']
PROFICIENCY_WORDS = ['expert', 'advanced', 'proficient', 'intermediate', 'beginner', 'years experience']

TECH_STACKS = {
    'frontend': ['react', 'angular', 'vue', 'html', 'css', 'javascript'],
    'backend': ['node', 'python', 'java', 'php', 'ruby', 'go'],
    'database': ['sql', 'mongodb', 'postgresql', 'mysql', 'redis'],
    'cloud': ['aws', 'azure', 'gcp', 'docker', 'kubernetes'],
    'devops': ['ci/cd', 'jenkins', 'git', 'linux', 'bash'],
}
STACK_DEPTH_CAP = 30


# ============================================================================
# Formatting
# ============================================================================

FORMATTING_BASELINE = 50
PROBLEMATIC_CHARS = ['†', '‡', '§', '¶', '©', '®', '™']
FORMATTING_BULLET_PATTERN = re.compile(r"[•·▪▫‣⁃-]")
DOUBLE_SPACE_PATTERN = re.compile(r"  +")


# ============================================================================
# Feedback
# ============================================================================

ISSUE_RECOMMENDATIONS = {
    'Missing email address': 'Add a professional email address',
    'Missing phone number': 'Include your phone number with area code',
    'Missing LinkedIn profile': 'Add your LinkedIn profile URL',
    'Missing employment dates': 'Include start and end dates for all positions',
    'Limited use of action verbs': 'Start bullet points with strong action verbs',
    'No quantifiable achievements found': 'Add specific numbers, percentages, and metrics',
    'Limited industry-specific keywords': 'Include more relevant industry terminology',
    'Resume too short (under 300 words)': 'Expand with more detailed achievements and experiences',
    'Resume too long (over 1200 words)': 'Condense content to focus on most relevant information',
    'Missing key resume sections': 'Add standard section headers such as Experience, Education and Skills',
    'Limited skills section': 'List your key skills in a dedicated Skills section',
    'No formal education mentioned': 'Add your degree, institution and graduation year',
    'Keyword stuffing detected': 'Use keywords naturally within achievement statements',
    'Inconsistent spacing detected': 'Use single spaces between words and consistent line breaks',
}
DEFAULT_RECOMMENDATION = 'Review and improve this section'

NEXT_STEPS_STRONG = [
    'Your resume is well-optimized! Consider tailoring for specific roles',
    'Review and update regularly to maintain relevance',
]
NEXT_STEPS_GOOD = [
    'Add more quantifiable achievements to boost impact',
    'Include additional industry-relevant keywords',
    'Ensure all contact information is complete',
]
NEXT_STEPS_WEAK = [
    'Focus on restructuring with clear section headers',
    'Add quantifiable achievements with specific numbers',
    'Include comprehensive skills section',
    'Ensure complete contact information',
]
