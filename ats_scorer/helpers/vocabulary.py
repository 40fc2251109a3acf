"""
Keyword dictionaries used by the heuristic extractor, the matcher and the suggestion templates.
"""
import re

# Canonical skill terms. Multi-word and punctuated terms are matched as phrases.
SKILL_TERMS = [
    "javascript", "typescript", "python", "java", "c++", "c#", "golang", "rust", "swift",
    "kotlin", "ruby", "php", "scala", "html", "css", "sql", "nosql", "graphql", "bash",
    "react", "angular", "vue", "node", "express.js", "next.js", "django", "flask", "fastapi",
    "spring", ".net", "rails", "tailwind",
    "aws", "azure", "gcp", "docker", "kubernetes", "terraform", "ansible", "linux",
    "mysql", "postgresql", "mongodb", "redis", "elasticsearch", "kafka", "rabbitmq",
    "git", "jenkins", "ci/cd", "github actions",
    "agile", "scrum", "devops", "microservices", "rest api",
    "machine learning", "deep learning", "ai", "nlp", "data science", "analytics",
    "big data", "spark", "pandas", "tensorflow", "pytorch", "tableau", "power bi",
]

# Canonical term -> alternative spellings. Seeded from the scoring defaults.
SKILL_SYNONYMS = {
    "javascript": ["js", "ecmascript", "es6", "es2015"],
    "typescript": ["ts"],
    "python": ["py"],
    "react": ["reactjs", "react.js"],
    "node": ["nodejs", "node.js"],
    "vue": ["vuejs", "vue.js"],
    "golang": ["go lang"],
    "postgresql": ["postgres"],
    "mongodb": ["mongo"],
    "aws": ["amazon web services"],
    "gcp": ["google cloud platform", "google cloud"],
    "azure": ["microsoft azure"],
    "kubernetes": ["k8s"],
    "ci/cd": ["continuous integration", "continuous delivery", "continuous deployment"],
    "machine learning": ["ml"],
    "ai": ["artificial intelligence"],
    "nlp": ["natural language processing"],
    "rest api": ["restful", "restful api", "rest apis"],
}

# Umbrella term -> members. A required umbrella term is satisfied by any member, not the reverse.
SKILL_FAMILIES = {
    "sql": ["mysql", "postgresql", "postgres", "sqlite", "t-sql", "sql server", "oracle"],
    "nosql": ["mongodb", "mongo", "dynamodb", "cassandra", "redis"],
    "cloud": ["aws", "azure", "gcp"],
}

DEGREE_TERMS = [
    "bachelor", "master", "phd", "ph.d", "doctorate", "mba", "associate degree",
    "b.s.", "b.sc", "bsc", "b.a.", "m.s.", "m.sc", "msc", "b.tech", "m.tech", "b.e.",
    "degree", "diploma",
]

INSTITUTION_TERMS = ["university", "college", "institute", "school of", "academy", "polytechnic"]

ROLE_NOUNS = [
    "engineer", "developer", "manager", "analyst", "architect", "consultant", "designer",
    "intern", "lead", "administrator", "scientist", "specialist", "coordinator", "director",
]

CERTIFICATION_TERMS = ["certified", "certification", "certificate", "license", "licensed"]

# Header label -> section name. Labels are compared after stripping trailing colons.
SECTION_HEADERS = {
    "summary": ["summary", "professional summary", "profile", "objective", "about", "about me"],
    "skills": ["skills", "technical skills", "core skills", "competencies", "core competencies", "technologies"],
    "experience": ["experience", "work experience", "employment", "employment history",
                   "professional experience", "work history"],
    "education": ["education", "academic background", "academics", "qualifications"],
    "projects": ["projects", "personal projects", "portfolio"],
    "certifications": ["certifications", "certificates", "licenses", "licenses & certifications"],
}

# Job-description block headers
JD_REQUIREMENT_HEADERS = ["requirements", "required", "required qualifications", "qualifications",
                          "must have", "must-have", "minimum qualifications", "what you need",
                          "what we're looking for", "basic qualifications"]
JD_NICE_TO_HAVE_HEADERS = ["nice to have", "nice-to-have", "preferred", "preferred qualifications",
                           "bonus", "bonus points", "pluses"]
JD_SKILL_HEADERS = ["skills", "required skills", "tech stack", "technologies", "technical skills"]

HARD_REQUIREMENT_PATTERNS = [
    re.compile(r"must have\s+([^.!?\n]+)", re.IGNORECASE),
    re.compile(r"required:\s*([^.!?\n]+)", re.IGNORECASE),
    re.compile(r"mandatory:?\s+([^.!?\n]+)", re.IGNORECASE),
    re.compile(r"essential:?\s+([^.!?\n]+)", re.IGNORECASE),
    re.compile(r"((?:minimum|at least)\s+(?:of\s+)?\d+\+?\s*(?:years?|yrs?)[^.!?\n]*)", re.IGNORECASE),
    re.compile(r"(\d+\+?\s*(?:years?|yrs?)\s+(?:of\s+)?(?:\w+\s+)?experience[^.!?\n]*)", re.IGNORECASE),
]

NICE_TO_HAVE_PATTERNS = [
    re.compile(r"nice to have:?\s+([^.!?\n]+)", re.IGNORECASE),
    re.compile(r"preferred:?\s+([^.!?\n]+)", re.IGNORECASE),
    re.compile(r"bonus:?\s+([^.!?\n]+)", re.IGNORECASE),
    re.compile(r"\ba plus:?\s*([^.!?\n]*)", re.IGNORECASE),
]

YEARS_REQUIRED_PATTERNS = [
    re.compile(r"(\d+)\+?\s*(?:years?|yrs?)\s+(?:of\s+)?(?:\w+\s+)?experience", re.IGNORECASE),
    re.compile(r"minimum\s+(?:of\s+)?(\d+)\s*(?:years?|yrs?)", re.IGNORECASE),
    re.compile(r"at least\s+(\d+)\s*(?:years?|yrs?)", re.IGNORECASE),
]

# Words that carry no signal when comparing requirement phrases
FILLER_WORDS = {
    "a", "an", "and", "or", "the", "of", "in", "on", "with", "for", "to", "as", "at", "by",
    "is", "are", "be", "we", "you", "our", "your", "will", "should", "must", "have", "has",
    "strong", "solid", "good", "excellent", "proven", "working", "hands", "plus", "etc",
    "knowledge", "understanding", "familiarity", "proficiency", "proficient", "ability",
    "skills", "skill", "required", "preferred", "including", "using", "least", "minimum",
    "years", "year", "nice", "bonus", "such", "like", "other", "related", "equivalent",
}

ACTION_VERBS = {
    "entry": ["Assisted", "Supported", "Contributed to", "Participated in", "Built", "Developed"],
    "mid": ["Led", "Implemented", "Designed", "Optimized", "Delivered", "Managed"],
    "senior": ["Architected", "Spearheaded", "Transformed", "Established", "Mentored", "Scaled"],
}

METRIC_PLACEHOLDERS = {
    "entry": ["[X% improvement in code quality]", "[X% fewer bugs]", "[X% faster load times]"],
    "mid": ["[X% increase in throughput]", "[X% cost reduction]", "[X% faster deployments]"],
    "senior": ["[X% improvement in scalability]", "[X% reduction in downtime]", "[X% gain in team productivity]"],
}

# Degree fields treated as relevant for technical roles
TECHNICAL_FIELDS = ["computer", "software", "engineering", "information", "data", "mathematics",
                    "math", "statistics", "physics", "electrical", "technology", "science"]

ALL_ACTION_VERBS = {v.split()[0].lower() for verbs in ACTION_VERBS.values() for v in verbs} | {
    "achieved", "automated", "created", "drove", "improved", "increased", "launched",
    "migrated", "reduced", "streamlined", "owned", "shipped", "maintained", "deployed",
}


def synonyms_for(term: str) -> list:
    """Spellings that satisfy a required term.

    Synonyms work both ways (``js`` satisfies ``javascript`` and vice versa);
    families only downwards (``postgres`` satisfies ``sql``).
    """
    key = term.lower().strip()
    found = [key]
    for alternative in SKILL_SYNONYMS.get(key, []) + SKILL_FAMILIES.get(key, []):
        if alternative not in found:
            found.append(alternative)
    for canonical, alternatives in SKILL_SYNONYMS.items():
        if key in alternatives:
            for spelling in [canonical] + alternatives:
                if spelling not in found:
                    found.append(spelling)
    return found
