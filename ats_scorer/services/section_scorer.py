import re
from typing import List, Optional

from ats_scorer.helpers.parsing import extract_experience_years
from ats_scorer.helpers.vocabulary import ALL_ACTION_VERBS, DEGREE_TERMS, TECHNICAL_FIELDS
from ats_scorer.models.models import ParsedJobDescription, ParsedResume
from ats_scorer.models.response import SectionScores
from ats_scorer.services.matching import KeywordReport, skill_present
from ats_scorer.utils.utils import clamp_score, contains_term, content_stems, split_lines, tokenize

EXPECTED_SKILL_COUNT = 10
EXPECTED_TERMINOLOGY_COUNT = 15
DEFAULT_TARGET_YEARS = 5
QUANTIFIED_SATURATION = 3
ACTION_VERB_SATURATION = 5

NO_DEGREE_SCORE = 0
UNRELATED_DEGREE_SCORE = 50
RELEVANT_DEGREE_SCORE = 100
NO_JD_EDUCATION_SCORE = 70

YEARS_WEIGHT, QUANTIFIED_WEIGHT, OVERLAP_WEIGHT = 0.5, 0.2, 0.3

QUANTIFIED_RE = re.compile(
    r"\$\s?\d|\d+(?:\.\d+)?\s?(?:%|percent\b|x\b|k\b|m\b|million\b|billion\b|users\b|customers\b"
    r"|clients\b|people\b|engineers\b|hours\b|ms\b|requests\b)",
    re.IGNORECASE,
)


def quantified_count(lines: List[str]) -> int:
    return sum(1 for line in lines if QUANTIFIED_RE.search(line))


def action_verb_count(text: str) -> int:
    return len({t for t in tokenize(text) if t in ALL_ACTION_VERBS})


def required_years(jd: ParsedJobDescription) -> Optional[int]:
    found = [y for y in (extract_experience_years(r) for r in jd.requirements) if y]
    if jd.experience_years:
        found.append(jd.experience_years)
    return max(found) if found else None


def degree_lines(resume: ParsedResume) -> List[str]:
    lines = resume.sections.education or split_lines(resume.text)
    return [line for line in lines if any(contains_term(line, t) for t in DEGREE_TERMS)]


class SectionScorer:
    """Per-section sub-scores, each an integer in [0, 100]"""

    def score(
        self,
        resume: ParsedResume,
        jd: Optional[ParsedJobDescription],
        years: float,
        keywords: Optional[KeywordReport] = None,
    ) -> SectionScores:
        return SectionScores(
            skills=self.skills(resume, jd),
            experience=self.experience(resume, jd, years),
            education=self.education(resume, jd),
            keywords=self.keywords(resume, jd, keywords),
        )

    def skills(self, resume: ParsedResume, jd: Optional[ParsedJobDescription]) -> int:
        resume_skills = resume.sections.skills
        if jd is None or not jd.skills_required:
            return clamp_score(len(resume_skills) / EXPECTED_SKILL_COUNT * 100)
        present = [s for s in jd.skills_required if skill_present(s, resume_skills)]
        return clamp_score(len(present) / len(jd.skills_required) * 100)

    def experience(self, resume: ParsedResume, jd: Optional[ParsedJobDescription], years: float) -> int:
        entries = resume.sections.experience or split_lines(resume.text)
        quantified = min(1.0, quantified_count(entries) / QUANTIFIED_SATURATION)

        if jd is None:
            ratio = min(1.0, years / DEFAULT_TARGET_YEARS)
            richness = min(1.0, action_verb_count(resume.text) / ACTION_VERB_SATURATION)
            return clamp_score(100 * (YEARS_WEIGHT * ratio + QUANTIFIED_WEIGHT * quantified + OVERLAP_WEIGHT * richness))

        target = required_years(jd)
        if target:
            ratio = min(1.0, years / target)
        else:
            ratio = 1.0 if (years > 0 or resume.sections.experience) else 0.0

        role_stems = content_stems(" ".join(jd.skills_required + jd.requirements)) or content_stems(jd.text)
        experience_stems = set(content_stems("\n".join(entries)))
        overlap = (
            sum(1 for s in role_stems if s in experience_stems) / len(role_stems) if role_stems else 0.0
        )
        return clamp_score(100 * (YEARS_WEIGHT * ratio + QUANTIFIED_WEIGHT * quantified + OVERLAP_WEIGHT * overlap))

    def education(self, resume: ParsedResume, jd: Optional[ParsedJobDescription]) -> int:
        if jd is None:
            return NO_JD_EDUCATION_SCORE
        degrees = degree_lines(resume)
        if not degrees:
            return NO_DEGREE_SCORE
        wanted_fields = [f for f in TECHNICAL_FIELDS if contains_term(jd.text, f)]
        if not wanted_fields:
            return RELEVANT_DEGREE_SCORE
        if any(contains_term(line, f) for line in degrees for f in wanted_fields):
            return RELEVANT_DEGREE_SCORE
        return UNRELATED_DEGREE_SCORE

    def keywords(
        self,
        resume: ParsedResume,
        jd: Optional[ParsedJobDescription],
        report: Optional[KeywordReport],
    ) -> int:
        if jd is None or report is None or not report.scores:
            terms = action_verb_count(resume.text) + len(resume.sections.skills)
            return clamp_score(terms / EXPECTED_TERMINOLOGY_COUNT * 100)
        return clamp_score(report.coverage * 100)
