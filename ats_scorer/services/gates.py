"""
Hard-requirement gates. Gates are reported next to the score and never change it.
"""
from typing import List, Optional

from ats_scorer.helpers.parsing import dictionary_skills, extract_experience_years, infer_candidate_years
from ats_scorer.helpers.vocabulary import synonyms_for
from ats_scorer.models.models import ParsedJobDescription, ParsedResume
from ats_scorer.models.response import Gate
from ats_scorer.utils.utils import clean_text, content_stems, find_term

REJECTION_IMPACT = "Resume may be auto-rejected by ATS filters"


def _format_years(years: float) -> str:
    return str(int(years)) if float(years).is_integer() else f"{years:.1f}"


def candidate_years(resume: ParsedResume, current_year: Optional[int] = None) -> float:
    return infer_candidate_years(resume.sections.experience, resume.text, current_year)


def years_gate(required: int, years: float, rule: Optional[str] = None) -> Gate:
    passed = years >= required
    return Gate(
        rule=rule or f"Minimum {required} years of experience",
        passed=passed,
        details=f"Found {_format_years(years)} years of experience (requires {required}+)",
        impact=None if passed else REJECTION_IMPACT,
    )


def textual_gate(requirement: str, resume: ParsedResume) -> Gate:
    """Pass iff the requirement's key terms show up in the candidate's skills or experience"""
    haystack = "\n".join(resume.sections.skills + resume.sections.experience)
    rule = f"Required: {requirement}"

    terms = dictionary_skills(requirement)
    if terms:
        found = [t for t in terms if any(find_term(haystack, sp) for sp in synonyms_for(t))]
        missing = [t for t in terms if t not in found]
        passed = not missing
        details = f"Found: {', '.join(found) or 'none'}"
        if missing:
            details += f"; missing: {', '.join(missing)}"
        return Gate(rule=rule, passed=passed, details=details, impact=None if passed else REJECTION_IMPACT)

    if clean_text(requirement).lower() in clean_text(haystack).lower():
        return Gate(rule=rule, passed=True, details="Requirement mentioned verbatim")

    wanted = content_stems(requirement)
    if not wanted:
        return Gate(rule=rule, passed=True, details="No specific terms to verify")
    have = set(content_stems(haystack))
    missing = [s for s in wanted if s not in have]
    if not missing:
        return Gate(rule=rule, passed=True, details="All key terms found in skills or experience")
    return Gate(
        rule=rule,
        passed=False,
        details=f"Matched {len(wanted) - len(missing)} of {len(wanted)} key terms",
        impact=REJECTION_IMPACT,
    )


class GateEvaluator:
    def __init__(self, current_year: Optional[int] = None):
        self.current_year = current_year

    def evaluate(self, resume: ParsedResume, jd: Optional[ParsedJobDescription]) -> List[Gate]:
        if jd is None:
            return []
        years = candidate_years(resume, self.current_year)
        gates: List[Gate] = []
        seen_years = set()
        for requirement in jd.requirements:
            required = extract_experience_years(requirement)
            if required is None:
                gates.append(textual_gate(requirement, resume))
            elif required not in seen_years:
                seen_years.add(required)
                gates.append(years_gate(required, years))
        if jd.experience_years and jd.experience_years not in seen_years:
            gates.append(years_gate(jd.experience_years, years))
        return gates
