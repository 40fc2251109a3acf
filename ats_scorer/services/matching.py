from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from ats_scorer.helpers.parsing import dedupe, extract_experience_years
from ats_scorer.helpers.vocabulary import synonyms_for
from ats_scorer.models.models import ParsedJobDescription, ParsedResume
from ats_scorer.models.response import Match
from ats_scorer.models.scoring_settings import MatchingSettings
from ats_scorer.utils.utils import content_stems, find_term, stem, tokenize

REQUIREMENT = "requirement"
SKILL = "skill"
NICE_TO_HAVE = "nice_to_have"


class KeywordItem(BaseModel):
    text: str
    kind: str
    hard: bool = False
    weight: float = 1.0


class ItemScore(BaseModel):
    item: KeywordItem
    similarity: float = 0.0
    matched_phrases: List[str] = Field(default_factory=list)
    source_section: str = "text"


class KeywordReport(BaseModel):
    scores: List[ItemScore] = Field(default_factory=list)
    matches: List[Match] = Field(default_factory=list)
    missing: List[ItemScore] = Field(default_factory=list)
    coverage: float = 0.0

    @property
    def missing_keywords(self) -> List[str]:
        return [s.item.text for s in self.missing]


def resume_sections(resume: ParsedResume) -> List[Tuple[str, str]]:
    """(sourceSection, text) pairs in matching order; the full text comes last"""
    s = resume.sections
    out = [("skills", ", ".join(s.skills))]
    out += [(f"experience-{i}", entry) for i, entry in enumerate(s.experience)]
    out += [
        ("education", "\n".join(s.education)),
        ("projects", "\n".join(s.projects)),
        ("certifications", "\n".join(s.certifications)),
        ("summary", s.summary),
        ("text", resume.text),
    ]
    return [(name, text) for name, text in out if text]


def skill_present(skill: str, resume_skills: List[str], resume_text: str = "") -> bool:
    """Fuzzy skill membership: synonym spellings, shared stems, or one name containing the other"""
    spellings = synonyms_for(skill)
    listed = ", ".join(resume_skills)
    if any(find_term(listed, sp) or find_term(resume_text, sp) for sp in spellings):
        return True
    wanted = content_stems(skill)
    if not wanted:
        return False
    for candidate in resume_skills:
        if content_stems(candidate) == wanted:
            return True
        if find_term(candidate, skill) or find_term(skill, candidate):
            return True
    return False


def jd_frequency(item: str, jd_text: str) -> int:
    """How often the item's leading content stem occurs in the job description"""
    stems = content_stems(item)
    if not stems:
        return 0
    return sum(1 for token in tokenize(jd_text) if stem(token) == stems[0])


class KeywordMatcher:
    def __init__(self, settings: Optional[MatchingSettings] = None):
        self.settings = settings or MatchingSettings()

    def items(self, jd: ParsedJobDescription) -> List[KeywordItem]:
        """Job-description items to look for; numeric experience requirements are left to the gates"""
        out: List[KeywordItem] = []
        seen = set()

        def add(text: str, kind: str, weight: float):
            key = text.strip().lower()
            if not key or key in seen:
                return
            seen.add(key)
            hard = kind == REQUIREMENT or any(find_term(req, text) for req in jd.requirements)
            out.append(KeywordItem(text=text.strip(), kind=kind, hard=hard, weight=weight))

        for skill in dedupe(jd.skills_required):
            add(skill, SKILL, self.settings.required_weight)
        for req in dedupe(jd.requirements):
            if extract_experience_years(req) is None:
                add(req, REQUIREMENT, self.settings.required_weight)
        for extra in dedupe(jd.nice_to_have):
            add(extra, NICE_TO_HAVE, self.settings.nice_to_have_weight)
        return out

    def score_item(self, item: KeywordItem, sections: List[Tuple[str, str]]) -> ItemScore:
        for spelling in synonyms_for(item.text):
            for name, text in sections:
                hit = find_term(text, spelling)
                if hit:
                    return ItemScore(item=item, similarity=1.0, matched_phrases=[hit], source_section=name)

        wanted = content_stems(item.text)
        if not wanted:
            return ItemScore(item=item)

        best_name, best_present, best_literals = "text", [], {}
        for name, text in sections:
            literals: Dict[str, str] = {}
            for token in tokenize(text):
                literals.setdefault(stem(token), token)
            present = [s for s in wanted if s in literals]
            if len(present) > len(best_present):
                best_name, best_present, best_literals = name, present, literals

        if not best_present:
            return ItemScore(item=item)
        overlap = len(best_present) / len(wanted)
        # Every content stem present counts as an exact match on normalized tokens
        similarity = 1.0 if overlap == 1 else round(self.settings.partial_credit * overlap, 4)
        return ItemScore(
            item=item,
            similarity=similarity,
            matched_phrases=[best_literals[s] for s in best_present],
            source_section=best_name,
        )

    def match(self, resume: ParsedResume, jd: ParsedJobDescription) -> KeywordReport:
        sections = resume_sections(resume)
        report = KeywordReport()
        total_weight = earned = 0.0
        for item in self.items(jd):
            scored = self.score_item(item, sections)
            report.scores.append(scored)
            total_weight += item.weight
            if scored.similarity >= self.settings.threshold:
                earned += item.weight * scored.similarity
                report.matches.append(Match(
                    jd_item=item.text,
                    matched_phrases=scored.matched_phrases,
                    similarity=scored.similarity,
                    source_section=scored.source_section,
                ))
            elif item.kind != NICE_TO_HAVE:
                report.missing.append(scored)
        report.coverage = earned / total_weight if total_weight else 0.0
        return report
