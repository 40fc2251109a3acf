"""
Deterministic suggestion rules. Wording stays conditional ("Consider ...") because
nothing here knows whether the candidate actually has the missing experience.
"""
from typing import List, Optional

from ats_scorer.helpers.parsing import dictionary_skills
from ats_scorer.helpers.vocabulary import ACTION_VERBS, METRIC_PLACEHOLDERS
from ats_scorer.models.models import ParsedJobDescription, ParsedResume
from ats_scorer.models.response import Gate, Suggestions
from ats_scorer.services.matching import SKILL, ItemScore, KeywordReport, jd_frequency
from ats_scorer.services.section_scorer import EXPECTED_SKILL_COUNT, quantified_count
from ats_scorer.utils.utils import contains_term, split_lines

MAX_TOP_ACTIONS = 5
MAX_SCORE_BULLETS = 3
MAX_BULLET_KEYWORD_WORDS = 4
CONTEXT_WORDS = 8

BULLET_TEMPLATE = "{verb} {keyword} work on {context}, resulting in {metric}"
BULLET_TEMPLATE_NO_CONTEXT = "{verb} {keyword} solutions for [project or team], resulting in {metric}"


def experience_level(years: float) -> str:
    if years < 2:
        return "entry"
    if years < 6:
        return "mid"
    return "senior"


def _context_for(keyword: str, lines: List[str]) -> Optional[str]:
    if not lines:
        return None
    line = next((ln for ln in lines if contains_term(ln, keyword)), lines[0])
    words = line.rstrip(".;:!").split()[:CONTEXT_WORDS]
    if not words:
        return None
    words[0] = words[0].lower()
    return " ".join(words)


def suggest_bullets(section_text: str, keywords: List[str], level: str = "mid") -> List[str]:
    """One templated bullet per keyword with a level-appropriate verb and a metric placeholder"""
    verbs = ACTION_VERBS.get(level, ACTION_VERBS["mid"])
    metrics = METRIC_PLACEHOLDERS.get(level, METRIC_PLACEHOLDERS["mid"])
    lines = split_lines(section_text)
    bullets = []
    for i, keyword in enumerate(k.strip() for k in keywords if k and k.strip()):
        context = _context_for(keyword, lines)
        template = BULLET_TEMPLATE if context else BULLET_TEMPLATE_NO_CONTEXT
        bullets.append(template.format(
            verb=verbs[i % len(verbs)],
            keyword=keyword,
            context=context,
            metric=metrics[i % len(metrics)],
        ))
    return bullets


def _action_for(scored: ItemScore) -> str:
    text = scored.item.text
    if scored.item.kind == SKILL:
        return f'Consider adding "{text}" to your skills section if you have worked with it'
    if scored.similarity > 0:
        return f'Consider mentioning more explicitly how you meet "{text}"'
    return f'Consider mentioning "{text}" if it reflects your experience'


def _bullet_keyword(scored: ItemScore) -> Optional[str]:
    text = scored.item.text
    if len(text.split()) <= MAX_BULLET_KEYWORD_WORDS:
        return text
    terms = dictionary_skills(text)
    return terms[0] if terms else None


class SuggestionGenerator:
    def rank_missing(self, report: KeywordReport, jd: ParsedJobDescription) -> List[ItemScore]:
        """Hard requirements first, then by how often the job description repeats the term"""
        indexed = list(enumerate(report.missing))
        indexed.sort(key=lambda pair: (not pair[1].item.hard, -jd_frequency(pair[1].item.text, jd.text), pair[0]))
        return [scored for _, scored in indexed]

    def generate(
        self,
        resume: ParsedResume,
        jd: Optional[ParsedJobDescription],
        gates: List[Gate],
        years: float,
        report: Optional[KeywordReport] = None,
    ) -> Suggestions:
        if jd is None or report is None:
            return self._intrinsic(resume)

        ranked = self.rank_missing(report, jd)

        # Gate advice leads; every missing item then gets its own action
        actions = []
        for gate in gates:
            if gate.passed:
                continue
            if gate.rule.startswith("Minimum"):
                actions.append(
                    "Consider quantifying the impact and duration of each role so your years of "
                    f"relevant experience are clear ({gate.rule.lower()})"
                )
            else:
                requirement = gate.rule.split(": ", 1)[-1]
                if not any(requirement == s.item.text for s in ranked):
                    actions.append(f'Consider addressing the hard requirement "{requirement}" explicitly')
        actions += [_action_for(scored) for scored in ranked]

        keywords = []
        for scored in ranked:
            keyword = _bullet_keyword(scored)
            if keyword and keyword.lower() not in (k.lower() for k in keywords):
                keywords.append(keyword)
        bullets = suggest_bullets(
            "\n".join(resume.sections.experience),
            keywords[:MAX_SCORE_BULLETS],
            experience_level(years),
        )
        return Suggestions(bullets=bullets, top_actions=actions)

    def _intrinsic(self, resume: ParsedResume) -> Suggestions:
        actions = []
        entries = resume.sections.experience or split_lines(resume.text)
        if quantified_count(entries) < 3:
            actions.append("Consider quantifying achievements with metrics such as percentages, revenue or time saved")
        if len(resume.sections.skills) < EXPECTED_SKILL_COUNT:
            actions.append("Consider listing more of the technical skills and tools you use")
        if not resume.sections.summary:
            actions.append("Consider adding a short professional summary at the top")
        flags = resume.metadata.formatting_flags
        if flags is not None and not flags.is_ats_friendly:
            actions.append("Consider using clear section headers such as Skills, Experience and Education")
        return Suggestions(bullets=[], top_actions=actions[:MAX_TOP_ACTIONS])
