from conftest import BACKEND_RESUME_TEXT, JD_TEXT, RESUME_TEXT
from ats_scorer.models.models import ParsedJobDescription
from ats_scorer.models.scoring_settings import MatchingSettings
from ats_scorer.services.matching import (
    NICE_TO_HAVE, REQUIREMENT, SKILL, KeywordMatcher, jd_frequency, skill_present
)
from ats_scorer.services.normalizer import heuristic_job_description, heuristic_resume


def _jd(**kwargs):
    return ParsedJobDescription(text=kwargs.pop("text", "job"), **kwargs)


class TestKeywordMatcher:
    """Exact, synonym and partial matching of job-description items"""

    def test_items_skip_numeric_requirements(self):
        items = KeywordMatcher().items(heuristic_job_description(JD_TEXT))
        texts = [i.text for i in items]

        assert texts == ["JavaScript", "React", "Strong JavaScript skills", "GraphQL experience"]
        assert [i.kind for i in items] == [SKILL, SKILL, REQUIREMENT, NICE_TO_HAVE]
        assert items[0].hard is True  # mentioned in a requirement
        assert items[1].hard is False

    def test_exact_match_records_literal_phrase_and_section(self):
        report = KeywordMatcher().match(heuristic_resume(RESUME_TEXT), _jd(skills_required=["react"]))
        match = report.matches[0]

        assert match.similarity == 1.0
        assert match.matched_phrases == ["React"]
        assert match.source_section == "skills"
        assert report.missing == []

    def test_synonym_counts_as_exact(self):
        resume = heuristic_resume("Summary\nShipped single page apps in JS and ES6 for five years.")
        report = KeywordMatcher().match(resume, _jd(skills_required=["JavaScript"]))
        assert report.matches[0].similarity == 1.0

    def test_full_stem_overlap_counts_as_exact(self):
        resume = heuristic_resume(RESUME_TEXT)
        report = KeywordMatcher().match(resume, _jd(requirements=["Strong JavaScript skills"]))

        match = report.matches[0]
        assert match.similarity == 1.0
        assert match.matched_phrases == ["javascript"]
        assert report.coverage == 1.0

    def test_partial_overlap_gets_partial_credit(self):
        resume = heuristic_resume(RESUME_TEXT)
        report = KeywordMatcher().match(resume, _jd(requirements=["Experience with JavaScript and Kubernetes"]))

        match = report.matches[0]
        # Two of three content stems, at half credit
        assert match.similarity == round(0.5 * 2 / 3, 4)
        assert match.matched_phrases == ["experience", "javascript"]
        assert match.source_section == "summary"

    def test_below_threshold_is_missing(self):
        resume = heuristic_resume(RESUME_TEXT)
        jd = _jd(requirements=["Payments domain compliance auditing experience"])
        report = KeywordMatcher().match(resume, jd)

        assert report.matches == []
        assert report.missing_keywords == ["Payments domain compliance auditing experience"]
        assert 0 < report.missing[0].similarity < 0.3

    def test_threshold_is_configurable(self):
        resume = heuristic_resume(RESUME_TEXT)
        jd = _jd(requirements=["Payments domain compliance auditing experience"])
        report = KeywordMatcher(MatchingSettings(threshold=0.05)).match(resume, jd)
        assert len(report.matches) == 1

    def test_missing_nice_to_have_is_not_a_missing_keyword(self):
        report = KeywordMatcher().match(heuristic_resume(RESUME_TEXT), heuristic_job_description(JD_TEXT))
        assert "GraphQL experience" not in report.missing_keywords
        assert "GraphQL experience" not in [m.jd_item for m in report.matches]

    def test_missing_is_subset_and_disjoint(self):
        jd = heuristic_job_description(JD_TEXT)
        report = KeywordMatcher().match(heuristic_resume(BACKEND_RESUME_TEXT), jd)

        assert set(report.missing_keywords) == {"JavaScript", "React", "Strong JavaScript skills"}
        assert set(report.missing_keywords) <= set(jd.skills_required) | set(jd.requirements)
        assert not set(report.missing_keywords) & {m.jd_item for m in report.matches}

    def test_weighted_coverage(self):
        report = KeywordMatcher().match(heuristic_resume(RESUME_TEXT), heuristic_job_description(JD_TEXT))
        # JavaScript, React and the requirement 2x1.0 each, GraphQL 1x0, over a total weight of 7
        assert round(report.coverage, 4) == round(6 / 7, 4)


class TestSkillHelpers:

    def test_skill_present_is_fuzzy(self):
        assert skill_present("Node.js", ["nodejs"])
        assert skill_present("React", ["React Native"])
        assert skill_present("Microservice", ["microservices"])
        assert not skill_present("Rust", ["Ruby"])

    def test_jd_frequency_uses_stems(self):
        text = "React developer. You will build React apps and review reacting components."
        assert jd_frequency("React", text) == 3
        assert jd_frequency("the", text) == 0
