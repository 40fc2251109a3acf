from conftest import BACKEND_RESUME_TEXT, JD_TEXT, RESUME_TEXT
from ats_scorer.models.models import ParsedJobDescription
from ats_scorer.services.matching import KeywordMatcher
from ats_scorer.services.normalizer import heuristic_job_description, heuristic_resume
from ats_scorer.services.section_scorer import SectionScorer, quantified_count

CS_JD = ParsedJobDescription(
    text="Software engineer. Bachelor's degree in Computer Science or a related field.",
    skills_required=["Python"],
)


class TestSectionScorer:

    def test_skills_coverage(self):
        scorer = SectionScorer()
        assert scorer.skills(heuristic_resume(RESUME_TEXT), heuristic_job_description(JD_TEXT)) == 100
        assert scorer.skills(heuristic_resume(BACKEND_RESUME_TEXT), heuristic_job_description(JD_TEXT)) == 0

    def test_skills_intrinsic_without_job_description(self):
        resume = heuristic_resume("Skills: Python, Docker, Kafka, Linux, Git")
        assert SectionScorer().skills(resume, None) == 50

    def test_skills_intrinsic_when_job_lists_no_skills(self):
        resume = heuristic_resume("Skills: Python, Docker, Kafka, Linux, Git")
        assert SectionScorer().skills(resume, ParsedJobDescription(text="Team player")) == 50

    def test_education_levels(self):
        scorer = SectionScorer()
        relevant = heuristic_resume(RESUME_TEXT)
        unrelated = heuristic_resume(BACKEND_RESUME_TEXT)
        no_degree = heuristic_resume("Skills: Python\nExperience\nDeveloper, 2019 - 2023")

        assert scorer.education(relevant, None) == 70
        assert scorer.education(no_degree, CS_JD) == 0
        assert scorer.education(unrelated, CS_JD) == 50
        assert scorer.education(relevant, CS_JD) == 100

    def test_experience_blend(self):
        resume = heuristic_resume(RESUME_TEXT)
        jd = heuristic_job_description(JD_TEXT)
        score = SectionScorer().experience(resume, jd, years=5)

        # Full years ratio and quantified bullets; role overlap is partial
        assert 70 <= score <= 100

    def test_experience_years_ratio(self):
        resume = heuristic_resume(BACKEND_RESUME_TEXT)
        jd = heuristic_job_description(JD_TEXT)
        scorer = SectionScorer()
        assert scorer.experience(resume, jd, years=2) < scorer.experience(resume, jd, years=4)

    def test_quantified_bullets(self):
        lines = [
            "Reduced costs by 20%",
            "Saved $40k per year",
            "Served 2 million users",
            "Maintained internal APIs",
        ]
        assert quantified_count(lines) == 3

    def test_keywords_uses_weighted_coverage(self):
        resume = heuristic_resume(RESUME_TEXT)
        jd = heuristic_job_description(JD_TEXT)
        report = KeywordMatcher().match(resume, jd)
        assert SectionScorer().keywords(resume, jd, report) == 86

    def test_all_sections_bounded(self):
        for text in (RESUME_TEXT, BACKEND_RESUME_TEXT, "x" * 60):
            resume = heuristic_resume(text)
            for jd in (None, heuristic_job_description(JD_TEXT)):
                report = KeywordMatcher().match(resume, jd) if jd else None
                sections = SectionScorer().score(resume, jd, years=3, keywords=report)
                for value in sections.model_dump().values():
                    assert 0 <= value <= 100
