import pytest

from conftest import BACKEND_RESUME_TEXT, JD_TEXT, RESUME_TEXT
from ats_scorer.models.models import ParsedJobDescription
from ats_scorer.services.gates import GateEvaluator
from ats_scorer.services.matching import KeywordMatcher
from ats_scorer.services.normalizer import heuristic_job_description, heuristic_resume
from ats_scorer.services.suggestions import SuggestionGenerator, experience_level, suggest_bullets


def _suggest(resume_text, jd):
    resume = heuristic_resume(resume_text)
    gates = GateEvaluator(current_year=2024).evaluate(resume, jd)
    report = KeywordMatcher().match(resume, jd) if jd else None
    return SuggestionGenerator().generate(resume, jd, gates, years=2, report=report)


class TestSuggestionGenerator:

    def test_every_action_is_phrased_as_a_suggestion(self):
        suggestions = _suggest(BACKEND_RESUME_TEXT, heuristic_job_description(JD_TEXT))
        assert suggestions.top_actions
        assert all(a.startswith("Consider") for a in suggestions.top_actions)

    def test_hard_requirements_rank_first(self):
        jd = ParsedJobDescription(
            text="Kubernetes Kubernetes Kubernetes. Must have Terraform.",
            requirements=["Terraform"],
            skills_required=["Kubernetes", "Terraform"],
        )
        suggestions = _suggest(BACKEND_RESUME_TEXT, jd)
        assert "Terraform" in suggestions.top_actions[0]
        assert "Kubernetes" in suggestions.top_actions[1]

    def test_frequency_breaks_ties(self):
        jd = ParsedJobDescription(
            text="We use Kafka. Kafka pipelines feed Spark. Kafka everywhere.",
            skills_required=["Spark", "Kafka"],
        )
        actions = _suggest(BACKEND_RESUME_TEXT, jd).top_actions
        assert "Kafka" in actions[0]
        assert "Spark" in actions[1]

    def test_failed_years_gate_recommends_quantifying(self):
        actions = _suggest(BACKEND_RESUME_TEXT, heuristic_job_description(JD_TEXT)).top_actions
        assert any("quantifying" in a for a in actions)

    def test_gate_advice_survives_many_missing_skills(self):
        skills = ["Kubernetes", "Terraform", "Kafka", "Spark", "Scala", "Rust"]
        jd = ParsedJobDescription(
            text="Platform engineer. 5+ years of experience. " + ", ".join(skills),
            requirements=["5+ years of experience"],
            skills_required=skills,
            experience_years=5,
        )
        resume = "Summary\nData analyst.\nSkills\nExcel, Word\nExperience\nAnalyst, Foo Ltd, 2023 - 2024"
        actions = _suggest(resume, jd).top_actions

        assert "quantifying" in actions[0]
        assert "minimum 5 years of experience" in actions[0]
        for skill in skills:
            assert any(f'"{skill}"' in a for a in actions)
        assert len(actions) == 7

    def test_bullets_use_missing_skills_and_placeholders(self):
        bullets = _suggest(BACKEND_RESUME_TEXT, heuristic_job_description(JD_TEXT)).bullets
        assert 1 <= len(bullets) <= 3
        assert "JavaScript" in bullets[0]
        assert all("[X%" in b for b in bullets)

    def test_deterministic(self):
        jd = heuristic_job_description(JD_TEXT)
        assert _suggest(BACKEND_RESUME_TEXT, jd) == _suggest(BACKEND_RESUME_TEXT, jd)

    def test_no_job_description_gives_intrinsic_advice(self):
        suggestions = _suggest(RESUME_TEXT, None)
        assert suggestions.bullets == []
        assert any("technical skills" in a for a in suggestions.top_actions)


class TestSuggestBullets:

    @pytest.mark.parametrize("years,level", [(0, "entry"), (1.5, "entry"), (3, "mid"), (8, "senior")])
    def test_experience_level(self, years, level):
        assert experience_level(years) == level

    def test_level_verbs(self):
        entry = suggest_bullets("Worked on the billing service", ["Python"], "entry")
        senior = suggest_bullets("Worked on the billing service", ["Python"], "senior")
        assert entry[0].startswith("Assisted")
        assert senior[0].startswith("Architected")

    def test_context_comes_from_the_section(self):
        text = "- Built dashboards for finance\n- Migrated reporting jobs to Airflow"
        bullets = suggest_bullets(text, ["Airflow", "Docker"], "mid")

        assert bullets[0] == (
            "Led Airflow work on migrated reporting jobs to Airflow, resulting in [X% increase in throughput]"
        )
        assert "built dashboards for finance" in bullets[1]
        assert bullets[1].startswith("Implemented Docker")

    def test_one_bullet_per_keyword(self):
        bullets = suggest_bullets("Some experience text here", ["A", "B", "C", " "], "mid")
        assert len(bullets) == 3
