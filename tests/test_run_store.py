import json
from datetime import datetime, timedelta

import pytest

from conftest import JD_TEXT, RESUME_TEXT
from ats_scorer.models.response import ScoreResult, SectionScores
from ats_scorer.services.db import init_indexes
from ats_scorer.services.normalizer import heuristic_job_description, heuristic_resume
from ats_scorer.services.run_store import ScoreRunStore, bucket_for, record_from_result
from ats_scorer.utils.exceptions import AuthorizationError, NotFoundError, ValidationError


def _result(overall: int) -> ScoreResult:
    return ScoreResult(
        overall=overall,
        sections=SectionScores(skills=overall, experience=overall, education=overall, keywords=overall),
        timestamp="2024-01-01T00:00:00Z",
    )


async def _seed(store, user_id, scores):
    resume_id = await store.save_resume(user_id, heuristic_resume(RESUME_TEXT), title="Jane CV")
    jd_id = await store.save_job_description(user_id, heuristic_job_description(JD_TEXT), title="Frontend Engineer")
    ids = []
    for score in scores:
        ids.append(await store.create(record_from_result(user_id, resume_id, jd_id, _result(score), "1.0")))
    return ids


@pytest.fixture
def store(mongo_db):
    return ScoreRunStore(mongo_db)


class TestScoreRunStore:
    """Persistence, pagination and statistics of score runs"""

    def test_record_round_trips_result_shape(self, service):
        result = service.score(RESUME_TEXT, JD_TEXT)
        record = record_from_result("u1", "r1", "j1", result, "1.0")

        assert json.loads(record.section_json) == result.sections.model_dump(by_alias=True)
        gaps = json.loads(record.gaps_json)
        assert gaps["gates"] == [g.model_dump(by_alias=True) for g in result.gates]
        assert gaps["missingKeywords"] == result.missing_keywords
        assert json.loads(record.suggestions_json)["topActions"] == result.suggestions.top_actions

    @pytest.mark.asyncio
    async def test_get_joins_titles(self, store):
        run_id = (await _seed(store, "u1", [82]))[0]
        run = await store.get("u1", run_id)

        assert run.overall == 82
        assert run.sections["skills"] == 82
        assert run.resume.title == "Jane CV"
        assert run.job_description.title == "Frontend Engineer"

    @pytest.mark.asyncio
    async def test_get_missing_and_foreign_runs(self, store):
        run_id = (await _seed(store, "u1", [50]))[0]
        with pytest.raises(NotFoundError):
            await store.get("u1", "does-not-exist")
        with pytest.raises(AuthorizationError):
            await store.get("u2", run_id)

    @pytest.mark.asyncio
    async def test_pagination_visits_every_run_once(self, store, mongo_db):
        await init_indexes(mongo_db)
        await _seed(store, "u1", [10, 20, 30, 40, 50, 60, 70])
        await _seed(store, "u2", [99])

        seen, page = [], 1
        while True:
            result = await store.list("u1", page=page, page_size=3)
            seen += [r.id for r in result.runs]
            if not result.pagination.has_next:
                break
            page += 1

        assert result.pagination.total == 7
        assert result.pagination.pages == 3
        assert len(seen) == len(set(seen)) == 7

    @pytest.mark.asyncio
    async def test_sort_by_overall(self, store):
        await _seed(store, "u1", [40, 90, 65])
        asc = await store.list("u1", sort_by="overall", sort_order="asc")
        desc = await store.list("u1", sort_by="overall", sort_order="desc")

        assert [r.overall for r in asc.runs] == [40, 65, 90]
        assert [r.overall for r in desc.runs] == [90, 65, 40]
        assert desc.pagination.has_prev is False

    @pytest.mark.asyncio
    async def test_empty_list(self, store):
        result = await store.list("nobody")
        assert result.runs == []
        assert result.pagination.total == 0
        assert result.pagination.has_next is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kwargs", [{"page": 0}, {"page_size": 51}, {"sort_by": "title"}, {"sort_order": "up"}])
    async def test_invalid_list_arguments(self, store, kwargs):
        with pytest.raises(ValidationError):
            await store.list("u1", **kwargs)

    @pytest.mark.asyncio
    async def test_delete_is_idempotent_and_reflected(self, store):
        ids = await _seed(store, "u1", [95, 45])

        first = await store.delete("u1", ids[0])
        second = await store.delete("u1", ids[0])
        assert first.deleted is True
        assert second.deleted is False

        listed = await store.list("u1")
        assert [r.id for r in listed.runs] == [ids[1]]
        stats = await store.stats("u1")
        assert stats.totals.score_runs == 1
        assert stats.distribution.excellent == 0
        assert stats.distribution.poor == 1

    @pytest.mark.asyncio
    async def test_delete_foreign_run_is_forbidden(self, store):
        run_id = (await _seed(store, "u1", [70]))[0]
        with pytest.raises(AuthorizationError):
            await store.delete("u2", run_id)

    @pytest.mark.asyncio
    async def test_stats(self, store, mongo_db):
        await _seed(store, "u1", [95, 90, 75, 55, 20])
        old = await mongo_db["score_runs"].find_one({"user_id": "u1", "overall": 20})
        await mongo_db["score_runs"].update_one(
            {"id": old["id"]}, {"$set": {"created_at": datetime.utcnow() - timedelta(days=45)}}
        )

        stats = await store.stats("u1")
        assert stats.totals.score_runs == 5
        assert stats.totals.resumes == 1
        assert stats.totals.job_descriptions == 1
        assert stats.scores.average == 67
        assert stats.scores.highest == 95
        assert stats.scores.lowest == 20
        assert stats.activity.recent_runs == 4
        assert stats.activity.period_days == 30
        assert stats.distribution.model_dump() == {"excellent": 2, "good": 1, "fair": 1, "poor": 1}

    @pytest.mark.asyncio
    async def test_stats_for_new_user(self, store):
        stats = await store.stats("nobody")
        assert stats.scores.average == 0
        assert stats.scores.highest == 0
        assert stats.scores.lowest == 0

    @pytest.mark.asyncio
    async def test_snapshots_are_reused_by_owned_id(self, store):
        resume_id = await store.save_resume("u1", heuristic_resume(RESUME_TEXT))
        again = await store.save_resume("u1", heuristic_resume(RESUME_TEXT), resume_id=resume_id)
        assert again == resume_id
        with pytest.raises(AuthorizationError):
            await store.save_resume("u2", heuristic_resume(RESUME_TEXT), resume_id=resume_id)

    @pytest.mark.parametrize("score,bucket", [(100, "excellent"), (90, "excellent"), (89, "good"),
                                              (70, "good"), (69, "fair"), (50, "fair"), (49, "poor")])
    def test_buckets(self, score, bucket):
        assert bucket_for(score) == bucket
