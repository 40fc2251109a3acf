"""
Score Run Store: append-only persistence of score runs plus the resume / job
description snapshots they were computed from.
"""
import json
import math
import uuid
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from pymongo import ASCENDING, DESCENDING

from ats_scorer.models.models import ParsedJobDescription, ParsedResume
from ats_scorer.models.response import (
    DeleteRunResponse, DocumentSummary, Pagination, ScoreResult, ScoreRunDetail, ScoreRunPage,
    ScoreRunStats, ScoreRunSummary, StatsActivity, StatsDistribution, StatsScores, StatsTotals
)
from ats_scorer.models.schemas import JobDescriptionRecord, ResumeRecord, ScoreRunRecord
from ats_scorer.services.db import JOB_DESCRIPTIONS, RESUMES, SCORE_RUNS
from ats_scorer.utils.exceptions import (
    AuthorizationError, ExceptionContext, NotFoundError, ValidationError
)
from ats_scorer.utils.logging_config import get_logger
from ats_scorer.utils.utils import round_half_up

logger = get_logger(__name__)

SORT_FIELDS = {"createdAt": "created_at", "overall": "overall"}
SORT_ORDERS = {"asc": ASCENDING, "desc": DESCENDING}
MAX_PAGE_SIZE = 50


def new_id() -> str:
    return str(uuid.uuid4())


def bucket_for(score: int) -> str:
    if score >= 90:
        return "excellent"
    if score >= 70:
        return "good"
    if score >= 50:
        return "fair"
    return "poor"


def record_from_result(
    user_id: str, resume_id: str, job_desc_id: str, result: ScoreResult, model_version: str
) -> ScoreRunRecord:
    gaps = {
        "gates": [g.model_dump(by_alias=True) for g in result.gates],
        "matches": [m.model_dump(by_alias=True) for m in result.matches],
        "missingKeywords": list(result.missing_keywords),
    }
    return ScoreRunRecord(
        id=new_id(),
        user_id=user_id,
        resume_id=resume_id,
        job_desc_id=job_desc_id,
        overall=result.overall,
        section_json=result.sections.model_dump_json(by_alias=True),
        gaps_json=json.dumps(gaps),
        suggestions_json=result.suggestions.model_dump_json(by_alias=True),
        model_version=model_version,
    )


class ScoreRunStore:
    def __init__(self, db, stats_period_days: int = 30):
        self.db = db
        self.runs = db[SCORE_RUNS]
        self.resumes = db[RESUMES]
        self.job_descriptions = db[JOB_DESCRIPTIONS]
        self.stats_period_days = stats_period_days

    # -------- Snapshots --------
    async def _owned_snapshot(self, coll, doc_id: Optional[str], user_id: str, resource: str) -> Optional[str]:
        if not doc_id:
            return None
        existing = await coll.find_one({"id": doc_id})
        if existing is None:
            return None
        if existing.get("user_id") != user_id:
            raise AuthorizationError(f"{resource} {doc_id} belongs to another user", resource=resource)
        return doc_id

    async def save_resume(
        self, user_id: str, parsed: ParsedResume, title: Optional[str] = None, resume_id: Optional[str] = None
    ) -> str:
        """Store an immutable resume snapshot, or reuse the caller's existing one"""
        with ExceptionContext("save_resume", logger, user_id=user_id):
            existing = await self._owned_snapshot(self.resumes, resume_id, user_id, "resume")
            if existing:
                return existing
            record = ResumeRecord(
                id=resume_id or new_id(),
                user_id=user_id,
                title=title or "Uploaded Resume",
                original_name=parsed.metadata.file_name,
                text=parsed.text,
                parsed_json=parsed.model_dump_json(by_alias=True),
            )
            await self.resumes.insert_one(record.model_dump())
            logger.debug(f"Stored resume snapshot {record.id}")
            return record.id

    async def save_job_description(
        self, user_id: str, parsed: ParsedJobDescription, title: Optional[str] = None,
        job_desc_id: Optional[str] = None, source: Optional[str] = None
    ) -> str:
        with ExceptionContext("save_job_description", logger, user_id=user_id):
            existing = await self._owned_snapshot(self.job_descriptions, job_desc_id, user_id, "job description")
            if existing:
                return existing
            record = JobDescriptionRecord(
                id=job_desc_id or new_id(),
                user_id=user_id,
                title=title or "Job Description",
                source=source,
                text=parsed.text,
                parsed_json=parsed.model_dump_json(by_alias=True),
            )
            await self.job_descriptions.insert_one(record.model_dump())
            logger.debug(f"Stored job description snapshot {record.id}")
            return record.id

    # -------- Score runs --------
    async def create(self, record: ScoreRunRecord) -> str:
        with ExceptionContext("create_score_run", logger, user_id=record.user_id):
            await self.runs.insert_one(record.model_dump())
        logger.info(f"Created score run {record.id} (overall {record.overall})")
        return record.id

    async def _titles(self, coll, ids: List[str]) -> Dict[str, DocumentSummary]:
        ids = [i for i in set(ids) if i]
        if not ids:
            return {}
        docs = await coll.find({"id": {"$in": ids}}).to_list(length=None)
        return {
            d["id"]: DocumentSummary(id=d["id"], title=d.get("title", ""), created_at=d.get("created_at"))
            for d in docs
        }

    async def list(
        self, user_id: str, page: int = 1, page_size: int = 10,
        sort_by: str = "createdAt", sort_order: str = "desc"
    ) -> ScoreRunPage:
        if page < 1:
            raise ValidationError("page must be at least 1", field="page", value=page)
        if page_size < 1 or page_size > MAX_PAGE_SIZE:
            raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}", field="limit", value=page_size)
        if sort_by not in SORT_FIELDS:
            raise ValidationError(f"sortBy must be one of {', '.join(SORT_FIELDS)}", field="sortBy", value=sort_by)
        if sort_order not in SORT_ORDERS:
            raise ValidationError("sortOrder must be asc or desc", field="sortOrder", value=sort_order)

        direction = SORT_ORDERS[sort_order]
        query = {"user_id": user_id}
        with ExceptionContext("list_score_runs", logger, user_id=user_id):
            total = await self.runs.count_documents(query)
            cursor = (
                self.runs.find(query)
                .sort([(SORT_FIELDS[sort_by], direction), ("id", direction)])
                .skip((page - 1) * page_size)
                .limit(page_size)
            )
            docs = await cursor.to_list(length=page_size)
            resumes = await self._titles(self.resumes, [d["resume_id"] for d in docs])
            jds = await self._titles(self.job_descriptions, [d["job_desc_id"] for d in docs])

        runs = [
            ScoreRunSummary(
                id=d["id"],
                overall=d["overall"],
                sections=json.loads(d["section_json"]),
                created_at=d["created_at"],
                model_version=d["model_version"],
                resume=resumes.get(d["resume_id"]),
                job_description=jds.get(d["job_desc_id"]),
            )
            for d in docs
        ]
        pages = math.ceil(total / page_size) if total else 0
        return ScoreRunPage(
            runs=runs,
            pagination=Pagination(
                page=page, limit=page_size, total=total, pages=pages,
                has_next=page < pages, has_prev=page > 1,
            ),
        )

    async def _owned_run(self, user_id: str, run_id: str) -> Optional[dict]:
        doc = await self.runs.find_one({"id": run_id})
        if doc is not None and doc.get("user_id") != user_id:
            raise AuthorizationError("Score run belongs to another user", resource="score_run")
        return doc

    async def get(self, user_id: str, run_id: str) -> ScoreRunDetail:
        with ExceptionContext("get_score_run", logger, user_id=user_id, run_id=run_id):
            doc = await self._owned_run(user_id, run_id)
            if doc is None:
                raise NotFoundError(f"Score run {run_id} not found", resource="score_run", resource_id=run_id)
            resumes = await self._titles(self.resumes, [doc["resume_id"]])
            jds = await self._titles(self.job_descriptions, [doc["job_desc_id"]])

        return ScoreRunDetail(
            id=doc["id"],
            user_id=doc["user_id"],
            overall=doc["overall"],
            sections=json.loads(doc["section_json"]),
            gaps=json.loads(doc["gaps_json"]),
            suggestions=json.loads(doc["suggestions_json"]),
            model_version=doc["model_version"],
            created_at=doc["created_at"],
            resume=resumes.get(doc["resume_id"]),
            job_description=jds.get(doc["job_desc_id"]),
        )

    async def delete(self, user_id: str, run_id: str) -> DeleteRunResponse:
        """Idempotent: deleting a missing run reports ``deleted=False``"""
        with ExceptionContext("delete_score_run", logger, user_id=user_id, run_id=run_id):
            doc = await self._owned_run(user_id, run_id)
            if doc is None:
                return DeleteRunResponse(id=run_id, deleted=False, message="Score run not found or already deleted")
            await self.runs.delete_one({"id": run_id, "user_id": user_id})
        logger.info(f"Deleted score run {run_id}")
        return DeleteRunResponse(id=run_id, deleted=True, message="Score run deleted successfully")

    async def stats(self, user_id: str, now: Optional[datetime] = None) -> ScoreRunStats:
        now = now or datetime.utcnow()
        since = now - timedelta(days=self.stats_period_days)
        with ExceptionContext("score_run_stats", logger, user_id=user_id):
            docs = await self.runs.find(
                {"user_id": user_id}, {"overall": 1, "created_at": 1}
            ).to_list(length=None)
            resume_count = await self.resumes.count_documents({"user_id": user_id})
            jd_count = await self.job_descriptions.count_documents({"user_id": user_id})

        scores = [d["overall"] for d in docs]
        distribution = StatsDistribution()
        for score in scores:
            bucket = bucket_for(score)
            setattr(distribution, bucket, getattr(distribution, bucket) + 1)

        return ScoreRunStats(
            totals=StatsTotals(score_runs=len(docs), resumes=resume_count, job_descriptions=jd_count),
            scores=StatsScores(
                average=round_half_up(sum(scores) / len(scores)) if scores else 0,
                highest=max(scores) if scores else 0,
                lowest=min(scores) if scores else 0,
            ),
            activity=StatsActivity(
                recent_runs=sum(1 for d in docs if d["created_at"] >= since),
                period_days=self.stats_period_days,
            ),
            distribution=distribution,
        )
