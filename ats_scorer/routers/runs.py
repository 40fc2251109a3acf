# routers/runs.py
from typing import Literal

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response

from ats_scorer.models.response import DeleteRunResponse, ScoreRunDetail, ScoreRunPage, ScoreRunStats
from ats_scorer.routers.dependencies import get_current_user, get_report_renderer, get_run_store
from ats_scorer.services.report_renderer import ReportRenderer
from ats_scorer.services.run_store import MAX_PAGE_SIZE, ScoreRunStore
from ats_scorer.utils.exceptions import ValidationError
from ats_scorer.utils.logging_config import PerformanceMonitor, get_logger, log_api_call

router = APIRouter()
logger = get_logger(__name__)


def _check_run_id(run_id: str) -> str:
    if not run_id or not run_id.strip():
        raise ValidationError("Score run ID cannot be empty", field="run_id", value=run_id)
    return run_id.strip()


@router.get("", response_model=ScoreRunPage)
async def list_runs(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    sort_by: Literal["createdAt", "overall"] = Query("createdAt", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    user_id: str = Depends(get_current_user),
    store: ScoreRunStore = Depends(get_run_store),
):
    """List the caller's score runs, newest first by default"""
    request_id = getattr(request.state, "request_id", "unknown")
    with PerformanceMonitor("list_runs", logger):
        result = await store.list(user_id, page, limit, sort_by, sort_order)
    logger.info(
        f"Listed {len(result.runs)} of {result.pagination.total} score runs",
        extra={"request_id": request_id, "user_id": user_id},
    )
    return result


# Registered before /{run_id} so "stats" is not taken for an id
@router.get("/stats/summary", response_model=ScoreRunStats)
async def run_stats(
    user_id: str = Depends(get_current_user),
    store: ScoreRunStore = Depends(get_run_store),
):
    with PerformanceMonitor("run_stats", logger):
        return await store.stats(user_id)


@router.get("/{run_id}", response_model=ScoreRunDetail)
async def get_run(
    run_id: str,
    user_id: str = Depends(get_current_user),
    store: ScoreRunStore = Depends(get_run_store),
):
    return await store.get(user_id, _check_run_id(run_id))


@router.delete("/{run_id}", response_model=DeleteRunResponse)
@log_api_call("delete_run")
async def delete_run(
    run_id: str,
    user_id: str = Depends(get_current_user),
    store: ScoreRunStore = Depends(get_run_store),
):
    return await store.delete(user_id, _check_run_id(run_id))


@router.get("/{run_id}/pdf")
async def download_run_report(
    run_id: str,
    user_id: str = Depends(get_current_user),
    store: ScoreRunStore = Depends(get_run_store),
    renderer: ReportRenderer = Depends(get_report_renderer),
):
    """Render the run through the configured report renderer"""
    run = await store.get(user_id, _check_run_id(run_id))
    content = renderer.render(run)
    logger.info(f"Rendered report for score run {run.id} ({len(content)} bytes)")
    return Response(
        content=content,
        media_type=renderer.media_type,
        headers={"Content-Disposition": f'attachment; filename="{renderer.filename(run)}"'},
    )
