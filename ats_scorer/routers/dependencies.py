from typing import Optional

from fastapi import Depends, Header, Request

from ats_scorer.services.report_renderer import ReportRenderer
from ats_scorer.services.run_store import ScoreRunStore
from ats_scorer.services.scoring import ScoringService
from ats_scorer.utils.exceptions import AuthenticationError

# Services are built once in the app lifespan and kept on app.state


def get_scoring_service(request: Request) -> ScoringService:
    return request.app.state.scoring_service


def get_run_store(request: Request) -> ScoreRunStore:
    return request.app.state.run_store


def get_report_renderer(request: Request) -> ReportRenderer:
    return request.app.state.report_renderer


def get_optional_user(x_user_id: Optional[str] = Header(default=None, alias="X-User-Id")) -> Optional[str]:
    """Caller identity as forwarded by the upstream gateway"""
    if x_user_id is None or not x_user_id.strip():
        return None
    return x_user_id.strip()


def get_current_user(user_id: Optional[str] = Depends(get_optional_user)) -> str:
    if user_id is None:
        raise AuthenticationError("X-User-Id header is required")
    return user_id
