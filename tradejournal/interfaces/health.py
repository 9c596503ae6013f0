"""
Health check router.

Reports liveness plus whether the journal database answers a trivial
query. A database that cannot be reached turns the check into a 503 so
load balancers stop routing to the instance.
"""

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tradejournal.core.config import settings
from tradejournal.interfaces.journal.dependencies import get_db_session
from tradejournal.interfaces.journal.schemas import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns service status, version and database reachability.",
    responses={503: {"model": HealthResponse}},
)
def health_check(
    response: Response, session: Session = Depends(get_db_session)
) -> HealthResponse:
    """Ping the database and report the service as ok or degraded."""
    try:
        session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("Health check: database unavailable (%s)", type(exc).__name__)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(
            status="degraded", version=settings.version, database="unavailable"
        )
    return HealthResponse(status="ok", version=settings.version, database="ok")
