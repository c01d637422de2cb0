"""
Service probes.

``/health`` only proves the process answers. ``/ready`` also proves the
catalog tables are reachable and lists the import sources this instance
can serve.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tcgtracker.api.imports import get_registry
from tcgtracker.db.database import get_session
from tcgtracker.db.operations import count_cards
from tcgtracker.importing.registry import ImporterRegistry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class LivenessResponse(BaseModel):
    status: str = "healthy"


class ReadinessResponse(BaseModel):
    """Readiness report for load balancers and deploy checks."""

    status: str
    database: str
    catalog_cards: int | None = Field(default=None, description="Cards currently in the catalog")
    sources: list[str] = Field(default_factory=list, description="Registered importer keys")


async def catalog_size(session: AsyncSession) -> int | None:
    """Card count, or None if the catalog cannot be queried."""
    try:
        return await count_cards(session)
    except SQLAlchemyError as e:
        logger.warning("Catalog readiness check failed: %s", e)
        return None


@router.get("/health", response_model=LivenessResponse)
async def health() -> LivenessResponse:
    """Liveness probe; never touches the database."""
    return LivenessResponse()


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"model": ReadinessResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
    registry: Annotated[ImporterRegistry, Depends(get_registry)],
) -> ReadinessResponse:
    """
    Readiness probe.

    Responds 503 while the catalog tables cannot be queried.
    """
    cards = await catalog_size(session)
    sources = sorted(registry.keys)
    if cards is None:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return ReadinessResponse(status="not ready", database="unavailable", sources=sources)
    return ReadinessResponse(
        status="ready", database="connected", catalog_cards=cards, sources=sources
    )
