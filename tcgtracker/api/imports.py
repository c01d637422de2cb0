"""
Catalog import API endpoints.

Dry-run and apply accept either a JSON body ``{source, set?, limit?}`` or a
multipart form with the same fields plus ``file``. Which mode runs is fixed
by the endpoint, never by the request body.

Administrator access is enforced by the upstream routing layer; the acting
user arrives in the ``X-User-Id`` header.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from tcgtracker.config import MAX_PREVIEW_LIMIT, MIN_PREVIEW_LIMIT
from tcgtracker.db.database import get_session
from tcgtracker.importing.orchestrator import ImportOrchestrator, ImportRequest
from tcgtracker.importing.registry import ImporterRegistry, build_default_registry
from tcgtracker.importing.schemas import (
    ImportApplyResponse,
    ImportOptionsResponse,
    ImportPreviewResponse,
    ImportRequestPayload,
)
from tcgtracker.models.failure import InvalidLimitError, InvalidRequestError, ProblemDetails

router = APIRouter(prefix="/import", tags=["import"])

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")

PROBLEM_RESPONSES: dict[int | str, dict[str, object]] = {400: {"model": ProblemDetails}}


@lru_cache(maxsize=1)
def get_registry() -> ImporterRegistry:
    """Registry of bundled importers, built once per process."""
    return build_default_registry()


def get_orchestrator(
    registry: Annotated[ImporterRegistry, Depends(get_registry)],
) -> ImportOrchestrator:
    return ImportOrchestrator(registry)


def get_acting_user_id(
    x_user_id: Annotated[str | None, Header()] = None,
) -> int | None:
    """Acting user id from the upstream-authenticated header, if any."""
    if x_user_id is None or not x_user_id.strip().isdigit():
        return None
    return int(x_user_id.strip())


def _parse_limit(raw: object) -> int | None:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        raise InvalidLimitError(MIN_PREVIEW_LIMIT, MAX_PREVIEW_LIMIT) from None


async def read_import_request(request: Request) -> ImportRequest:
    """
    Unpack either request shape into an ImportRequest.

    The ``limit`` query parameter is used when the body/form gives none.

    Raises:
        InvalidRequestError: If the body is empty, not JSON, or names no source
        InvalidLimitError: If a limit is present but not an integer
    """
    query_limit = _parse_limit(request.query_params.get("limit"))
    content_type = request.headers.get("content-type", "").lower()

    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        source = form.get("source")
        if not isinstance(source, str) or not source.strip():
            raise InvalidRequestError()

        form_limit = _parse_limit(form.get("limit"))
        set_code = form.get("set")
        upload = next((v for _, v in form.multi_items() if isinstance(v, UploadFile)), None)
        return ImportRequest(
            source=source,
            set_code=set_code.strip() if isinstance(set_code, str) and set_code.strip() else None,
            limit=form_limit if form_limit is not None else query_limit,
            file=upload,
        )

    body = await request.body()
    if not body.strip():
        raise InvalidRequestError()
    try:
        payload = ImportRequestPayload.model_validate_json(body)
    except ValidationError as e:
        if any(error["loc"][:1] == ("limit",) for error in e.errors()):
            raise InvalidLimitError(MIN_PREVIEW_LIMIT, MAX_PREVIEW_LIMIT) from None
        raise InvalidRequestError("The request body could not be parsed as JSON.") from None

    if not payload.source.strip():
        raise InvalidRequestError()

    set_code = payload.set.strip() if payload.set and payload.set.strip() else None
    return ImportRequest(
        source=payload.source,
        set_code=set_code,
        limit=payload.limit if payload.limit is not None else query_limit,
    )


@router.get("/options", response_model=ImportOptionsResponse)
async def get_import_options(
    orchestrator: Annotated[ImportOrchestrator, Depends(get_orchestrator)],
) -> ImportOptionsResponse:
    """
    List importable sources.

    Static catalog: each source's canonical key, registry key, display name,
    games and known set codes.
    """
    return orchestrator.options()


@router.post("/dry-run", response_model=ImportPreviewResponse, responses=PROBLEM_RESPONSES)
async def dry_run_import(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_session)],
    orchestrator: Annotated[ImportOrchestrator, Depends(get_orchestrator)],
    user_id: Annotated[int | None, Depends(get_acting_user_id)],
) -> ImportPreviewResponse:
    """
    Preview an import.

    Runs the full reconciliation and rolls it back. Invalid rows are
    returned as preview rows, not as a failed request.
    """
    import_request = await read_import_request(request)
    return await orchestrator.dry_run(session, import_request, user_id)


@router.post("/apply", response_model=ImportApplyResponse, responses=PROBLEM_RESPONSES)
async def apply_import(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_session)],
    orchestrator: Annotated[ImportOrchestrator, Depends(get_orchestrator)],
    user_id: Annotated[int | None, Depends(get_acting_user_id)],
) -> ImportApplyResponse:
    """
    Apply an import.

    Commits in one transaction; a failure leaves the catalog unchanged.
    Re-applying the same input reports nothing created or updated.
    """
    import_request = await read_import_request(request)
    return await orchestrator.apply(session, import_request, user_id)
