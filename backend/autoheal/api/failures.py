from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from autoheal.schemas.failure import FailureCreate, FailureDetail, FailureListItem, FailureResponse
from autoheal.schemas.suggestion import SuggestionResponse
from autoheal.services.failure_service import FailureService
from autoheal.services.workflow import FAILURE_STATUSES
from autoheal.exceptions import ValidationError
from autoheal.storage import FailureFilter, Storage, get_storage

router = APIRouter()


@router.post("", response_model=FailureResponse, status_code=status.HTTP_201_CREATED)
async def create_failure(payload: FailureCreate, storage: Storage = Depends(get_storage)):
    """Ingest a failure report from a test run."""
    return await FailureService(storage).ingest(payload)


@router.get("", response_model=list[FailureListItem])
async def list_failures(
    repo: str | None = None,
    status: str | None = None,
    run_id: str | None = Query(default=None, alias="runId"),
    since: datetime | None = None,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    storage: Storage = Depends(get_storage),
):
    """List failures newest first, with suggestion counts."""
    if status and status not in FAILURE_STATUSES:
        raise ValidationError(f"Unknown status '{status}'")

    rows = await FailureService(storage).list_failures(
        FailureFilter(repo=repo, status=status, run_id=run_id, since=since, limit=limit, offset=offset)
    )
    items = []
    for failure, count in rows:
        item = FailureListItem.model_validate(failure)
        item.suggestion_count = count
        items.append(item)
    return items


@router.get("/{failure_id}", response_model=FailureDetail)
async def get_failure(failure_id: str, storage: Storage = Depends(get_storage)):
    """Get a failure with all of its suggestions, newest first."""
    service = FailureService(storage)
    failure = await service.get(failure_id)
    suggestions = await storage.list_suggestions(failure.id)

    detail = FailureDetail.model_validate(failure)
    detail.suggestions = [SuggestionResponse.model_validate(s) for s in suggestions]
    return detail
