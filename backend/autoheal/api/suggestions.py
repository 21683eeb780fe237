from fastapi import APIRouter, Depends, status

from autoheal.exceptions import NotFoundError
from autoheal.schemas.suggestion import SuggestionCreate, SuggestionResponse
from autoheal.services.failure_service import FailureService
from autoheal.storage import Storage, get_storage

router = APIRouter()


@router.post("", response_model=SuggestionResponse, status_code=status.HTTP_201_CREATED)
async def create_suggestion(data: SuggestionCreate, storage: Storage = Depends(get_storage)):
    """Record ranked candidates for a failure (posted by the healing engine)."""
    return await FailureService(storage).record_suggestion(data)


@router.get("/failure/{failure_id}", response_model=list[SuggestionResponse])
async def list_suggestions_for_failure(failure_id: str, storage: Storage = Depends(get_storage)):
    return await FailureService(storage).suggestions(failure_id)


@router.get("/failure/{failure_id}/latest", response_model=SuggestionResponse)
async def get_latest_suggestion(failure_id: str, storage: Storage = Depends(get_storage)):
    """The suggestion a reviewer decides on: the most recently recorded one."""
    return await FailureService(storage).latest_suggestion(failure_id)


@router.get("/{suggestion_id}", response_model=SuggestionResponse)
async def get_suggestion(suggestion_id: str, storage: Storage = Depends(get_storage)):
    suggestion = await storage.get_suggestion(suggestion_id)
    if not suggestion:
        raise NotFoundError("Suggestion not found")
    return suggestion
