from fastapi import APIRouter, Depends, Query

from autoheal.exceptions import ValidationError
from autoheal.models.user import User
from autoheal.schemas.pull_request import PullRequestResponse
from autoheal.security import get_current_user
from autoheal.services.github import GitHubClient, get_github_client
from autoheal.services.pull_request_service import PullRequestService
from autoheal.services.workflow import PR_STATUSES
from autoheal.storage import Storage, get_storage

router = APIRouter()


@router.get("/prs", response_model=list[PullRequestResponse])
async def list_pull_requests(
    status: str | None = None,
    limit: int = Query(default=50, ge=1, le=200),
    storage: Storage = Depends(get_storage),
):
    if status and status not in PR_STATUSES:
        raise ValidationError(f"Unknown status '{status}'")
    return await storage.list_pull_requests(status, limit)


@router.post("/pr/{suggestion_id}/retry", response_model=PullRequestResponse)
async def retry_pull_request(
    suggestion_id: str,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    github: GitHubClient | None = Depends(get_github_client),
):
    """Open the pull request again for an approved suggestion whose last attempt failed."""
    return await PullRequestService(storage, github).retry(suggestion_id)


@router.get("/pr/{suggestion_id}/status", response_model=PullRequestResponse)
async def get_pull_request_status(suggestion_id: str, storage: Storage = Depends(get_storage)):
    return await PullRequestService(storage, None).status(suggestion_id)
