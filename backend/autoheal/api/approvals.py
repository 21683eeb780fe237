from typing import Literal

from fastapi import APIRouter, Depends, Query, status

from autoheal.models.user import User
from autoheal.schemas.approval import ApprovalCreate, ApprovalResponse
from autoheal.security import get_current_user
from autoheal.services.approval_service import ApprovalService
from autoheal.services.github import GitHubClient, get_github_client
from autoheal.services.pull_request_service import PullRequestService
from autoheal.storage import Storage, get_storage

router = APIRouter()


@router.post("", response_model=ApprovalResponse, status_code=status.HTTP_201_CREATED)
async def create_approval(
    data: ApprovalCreate,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    github: GitHubClient | None = Depends(get_github_client),
):
    """Approve or reject the current suggestion for a failure.

    Approving also opens a pull request in the test repository when GitHub is configured.
    """
    service = ApprovalService(storage, PullRequestService(storage, github))
    return await service.decide(data, current_user)


@router.get("", response_model=list[ApprovalResponse])
async def list_recent_approvals(
    decision: Literal["approve", "reject"] | None = None,
    limit: int = Query(default=50, ge=1, le=200),
    storage: Storage = Depends(get_storage),
):
    return await storage.list_recent_approvals(decision, limit)


@router.get("/suggestion/{suggestion_id}", response_model=list[ApprovalResponse])
async def list_approvals_for_suggestion(suggestion_id: str, storage: Storage = Depends(get_storage)):
    """Decision history for a suggestion, newest first."""
    return await ApprovalService(storage).for_suggestion(suggestion_id)
