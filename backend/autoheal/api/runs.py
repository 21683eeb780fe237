from typing import Literal

from fastapi import APIRouter, Depends, Query, status

from autoheal.schemas.failure import FailureResponse
from autoheal.schemas.run import RunComplete, RunCreate, RunResponse
from autoheal.services.run_service import RunService
from autoheal.storage import RunFilter, Storage, get_storage

router = APIRouter()


@router.post("", response_model=RunResponse, status_code=status.HTTP_201_CREATED)
async def start_run(data: RunCreate, storage: Storage = Depends(get_storage)):
    """Open a run record; CI closes it with /complete when the suite ends."""
    return await RunService(storage).start(data)


@router.get("", response_model=list[RunResponse])
async def list_runs(
    repo: str | None = None,
    status: Literal["running", "completed", "failed"] | None = None,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    storage: Storage = Depends(get_storage),
):
    return await storage.list_runs(RunFilter(repo=repo, status=status, limit=limit, offset=offset))


@router.get("/{run_id}", response_model=RunResponse)
async def get_run(run_id: str, storage: Storage = Depends(get_storage)):
    return await RunService(storage).get(run_id)


@router.post("/{run_id}/complete", response_model=RunResponse)
async def complete_run(run_id: str, data: RunComplete, storage: Storage = Depends(get_storage)):
    return await RunService(storage).finish(run_id, data)


@router.get("/{run_id}/failures", response_model=list[FailureResponse])
async def list_run_failures(
    run_id: str,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    storage: Storage = Depends(get_storage),
):
    return await RunService(storage).failures(run_id, limit, offset)
