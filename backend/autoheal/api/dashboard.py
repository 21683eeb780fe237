from fastapi import APIRouter, Depends

from autoheal.schemas.dashboard import DashboardStats
from autoheal.services.dashboard_service import collect_stats
from autoheal.storage import Storage, get_storage

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(storage: Storage = Depends(get_storage)):
    """Failure, run and decision counts for the dashboard header."""
    return await collect_stats(storage)
