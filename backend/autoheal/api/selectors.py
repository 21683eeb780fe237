from fastapi import APIRouter, Depends

from autoheal.models.user import User
from autoheal.schemas.selector import SelectorResponse, SelectorUpdate
from autoheal.security import get_current_user
from autoheal.services.selector_service import SelectorService
from autoheal.storage import Storage, get_storage

router = APIRouter()


@router.get("", response_model=dict[str, str])
async def get_selector_map(storage: Storage = Depends(get_storage)):
    """Full catalog as {"page.name": selector}."""
    return await SelectorService(storage).selector_map()


@router.get("/{page}", response_model=dict[str, str])
async def get_page_selectors(page: str, storage: Storage = Depends(get_storage)):
    return await SelectorService(storage).selector_map(page)


@router.get("/{page}/{name}", response_model=SelectorResponse)
async def get_selector(page: str, name: str, storage: Storage = Depends(get_storage)):
    return await SelectorService(storage).get(page, name)


@router.put("/{page}/{name}", response_model=SelectorResponse)
async def update_selector(
    page: str,
    name: str,
    data: SelectorUpdate,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Set the accepted selector for an element and append it to the history."""
    return await SelectorService(storage).update(page, name, data, current_user.username)
