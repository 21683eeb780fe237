import logging
from datetime import datetime

from autoheal.exceptions import NotFoundError
from autoheal.models import Selector
from autoheal.schemas.selector import SelectorUpdate
from autoheal.storage import Storage

logger = logging.getLogger(__name__)


def selector_key(page: str, name: str) -> str:
    return f"{page}.{name}"


class SelectorService:
    """Catalog of accepted selectors keyed by page and element name."""

    def __init__(self, storage: Storage):
        self.storage = storage

    async def selector_map(self, page: str | None = None) -> dict[str, str]:
        selectors = await self.storage.list_selectors(page)
        return {selector_key(s.page, s.name): s.current for s in selectors}

    async def get(self, page: str, name: str) -> Selector:
        selector = await self.storage.get_selector(page, name)
        if not selector:
            raise NotFoundError(f"Selector {selector_key(page, name)} not found")
        return selector

    async def update(self, page: str, name: str, data: SelectorUpdate, updated_by: str | None) -> Selector:
        entry = {
            "selector": data.selector,
            "commit": data.commit,
            "approvedAt": datetime.utcnow().isoformat(),
            "approvedBy": data.approved_by or updated_by,
        }
        selector = await self.storage.upsert_selector(page, name, data.selector, entry)
        await self.storage.commit()
        logger.info("Updated selector %s to %s", selector_key(page, name), data.selector)
        return selector
