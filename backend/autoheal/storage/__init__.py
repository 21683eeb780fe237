from autoheal.storage.base import FailureFilter, RunFilter, Storage
from autoheal.storage.sql import SQLStorage, get_storage

__all__ = [
    "FailureFilter",
    "RunFilter",
    "Storage",
    "SQLStorage",
    "get_storage",
]
