from maids.allocation import AllocationResult, Allocator, BatchCoordinator
from maids.config import AppIdsConfig, Config, load_config, parse_config
from maids.errors import (
    AllocationError,
    DuplicateAppIdError,
    MaidsError,
    StoreError,
    ValidationError,
)
from maids.facade import ErrorDetail, Maids, Reply
from maids.models import AppId
from maids.store import InMemoryStore, InsertOutcome, PostgresStore, Store

__version__ = "0.1.0"

__all__ = [
    "AllocationError",
    "AllocationResult",
    "Allocator",
    "AppId",
    "AppIdsConfig",
    "BatchCoordinator",
    "Config",
    "DuplicateAppIdError",
    "ErrorDetail",
    "InMemoryStore",
    "InsertOutcome",
    "Maids",
    "MaidsError",
    "PostgresStore",
    "Reply",
    "Store",
    "StoreError",
    "ValidationError",
    "load_config",
    "parse_config",
]
