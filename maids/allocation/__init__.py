from maids.allocation.allocator import DEFAULT_MAX_RETRIES, Allocator
from maids.allocation.batch import AllocationResult, BatchCoordinator

__all__ = [
    "DEFAULT_MAX_RETRIES",
    "AllocationResult",
    "Allocator",
    "BatchCoordinator",
]
