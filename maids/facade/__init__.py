from maids.facade.core import Maids
from maids.facade.types import ErrorDetail, Reply

__all__ = [
    "ErrorDetail",
    "Maids",
    "Reply",
]
