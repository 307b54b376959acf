"""Domain models: pure Python dataclasses with no infrastructure dependencies.

The SQLAlchemy ORM row used by ``PostgresStore`` lives separately in
``maids.db.models`` and maps to/from these models at the store boundary.
"""

from maids.models.app_id import AppId
from maids.models.utils import generate_id

__all__ = [
    "AppId",
    "generate_id",
]
