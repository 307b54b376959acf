from maids.db.models import APP_IDS_TABLE, AppIdRow, Base

__all__ = [
    "APP_IDS_TABLE",
    "AppIdRow",
    "Base",
]
