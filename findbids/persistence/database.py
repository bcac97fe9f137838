# Re-export the canonical database helpers so routers can depend on findbids.persistence.database
from ..database import engine, create_db_and_tables, get_session

__all__ = [
    "engine",
    "create_db_and_tables",
    "get_session",
]


