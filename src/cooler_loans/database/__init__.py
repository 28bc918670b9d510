from cooler_loans.database.operations import (
    compact_sqlite_database,
    create_new_sqlite_database,
    get_scoped_sqlite_session,
)
from cooler_loans.database.store import EntityStore, SqlAlchemyEntityStore

__all__ = (
    "EntityStore",
    "SqlAlchemyEntityStore",
    "compact_sqlite_database",
    "create_new_sqlite_database",
    "get_scoped_sqlite_session",
)
