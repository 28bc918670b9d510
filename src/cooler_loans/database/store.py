"""
Storage for indexed records, keyed by their derived string ID.

Handlers read through an `EntityStore` and return the records they produce. The caller persists
them with `save`, which overwrites every column of an existing record with the same ID.
"""

from typing import Protocol

from sqlalchemy.orm import Session, scoped_session

from cooler_loans.database.models import IndexedRecord
from cooler_loans.logging import logger


class EntityStore(Protocol):
    def load[T: IndexedRecord](self, table: type[T], record_id: str) -> T | None:
        """
        Get the record with the given ID, or None if it has not been stored.
        """
        ...

    def create[T: IndexedRecord](self, table: type[T], record_id: str) -> T:
        """
        Construct a new, unsaved record. The caller must populate every required column before
        saving it.
        """
        ...

    def save(self, record: IndexedRecord) -> None: ...


class SqlAlchemyEntityStore:
    """
    An `EntityStore` backed by a SQLAlchemy session. Writes are flushed but not committed; the
    caller owns the transaction boundary.
    """

    def __init__(self, session: Session | scoped_session[Session]) -> None:
        self.session = session

    def load[T: IndexedRecord](self, table: type[T], record_id: str) -> T | None:
        return self.session.get(table, record_id)

    def create[T: IndexedRecord](self, table: type[T], record_id: str) -> T:
        return table(id=record_id)

    def save(self, record: IndexedRecord) -> None:
        self.session.merge(record)
        self.session.flush()
        logger.debug(f"Saved {record.__class__.__name__} {record.id}")
