import pathlib

from sqlalchemy import URL, Engine, create_engine
from sqlalchemy.orm import Session, scoped_session, sessionmaker

from cooler_loans.database.models import Base
from cooler_loans.exceptions import CoolerLoansError
from cooler_loans.logging import logger


def _get_sqlite_engine(db_path: pathlib.Path) -> Engine:
    return create_engine(URL.create(drivername="sqlite", database=str(db_path.absolute())))


def create_new_sqlite_database(db_path: pathlib.Path) -> None:
    """
    Create the database file with every Cooler table. Auto-vacuum must be enabled before the first
    table is created, so it is set on the empty file.
    """

    db_path.parent.mkdir(parents=True, exist_ok=True)

    engine = _get_sqlite_engine(db_path)
    with engine.connect() as connection:
        connection.exec_driver_sql("PRAGMA auto_vacuum=FULL")
        journal_mode = connection.exec_driver_sql("PRAGMA journal_mode=WAL").scalar()
        if journal_mode != "wal":
            raise CoolerLoansError(
                message=f"Could not enable WAL journaling for {db_path} (mode is {journal_mode})"
            )

    Base.metadata.create_all(bind=engine)
    engine.dispose()

    logger.info(f"Created Cooler loans database at {db_path}")


def compact_sqlite_database(db_path: pathlib.Path) -> None:
    engine = _get_sqlite_engine(db_path)
    with engine.connect() as connection:
        connection.exec_driver_sql("VACUUM")
    engine.dispose()

    logger.info(f"Compacted Cooler loans database at {db_path}")


def get_scoped_sqlite_session(database_path: pathlib.Path) -> scoped_session[Session]:
    """
    Get a thread-local session factory for the database, creating the database if it does not
    exist.
    """

    if not database_path.exists():
        create_new_sqlite_database(db_path=database_path)

    return scoped_session(
        session_factory=sessionmaker(bind=_get_sqlite_engine(database_path)),
    )
