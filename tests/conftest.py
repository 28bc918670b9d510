import logging
from collections.abc import Callable, Generator

import pytest
from fakes import BORROWER, COOLER, DAI, GOHM, LOAN, REQUEST, FakeChainReader, FakePriceOracle
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from cooler_loans.config import DatabaseSettings, Settings
from cooler_loans.database import SqlAlchemyEntityStore
from cooler_loans.database.models import Base, IndexedRecord
from cooler_loans.handlers import HandlerContext
from cooler_loans.logging import logger


@pytest.fixture(scope="session", autouse=True)
def _set_cooler_loans_logging():
    """
    Set the logging level to DEBUG for the test run
    """
    logger.setLevel(logging.DEBUG)


@pytest.fixture
def session() -> Generator[Session, None, None]:
    engine = create_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    with Session(engine) as session:
        yield session


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        network="mainnet",
        database=DatabaseSettings(path=tmp_path / "cooler_loans.db"),
    )


@pytest.fixture
def reader() -> FakeChainReader:
    reader = FakeChainReader()
    reader.add_cooler(cooler=COOLER, owner=BORROWER, collateral=GOHM, debt=DAI)
    reader.requests[COOLER, 0] = REQUEST
    reader.loans[COOLER, 0] = LOAN
    return reader


@pytest.fixture
def oracle() -> FakePriceOracle:
    return FakePriceOracle()


@pytest.fixture
def context(
    settings: Settings,
    reader: FakeChainReader,
    oracle: FakePriceOracle,
    session: Session,
) -> HandlerContext:
    return HandlerContext(
        settings=settings,
        reader=reader,
        oracle=oracle,
        store=SqlAlchemyEntityStore(session),
    )


@pytest.fixture
def save_records(
    context: HandlerContext, session: Session
) -> Callable[[tuple[IndexedRecord, ...]], None]:
    """
    Persist the records returned by a handler, as the indexer does after a successful event.
    """

    def _save(records: tuple[IndexedRecord, ...]) -> None:
        for record in records:
            context.store.save(record)
        session.commit()

    return _save
