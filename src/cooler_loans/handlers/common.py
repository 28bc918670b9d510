from dataclasses import dataclass

from cooler_loans.config import Settings
from cooler_loans.cooler import ChainReader
from cooler_loans.database import EntityStore
from cooler_loans.database.models import CoolerLoanRequestTable, CoolerLoanTable
from cooler_loans.database.models.cooler import EventRecordMixin
from cooler_loans.exceptions import LoanNotFound, RequestNotFound
from cooler_loans.functions import get_iso8601_date_string
from cooler_loans.identifiers import get_loan_record_id, get_request_record_id
from cooler_loans.oracle import PriceOracle
from cooler_loans.types import BlockContext


@dataclass(frozen=True, slots=True)
class HandlerContext:
    """
    The capabilities available to an event handler. Handlers keep no state between invocations;
    all continuity is through the records in `store`.
    """

    settings: Settings
    reader: ChainReader
    oracle: PriceOracle
    store: EntityStore


def populate_event_record[T: EventRecordMixin](record: T, block: BlockContext) -> T:
    record.date = get_iso8601_date_string(block.timestamp)
    record.block_number = block.number
    record.block_timestamp = block.timestamp
    record.transaction_hash = block.transaction_hash.to_0x_hex()
    return record


def get_request_record(
    store: EntityStore,
    cooler: str,
    request_id: int,
) -> CoolerLoanRequestTable:
    """
    Get an existing request record. A missing record means the request was never indexed.
    """

    record_id = get_request_record_id(cooler, request_id)
    if (request_record := store.load(CoolerLoanRequestTable, record_id)) is None:
        raise RequestNotFound(record_id=record_id)
    return request_record


def get_loan_record(
    store: EntityStore,
    cooler: str,
    loan_id: int,
) -> CoolerLoanTable:
    """
    Get an existing loan record. A missing record means the loan was never indexed.
    """

    record_id = get_loan_record_id(cooler, loan_id)
    if (loan_record := store.load(CoolerLoanTable, record_id)) is None:
        raise LoanNotFound(record_id=record_id)
    return loan_record
