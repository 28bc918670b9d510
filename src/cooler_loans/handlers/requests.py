"""
Request lifecycle: a borrower's request is created open, and is either rescinded by the borrower or
cleared by a lender. Clearing is recorded by the loan handlers; the request record itself is left
as the historical request.
"""

from cooler_loans.constants import INTEREST_PERCENTAGE_MULTIPLIER
from cooler_loans.database.models import (
    CoolerLoanRequestTable,
    IndexedRecord,
    RequestLoanEventTable,
    RescindLoanRequestEventTable,
)
from cooler_loans.functions import multiply, to_decimal
from cooler_loans.handlers.common import HandlerContext, get_request_record, populate_event_record
from cooler_loans.identifiers import get_request_record_id
from cooler_loans.logging import logger
from cooler_loans.types import RequestLoan, RescindRequest


def handle_request_loan(
    event: RequestLoan,
    context: HandlerContext,
) -> tuple[IndexedRecord, ...]:
    reader = context.reader
    debt_decimals = reader.decimals(event.debt)
    request = reader.get_request(event.cooler, event.request_id, event.block.number)

    record_id = get_request_record_id(event.cooler, event.request_id)

    request_record = context.store.create(CoolerLoanRequestTable, record_id)
    request_record.created_block = event.block.number
    request_record.created_timestamp = event.block.timestamp
    request_record.created_transaction = event.block.transaction_hash.to_0x_hex()
    request_record.cooler = event.cooler
    request_record.request_id = event.request_id
    request_record.borrower = reader.owner(event.cooler)
    request_record.collateral_token = event.collateral
    request_record.debt_token = event.debt
    request_record.amount = to_decimal(request.amount, debt_decimals)

    # Interest is stored on the contract as a fraction of 1e18, e.g. 5e15 = 0.005 = 0.5%
    request_record.interest_percentage = multiply(
        to_decimal(request.interest, debt_decimals),
        INTEREST_PERCENTAGE_MULTIPLIER,
    )

    request_record.loan_to_collateral_ratio = to_decimal(request.loan_to_collateral, debt_decimals)
    request_record.duration_seconds = request.duration
    request_record.is_rescinded = False

    event_record = populate_event_record(
        context.store.create(RequestLoanEventTable, record_id),
        event.block,
    )
    event_record.request_record_id = request_record.id

    logger.info(f"Request {record_id}: {request_record.amount} requested")
    return request_record, event_record


def handle_rescind_request(
    event: RescindRequest,
    context: HandlerContext,
) -> tuple[IndexedRecord, ...]:
    request_record = get_request_record(
        store=context.store,
        cooler=event.cooler,
        request_id=event.request_id,
    )

    # Rescission is terminal, repeated rescinds leave the flag set
    request_record.is_rescinded = True

    event_record = populate_event_record(
        context.store.create(RescindLoanRequestEventTable, request_record.id),
        event.block,
    )
    event_record.request_record_id = request_record.id

    logger.info(f"Request {request_record.id}: rescinded")
    return request_record, event_record
