"""
Loan lifecycle: a loan is created once when a lender clears a request, and is subsequently repaid,
extended, or defaulted. The loan record holds the terms at clearing time. Later events re-read the
loan from the Cooler and record a snapshot in a new event record, leaving the loan record as-is.

Interest income from repayments and collateral income from defaults require the loan's event
history, and are not calculated here.
"""

from cooler_loans.database.models import (
    ClaimDefaultedLoanEventTable,
    ClearLoanRequestEventTable,
    CoolerLoanTable,
    ExtendLoanEventTable,
    IndexedRecord,
    RepayLoanEventTable,
)
from cooler_loans.functions import multiply, to_decimal
from cooler_loans.handlers.common import (
    HandlerContext,
    get_loan_record,
    get_request_record,
    populate_event_record,
)
from cooler_loans.identifiers import get_loan_event_record_id, get_loan_record_id
from cooler_loans.logging import logger
from cooler_loans.oracle import get_collateral_price
from cooler_loans.types import ClearRequest, DefaultLoan, ExtendLoan, RepayLoan


def handle_clear_request(
    event: ClearRequest,
    context: HandlerContext,
) -> tuple[IndexedRecord, ...]:
    reader = context.reader
    loan_data = reader.get_loan(event.cooler, event.loan_id, event.block.number)

    # A clear must always follow a request
    request_record = get_request_record(
        store=context.store,
        cooler=event.cooler,
        request_id=event.request_id,
    )

    collateral_token = reader.collateral(event.cooler)
    debt_token = reader.debt(event.cooler)
    collateral_decimals = reader.decimals(collateral_token)
    debt_decimals = reader.decimals(debt_token)

    record_id = get_loan_record_id(event.cooler, event.loan_id)

    loan_record = context.store.create(CoolerLoanTable, record_id)
    loan_record.created_block = event.block.number
    loan_record.created_timestamp = event.block.timestamp
    loan_record.created_transaction = event.block.transaction_hash.to_0x_hex()
    loan_record.loan_id = event.loan_id
    loan_record.cooler = event.cooler
    loan_record.request_record_id = request_record.id
    loan_record.borrower = reader.owner(event.cooler)
    loan_record.interest = to_decimal(loan_data.interest_due, debt_decimals)
    loan_record.principal = to_decimal(loan_data.principal, debt_decimals)
    loan_record.collateral = to_decimal(loan_data.collateral, collateral_decimals)
    loan_record.expiry_timestamp = loan_data.expiry
    loan_record.lender = loan_data.lender
    loan_record.has_callback = loan_data.callback
    loan_record.collateral_token = collateral_token
    loan_record.debt_token = debt_token

    event_record = populate_event_record(
        context.store.create(ClearLoanRequestEventTable, record_id),
        event.block,
    )
    event_record.loan_record_id = loan_record.id
    event_record.request_record_id = request_record.id

    logger.info(
        f"Loan {record_id}: cleared request {request_record.id} "
        f"(principal {loan_record.principal}, lender {loan_record.lender})"
    )
    return loan_record, event_record


def handle_default_loan(
    event: DefaultLoan,
    context: HandlerContext,
) -> tuple[IndexedRecord, ...]:
    reader = context.reader
    loan_record = get_loan_record(
        store=context.store,
        cooler=event.cooler,
        loan_id=event.loan_id,
    )
    loan_data = reader.get_loan(event.cooler, event.loan_id, event.block.number)

    collateral_price = get_collateral_price(
        token=loan_record.collateral_token,
        oracle=context.oracle,
        reader=reader,
        settings=context.settings,
        block=event.block.number,
    )
    collateral_quantity = to_decimal(
        event.amount,
        reader.decimals(loan_record.collateral_token),
    )

    event_record = populate_event_record(
        context.store.create(ClaimDefaultedLoanEventTable, loan_record.id),
        event.block,
    )
    event_record.loan_record_id = loan_record.id
    event_record.collateral_quantity_claimed = collateral_quantity
    event_record.collateral_price = collateral_price
    event_record.collateral_value_claimed = multiply(collateral_quantity, collateral_price)

    # Negative if the claim happens before the recorded expiry
    event_record.seconds_since_expiry = event.block.timestamp - loan_data.expiry

    logger.info(
        f"Loan {loan_record.id}: defaulted, {collateral_quantity} collateral claimed "
        f"(${event_record.collateral_value_claimed})"
    )
    return (event_record,)


def handle_repay_loan(
    event: RepayLoan,
    context: HandlerContext,
) -> tuple[IndexedRecord, ...]:
    reader = context.reader
    loan_record = get_loan_record(
        store=context.store,
        cooler=event.cooler,
        loan_id=event.loan_id,
    )
    loan_data = reader.get_loan(event.cooler, event.loan_id, event.block.number)

    debt_decimals = reader.decimals(loan_record.debt_token)
    collateral_decimals = reader.decimals(loan_record.collateral_token)

    event_record = populate_event_record(
        context.store.create(
            RepayLoanEventTable,
            get_loan_event_record_id(event.cooler, event.loan_id, event.block.number),
        ),
        event.block,
    )
    event_record.amount_paid = to_decimal(event.amount, debt_decimals)
    event_record.loan_record_id = loan_record.id

    # Negative if the repayment happens after expiry
    event_record.seconds_to_expiry = loan_data.expiry - event.block.timestamp

    event_record.principal_payable = to_decimal(loan_data.principal, debt_decimals)
    event_record.interest_payable = to_decimal(loan_data.interest_due, debt_decimals)
    event_record.collateral_deposited = to_decimal(loan_data.collateral, collateral_decimals)

    logger.info(
        f"Loan {loan_record.id}: repaid {event_record.amount_paid} "
        f"({event_record.principal_payable} principal outstanding)"
    )
    return (event_record,)


def handle_extend_loan(
    event: ExtendLoan,
    context: HandlerContext,
) -> tuple[IndexedRecord, ...]:
    reader = context.reader
    loan_record = get_loan_record(
        store=context.store,
        cooler=event.cooler,
        loan_id=event.loan_id,
    )
    loan_data = reader.get_loan(event.cooler, event.loan_id, event.block.number)

    event_record = populate_event_record(
        context.store.create(
            ExtendLoanEventTable,
            get_loan_event_record_id(event.cooler, event.loan_id, event.block.number),
        ),
        event.block,
    )
    event_record.periods = event.times
    event_record.loan_record_id = loan_record.id
    event_record.expiry_timestamp = loan_data.expiry
    event_record.interest_due = to_decimal(
        loan_data.interest_due,
        reader.decimals(loan_record.debt_token),
    )

    logger.info(
        f"Loan {loan_record.id}: extended {event.times} period(s) to {loan_data.expiry}"
    )
    return (event_record,)
