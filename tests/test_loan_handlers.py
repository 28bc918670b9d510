import dataclasses
from decimal import Decimal

import pytest
from fakes import (
    BORROWER,
    CLEAR_BLOCK,
    COOLER,
    DAI,
    GOHM,
    LENDER,
    LOAN,
    LOAN_EXPIRY,
    OHM,
    REQUEST_BLOCK,
)
from hexbytes import HexBytes

from cooler_loans.database.models import (
    ClaimDefaultedLoanEventTable,
    ClearLoanRequestEventTable,
    CoolerLoanRequestTable,
    CoolerLoanTable,
    ExtendLoanEventTable,
    RepayLoanEventTable,
    RequestStatus,
)
from cooler_loans.exceptions import LoanNotFound, PriceOracleError, RequestNotFound
from cooler_loans.handlers import process_event
from cooler_loans.handlers.loans import (
    handle_clear_request,
    handle_default_loan,
    handle_extend_loan,
    handle_repay_loan,
)
from cooler_loans.handlers.requests import handle_request_loan
from cooler_loans.identifiers import (
    get_loan_event_record_id,
    get_loan_record_id,
    get_request_record_id,
)
from cooler_loans.types import (
    BlockContext,
    ClearRequest,
    DefaultLoan,
    ExtendLoan,
    RepayLoan,
    RequestLoan,
)

LOAN_RECORD_ID = get_loan_record_id(COOLER, 0)
REQUEST_RECORD_ID = get_request_record_id(COOLER, 0)


def _block(number: int, timestamp: int) -> BlockContext:
    return BlockContext(
        number=number,
        timestamp=timestamp,
        transaction_hash=HexBytes(number.to_bytes(32, "big")),
    )


@pytest.fixture
def cleared_loan(context, save_records):
    """
    Index a request for loan 0 and the clear which creates it.
    """

    save_records(
        handle_request_loan(
            RequestLoan(
                cooler=COOLER,
                collateral=GOHM,
                debt=DAI,
                request_id=0,
                block=REQUEST_BLOCK,
            ),
            context,
        )
    )
    save_records(
        handle_clear_request(
            ClearRequest(cooler=COOLER, request_id=0, loan_id=0, block=CLEAR_BLOCK),
            context,
        )
    )


def test_clear_request_creates_loan(cleared_loan, session):
    loan_record = session.get(CoolerLoanTable, LOAN_RECORD_ID)
    assert loan_record is not None
    assert loan_record.cooler == COOLER
    assert loan_record.loan_id == 0
    assert loan_record.borrower == BORROWER
    assert loan_record.lender == LENDER
    assert loan_record.principal == Decimal("3000")
    assert loan_record.interest == Decimal("15")
    assert loan_record.collateral == Decimal("1.2")
    assert loan_record.expiry_timestamp == LOAN_EXPIRY
    assert loan_record.has_callback is False
    assert loan_record.collateral_token == GOHM
    assert loan_record.debt_token == DAI
    assert loan_record.created_block == CLEAR_BLOCK.number
    assert loan_record.created_timestamp == CLEAR_BLOCK.timestamp


def test_clear_request_links_loan_and_request(cleared_loan, session):
    loan_record = session.get(CoolerLoanTable, LOAN_RECORD_ID)
    assert loan_record is not None
    assert loan_record.request_record_id == REQUEST_RECORD_ID
    assert loan_record.request.id == REQUEST_RECORD_ID

    request_record = session.get(CoolerLoanRequestTable, REQUEST_RECORD_ID)
    assert request_record is not None
    assert [loan.id for loan in request_record.loans] == [LOAN_RECORD_ID]
    assert request_record.status is RequestStatus.CLEARED
    assert request_record.is_rescinded is False

    event_record = session.get(ClearLoanRequestEventTable, LOAN_RECORD_ID)
    assert event_record is not None
    assert event_record.loan_record_id == LOAN_RECORD_ID
    assert event_record.request_record_id == REQUEST_RECORD_ID
    assert event_record.block_number == CLEAR_BLOCK.number


def test_clear_request_without_request(context, session):
    outcome = process_event(
        ClearRequest(cooler=COOLER, request_id=0, loan_id=0, block=CLEAR_BLOCK),
        context,
    )

    assert not outcome.ok
    assert isinstance(outcome.error, RequestNotFound)
    assert outcome.records == ()
    assert session.get(CoolerLoanTable, LOAN_RECORD_ID) is None


def test_repay_loan(cleared_loan, context, reader, save_records, session):
    repay_block = _block(17_900_500, LOAN_EXPIRY - 3_600)

    # Half of the principal and all interest repaid
    reader.loans[COOLER, 0] = dataclasses.replace(
        LOAN,
        principal=1_500 * 10**18,
        interest_due=0,
        collateral=6 * 10**17,
    )
    save_records(
        handle_repay_loan(
            RepayLoan(cooler=COOLER, loan_id=0, amount=1_515 * 10**18, block=repay_block),
            context,
        )
    )

    event_record = session.get(
        RepayLoanEventTable,
        get_loan_event_record_id(COOLER, 0, repay_block.number),
    )
    assert event_record is not None
    assert event_record.loan_record_id == LOAN_RECORD_ID
    assert event_record.amount_paid == Decimal("1515")
    assert event_record.seconds_to_expiry == 3_600
    assert event_record.principal_payable == Decimal("1500")
    assert event_record.interest_payable == Decimal("0")
    assert event_record.collateral_deposited == Decimal("0.6")

    # The loan record keeps the terms from clearing time
    loan_record = session.get(CoolerLoanTable, LOAN_RECORD_ID)
    assert loan_record is not None
    assert loan_record.principal == Decimal("3000")


def test_repay_loan_after_expiry(cleared_loan, context, save_records, session):
    repay_block = _block(17_950_000, LOAN_EXPIRY + 600)
    save_records(
        handle_repay_loan(
            RepayLoan(cooler=COOLER, loan_id=0, amount=10**18, block=repay_block),
            context,
        )
    )

    event_record = session.get(
        RepayLoanEventTable,
        get_loan_event_record_id(COOLER, 0, repay_block.number),
    )
    assert event_record is not None
    assert event_record.seconds_to_expiry == -600


def test_repayments_in_different_blocks_are_kept(cleared_loan, context, save_records, session):
    blocks = [
        _block(17_900_500, CLEAR_BLOCK.timestamp + 100),
        _block(17_900_600, CLEAR_BLOCK.timestamp + 200),
    ]
    for block in blocks:
        save_records(
            handle_repay_loan(
                RepayLoan(cooler=COOLER, loan_id=0, amount=10**18, block=block),
                context,
            )
        )

    assert session.query(RepayLoanEventTable).count() == len(blocks)


def test_repay_unknown_loan(context):
    with pytest.raises(LoanNotFound) as exc_info:
        handle_repay_loan(
            RepayLoan(cooler=COOLER, loan_id=3, amount=10**18, block=CLEAR_BLOCK),
            context,
        )
    assert exc_info.value.record_id == get_loan_record_id(COOLER, 3)


def test_extend_loan(cleared_loan, context, reader, save_records, session):
    extend_block = _block(17_910_000, CLEAR_BLOCK.timestamp + 86_400)
    extended_expiry = LOAN_EXPIRY + 2 * 121 * 86_400

    reader.loans[COOLER, 0] = dataclasses.replace(
        LOAN,
        expiry=extended_expiry,
        interest_due=45 * 10**18,
    )
    save_records(
        handle_extend_loan(
            ExtendLoan(cooler=COOLER, loan_id=0, times=2, block=extend_block),
            context,
        )
    )

    event_record = session.get(
        ExtendLoanEventTable,
        get_loan_event_record_id(COOLER, 0, extend_block.number),
    )
    assert event_record is not None
    assert event_record.loan_record_id == LOAN_RECORD_ID
    assert event_record.periods == 2
    assert event_record.expiry_timestamp == extended_expiry
    assert event_record.interest_due == Decimal("45")

    loan_record = session.get(CoolerLoanTable, LOAN_RECORD_ID)
    assert loan_record is not None
    assert loan_record.expiry_timestamp == LOAN_EXPIRY


def test_extend_unknown_loan(context):
    outcome = process_event(
        ExtendLoan(cooler=COOLER, loan_id=3, times=1, block=CLEAR_BLOCK),
        context,
    )
    assert isinstance(outcome.error, LoanNotFound)


def test_default_loan_values_gohm_collateral(cleared_loan, context, save_records, session):
    default_block = _block(18_000_000, LOAN_EXPIRY + 7_200)

    # OHM at $10 and an index of 1.2 OHM per gOHM prices gOHM at $12
    save_records(
        handle_default_loan(
            DefaultLoan(cooler=COOLER, loan_id=0, amount=2 * 10**18, block=default_block),
            context,
        )
    )

    event_record = session.get(ClaimDefaultedLoanEventTable, LOAN_RECORD_ID)
    assert event_record is not None
    assert event_record.loan_record_id == LOAN_RECORD_ID
    assert event_record.collateral_quantity_claimed == Decimal("2")
    assert event_record.collateral_price == Decimal("12")
    assert event_record.collateral_value_claimed == Decimal("24")
    assert event_record.seconds_since_expiry == 7_200


def test_default_loan_reads_index_at_event_block(cleared_loan, context, reader):
    default_block = _block(18_000_000, LOAN_EXPIRY + 7_200)
    handle_default_loan(
        DefaultLoan(cooler=COOLER, loan_id=0, amount=10**18, block=default_block),
        context,
    )
    assert ("index()", GOHM, default_block.number) in reader.calls
    assert ("getLoan(uint256)", COOLER, default_block.number) in reader.calls


def test_default_loan_before_expiry(cleared_loan, context):
    default_block = _block(17_990_000, LOAN_EXPIRY - 60)
    (event_record,) = handle_default_loan(
        DefaultLoan(cooler=COOLER, loan_id=0, amount=10**18, block=default_block),
        context,
    )
    assert isinstance(event_record, ClaimDefaultedLoanEventTable)
    assert event_record.seconds_since_expiry == -60


def test_default_loan_with_ohm_collateral(context, reader, oracle, save_records):
    reader.add_cooler(cooler=COOLER, owner=BORROWER, collateral=OHM, debt=DAI)
    oracle.prices[OHM] = Decimal("11.25")

    save_records(
        handle_request_loan(
            RequestLoan(cooler=COOLER, collateral=OHM, debt=DAI, request_id=0, block=REQUEST_BLOCK),
            context,
        )
    )
    save_records(
        handle_clear_request(
            ClearRequest(cooler=COOLER, request_id=0, loan_id=0, block=CLEAR_BLOCK),
            context,
        )
    )
    (event_record,) = handle_default_loan(
        DefaultLoan(
            cooler=COOLER,
            loan_id=0,
            amount=4 * 10**9,
            block=_block(18_000_000, LOAN_EXPIRY + 1),
        ),
        context,
    )

    assert isinstance(event_record, ClaimDefaultedLoanEventTable)
    assert event_record.collateral_quantity_claimed == Decimal("4")
    assert event_record.collateral_price == Decimal("11.25")
    assert event_record.collateral_value_claimed == Decimal("45")


def test_default_loan_without_price(cleared_loan, context, oracle, session):
    oracle.prices.clear()

    outcome = process_event(
        DefaultLoan(
            cooler=COOLER,
            loan_id=0,
            amount=10**18,
            block=_block(18_000_000, LOAN_EXPIRY + 1),
        ),
        context,
    )

    assert isinstance(outcome.error, PriceOracleError)
    assert session.get(ClaimDefaultedLoanEventTable, LOAN_RECORD_ID) is None


def test_default_unknown_loan(context):
    with pytest.raises(LoanNotFound):
        handle_default_loan(
            DefaultLoan(cooler=COOLER, loan_id=1, amount=10**18, block=CLEAR_BLOCK),
            context,
        )
