from decimal import Decimal
from enum import Enum
from typing import Annotated

from sqlalchemy import ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Address, Base, BigInteger, RecordId, TransactionHash


class RequestStatus(Enum):
    OPEN = "OPEN"
    RESCINDED = "RESCINDED"
    CLEARED = "CLEARED"


class CoolerLoanRequestTable(Base):
    __tablename__ = "cooler_loan_requests"

    id: Mapped[RecordId]
    created_block: Mapped[int]
    created_timestamp: Mapped[int]
    created_transaction: Mapped[TransactionHash]
    cooler: Mapped[Address]
    request_id: Mapped[BigInteger]
    borrower: Mapped[Address]
    collateral_token: Mapped[Address]
    debt_token: Mapped[Address]
    amount: Mapped[Decimal]
    interest_percentage: Mapped[Decimal]
    loan_to_collateral_ratio: Mapped[Decimal]
    duration_seconds: Mapped[BigInteger]
    is_rescinded: Mapped[bool]

    # Relationships
    loans: Mapped[list["CoolerLoanTable"]] = relationship(
        "CoolerLoanTable",
        viewonly=True,
    )

    @property
    def status(self) -> RequestStatus:
        """
        The request's lifecycle state. A cleared request is identified by the existence of a loan
        referencing it.
        """

        if self.is_rescinded:
            return RequestStatus.RESCINDED
        if self.loans:
            return RequestStatus.CLEARED
        return RequestStatus.OPEN


ForeignKeyRequestRecordId = Annotated[
    str,
    mapped_column(ForeignKey(CoolerLoanRequestTable.id), index=True),
]


class CoolerLoanTable(Base):
    __tablename__ = "cooler_loans"

    id: Mapped[RecordId]
    created_block: Mapped[int]
    created_timestamp: Mapped[int]
    created_transaction: Mapped[TransactionHash]
    cooler: Mapped[Address]
    loan_id: Mapped[BigInteger]
    request_record_id: Mapped[ForeignKeyRequestRecordId]
    borrower: Mapped[Address]
    lender: Mapped[Address]
    principal: Mapped[Decimal]
    interest: Mapped[Decimal]
    collateral: Mapped[Decimal]
    expiry_timestamp: Mapped[int]
    has_callback: Mapped[bool]
    collateral_token: Mapped[Address]
    debt_token: Mapped[Address]

    # Relationships
    request: Mapped["CoolerLoanRequestTable"] = relationship(
        "CoolerLoanRequestTable",
        viewonly=True,
    )


ForeignKeyLoanRecordId = Annotated[
    str,
    mapped_column(ForeignKey(CoolerLoanTable.id), index=True),
]


class EventRecordMixin:
    id: Mapped[RecordId]
    date: Mapped[str]
    block_number: Mapped[int]
    block_timestamp: Mapped[int]
    transaction_hash: Mapped[TransactionHash]


class RequestLoanEventTable(EventRecordMixin, Base):
    __tablename__ = "request_loan_events"

    request_record_id: Mapped[ForeignKeyRequestRecordId]


class RescindLoanRequestEventTable(EventRecordMixin, Base):
    __tablename__ = "rescind_loan_request_events"

    request_record_id: Mapped[ForeignKeyRequestRecordId]


class ClearLoanRequestEventTable(EventRecordMixin, Base):
    __tablename__ = "clear_loan_request_events"

    loan_record_id: Mapped[ForeignKeyLoanRecordId]
    request_record_id: Mapped[ForeignKeyRequestRecordId]


class ClaimDefaultedLoanEventTable(EventRecordMixin, Base):
    __tablename__ = "claim_defaulted_loan_events"

    loan_record_id: Mapped[ForeignKeyLoanRecordId]
    collateral_quantity_claimed: Mapped[Decimal]
    collateral_price: Mapped[Decimal]
    collateral_value_claimed: Mapped[Decimal]
    seconds_since_expiry: Mapped[int]


class RepayLoanEventTable(EventRecordMixin, Base):
    __tablename__ = "repay_loan_events"

    loan_record_id: Mapped[ForeignKeyLoanRecordId]
    amount_paid: Mapped[Decimal]
    seconds_to_expiry: Mapped[int]
    principal_payable: Mapped[Decimal]
    interest_payable: Mapped[Decimal]
    collateral_deposited: Mapped[Decimal]


class ExtendLoanEventTable(EventRecordMixin, Base):
    __tablename__ = "extend_loan_events"

    loan_record_id: Mapped[ForeignKeyLoanRecordId]
    periods: Mapped[int]
    expiry_timestamp: Mapped[int]
    interest_due: Mapped[Decimal]


# The (cooler, request ID) and (cooler, loan ID) tuples are unique
Index(
    "ix_cooler_loan_requests_cooler_request_id",
    CoolerLoanRequestTable.cooler,
    CoolerLoanRequestTable.request_id,
    unique=True,
)
Index(
    "ix_cooler_loans_cooler_loan_id",
    CoolerLoanTable.cooler,
    CoolerLoanTable.loan_id,
    unique=True,
)


type IndexedRecord = (
    CoolerLoanRequestTable
    | CoolerLoanTable
    | RequestLoanEventTable
    | RescindLoanRequestEventTable
    | ClearLoanRequestEventTable
    | ClaimDefaultedLoanEventTable
    | RepayLoanEventTable
    | ExtendLoanEventTable
)
