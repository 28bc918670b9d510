"""Cooler contract structs, block context, and decoded CoolerFactory events."""

from dataclasses import dataclass
from typing import Any, Self

from eth_typing import ChecksumAddress
from hexbytes import HexBytes

from cooler_loans.checksum_cache import get_checksum_address


@dataclass(frozen=True, slots=True)
class CoolerRequest:
    """
    A loan request as stored by the Cooler contract.

    `interest` and `loan_to_collateral` are raw fixed-point values. `duration` is in seconds.
    """

    amount: int
    interest: int
    loan_to_collateral: int
    duration: int
    active: bool
    requester: ChecksumAddress

    ABI_TYPE = "(uint256,uint256,uint256,uint256,bool,address)"

    @classmethod
    def from_tuple(cls, data: tuple[Any, ...]) -> Self:
        amount, interest, loan_to_collateral, duration, active, requester = data
        return cls(
            amount=amount,
            interest=interest,
            loan_to_collateral=loan_to_collateral,
            duration=duration,
            active=active,
            requester=get_checksum_address(requester),
        )


@dataclass(frozen=True, slots=True)
class CoolerLoanData:
    """
    A loan as stored by the Cooler contract. Amounts are raw fixed-point values, `expiry` is a
    Unix timestamp.
    """

    request: CoolerRequest
    principal: int
    interest_due: int
    collateral: int
    expiry: int
    lender: ChecksumAddress
    recipient: ChecksumAddress
    callback: bool

    ABI_TYPE = (
        f"({CoolerRequest.ABI_TYPE},uint256,uint256,uint256,uint256,address,address,bool)"
    )

    @classmethod
    def from_tuple(cls, data: tuple[Any, ...]) -> Self:
        request, principal, interest_due, collateral, expiry, lender, recipient, callback = data
        return cls(
            request=CoolerRequest.from_tuple(request),
            principal=principal,
            interest_due=interest_due,
            collateral=collateral,
            expiry=expiry,
            lender=get_checksum_address(lender),
            recipient=get_checksum_address(recipient),
            callback=callback,
        )


@dataclass(frozen=True, slots=True)
class BlockContext:
    """The block and transaction in which an event was emitted."""

    number: int
    timestamp: int
    transaction_hash: HexBytes
    log_index: int = 0


@dataclass(frozen=True, slots=True)
class RequestLoan:
    # event RequestLoan(address indexed cooler, address collateral, address debt, uint256 reqID)
    cooler: ChecksumAddress
    collateral: ChecksumAddress
    debt: ChecksumAddress
    request_id: int
    block: BlockContext


@dataclass(frozen=True, slots=True)
class RescindRequest:
    # event RescindRequest(address indexed cooler, uint256 reqID)
    cooler: ChecksumAddress
    request_id: int
    block: BlockContext


@dataclass(frozen=True, slots=True)
class ClearRequest:
    # event ClearRequest(address indexed cooler, uint256 reqID, uint256 loanID)
    cooler: ChecksumAddress
    request_id: int
    loan_id: int
    block: BlockContext


@dataclass(frozen=True, slots=True)
class RepayLoan:
    # event RepayLoan(address indexed cooler, uint256 loanID, uint256 amount)
    cooler: ChecksumAddress
    loan_id: int
    amount: int
    block: BlockContext


@dataclass(frozen=True, slots=True)
class ExtendLoan:
    # event ExtendLoan(address indexed cooler, uint256 loanID, uint8 times)
    cooler: ChecksumAddress
    loan_id: int
    times: int
    block: BlockContext


@dataclass(frozen=True, slots=True)
class DefaultLoan:
    # event DefaultLoan(address indexed cooler, uint256 loanID, uint256 amount)
    cooler: ChecksumAddress
    loan_id: int
    amount: int
    block: BlockContext


type CoolerFactoryEventData = (
    RequestLoan | RescindRequest | ClearRequest | RepayLoan | ExtendLoan | DefaultLoan
)
