"""Addresses, contract state and fake upstream readers shared by the test modules."""

from decimal import Decimal

from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3.types import BlockIdentifier

from cooler_loans.checksum_cache import get_checksum_address
from cooler_loans.constants import DEFAULT_GOHM_ADDRESSES, DEFAULT_OHM_ADDRESSES
from cooler_loans.exceptions import ContractCallError, PriceOracleError
from cooler_loans.types import BlockContext, CoolerLoanData, CoolerRequest

COOLER: ChecksumAddress = get_checksum_address("0x95fd43d0e2b9e1d1a3b5e7c9a2f4e6d8c0b2a4f6")
BORROWER: ChecksumAddress = get_checksum_address("0x7a1b3c5d7e9f0a2b4c6d8e0f1a3b5c7d9e1f2a4b")
LENDER: ChecksumAddress = get_checksum_address("0x2b4d6f8a0c1e3a5c7e9b1d3f5a7c9e0b2d4f6a8c")
DAI: ChecksumAddress = get_checksum_address("0x6B175474E89094C44Da98b954EedeAC495271d0F")
OHM: ChecksumAddress = DEFAULT_OHM_ADDRESSES["mainnet"]
GOHM: ChecksumAddress = DEFAULT_GOHM_ADDRESSES["mainnet"]

REQUEST_BLOCK = BlockContext(
    number=17_900_000,
    timestamp=1_692_000_000,
    transaction_hash=HexBytes("0x" + "a1" * 32),
)
CLEAR_BLOCK = BlockContext(
    number=17_900_100,
    timestamp=1_692_001_200,
    transaction_hash=HexBytes("0x" + "b2" * 32),
)

# A 3,000 DAI request at 0.5% interest for 121 days, backed by gOHM
REQUEST = CoolerRequest(
    amount=3_000 * 10**18,
    interest=5 * 10**15,
    loan_to_collateral=2_500 * 10**18,
    duration=121 * 86_400,
    active=True,
    requester=BORROWER,
)
LOAN_EXPIRY = CLEAR_BLOCK.timestamp + REQUEST.duration
LOAN = CoolerLoanData(
    request=REQUEST,
    principal=3_000 * 10**18,
    interest_due=15 * 10**18,
    collateral=12 * 10**17,
    expiry=LOAN_EXPIRY,
    lender=LENDER,
    recipient=LENDER,
    callback=False,
)


class FakeChainReader:
    """
    A `ChainReader` serving contract state from dictionaries. Requests and loans may be replaced
    between events to simulate state changes on the Cooler.
    """

    def __init__(self) -> None:
        self.requests: dict[tuple[ChecksumAddress, int], CoolerRequest] = {}
        self.loans: dict[tuple[ChecksumAddress, int], CoolerLoanData] = {}
        self.owners: dict[ChecksumAddress, ChecksumAddress] = {}
        self.collaterals: dict[ChecksumAddress, ChecksumAddress] = {}
        self.debts: dict[ChecksumAddress, ChecksumAddress] = {}
        self.token_decimals: dict[ChecksumAddress, int] = {DAI: 18, OHM: 9, GOHM: 18}
        self.gohm_index = 1_200_000_000
        self.calls: list[tuple[str, ChecksumAddress, BlockIdentifier | None]] = []

    def add_cooler(
        self,
        cooler: ChecksumAddress,
        owner: ChecksumAddress,
        collateral: ChecksumAddress,
        debt: ChecksumAddress,
    ) -> None:
        self.owners[cooler] = owner
        self.collaterals[cooler] = collateral
        self.debts[cooler] = debt

    def get_request(
        self, cooler: ChecksumAddress, request_id: int, block: BlockIdentifier | None = None
    ) -> CoolerRequest:
        self.calls.append(("getRequest(uint256)", cooler, block))
        try:
            return self.requests[cooler, request_id]
        except KeyError:
            raise ContractCallError(
                address=cooler, function="getRequest(uint256)", error="execution reverted"
            ) from None

    def get_loan(
        self, cooler: ChecksumAddress, loan_id: int, block: BlockIdentifier | None = None
    ) -> CoolerLoanData:
        self.calls.append(("getLoan(uint256)", cooler, block))
        try:
            return self.loans[cooler, loan_id]
        except KeyError:
            raise ContractCallError(
                address=cooler, function="getLoan(uint256)", error="execution reverted"
            ) from None

    def owner(self, cooler: ChecksumAddress) -> ChecksumAddress:
        return self.owners[cooler]

    def collateral(self, cooler: ChecksumAddress) -> ChecksumAddress:
        return self.collaterals[cooler]

    def debt(self, cooler: ChecksumAddress) -> ChecksumAddress:
        return self.debts[cooler]

    def decimals(self, token: ChecksumAddress) -> int:
        return self.token_decimals[token]

    def index(self, token: ChecksumAddress, block: BlockIdentifier | None = None) -> int:
        self.calls.append(("index()", token, block))
        return self.gohm_index


class FakePriceOracle:
    def __init__(self, prices: dict[ChecksumAddress, Decimal] | None = None) -> None:
        self.prices = prices if prices is not None else {OHM: Decimal("10.00")}

    def fetch_price_usd(
        self, token: ChecksumAddress, block: BlockIdentifier | None = None
    ) -> Decimal:
        try:
            return self.prices[token]
        except KeyError:
            raise PriceOracleError(token=token, error="no price feed configured") from None
