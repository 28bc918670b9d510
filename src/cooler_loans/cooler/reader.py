from typing import Any, Protocol

from eth_abi.exceptions import DecodingError
from eth_typing import ChecksumAddress
from web3 import Web3
from web3.types import BlockIdentifier

from cooler_loans.checksum_cache import get_checksum_address
from cooler_loans.exceptions import ContractCallError
from cooler_loans.functions import RPC_TRANSPORT_ERRORS, encode_function_calldata, raw_call
from cooler_loans.logging import logger
from cooler_loans.types import CoolerLoanData, CoolerRequest


class ChainReader(Protocol):
    """
    Contract reads needed to index Cooler events. Calls take the block of the event being handled,
    so that the state observed is the state immediately after that block.
    """

    def get_request(
        self, cooler: ChecksumAddress, request_id: int, block: BlockIdentifier | None = None
    ) -> CoolerRequest: ...

    def get_loan(
        self, cooler: ChecksumAddress, loan_id: int, block: BlockIdentifier | None = None
    ) -> CoolerLoanData: ...

    def owner(self, cooler: ChecksumAddress) -> ChecksumAddress: ...

    def collateral(self, cooler: ChecksumAddress) -> ChecksumAddress: ...

    def debt(self, cooler: ChecksumAddress) -> ChecksumAddress: ...

    def decimals(self, token: ChecksumAddress) -> int: ...

    def index(self, token: ChecksumAddress, block: BlockIdentifier | None = None) -> int: ...


class Web3ChainReader:
    """
    A `ChainReader` performing `eth_call`s through a Web3 connection.

    The owner, collateral and debt of a Cooler are immutable arguments of the clone, and token
    decimals never change, so these are cached after the first read.
    """

    def __init__(self, w3: Web3) -> None:
        self.w3 = w3
        self._cooler_addresses: dict[tuple[ChecksumAddress, str], ChecksumAddress] = {}
        self._token_decimals: dict[ChecksumAddress, int] = {}

    def _call(
        self,
        address: ChecksumAddress,
        function_prototype: str,
        function_arguments: list[Any] | None,
        return_types: list[str],
        block: BlockIdentifier | None = None,
    ) -> tuple[Any, ...]:
        logger.debug(f"Calling {function_prototype} at {address} (block {block})")
        try:
            return raw_call(
                w3=self.w3,
                address=address,
                calldata=encode_function_calldata(
                    function_prototype=function_prototype,
                    function_arguments=function_arguments,
                ),
                return_types=return_types,
                block_identifier=block,
            )
        except (*RPC_TRANSPORT_ERRORS, DecodingError) as exc:
            raise ContractCallError(
                address=address,
                function=function_prototype,
                error=str(exc),
            ) from exc

    def _get_cooler_address(
        self, cooler: ChecksumAddress, function_prototype: str
    ) -> ChecksumAddress:
        key = (cooler, function_prototype)
        if key not in self._cooler_addresses:
            (address,) = self._call(
                address=cooler,
                function_prototype=function_prototype,
                function_arguments=None,
                return_types=["address"],
            )
            self._cooler_addresses[key] = get_checksum_address(address)
        return self._cooler_addresses[key]

    def get_request(
        self, cooler: ChecksumAddress, request_id: int, block: BlockIdentifier | None = None
    ) -> CoolerRequest:
        (request,) = self._call(
            address=cooler,
            function_prototype="getRequest(uint256)",
            function_arguments=[request_id],
            return_types=[CoolerRequest.ABI_TYPE],
            block=block,
        )
        return CoolerRequest.from_tuple(request)

    def get_loan(
        self, cooler: ChecksumAddress, loan_id: int, block: BlockIdentifier | None = None
    ) -> CoolerLoanData:
        (loan,) = self._call(
            address=cooler,
            function_prototype="getLoan(uint256)",
            function_arguments=[loan_id],
            return_types=[CoolerLoanData.ABI_TYPE],
            block=block,
        )
        return CoolerLoanData.from_tuple(loan)

    def owner(self, cooler: ChecksumAddress) -> ChecksumAddress:
        return self._get_cooler_address(cooler, "owner()")

    def collateral(self, cooler: ChecksumAddress) -> ChecksumAddress:
        return self._get_cooler_address(cooler, "collateral()")

    def debt(self, cooler: ChecksumAddress) -> ChecksumAddress:
        return self._get_cooler_address(cooler, "debt()")

    def decimals(self, token: ChecksumAddress) -> int:
        if token not in self._token_decimals:
            (decimals,) = self._call(
                address=token,
                function_prototype="decimals()",
                function_arguments=None,
                return_types=["uint8"],
            )
            self._token_decimals[token] = decimals
        return self._token_decimals[token]

    def index(self, token: ChecksumAddress, block: BlockIdentifier | None = None) -> int:
        """
        Get the gOHM index, a raw value with 9 fractional digits.
        """

        index: int
        (index,) = self._call(
            address=token,
            function_prototype="index()",
            function_arguments=None,
            return_types=["uint256"],
            block=block,
        )
        return index
