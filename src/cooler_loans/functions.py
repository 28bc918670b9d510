import datetime
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import ROUND_DOWN, Context, Decimal
from typing import Any

import eth_abi.abi
from eth_typing import ChecksumAddress
from eth_utils.crypto import keccak
from hexbytes import HexBytes
from requests.exceptions import RequestException
from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)
from web3 import Web3
from web3._utils.threads import Timeout
from web3.exceptions import Web3Exception
from web3.types import BlockIdentifier, FilterParams, LogReceipt, TxParams

from cooler_loans.exceptions import CoolerLoansValueError, LogFetchingTimeout
from cooler_loans.logging import logger

# uint256 values have at most 78 digits. Arithmetic on converted amounts and prices uses a context
# wide enough to hold products of two such values without rounding.
DECIMAL_CONTEXT = Context(prec=160)

# Errors raised by web3 or its transport when an RPC request fails or reverts. IPC providers raise
# OSError subclasses.
RPC_TRANSPORT_ERRORS: tuple[type[Exception], ...] = (
    Timeout,
    Web3Exception,
    RequestException,
    OSError,
)


def get_argument_types(function_prototype: str) -> list[str]:
    """
    Get the ABI argument types of a function prototype, e.g. ['address', 'uint256'] for
    'transfer(address,uint256)'. Tuple arguments are not supported.
    """

    _, _, arguments = function_prototype.partition("(")
    arguments = arguments.removesuffix(")")
    return arguments.split(",") if arguments else []


def encode_function_calldata(
    function_prototype: str,
    function_arguments: Sequence[Any] | None = None,
) -> bytes:
    """
    Build calldata for a call: the 4-byte selector of `function_prototype` followed by the
    ABI-encoded arguments.
    """

    selector = keccak(text=function_prototype)[:4]
    argument_types = get_argument_types(function_prototype)
    if not argument_types:
        return selector
    return selector + eth_abi.abi.encode(types=argument_types, args=function_arguments or ())


def raw_call(
    w3: Web3,
    address: ChecksumAddress,
    calldata: bytes,
    return_types: list[str],
    block_identifier: BlockIdentifier | None = None,
) -> tuple[Any, ...]:
    """
    Execute an `eth_call` and ABI-decode the returned bytes.
    """

    response = w3.eth.call(
        transaction=TxParams(to=address, data=calldata),
        block_identifier=block_identifier,
    )
    return eth_abi.abi.decode(types=return_types, data=response)


def to_decimal(value: int, decimals: int) -> Decimal:
    """
    Convert a raw fixed-point integer to an exact decimal value, e.g. 1_500_000 with 6 decimals is
    Decimal('1.500000').
    """

    if decimals < 0:
        raise CoolerLoansValueError(message=f"Invalid decimal count {decimals}")

    # Constructing from a string is exact and does not depend on the context precision
    return Decimal(f"{value}E-{decimals}")


def from_decimal(value: Decimal, decimals: int) -> int:
    """
    Convert a decimal value to a raw fixed-point integer with the given number of decimals,
    truncating any digits beyond that precision.
    """

    if decimals < 0:
        raise CoolerLoansValueError(message=f"Invalid decimal count {decimals}")

    return int(
        DECIMAL_CONTEXT.scaleb(value, decimals).to_integral_value(
            rounding=ROUND_DOWN,
            context=DECIMAL_CONTEXT,
        )
    )


def multiply(a: Decimal, b: Decimal) -> Decimal:
    return DECIMAL_CONTEXT.multiply(a, b)


def get_iso8601_date_string(timestamp: int) -> str:
    """
    Get the UTC calendar date for a Unix timestamp, formatted as YYYY-MM-DD.
    """

    return datetime.datetime.fromtimestamp(timestamp, tz=datetime.UTC).date().isoformat()


@dataclass
class _BlockSpan:
    """
    The number of blocks requested per `eth_getLogs` call. Failures shrink it quickly and successes
    grow it slowly, within [1, maximum].
    """

    size: int
    maximum: int

    def shrink(self) -> None:
        self.size = max(1, self.size * 3 // 4)

    def grow(self) -> None:
        self.size = min(self.maximum, self.size + max(1, self.size // 100))


def fetch_logs_retrying(
    w3: Web3,
    start_block: int,
    end_block: int,
    *,
    address: Sequence[ChecksumAddress] = (),
    topics: Sequence[Sequence[HexBytes] | HexBytes] = (),
    max_retries: int = 10,
    max_blocks_per_request: int = 5_000,
) -> list[LogReceipt]:
    """
    Fetch the logs emitted by `address` and matching `topics` over the inclusive block range.

    The range is requested in chunks. A chunk which fails with a timeout or RPC error is retried
    with a smaller span, up to `max_retries` times.

    See `https://ethereum.org/developers/docs/apis/json-rpc/#eth_getlogs` for the topic filter
    format.
    """

    if end_block < start_block:
        raise CoolerLoansValueError(message="End block cannot be earlier than start block.")

    span = _BlockSpan(size=min(100, max_blocks_per_request), maximum=max_blocks_per_request)
    retrier = Retrying(
        stop=stop_after_attempt(max_retries),
        wait=wait_exponential_jitter(),
        retry=retry_if_exception_type(RPC_TRANSPORT_ERRORS),
    )

    def fetch_chunk(chunk_start: int) -> tuple[int, list[LogReceipt]]:
        chunk_end = min(end_block, chunk_start + span.size - 1)
        logger.debug(f"Fetching logs for blocks {chunk_start}-{chunk_end}")
        try:
            chunk_logs = w3.eth.get_logs(
                FilterParams(
                    address=list(address),
                    fromBlock=chunk_start,
                    toBlock=chunk_end,
                    topics=list(topics),
                )
            )
        except Exception:
            span.shrink()
            logger.debug(f"Failed fetching blocks {chunk_start}-{chunk_end}, span now {span.size}")
            raise
        span.grow()
        return chunk_end, list(chunk_logs)

    event_logs: list[LogReceipt] = []
    chunk_start = start_block
    while chunk_start <= end_block:
        try:
            chunk_end, chunk_logs = retrier(fetch_chunk, chunk_start)
        except RetryError:
            raise LogFetchingTimeout(max_retries=max_retries) from None
        event_logs.extend(chunk_logs)
        chunk_start = chunk_end + 1

    return event_logs
