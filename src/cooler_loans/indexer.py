"""
Index CoolerFactory events into request, loan, and event records.

Logs are processed one at a time in chain order, sorted by (blockNumber, logIndex). Each event is
decoded, dispatched to its handler, and the handler's records are saved and committed before the
next event is processed. If a handler fails, the session is rolled back so that the failed event
leaves no writes, and the run either stops (`halt_on_error=True`) or continues with the next event.

Events handled (emitted by the CoolerFactory, with the Cooler address as the first indexed topic):
    - RequestLoan: a borrower opens a request
    - RescindRequest: a borrower cancels an open request
    - ClearRequest: a lender accepts a request, creating a loan
    - RepayLoan: the borrower repays some or all of a loan
    - ExtendLoan: the lender extends a loan's expiry by some number of periods
    - DefaultLoan: the lender claims collateral from an expired loan
"""

import operator
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum

import eth_abi.abi
import tqdm
from eth_typing import ChecksumAddress
from eth_utils.crypto import keccak
from hexbytes import HexBytes
from sqlalchemy.orm import Session, scoped_session
from web3 import Web3
from web3.types import LogReceipt

from cooler_loans.checksum_cache import get_checksum_address
from cooler_loans.config import Settings
from cooler_loans.connection import get_network_for_chain_id
from cooler_loans.cooler import Web3ChainReader
from cooler_loans.database import SqlAlchemyEntityStore, get_scoped_sqlite_session
from cooler_loans.exceptions import CoolerLoansValueError, UnknownEventTopic
from cooler_loans.functions import fetch_logs_retrying
from cooler_loans.handlers import HandlerContext, HandlerOutcome, process_event
from cooler_loans.logging import logger
from cooler_loans.oracle import ChainlinkPriceOracle
from cooler_loans.types import (
    BlockContext,
    ClearRequest,
    CoolerFactoryEventData,
    DefaultLoan,
    ExtendLoan,
    RepayLoan,
    RequestLoan,
    RescindRequest,
)


class CoolerFactoryEvent(Enum):
    REQUEST_LOAN = HexBytes(keccak(text="RequestLoan(address,address,address,uint256)"))
    RESCIND_REQUEST = HexBytes(keccak(text="RescindRequest(address,uint256)"))
    CLEAR_REQUEST = HexBytes(keccak(text="ClearRequest(address,uint256,uint256)"))
    REPAY_LOAN = HexBytes(keccak(text="RepayLoan(address,uint256,uint256)"))
    EXTEND_LOAN = HexBytes(keccak(text="ExtendLoan(address,uint256,uint8)"))
    DEFAULT_LOAN = HexBytes(keccak(text="DefaultLoan(address,uint256,uint256)"))


@dataclass
class BlockTimestampCache:
    """Timestamps of blocks seen during a run, fetched once per block."""

    w3: Web3
    _timestamps: dict[int, int] = field(default_factory=dict)

    def __call__(self, block_number: int) -> int:
        if block_number not in self._timestamps:
            block = self.w3.eth.get_block(block_number)
            self._timestamps[block_number] = block["timestamp"]
        return self._timestamps[block_number]


def _decode_address(input_: bytes) -> ChecksumAddress:
    """
    Get the checksummed address from the given byte stream.
    """

    (address,) = eth_abi.abi.decode(types=["address"], data=input_)
    return get_checksum_address(address)


def decode_event(log: LogReceipt, block_timestamp: int) -> CoolerFactoryEventData:
    """
    Decode a CoolerFactory log into its event type.
    """

    topic = HexBytes(log["topics"][0])
    cooler = _decode_address(log["topics"][1])
    data = HexBytes(log["data"])
    block = BlockContext(
        number=log["blockNumber"],
        timestamp=block_timestamp,
        transaction_hash=HexBytes(log["transactionHash"]),
        log_index=log["logIndex"],
    )

    match topic:
        case CoolerFactoryEvent.REQUEST_LOAN.value:
            collateral, debt, request_id = eth_abi.abi.decode(
                types=["address", "address", "uint256"], data=data
            )
            return RequestLoan(
                cooler=cooler,
                collateral=get_checksum_address(collateral),
                debt=get_checksum_address(debt),
                request_id=request_id,
                block=block,
            )
        case CoolerFactoryEvent.RESCIND_REQUEST.value:
            (request_id,) = eth_abi.abi.decode(types=["uint256"], data=data)
            return RescindRequest(cooler=cooler, request_id=request_id, block=block)
        case CoolerFactoryEvent.CLEAR_REQUEST.value:
            request_id, loan_id = eth_abi.abi.decode(types=["uint256", "uint256"], data=data)
            return ClearRequest(cooler=cooler, request_id=request_id, loan_id=loan_id, block=block)
        case CoolerFactoryEvent.REPAY_LOAN.value:
            loan_id, amount = eth_abi.abi.decode(types=["uint256", "uint256"], data=data)
            return RepayLoan(cooler=cooler, loan_id=loan_id, amount=amount, block=block)
        case CoolerFactoryEvent.EXTEND_LOAN.value:
            loan_id, times = eth_abi.abi.decode(types=["uint256", "uint8"], data=data)
            return ExtendLoan(cooler=cooler, loan_id=loan_id, times=times, block=block)
        case CoolerFactoryEvent.DEFAULT_LOAN.value:
            loan_id, amount = eth_abi.abi.decode(types=["uint256", "uint256"], data=data)
            return DefaultLoan(cooler=cooler, loan_id=loan_id, amount=amount, block=block)
        case _:
            raise UnknownEventTopic(topic=topic)


def process_logs(
    logs: Iterable[LogReceipt],
    *,
    context: HandlerContext,
    session: Session | scoped_session[Session],
    get_block_timestamp: Callable[[int], int],
    halt_on_error: bool = True,
    no_progress: bool = True,
) -> list[HandlerOutcome]:
    """
    Handle CoolerFactory logs in chain order, committing the records from each event separately.
    """

    outcomes: list[HandlerOutcome] = []

    for log in tqdm.tqdm(
        sorted(logs, key=operator.itemgetter("blockNumber", "logIndex")),
        desc="Processing events",
        leave=False,
        disable=no_progress,
    ):
        event = decode_event(log, block_timestamp=get_block_timestamp(log["blockNumber"]))
        try:
            outcome = process_event(event, context)
        except Exception:
            # Unexpected failures are not returned in an outcome, discard any partial writes
            session.rollback()
            raise
        outcomes.append(outcome)

        if outcome.error is not None:
            session.rollback()
            logger.error(
                f"Failed to process {type(event).__name__} at block {event.block.number} "
                f"(log {event.block.log_index}): {outcome.error}"
            )
            if halt_on_error:
                raise outcome.error
            continue

        try:
            for record in outcome.records:
                context.store.save(record)
        except Exception:
            session.rollback()
            raise
        session.commit()

    return outcomes


def sync_cooler_factory(
    *,
    w3: Web3,
    settings: Settings,
    start_block: int,
    end_block: int,
    session: Session | scoped_session[Session] | None = None,
    no_progress: bool = False,
) -> list[HandlerOutcome]:
    """
    Fetch and process all CoolerFactory events in the inclusive block range.

    Records are written to the given session, or to the database at `settings.database.path` if no
    session is given.
    """

    if (chain_network := get_network_for_chain_id(w3.eth.chain_id)) != settings.network:
        raise CoolerLoansValueError(
            message=(
                f"Connected to {chain_network}, but the configured network is {settings.network}"
            )
        )

    if session is None:
        session = get_scoped_sqlite_session(database_path=settings.database.path)

    context = HandlerContext(
        settings=settings,
        reader=Web3ChainReader(w3),
        oracle=ChainlinkPriceOracle(w3, feeds=settings.get_network_addresses().price_feeds),
        store=SqlAlchemyEntityStore(session),
    )

    logs = fetch_logs_retrying(
        w3=w3,
        start_block=start_block,
        end_block=end_block,
        address=[settings.get_cooler_factory_address()],
        topics=[
            [event.value for event in CoolerFactoryEvent],
        ],
    )
    logger.info(f"Fetched {len(logs)} CoolerFactory events from blocks {start_block}-{end_block}")

    return process_logs(
        logs,
        context=context,
        session=session,
        get_block_timestamp=BlockTimestampCache(w3=w3),
        halt_on_error=settings.halt_on_error,
        no_progress=no_progress,
    )
