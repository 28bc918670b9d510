"""
USD pricing for Cooler collateral.

OHM is priced by an oracle. gOHM is priced from OHM: the gOHM index is the number of OHM that one
gOHM redeems for, so price(gOHM) = price(OHM) * index.
"""

from decimal import Decimal
from typing import Protocol

from eth_abi.exceptions import DecodingError
from eth_typing import ChecksumAddress
from web3 import Web3
from web3.types import BlockIdentifier

from cooler_loans.config import PriceFeed, Settings
from cooler_loans.constants import GOHM_INDEX_DECIMALS
from cooler_loans.cooler import ChainReader
from cooler_loans.exceptions import PriceOracleError
from cooler_loans.functions import (
    RPC_TRANSPORT_ERRORS,
    encode_function_calldata,
    multiply,
    raw_call,
    to_decimal,
)
from cooler_loans.logging import logger


class PriceOracle(Protocol):
    def fetch_price_usd(
        self, token: ChecksumAddress, block: BlockIdentifier | None = None
    ) -> Decimal: ...


class ChainlinkPriceOracle:
    """
    Prices tokens in USD from Chainlink AggregatorV3 feeds. Tokens quoted in another asset (e.g.
    OHM/ETH) are converted to USD through the quote asset's USD feed.
    """

    def __init__(self, w3: Web3, feeds: dict[ChecksumAddress, PriceFeed]) -> None:
        self.w3 = w3
        self.feeds = feeds
        self._feed_decimals: dict[ChecksumAddress, int] = {}

    def _get_feed_decimals(self, aggregator: ChecksumAddress) -> int:
        if aggregator not in self._feed_decimals:
            (decimals,) = raw_call(
                w3=self.w3,
                address=aggregator,
                calldata=encode_function_calldata(
                    function_prototype="decimals()",
                    function_arguments=None,
                ),
                return_types=["uint8"],
            )
            self._feed_decimals[aggregator] = decimals
        return self._feed_decimals[aggregator]

    def _get_feed_answer(
        self, aggregator: ChecksumAddress, block: BlockIdentifier | None
    ) -> Decimal:
        answer: int
        _, answer, _, _, _ = raw_call(
            w3=self.w3,
            address=aggregator,
            calldata=encode_function_calldata(
                function_prototype="latestRoundData()",
                function_arguments=None,
            ),
            return_types=["uint80", "int256", "uint256", "uint256", "uint80"],
            block_identifier=block,
        )
        return to_decimal(answer, self._get_feed_decimals(aggregator))

    def fetch_price_usd(
        self, token: ChecksumAddress, block: BlockIdentifier | None = None
    ) -> Decimal:
        try:
            feed = self.feeds[token]
        except KeyError:
            raise PriceOracleError(token=token, error="no price feed configured") from None

        try:
            price = self._get_feed_answer(feed.aggregator, block)
            if feed.quote_feed is not None:
                price = multiply(price, self._get_feed_answer(feed.quote_feed, block))
        except (*RPC_TRANSPORT_ERRORS, DecodingError) as exc:
            raise PriceOracleError(token=token, error=str(exc)) from exc

        logger.debug(f"Fetched USD price for {token}: {price}")
        return price


def get_ohm_price(
    oracle: PriceOracle,
    settings: Settings,
    block: BlockIdentifier | None = None,
) -> Decimal:
    return oracle.fetch_price_usd(settings.get_ohm_address(), block)


def get_gohm_price(
    oracle: PriceOracle,
    reader: ChainReader,
    settings: Settings,
    block: BlockIdentifier | None = None,
) -> Decimal:
    ohm_price = get_ohm_price(oracle=oracle, settings=settings, block=block)
    index = to_decimal(
        reader.index(settings.get_gohm_address(), block),
        GOHM_INDEX_DECIMALS,
    )
    return multiply(ohm_price, index)


def get_collateral_price(
    token: ChecksumAddress,
    oracle: PriceOracle,
    reader: ChainReader,
    settings: Settings,
    block: BlockIdentifier | None = None,
) -> Decimal:
    """
    Get the USD price of a Cooler's collateral token. gOHM and OHM are priced from the OHM feed,
    any other token directly from the oracle.
    """

    if token == settings.get_gohm_address():
        return get_gohm_price(oracle=oracle, reader=reader, settings=settings, block=block)
    if token == settings.get_ohm_address():
        return get_ohm_price(oracle=oracle, settings=settings, block=block)
    return oracle.fetch_price_usd(token, block)
