__all__ = (
    "CHAIN_ID_TO_NETWORK",
    "DEFAULT_COOLER_FACTORY_ADDRESSES",
    "DEFAULT_GOHM_ADDRESSES",
    "DEFAULT_OHM_ADDRESSES",
    "DEFAULT_PRICE_FEEDS",
    "GOHM_INDEX_DECIMALS",
    "INTEREST_PERCENTAGE_MULTIPLIER",
)

from decimal import Decimal

from eth_typing import ChainId, ChecksumAddress

from cooler_loans.checksum_cache import get_checksum_address


# The gOHM index is a fixed-point value with 9 fractional digits, matching OHM
GOHM_INDEX_DECIMALS = 9

# Request interest is a fraction (1e18 = 100%), recorded as a percentage
INTEREST_PERCENTAGE_MULTIPLIER = Decimal(100)


# Network names keyed by chain ID
CHAIN_ID_TO_NETWORK: dict[int, str] = {
    ChainId.ETH: "mainnet",
    5: "goerli",
}


# Canonical OHM (v2) token addresses, keyed by network name
DEFAULT_OHM_ADDRESSES: dict[str, ChecksumAddress] = {
    "mainnet": get_checksum_address("0x64aa3364F17a4D01c6f1751Fd97C2BD3D7e7f1D5"),
    "goerli": get_checksum_address("0x0595328847AF962F951a4f8F8eE9A3Bf261e4f6b"),
}


# Canonical gOHM token addresses, keyed by network name
DEFAULT_GOHM_ADDRESSES: dict[str, ChecksumAddress] = {
    "mainnet": get_checksum_address("0x0ab87046fBb341D058F17CBC4c1133F25a20a52f"),
    "goerli": get_checksum_address("0xC1863141dc1861122d5410fB5973951c82871d98"),
}


# Cooler factory deployments, keyed by network name
DEFAULT_COOLER_FACTORY_ADDRESSES: dict[str, ChecksumAddress] = {
    "mainnet": get_checksum_address("0x30Ce56e80aA96EbbA1E1a74bC5c0FEB5B0dB4216"),
}


type PriceFeedPair = tuple[ChecksumAddress, ChecksumAddress | None]


# Chainlink aggregators used to price tokens in USD, keyed by network name and token address.
# Each entry is (token/quote aggregator, quote/USD aggregator or None for a direct USD feed).
DEFAULT_PRICE_FEEDS: dict[str, dict[ChecksumAddress, PriceFeedPair]] = {
    "mainnet": {
        # OHMv2 / ETH * ETH / USD
        get_checksum_address("0x64aa3364F17a4D01c6f1751Fd97C2BD3D7e7f1D5"): (
            get_checksum_address("0x9a72298ae3886221820B1c878d12D872087D3a23"),
            get_checksum_address("0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419"),
        ),
    },
}
