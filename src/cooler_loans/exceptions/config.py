"""
Exceptions raised when the active configuration cannot satisfy a lookup.
"""

from typing import Any

from cooler_loans.exceptions.base import CoolerLoansError


class ConfigurationError(CoolerLoansError):
    """
    Base exception for configuration errors.
    """


class AddressNotFound(ConfigurationError):
    """
    Raised when a canonical address is not defined for the active network.
    """

    def __init__(self, network: str, asset: str) -> None:
        self.network = network
        self.asset = asset
        super().__init__(message=f"{asset} address not found for network: {network}")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.network, self.asset)


class UnknownNetwork(ConfigurationError):
    """
    Raised when a chain ID does not map to a known network name.
    """

    def __init__(self, chain_id: int) -> None:
        self.chain_id = chain_id
        super().__init__(message=f"No network name is defined for chain ID {chain_id}")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.chain_id,)
