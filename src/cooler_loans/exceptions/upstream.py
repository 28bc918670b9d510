"""
Exceptions raised when a read from the chain or a price oracle fails.

No retry is attempted for contract and oracle reads. Log fetching is retried, and raises
`LogFetchingTimeout` once the attempts are exhausted.
"""

from typing import Any

from cooler_loans.exceptions.base import CoolerLoansError


class UpstreamError(CoolerLoansError):
    """
    Base exception for failed reads from external services.
    """


class ContractCallError(UpstreamError):
    """
    Raised when an `eth_call` to a contract reverts, fails, or returns undecodable data.
    """

    def __init__(self, address: str, function: str, error: str) -> None:
        self.address = address
        self.function = function
        self.error = error
        super().__init__(message=f"Call to {function} at {address} failed: {error}")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.address, self.function, self.error)


class PriceOracleError(UpstreamError):
    """
    Raised when a USD price cannot be fetched for a token.
    """

    def __init__(self, token: str, error: str) -> None:
        self.token = token
        self.error = error
        super().__init__(message=f"Could not fetch USD price for {token}: {error}")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.token, self.error)


class FetchingError(UpstreamError):
    """
    Base exception for data fetching errors.
    """


class LogFetchingTimeout(FetchingError):
    """
    Raised when log fetching operations timeout after multiple retry attempts.
    """

    def __init__(self, max_retries: int) -> None:
        """
        Initialize LogFetchingTimeout.

        Args:
            max_retries: The maximum number of retry attempts that were made
        """
        self.max_retries = max_retries
        super().__init__(message=f"Timed out fetching logs after {max_retries} tries.")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.max_retries,)
