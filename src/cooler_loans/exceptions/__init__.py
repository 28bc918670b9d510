from cooler_loans.exceptions.base import (
    CoolerLoansError,
    CoolerLoansTypeError,
    CoolerLoansValueError,
)
from cooler_loans.exceptions.config import AddressNotFound, ConfigurationError, UnknownNetwork
from cooler_loans.exceptions.consistency import ConsistencyError, LoanNotFound, RequestNotFound
from cooler_loans.exceptions.events import UnknownEventTopic
from cooler_loans.exceptions.upstream import (
    ContractCallError,
    FetchingError,
    LogFetchingTimeout,
    PriceOracleError,
    UpstreamError,
)

from . import config, consistency, events, upstream

__all__ = (
    "AddressNotFound",
    "ConfigurationError",
    "ConsistencyError",
    "ContractCallError",
    "CoolerLoansError",
    "CoolerLoansTypeError",
    "CoolerLoansValueError",
    "FetchingError",
    "LoanNotFound",
    "LogFetchingTimeout",
    "PriceOracleError",
    "RequestNotFound",
    "UnknownEventTopic",
    "UnknownNetwork",
    "UpstreamError",
    "config",
    "consistency",
    "events",
    "upstream",
)
