from .base import Base
from .cooler import (
    ClaimDefaultedLoanEventTable,
    ClearLoanRequestEventTable,
    CoolerLoanRequestTable,
    CoolerLoanTable,
    ExtendLoanEventTable,
    IndexedRecord,
    RepayLoanEventTable,
    RequestLoanEventTable,
    RequestStatus,
    RescindLoanRequestEventTable,
)

__all__ = (
    "Base",
    "ClaimDefaultedLoanEventTable",
    "ClearLoanRequestEventTable",
    "CoolerLoanRequestTable",
    "CoolerLoanTable",
    "ExtendLoanEventTable",
    "IndexedRecord",
    "RepayLoanEventTable",
    "RequestLoanEventTable",
    "RequestStatus",
    "RescindLoanRequestEventTable",
)
