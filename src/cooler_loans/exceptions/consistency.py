"""
Exceptions raised when a lifecycle event references a record that was never indexed.

These indicate a mismatch between the contract's event log and the indexed records, and must not be
silently ignored.
"""

from typing import Any

from cooler_loans.exceptions.base import CoolerLoansError


class ConsistencyError(CoolerLoansError):
    """
    Base exception for missing or inconsistent records.
    """


class RequestNotFound(ConsistencyError):
    """
    Raised when a loan request record does not exist.
    """

    def __init__(self, record_id: str) -> None:
        self.record_id = record_id
        super().__init__(message=f"Request not found with record id: {record_id}")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.record_id,)


class LoanNotFound(ConsistencyError):
    """
    Raised when a loan record does not exist.
    """

    def __init__(self, record_id: str) -> None:
        self.record_id = record_id
        super().__init__(message=f"Loan not found with record id: {record_id}")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.record_id,)
