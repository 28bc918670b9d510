from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from cooler_loans.database.models import IndexedRecord
from cooler_loans.exceptions import CoolerLoansError, CoolerLoansTypeError
from cooler_loans.handlers.common import HandlerContext
from cooler_loans.handlers.loans import (
    handle_clear_request,
    handle_default_loan,
    handle_extend_loan,
    handle_repay_loan,
)
from cooler_loans.handlers.requests import handle_request_loan, handle_rescind_request
from cooler_loans.types import (
    ClearRequest,
    CoolerFactoryEventData,
    DefaultLoan,
    ExtendLoan,
    RepayLoan,
    RequestLoan,
    RescindRequest,
)

EVENT_HANDLERS: dict[type, Callable[[Any, HandlerContext], tuple[IndexedRecord, ...]]] = {
    RequestLoan: handle_request_loan,
    RescindRequest: handle_rescind_request,
    ClearRequest: handle_clear_request,
    RepayLoan: handle_repay_loan,
    ExtendLoan: handle_extend_loan,
    DefaultLoan: handle_default_loan,
}


@dataclass(frozen=True, slots=True)
class HandlerOutcome:
    """
    The result of handling one event: either the records to persist, or the error that aborted
    handling. A failed event produces no records.
    """

    event: CoolerFactoryEventData
    records: tuple[IndexedRecord, ...] = ()
    error: CoolerLoansError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def process_event(event: CoolerFactoryEventData, context: HandlerContext) -> HandlerOutcome:
    """
    Dispatch an event to its handler.

    Errors raised by this package (configuration, consistency, and upstream read failures) are
    returned in the outcome for the caller to act on. Any other exception propagates.
    """

    try:
        handler = EVENT_HANDLERS[type(event)]
    except KeyError:
        raise CoolerLoansTypeError(
            message=f"No handler for event type {type(event).__name__}"
        ) from None

    try:
        records = handler(event, context)
    except CoolerLoansError as exc:
        return HandlerOutcome(event=event, error=exc)

    return HandlerOutcome(event=event, records=records)
