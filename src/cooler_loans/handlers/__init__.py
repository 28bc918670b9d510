from cooler_loans.handlers.common import HandlerContext
from cooler_loans.handlers.dispatch import EVENT_HANDLERS, HandlerOutcome, process_event
from cooler_loans.handlers.loans import (
    handle_clear_request,
    handle_default_loan,
    handle_extend_loan,
    handle_repay_loan,
)
from cooler_loans.handlers.requests import handle_request_loan, handle_rescind_request

__all__ = (
    "EVENT_HANDLERS",
    "HandlerContext",
    "HandlerOutcome",
    "handle_clear_request",
    "handle_default_loan",
    "handle_extend_loan",
    "handle_repay_loan",
    "handle_request_loan",
    "handle_rescind_request",
    "process_event",
)
