"""
Record identifiers for indexed Cooler requests, loans and their events.

Every handler that creates or looks up a record derives its key here. A request or loan is keyed by
the lowercase hex address of its Cooler and its numeric ID, e.g.
`0x1d5e1c7ab1ef7e4b8f6ce10e5ce7e5b0d4c0f7f5-3`. Events which can occur more than once for the same
loan (repayments, extensions) append the block number to the loan's key.
"""

from hexbytes import HexBytes


def _cooler_hex(cooler: str | bytes) -> str:
    return HexBytes(cooler).to_0x_hex()


def get_request_record_id(cooler: str | bytes, request_id: int) -> str:
    return f"{_cooler_hex(cooler)}-{request_id}"


def get_loan_record_id(cooler: str | bytes, loan_id: int) -> str:
    return f"{_cooler_hex(cooler)}-{loan_id}"


def get_loan_event_record_id(cooler: str | bytes, loan_id: int, block_number: int) -> str:
    return f"{get_loan_record_id(cooler, loan_id)}-{block_number}"
