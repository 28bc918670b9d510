from typing import Any

from hexbytes import HexBytes

from cooler_loans.exceptions.base import CoolerLoansValueError


class UnknownEventTopic(CoolerLoansValueError):
    """
    Raised when a log does not match any known Cooler factory event.
    """

    def __init__(self, topic: bytes) -> None:
        self.topic = HexBytes(topic)
        super().__init__(message=f"Unknown event topic: {self.topic.to_0x_hex()}")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (bytes(self.topic),)
