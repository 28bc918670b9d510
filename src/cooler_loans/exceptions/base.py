class CoolerLoansError(Exception):
    """
    Parent of every exception raised by `cooler_loans`. Handler failures derived from it are
    returned in a `HandlerOutcome` instead of propagating, so catch it before `Exception` when
    calling into the package directly, e.g.:

    ```
    try:
        cooler_loans.sync_cooler_factory(...)
    except RequestNotFound:
        ... # an event referenced a request which was never indexed
    except CoolerLoansError:
        ... # any other cooler_loans failure
    ```

    A description is available as `.message`, if one was given.
    """

    message: str | None = None

    def __init__(self, message: str | None = None) -> None:
        if message:
            self.message = message
            super().__init__(message)


class CoolerLoansValueError(CoolerLoansError): ...


class CoolerLoansTypeError(CoolerLoansError): ...
