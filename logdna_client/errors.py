"""Exception types raised by the delivery path and the client facade."""


class DeliveryError(Exception):
    """A batch could not be delivered to the ingest endpoint."""

    retryable = False

    def __init__(self, message: str, retryable: bool | None = None):
        super().__init__(message)
        if retryable is not None:
            self.retryable = retryable


class EncodingError(DeliveryError):
    """The batch could not be serialized to JSON."""


class TransmissionError(DeliveryError):
    """Network failure or a non-2xx response from the ingest endpoint."""

    retryable = True

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        retryable: bool | None = None,
    ):
        if retryable is None and status_code is not None:
            retryable = is_retryable_status(status_code)
        super().__init__(message, retryable)
        self.status_code = status_code


class ClientClosedError(RuntimeError):
    """Raised when logging or flushing through a client that was closed."""


def is_retryable_status(status_code: int) -> bool:
    """Timeouts, rate limiting and server errors are worth another attempt."""
    return status_code in (408, 429) or status_code >= 500
