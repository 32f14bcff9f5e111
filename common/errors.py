"""
Exception hierarchy for trace benchmark runs.
"""


class TraceBenchError(Exception):
    """Base class for all benchmark errors."""


class DispatchError(TraceBenchError):
    """The request could not be sent or no response was received."""

    def __init__(self, url: str, cause: BaseException):
        self.url = url
        self.cause = cause
        super().__init__(f"Request to {url} failed: {type(cause).__name__}: {cause}")


class StreamError(TraceBenchError):
    """Reading the response body failed before end-of-stream."""

    def __init__(self, url: str, cause: BaseException, bytes_read: int = 0):
        self.url = url
        self.cause = cause
        self.bytes_read = bytes_read
        super().__init__(
            f"Reading body from {url} failed after {bytes_read} bytes: "
            f"{type(cause).__name__}: {cause}"
        )


class AggregationError(TraceBenchError, ValueError):
    """Statistics were requested over an empty series."""
