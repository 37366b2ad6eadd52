"""Error types for the fetch task layer."""

from enum import Enum


class FetchErrorClass(str, Enum):
    """Classification of fetch failures for logging and metrics.

    - OFFLINE: Connectivity predicate reported no network
    - TRANSIENT_IO: Connection/stream/HTTP error, retried up to the ceiling
    - MALFORMED_CONFIG: URL absent or not an absolute http(s) URL
    - UNSUPPORTED_SHAPE: Result shape outside ARRAY/OBJECT
    - MALFORMED_BODY: Response body is not the expected JSON shape
    - RESPONSE_SIZE_EXCEEDED: Response exceeded max size limit
    - CANCELLED: Task cancelled by its owner
    - UNKNOWN: Unclassified error
    """

    OFFLINE = "OFFLINE"
    TRANSIENT_IO = "TRANSIENT_IO"
    MALFORMED_CONFIG = "MALFORMED_CONFIG"
    UNSUPPORTED_SHAPE = "UNSUPPORTED_SHAPE"
    MALFORMED_BODY = "MALFORMED_BODY"
    RESPONSE_SIZE_EXCEEDED = "RESPONSE_SIZE_EXCEEDED"
    CANCELLED = "CANCELLED"
    UNKNOWN = "UNKNOWN"

    @property
    def is_retryable(self) -> bool:
        """Check if failures of this class are retried."""
        return self is FetchErrorClass.TRANSIENT_IO


class FetchTaskError(Exception):
    """Base exception for fetch task errors.

    Provides structured error information for logging.
    """

    error_class: FetchErrorClass = FetchErrorClass.UNKNOWN

    def __init__(
        self,
        message: str,
        url: str | None = None,
        details: dict[str, str | int | bool | None] | None = None,
    ) -> None:
        """Initialize the fetch task error.

        Args:
            message: Human-readable error message.
            url: URL being fetched, if any.
            details: Additional structured error details.
        """
        super().__init__(message)
        self.message = message
        self.url = url
        self.details = details or {}

    def to_dict(
        self,
    ) -> dict[str, str | int | bool | None | dict[str, str | int | bool | None]]:
        """Convert error to dictionary for logging/serialization.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "error_class": self.error_class.value,
            "message": self.message,
            "url": self.url,
            "details": self.details,
        }


class TransportError(FetchTaskError):
    """I/O failure while talking to the server.

    Covers refused connections, timeouts, broken streams and HTTP error
    statuses (the upstream's spurious 404s included).
    """

    error_class = FetchErrorClass.TRANSIENT_IO

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        """Initialize the transport error.

        Args:
            message: Human-readable error message.
            url: URL being fetched.
            status_code: HTTP status code if a response was received.
        """
        super().__init__(message, url=url, details={"status_code": status_code})
        self.status_code = status_code


class ResponseSizeExceededError(FetchTaskError):
    """Raised when response size exceeds the configured limit."""

    error_class = FetchErrorClass.RESPONSE_SIZE_EXCEEDED


class BodyParseError(FetchTaskError):
    """Error parsing a response body into the expected shape."""

    error_class = FetchErrorClass.MALFORMED_BODY

    def __init__(
        self,
        message: str,
        url: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize the parse error.

        Args:
            message: Human-readable error message.
            url: URL the body came from.
            line: Line number where the error occurred.
            column: Column number where the error occurred.
        """
        super().__init__(message, url=url, details={"line": line, "column": column})
        self.line = line
        self.column = column


class InvalidUrlError(FetchTaskError):
    """URL passed the scheme/host check but httpx cannot build a request.

    An out-of-range port such as ``http://host:99999/`` is the usual case.
    """

    error_class = FetchErrorClass.MALFORMED_CONFIG
