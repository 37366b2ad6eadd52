"""HTTP transport used by fetch tasks."""

from io import BytesIO
from typing import Protocol, runtime_checkable

import httpx
import structlog

from shutfetch.fetch.config import FetchConfig
from shutfetch.fetch.constants import DEFAULT_CHUNK_SIZE, HTTP_STATUS_BAD_REQUEST
from shutfetch.fetch.errors import (
    InvalidUrlError,
    ResponseSizeExceededError,
    TransportError,
)
from shutfetch.observability.redact import redact_headers, redact_url_credentials


logger = structlog.get_logger()


@runtime_checkable
class Transport(Protocol):
    """Protocol for issuing a single HTTP GET."""

    def get(self, url: str) -> bytes:
        """Fetch a URL and return the full response body.

        Args:
            url: Absolute URL to fetch.

        Returns:
            Response body bytes.

        Raises:
            TransportError: On any I/O failure or HTTP error status.
            ResponseSizeExceededError: If the body exceeds the size limit.
        """
        ...


class HttpxTransport:
    """Transport backed by a fresh httpx.Client per request.

    Error statuses (>= 400) are raised as TransportError so the retry
    loop treats them like any other I/O failure.
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            config: Fetch configuration (timeouts, size limit, user agent).
            transport: Optional httpx transport, e.g. httpx.MockTransport.
        """
        self._config = config or FetchConfig()
        self._transport = transport
        self._log = logger.bind(component="transport")

    def get(self, url: str) -> bytes:
        """Fetch a URL and return the full response body.

        Args:
            url: Absolute URL to fetch.

        Returns:
            Response body bytes.

        Raises:
            TransportError: On any I/O failure or HTTP error status.
            ResponseSizeExceededError: If the body exceeds the size limit.
            InvalidUrlError: If httpx rejects the URL.
        """
        headers = {
            "User-Agent": self._config.user_agent,
            "Accept": "application/json",
        }
        log = self._log.bind(
            url=redact_url_credentials(url), headers=redact_headers(headers)
        )

        try:
            with (
                httpx.Client(
                    timeout=self._config.timeout_seconds,
                    follow_redirects=True,
                    transport=self._transport,
                ) as client,
                client.stream("GET", url, headers=headers) as response,
            ):
                if response.status_code >= HTTP_STATUS_BAD_REQUEST:
                    msg = f"HTTP error ({response.status_code})"
                    raise TransportError(
                        msg, url=url, status_code=response.status_code
                    )
                body = self._read_body_with_limit(response, url)
        except httpx.InvalidURL as e:
            msg = f"Invalid URL: {e}"
            raise InvalidUrlError(msg, url=url) from e
        except httpx.TimeoutException as e:
            msg = f"Request timed out: {e}"
            raise TransportError(msg, url=url) from e
        except httpx.HTTPError as e:
            msg = f"Connection failed: {e}"
            raise TransportError(msg, url=url) from e

        log.debug("http_get_complete", bytes=len(body))
        return body

    def _read_body_with_limit(self, response: httpx.Response, url: str) -> bytes:
        """Read response body with size limit.

        Args:
            response: Streaming HTTP response.
            url: Requested URL, for error context.

        Returns:
            Response body bytes.

        Raises:
            ResponseSizeExceededError: If size limit exceeded.
        """
        max_size = self._config.max_response_size_bytes

        content_length = response.headers.get("content-length")
        if (
            content_length
            and content_length.isdigit()
            and int(content_length) > max_size
        ):
            msg = f"Response size {content_length} exceeds limit {max_size}"
            raise ResponseSizeExceededError(msg, url=url)

        buffer = BytesIO()
        total_read = 0
        for chunk in response.iter_bytes(chunk_size=DEFAULT_CHUNK_SIZE):
            total_read += len(chunk)
            if total_read > max_size:
                msg = (
                    f"Response size exceeded limit of {max_size} bytes "
                    f"(read {total_read} bytes)"
                )
                raise ResponseSizeExceededError(msg, url=url)
            buffer.write(chunk)

        return buffer.getvalue()
