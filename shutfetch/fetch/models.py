"""Data models for the fetch task layer."""

from enum import Enum
from typing import Annotated, Any
from urllib.parse import parse_qs, urlparse

from pydantic import BaseModel, ConfigDict, Field

from shutfetch.fetch.constants import (
    ALLOWED_URL_SCHEMES,
    ARRAY_ECHO_PARAMETERS,
    OBJECT_ECHO_PARAMETERS,
)
from shutfetch.fetch.errors import FetchErrorClass


class ResultShape(str, Enum):
    """Expected top-level shape of a response body.

    - ARRAY: JSON array, echoes ``location``
    - OBJECT: JSON object, echoes ``method`` and ``location``
    - UNKNOWN: Not supported; a task with this shape fails without I/O
    """

    ARRAY = "ARRAY"
    OBJECT = "OBJECT"
    UNKNOWN = "UNKNOWN"

    @property
    def echo_parameter_names(self) -> tuple[str, ...]:
        """Query parameter names echoed back with results of this shape."""
        match self:
            case ResultShape.ARRAY:
                return ARRAY_ECHO_PARAMETERS
            case ResultShape.OBJECT:
                return OBJECT_ECHO_PARAMETERS
            case _:
                return ()


class RequestDescriptor(BaseModel):
    """Immutable description of a single fetch request.

    The URL may be absent; that is only reported once the task executes.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str | None = Field(default=None, description="Absolute target URL")
    shape: ResultShape = Field(description="Expected shape of the response body")

    def is_valid_url(self) -> bool:
        """Check that the URL is an absolute http(s) URL with a host.

        Returns:
            True if the URL can be requested.
        """
        if not self.url:
            return False
        try:
            parsed = urlparse(self.url)
        except ValueError:
            return False
        return parsed.scheme in ALLOWED_URL_SCHEMES and bool(parsed.netloc)

    def echo_parameters(self) -> tuple[str | None, ...]:
        """Extract the shape's echo parameters from the URL query string.

        Returns:
            One value per echo parameter name, in order. Missing parameters
            are None.
        """
        names = self.shape.echo_parameter_names
        if not names:
            return ()
        query: dict[str, list[str]] = {}
        if self.url:
            try:
                query = parse_qs(urlparse(self.url).query, keep_blank_values=True)
            except ValueError:
                query = {}
        return tuple(query[name][0] if name in query else None for name in names)


class FetchSuccess(BaseModel):
    """Successful fetch outcome handed to the listener."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    payload: list[Any] | dict[str, Any] = Field(description="Parsed JSON document")
    parameters: tuple[str | None, ...] = Field(
        default=(), description="Echoed query parameter values"
    )


class FetchFailure(BaseModel):
    """Failed fetch outcome.

    Kept for logging and metrics; the listener only learns that the request
    failed.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    error_class: FetchErrorClass = Field(description="Classification of the failure")
    message: Annotated[str, Field(min_length=1, description="Human-readable message")]
    attempts: Annotated[int, Field(ge=0, description="Transport attempts made")] = 0


FetchOutcome = FetchSuccess | FetchFailure
