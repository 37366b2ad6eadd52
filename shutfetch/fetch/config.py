"""Configuration model for fetch tasks."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from shutfetch.fetch.constants import (
    DEFAULT_MAX_RESPONSE_SIZE_BYTES,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    MAX_ATTEMPTS,
)


class FetchConfig(BaseModel):
    """Configuration shared by the transport and the retry loop."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = (
        DEFAULT_USER_AGENT
    )
    timeout_seconds: Annotated[float, Field(ge=1.0, le=300.0)] = (
        DEFAULT_TIMEOUT_SECONDS
    )
    max_response_size_bytes: Annotated[int, Field(ge=1024, le=100 * 1024 * 1024)] = (
        DEFAULT_MAX_RESPONSE_SIZE_BYTES
    )
    max_attempts: Annotated[
        int, Field(ge=1, le=10, description="Total attempts on transient I/O failure")
    ] = MAX_ATTEMPTS
