"""Constants for the fetch task layer.

Centralizes retry, HTTP and size limits to avoid duplication across modules.
"""

# Total attempts (not retries) before a transient I/O failure is reported.
# The upstream API spuriously answers 404 and recovers on an immediate retry;
# two attempts are not always enough.
MAX_ATTEMPTS = 3

# HTTP Status Codes
HTTP_STATUS_BAD_REQUEST = 400

# Response Size Limits
DEFAULT_MAX_RESPONSE_SIZE_BYTES = 10 * 1024 * 1024  # 10 MB

# Chunk size for streaming reads
DEFAULT_CHUNK_SIZE = 8192

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_USER_AGENT = "shutfetch/1.0"

# Query parameters echoed back alongside each result shape
ARRAY_ECHO_PARAMETERS = ("location",)
OBJECT_ECHO_PARAMETERS = ("method", "location")

ALLOWED_URL_SCHEMES = frozenset({"http", "https"})
