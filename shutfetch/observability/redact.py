"""Redaction of credentials before URLs and headers reach the logs."""

import re


# Headers that must never appear in logs
SENSITIVE_HEADERS = frozenset(
    {
        "authorization",
        "cookie",
        "proxy-authorization",
        "x-api-key",
    }
)

REDACTED_VALUE = "[REDACTED]"

# Matches user:password@ in http(s) URLs
_URL_CREDENTIALS_PATTERN = re.compile(r"(https?://)([^:/@]+):([^@/]+)@")


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact sensitive request headers for logging.

    Args:
        headers: Original headers dictionary.

    Returns:
        New dictionary with sensitive values replaced by [REDACTED].
    """
    return {
        key: REDACTED_VALUE if key.lower() in SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }


def redact_url_credentials(url: str | None) -> str | None:
    """Redact user:password credentials from a URL.

    Args:
        url: URL that may contain credentials, or None.

    Returns:
        URL with credentials redacted, or None if no URL was given.
    """
    if url is None:
        return None
    return _URL_CREDENTIALS_PATTERN.sub(r"\1[REDACTED]:[REDACTED]@", url)
