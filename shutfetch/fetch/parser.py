"""JSON body parsing by expected result shape."""

import json
from typing import Any

from shutfetch.fetch.errors import BodyParseError
from shutfetch.fetch.models import ResultShape


def parse_body(
    body: bytes,
    shape: ResultShape,
    url: str | None = None,
) -> list[Any] | dict[str, Any]:
    """Parse a UTF-8 response body into the expected JSON shape.

    Args:
        body: Raw response body.
        shape: Expected top-level shape (ARRAY or OBJECT).
        url: Source URL, for error context.

    Returns:
        A list for ARRAY, a dict for OBJECT.

    Raises:
        BodyParseError: If the body is not valid UTF-8 JSON of the expected shape.
        ValueError: If the shape is not supported.
    """
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as e:
        msg = f"Response body is not valid UTF-8: {e}"
        raise BodyParseError(msg, url=url) from e

    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        msg = f"Invalid JSON: {e.msg}"
        raise BodyParseError(msg, url=url, line=e.lineno, column=e.colno) from e

    match shape:
        case ResultShape.ARRAY:
            expected: type = list
        case ResultShape.OBJECT:
            expected = dict
        case _:
            msg = f"Result shape {shape.value} is not supported"
            raise ValueError(msg)

    if not isinstance(document, expected):
        msg = (
            f"Expected JSON {shape.value.lower()}, "
            f"got {type(document).__name__}"
        )
        raise BodyParseError(msg, url=url)

    return document
