"""Unit tests for fetch request and outcome models."""

import pytest
from pydantic import ValidationError

from shutfetch.fetch.errors import FetchErrorClass
from shutfetch.fetch.models import (
    FetchFailure,
    FetchSuccess,
    RequestDescriptor,
    ResultShape,
)


class TestRequestDescriptor:
    """Tests for RequestDescriptor."""

    def test_url_may_be_absent(self) -> None:
        """Construction accepts a missing URL."""
        descriptor = RequestDescriptor(shape=ResultShape.ARRAY)

        assert descriptor.url is None
        assert descriptor.is_valid_url() is False

    def test_is_frozen(self) -> None:
        """Descriptors cannot be mutated."""
        descriptor = RequestDescriptor(url="https://a.example", shape=ResultShape.ARRAY)

        with pytest.raises(ValidationError):
            descriptor.url = "https://b.example"  # type: ignore[misc]

    @pytest.mark.parametrize(
        ("url", "valid"),
        [
            ("https://laundry.example.edu/api?location=Yale", True),
            ("http://127.0.0.1:8080/resource", True),
            ("laundry.example.edu/api", False),
            ("mailto:someone@example.com", False),
            ("http://[::1", False),
        ],
    )
    def test_is_valid_url(self, url: str, valid: bool) -> None:
        """Only absolute http(s) URLs with a host are valid."""
        descriptor = RequestDescriptor(url=url, shape=ResultShape.ARRAY)

        assert descriptor.is_valid_url() is valid

    def test_array_echo_parameters(self) -> None:
        """ARRAY echoes only location."""
        descriptor = RequestDescriptor(
            url="https://x.example/api?method=m&location=Yale",
            shape=ResultShape.ARRAY,
        )

        assert descriptor.echo_parameters() == ("Yale",)

    def test_object_echo_parameters_in_order(self) -> None:
        """OBJECT echoes method then location."""
        descriptor = RequestDescriptor(
            url="https://x.example/api?location=Saybrook&method=getTotal",
            shape=ResultShape.OBJECT,
        )

        assert descriptor.echo_parameters() == ("getTotal", "Saybrook")

    def test_echo_parameters_decoded(self) -> None:
        """Percent-encoded values are decoded; the first value wins."""
        descriptor = RequestDescriptor(
            url="https://x.example/api?location=Old%20Campus&location=Other",
            shape=ResultShape.ARRAY,
        )

        assert descriptor.echo_parameters() == ("Old Campus",)

    def test_unknown_shape_echoes_nothing(self) -> None:
        """UNKNOWN has no echo parameters."""
        descriptor = RequestDescriptor(
            url="https://x.example/api?location=Yale", shape=ResultShape.UNKNOWN
        )

        assert descriptor.echo_parameters() == ()

    def test_absent_url_echoes_none(self) -> None:
        """Without a URL every echo parameter is None."""
        descriptor = RequestDescriptor(shape=ResultShape.OBJECT)

        assert descriptor.echo_parameters() == (None, None)


class TestOutcomes:
    """Tests for FetchSuccess and FetchFailure."""

    def test_success_keeps_payload_type(self) -> None:
        """Array payloads stay lists and object payloads stay dicts."""
        array = FetchSuccess(payload=["a", "b"], parameters=("Yale",))
        obj = FetchSuccess(payload={"a": 1}, parameters=("m", "Yale"))

        assert array.payload == ["a", "b"]
        assert obj.payload == {"a": 1}

    def test_failure_requires_message(self) -> None:
        """FetchFailure rejects an empty message."""
        with pytest.raises(ValidationError):
            FetchFailure(error_class=FetchErrorClass.OFFLINE, message="")

    def test_only_transient_io_is_retryable(self) -> None:
        """TRANSIENT_IO is the single retryable error class."""
        retryable = {c for c in FetchErrorClass if c.is_retryable}

        assert retryable == {FetchErrorClass.TRANSIENT_IO}
