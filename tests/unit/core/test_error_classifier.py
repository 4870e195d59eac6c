"""
Tests for error classification.
"""

import json
from unittest.mock import Mock

import pytest
import requests

from cloud_client.core.error_classifier import (
    classify,
    classify_status,
    exception_for_status,
    to_exception,
)
from cloud_client.core.exceptions import (
    BadRequestError,
    CloudClientException,
    ConflictError,
    ConnectionError,
    DNSError,
    ErrorKind,
    ForbiddenError,
    HTTPError,
    InvalidResponseError,
    NotFoundError,
    ServiceUnavailableError,
    TimeoutError,
    UnauthorizedError,
    WaitTimeoutError,
)


def _response(status_code, text="", url="https://nova.example.com/v2.1/servers/abc"):
    response = requests.Response()
    response.status_code = status_code
    response._content = text.encode()
    response.url = url
    return response


class TestClassifyStatus:
    """Status code -> ErrorKind."""

    @pytest.mark.parametrize("status", [502, 503, 504])
    def test_gateway_errors_are_transient(self, status):
        assert classify_status(status) is ErrorKind.TRANSIENT

    def test_404_is_not_found(self):
        assert classify_status(404) is ErrorKind.NOT_FOUND

    def test_409_is_conflict(self):
        assert classify_status(409) is ErrorKind.CONFLICT

    @pytest.mark.parametrize("status", [400, 401, 403, 405, 413, 429, 500, 501])
    def test_other_statuses_are_fatal(self, status):
        """500 and 429 are never retried."""
        assert classify_status(status) is ErrorKind.FATAL


class TestClassify:
    """classify() over every kind of outcome."""

    def test_read_timeout_is_transient(self):
        assert classify(requests.exceptions.ReadTimeout()) is ErrorKind.TRANSIENT

    def test_connect_timeout_is_transient(self):
        assert classify(requests.exceptions.ConnectTimeout()) is ErrorKind.TRANSIENT

    def test_connection_error_is_transient(self):
        assert classify(requests.exceptions.ConnectionError("reset by peer")) is ErrorKind.TRANSIENT

    def test_http_error_uses_response_status(self):
        error = requests.exceptions.HTTPError(response=_response(404))
        assert classify(error) is ErrorKind.NOT_FOUND

    def test_http_error_without_response_is_fatal(self):
        assert classify(requests.exceptions.HTTPError("boom")) is ErrorKind.FATAL

    def test_other_request_exception_is_fatal(self):
        assert classify(requests.exceptions.InvalidURL("bad")) is ErrorKind.FATAL

    def test_response_object(self):
        assert classify(_response(503)) is ErrorKind.TRANSIENT
        assert classify(_response(409)) is ErrorKind.CONFLICT

    def test_int_status(self):
        assert classify(504) is ErrorKind.TRANSIENT
        assert classify(500) is ErrorKind.FATAL

    def test_bool_is_not_a_status(self):
        assert classify(True) is ErrorKind.FATAL

    def test_json_decode_error_is_fatal(self):
        try:
            json.loads("{not json")
        except ValueError as e:
            error = e
        assert classify(error) is ErrorKind.FATAL

    def test_own_exception_keeps_kind(self):
        assert classify(NotFoundError("https://x")) is ErrorKind.NOT_FOUND
        assert classify(WaitTimeoutError(10.0, 3)) is ErrorKind.TRANSIENT

    def test_unknown_exception_is_fatal(self):
        assert classify(RuntimeError("surprise")) is ErrorKind.FATAL
        assert classify(object()) is ErrorKind.FATAL


class TestToException:
    """to_exception() always agrees with classify()."""

    @pytest.mark.parametrize("outcome", [
        requests.exceptions.ReadTimeout(),
        requests.exceptions.ConnectTimeout(),
        requests.exceptions.ConnectionError("refused"),
        requests.exceptions.InvalidURL("bad"),
        400, 401, 403, 404, 409, 429, 500, 502, 503, 504,
        ValueError("bad json"),
        RuntimeError("surprise"),
    ])
    def test_kind_matches_classify(self, outcome):
        exc = to_exception(outcome, "https://nova.example.com/v2.1/servers")
        assert isinstance(exc, CloudClientException)
        assert exc.kind is classify(outcome)

    def test_read_timeout(self):
        exc = to_exception(requests.exceptions.ReadTimeout(), "https://x")
        assert isinstance(exc, TimeoutError)
        assert exc.timeout_type == "read"
        assert exc.retryable

    def test_connect_timeout(self):
        exc = to_exception(requests.exceptions.ConnectTimeout(), "https://x")
        assert isinstance(exc, TimeoutError)
        assert exc.timeout_type == "connect"

    def test_dns_failure(self):
        error = requests.exceptions.ConnectionError(
            "Failed to resolve 'nova.example.com' (Name or service not known)"
        )
        exc = to_exception(error, "https://nova.example.com")
        assert isinstance(exc, DNSError)
        assert exc.kind is ErrorKind.TRANSIENT

    def test_plain_connection_error(self):
        exc = to_exception(requests.exceptions.ConnectionError("reset"), "https://x")
        assert type(exc) is ConnectionError

    def test_response_to_exception_carries_body_excerpt(self):
        exc = to_exception(_response(404, '{"itemNotFound": {"message": "gone"}}'))
        assert isinstance(exc, NotFoundError)
        assert "gone" in str(exc)
        assert exc.url == "https://nova.example.com/v2.1/servers/abc"

    def test_long_body_is_truncated(self):
        exc = to_exception(_response(500, "x" * 1000))
        assert "x" * 201 not in str(exc)

    def test_http_error_wrapper(self):
        exc = to_exception(requests.exceptions.HTTPError(response=_response(409)))
        assert isinstance(exc, ConflictError)

    def test_invalid_json(self):
        exc = to_exception(requests.exceptions.JSONDecodeError("Expecting value", "doc", 0))
        assert isinstance(exc, InvalidResponseError)
        assert exc.fatal

    def test_own_exception_passes_through(self):
        original = NotFoundError("https://x")
        assert to_exception(original) is original


class TestExceptionForStatus:
    """Status -> exception class."""

    @pytest.mark.parametrize("status, exc_class", [
        (400, BadRequestError),
        (401, UnauthorizedError),
        (403, ForbiddenError),
        (404, NotFoundError),
        (409, ConflictError),
        (503, ServiceUnavailableError),
    ])
    def test_specific_classes(self, status, exc_class):
        exc = exception_for_status(status, "https://x")
        assert isinstance(exc, exc_class)
        assert exc.status_code == status

    def test_generic_fatal_status(self):
        exc = exception_for_status(500, "https://x", "Internal error")
        assert type(exc) is HTTPError
        assert exc.status_code == 500
        assert not exc.retryable

    def test_mocked_response_status(self):
        response = Mock(spec=requests.Response)
        response.status_code = 502
        response.url = "https://x"
        response.text = "Bad Gateway"
        exc = to_exception(response)
        assert isinstance(exc, ServiceUnavailableError)
        assert exc.retryable
