"""
Tests for Session.
"""

import json
from dataclasses import replace

import pytest
import requests
import responses

from cloud_client.core.config import CloudConfig
from cloud_client.core.exceptions import (
    ConflictError,
    ConnectionError,
    EndpointNotFoundError,
    ErrorKind,
    HTTPError,
    InvalidResponseError,
    NotFoundError,
    ServiceUnavailableError,
    TimeoutError,
)
from cloud_client.core.session import REQUEST_ID_HEADER, Session

COMPUTE_URL = "https://nova.example.com/v2.1"


class TestCatalog:

    def test_get_endpoint(self, session):
        assert session.get_endpoint("compute") == COMPUTE_URL

    def test_missing_endpoint(self, session):
        with pytest.raises(EndpointNotFoundError) as exc_info:
            session.get_endpoint("volumev3")
        assert exc_info.value.service_type == "volumev3"
        assert exc_info.value.interface == "public"

    def test_interface_specific_endpoint(self, config):
        config = config.with_endpoint("compute:internal", "http://nova.internal:8774/v2.1")

        with Session(config) as public:
            assert public.get_endpoint("compute") == COMPUTE_URL
        with Session(config.with_endpoint_interface("internal")) as internal:
            assert internal.get_endpoint("compute") == "http://nova.internal:8774/v2.1"
            assert internal.get_endpoint("image") == "https://glance.example.com"

    def test_url_for_quotes_segments(self, session):
        url = session.url_for("compute", "os-keypairs", "my key")
        assert url == f"{COMPUTE_URL}/os-keypairs/my%20key"

    def test_url_for_without_path(self, session):
        assert session.url_for("compute") == COMPUTE_URL


class TestRequest:

    @responses.activate
    def test_get_json_sends_token_and_request_id(self, session):
        responses.add(responses.GET, f"{COMPUTE_URL}/servers/abc", json={"server": {"id": "abc"}})

        assert session.get_json("compute", "servers", "abc", key="server") == {"id": "abc"}

        sent = responses.calls[0].request
        assert sent.headers["X-Auth-Token"] == "gAAAAB-test-token"
        assert sent.headers["Accept"] == "application/json"
        assert sent.headers[REQUEST_ID_HEADER].startswith("req-")

    @responses.activate
    def test_query_params(self, session):
        responses.add(responses.GET, f"{COMPUTE_URL}/servers/detail", json={"servers": []})

        session.get_json("compute", "servers", "detail", params={"limit": 2, "marker": "abc"})

        assert "limit=2" in responses.calls[0].request.url
        assert "marker=abc" in responses.calls[0].request.url

    @responses.activate
    def test_post_json_body(self, session):
        responses.add(responses.POST, f"{COMPUTE_URL}/servers", json={"server": {"id": "new"}}, status=202)

        result = session.post_json("compute", "servers", body={"server": {"name": "web-1"}}, key="server")

        assert result == {"id": "new"}
        assert json.loads(responses.calls[0].request.body) == {"server": {"name": "web-1"}}

    @responses.activate
    def test_put_json(self, session):
        responses.add(responses.PUT, f"{COMPUTE_URL}/servers/abc", json={"server": {"name": "renamed"}})

        assert session.put_json("compute", "servers", "abc", body={"server": {"name": "renamed"}}) == {
            "server": {"name": "renamed"}
        }

    @responses.activate
    def test_delete_no_content(self, session):
        responses.add(responses.DELETE, f"{COMPUTE_URL}/servers/abc", status=204)
        assert session.delete("compute", "servers", "abc") is None

    @responses.activate
    def test_empty_body_with_expected_key(self, session):
        responses.add(responses.GET, f"{COMPUTE_URL}/servers/abc", status=204)
        with pytest.raises(InvalidResponseError):
            session.get_json("compute", "servers", "abc", key="server")

    @responses.activate
    def test_invalid_json(self, session):
        responses.add(responses.GET, f"{COMPUTE_URL}/servers/abc", body="<html>oops</html>")
        with pytest.raises(InvalidResponseError) as exc_info:
            session.get_json("compute", "servers", "abc")
        assert exc_info.value.kind is ErrorKind.FATAL

    @responses.activate
    def test_missing_key(self, session):
        responses.add(responses.GET, f"{COMPUTE_URL}/servers/abc", json={"other": {}})
        with pytest.raises(InvalidResponseError, match="server"):
            session.get_json("compute", "servers", "abc", key="server")


class TestErrors:

    @pytest.mark.parametrize("status, exc_class, kind", [
        (404, NotFoundError, ErrorKind.NOT_FOUND),
        (409, ConflictError, ErrorKind.CONFLICT),
        (500, HTTPError, ErrorKind.FATAL),
        (429, HTTPError, ErrorKind.FATAL),
        (503, ServiceUnavailableError, ErrorKind.TRANSIENT),
    ])
    @responses.activate
    def test_status_errors(self, session, status, exc_class, kind):
        responses.add(responses.GET, f"{COMPUTE_URL}/servers/abc", json={"error": "x"}, status=status)

        with pytest.raises(exc_class) as exc_info:
            session.get_json("compute", "servers", "abc")
        assert exc_info.value.kind is kind

    @responses.activate
    def test_no_retry_in_transport(self, session):
        responses.add(responses.GET, f"{COMPUTE_URL}/servers/abc", status=503)

        with pytest.raises(ServiceUnavailableError):
            session.get_json("compute", "servers", "abc")
        assert len(responses.calls) == 1

    @responses.activate
    def test_timeout(self, session):
        responses.add(responses.GET, f"{COMPUTE_URL}/servers/abc", body=requests.exceptions.ReadTimeout())

        with pytest.raises(TimeoutError) as exc_info:
            session.get_json("compute", "servers", "abc")
        assert exc_info.value.retryable

    @responses.activate
    def test_connection_error(self, session):
        responses.add(
            responses.GET, f"{COMPUTE_URL}/servers/abc",
            body=requests.exceptions.ConnectionError("Connection refused")
        )

        with pytest.raises(ConnectionError) as exc_info:
            session.get_json("compute", "servers", "abc")
        assert isinstance(exc_info.value.__cause__, requests.exceptions.ConnectionError)


class TestLifecycle:

    def test_kwargs_build_config(self):
        with Session(endpoints={"compute": COMPUTE_URL}, token="t") as session:
            assert session.config.token == "t"

    def test_no_token_header(self):
        with Session(CloudConfig(endpoints={"compute": COMPUTE_URL})) as session:
            assert "X-Auth-Token" not in session.session.headers

    def test_thread_local_sessions(self, session):
        first = session.session
        assert session.session is first
        session.close()
        assert session.session is not first

    @responses.activate
    def test_structured_logging(self, config, logging_config_with_file):
        responses.add(responses.GET, f"{COMPUTE_URL}/servers/abc", json={"server": {"id": "abc"}})
        responses.add(responses.GET, f"{COMPUTE_URL}/servers/gone", status=404)

        session = Session(replace(config, logging=logging_config_with_file))
        session.get_json("compute", "servers", "abc")
        with pytest.raises(NotFoundError):
            session.get_json("compute", "servers", "gone")
        session.close()

        with open(logging_config_with_file.file_path) as f:
            records = [json.loads(line) for line in f if line.strip()]

        messages = [record["message"] for record in records]
        assert "Request completed" in messages
        assert "Request failed" in messages

        failed = next(r for r in records if r["message"] == "Request failed")
        assert failed["error_kind"] == "not_found"
        assert failed["correlation_id"].startswith("req-")
        assert "gAAAAB-test-token" not in json.dumps(records)
