"""
Unit tests for the HTTP transport.
"""

import pytest
import requests
from unittest.mock import Mock, PropertyMock, patch

from cytetype.infrastructure.api.transport import (
    HttpTransport,
    classify_transport_error,
    DEFAULT_API_URL,
)
from cytetype.domain.exceptions import ErrorKind, CyteTypeAPIError, JobSubmissionError


def make_response(status_code=200, json_data=None, text=""):
    response = Mock()
    response.status_code = status_code
    response.text = text
    if isinstance(json_data, Exception):
        response.json.side_effect = json_data
    else:
        response.json.return_value = json_data
    return response


@pytest.fixture
def transport():
    return HttpTransport(api_url="https://api.example.org/")


class TestClassifyTransportError:
    """Test network vocabulary heuristic."""

    @pytest.mark.parametrize("exc", [
        requests.exceptions.ConnectionError("Max retries exceeded"),
        requests.exceptions.ReadTimeout("Read timed out."),
        ValueError("Failed to resolve host"),
        RuntimeError("network unreachable"),
    ])
    def test_network_errors(self, exc):
        """Test network failures are recognised by name or message."""
        assert classify_transport_error(exc) is ErrorKind.NETWORK

    def test_other_errors_are_api(self):
        """Test anything else is an API error."""
        assert classify_transport_error(ValueError("bad payload")) is ErrorKind.API


class TestHttpTransportRequests:
    """Test perform_request outcomes."""

    def test_base_url_and_report_url(self, transport):
        """Test trailing slash is dropped and report URL is built."""
        assert transport.api_url == "https://api.example.org"
        assert transport.report_url("abc") == "https://api.example.org/report/abc"

    def test_default_api_url(self):
        """Test public endpoint is the default."""
        assert HttpTransport().api_url == DEFAULT_API_URL

    def test_successful_get(self, transport):
        """Test 200 response yields decoded body."""
        with patch.object(requests.Session, 'request',
                          return_value=make_response(200, {"jobStatus": "pending"})) as mock_request:
            outcome = transport.get_status("job-1")

        assert outcome.ok
        assert outcome.body == {"jobStatus": "pending"}
        args, kwargs = mock_request.call_args
        assert args == ("GET", "https://api.example.org/status/job-1")
        assert kwargs["timeout"] == 30
        assert "Authorization" not in kwargs["headers"]

    def test_bearer_token_attached(self, transport):
        """Test auth token goes into the Authorization header."""
        with patch.object(requests.Session, 'request',
                          return_value=make_response(200, {})) as mock_request:
            transport.get_results("job-1", auth_token="secret")

        headers = mock_request.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer secret"

    def test_post_defaults_to_longer_timeout(self, transport):
        """Test POST requests get the submission timeout."""
        with patch.object(requests.Session, 'request',
                          return_value=make_response(200, {})) as mock_request:
            transport.perform_request("annotate", method="post", body={"a": 1})

        kwargs = mock_request.call_args.kwargs
        assert kwargs["timeout"] == 60
        assert kwargs["json"] == {"a": 1}

    def test_404_is_not_an_error(self, transport):
        """Test 404 is returned as a plain outcome."""
        with patch.object(requests.Session, 'request', return_value=make_response(404)):
            outcome = transport.get_status("job-1")

        assert outcome.is_not_found
        assert outcome.error is None
        assert outcome.body == {}

    @pytest.mark.parametrize("code,text", [
        (401, "Authentication failed: Invalid or expired auth token"),
        (403, "Authorization failed: Access denied"),
    ])
    def test_auth_failures(self, transport, code, text):
        """Test 401/403 are classified as auth."""
        with patch.object(requests.Session, 'request', return_value=make_response(code)):
            outcome = transport.get_status("job-1", auth_token="bad")

        assert outcome.error.kind is ErrorKind.AUTH
        assert outcome.error.message == text
        assert outcome.error.status_code == code

    def test_server_error(self, transport):
        """Test other non-2xx responses are API errors with the body text."""
        with patch.object(requests.Session, 'request',
                          return_value=make_response(500, text="boom")):
            outcome = transport.get_status("job-1")

        assert outcome.error.kind is ErrorKind.API
        assert outcome.error.message == "HTTP 500 error: boom"

    @pytest.mark.parametrize("text", ["", None])
    def test_server_error_without_body(self, transport, text):
        """Test an empty error body falls back to a placeholder."""
        with patch.object(requests.Session, 'request',
                          return_value=make_response(502, text=text)):
            outcome = transport.get_status("job-1")

        assert outcome.error.message == "HTTP 502 error: Unknown error"

    def test_server_error_unreadable_body(self, transport):
        """Test a body that cannot be decoded falls back to a placeholder."""
        response = Mock()
        response.status_code = 500
        type(response).text = PropertyMock(side_effect=UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid"))
        with patch.object(requests.Session, 'request', return_value=response):
            outcome = transport.get_status("job-1")

        assert outcome.error.kind is ErrorKind.API
        assert outcome.error.message == "HTTP 500 error: Unknown error"

    def test_invalid_json(self, transport):
        """Test undecodable body is an API error."""
        with patch.object(requests.Session, 'request',
                          return_value=make_response(200, ValueError("Expecting value"))):
            outcome = transport.get_status("job-1")

        assert outcome.error.kind is ErrorKind.API
        assert outcome.error.message.startswith("Invalid JSON response")

    def test_connection_error_is_network(self, transport):
        """Test transport exceptions become network outcomes."""
        with patch.object(requests.Session, 'request',
                          side_effect=requests.exceptions.ConnectionError("refused")):
            outcome = transport.get_status("job-1")

        assert outcome.status_code == 0
        assert outcome.error.kind is ErrorKind.NETWORK
        with pytest.raises(CyteTypeAPIError):
            outcome.raise_for_error()


class TestHttpTransportSubmit:
    """Test job submission."""

    def test_submit_returns_job_id(self, transport):
        """Test job id is extracted from the response."""
        with patch.object(requests.Session, 'request',
                          return_value=make_response(200, {"job_id": "job-42"})) as mock_request:
            job_id = transport.submit_job({"input_data": {}}, auth_token="tok")

        assert job_id == "job-42"
        args, kwargs = mock_request.call_args
        assert args == ("POST", "https://api.example.org/annotate")
        assert kwargs["headers"]["Authorization"] == "Bearer tok"

    def test_submit_none_payload(self, transport):
        """Test None payload is rejected before any request."""
        with patch.object(requests.Session, 'request') as mock_request:
            with pytest.raises(JobSubmissionError):
                transport.submit_job(None)
        mock_request.assert_not_called()

    @pytest.mark.parametrize("body", [{}, {"job_id": ""}, {"job_id": 7}, ["job-1"]])
    def test_submit_invalid_job_id(self, transport, body):
        """Test responses without a usable job id."""
        with patch.object(requests.Session, 'request', return_value=make_response(200, body)):
            with pytest.raises(JobSubmissionError, match="valid 'job_id'"):
                transport.submit_job({"input_data": {}})

    def test_submit_unexpected_status(self, transport):
        """Test non-200 success codes are rejected."""
        with patch.object(requests.Session, 'request',
                          return_value=make_response(202, {"job_id": "x"})):
            with pytest.raises(JobSubmissionError) as exc_info:
                transport.submit_job({"input_data": {}})

        assert exc_info.value.status_code == 202

    def test_submit_auth_error_keeps_kind(self, transport):
        """Test classified failures are re-raised unchanged."""
        with patch.object(requests.Session, 'request', return_value=make_response(401)):
            with pytest.raises(CyteTypeAPIError) as exc_info:
                transport.submit_job({"input_data": {}}, auth_token="bad")

        assert exc_info.value.kind is ErrorKind.AUTH
        assert not isinstance(exc_info.value, JobSubmissionError)
