"""
HTTP transport for the CyteType API.

Infrastructure layer: one authenticated call in, one typed outcome out.
Retries are the poller's job, not this layer's.
"""

import re
import logging
from typing import Optional, Mapping, Any

import requests
from requests.exceptions import RequestException

from cytetype.domain.exceptions import (
    ErrorKind,
    CyteTypeAPIError,
    JobSubmissionError,
)
from cytetype.domain.models import ApiOutcome

DEFAULT_API_URL = "https://nygen-labs--cytetype-api.modal.run"

STATUS_TIMEOUT = 30
SUBMIT_TIMEOUT = 60

NETWORK_ERROR_PATTERN = re.compile(r"network|connection|resolve|timeout", re.IGNORECASE)


def classify_transport_error(exc: BaseException) -> ErrorKind:
    """
    Classify a transport-level failure as NETWORK or API.

    Matches the network vocabulary against the exception message and the
    names of its class hierarchy (``ReadTimeout``, ``ConnectionError``...),
    so both "Failed to resolve host" and a bare "Read timed out." count.
    """
    names = " ".join(cls.__name__ for cls in type(exc).__mro__)
    if NETWORK_ERROR_PATTERN.search(f"{names} {exc}"):
        return ErrorKind.NETWORK
    return ErrorKind.API


class HttpTransport:
    """
    CyteType API transport.

    Uses a requests session; every call returns an ApiOutcome.
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize transport.

        Args:
            api_url: API base URL (default: public CyteType API)
            session: Optional pre-configured requests session
            logger: Logger instance
        """
        self.api_url = (api_url or DEFAULT_API_URL).rstrip('/')
        self.logger = logger or logging.getLogger(__name__)

        self.session = session or requests.Session()
        self.session.headers.update({
            'Accept': 'application/json',
        })

    def url_for(self, endpoint: str) -> str:
        return f"{self.api_url}/{endpoint.lstrip('/')}"

    def report_url(self, job_id: str) -> str:
        """Human-facing report URL; never fetched by the client."""
        return self.url_for(f"report/{job_id}")

    def perform_request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Optional[Mapping[str, Any]] = None,
        auth_token: Optional[str] = None,
        timeout: Optional[float] = None
    ) -> ApiOutcome:
        """
        Make one API request.

        Args:
            endpoint: Path relative to the base URL (e.g. 'status/<job_id>')
            method: HTTP method
            body: Optional JSON body
            auth_token: Optional bearer token
            timeout: Request timeout; defaults to 60s for POST, 30s otherwise

        Returns:
            ApiOutcome with either a decoded body or a classified error.
            HTTP 404 is returned as a plain outcome so callers can decide
            what "missing" means in their context.
        """
        method = method.upper()
        if timeout is None:
            timeout = SUBMIT_TIMEOUT if method == "POST" else STATUS_TIMEOUT

        headers = {}
        if auth_token:
            headers['Authorization'] = f"Bearer {auth_token}"

        kwargs: dict = {'headers': headers, 'timeout': timeout}
        if body is not None:
            kwargs['json'] = body

        url = self.url_for(endpoint)
        try:
            response = self.session.request(method, url, **kwargs)
        except RequestException as e:
            kind = classify_transport_error(e)
            self.logger.debug(f"{method} {endpoint} failed ({kind.value}): {e}")
            return ApiOutcome(
                status_code=0,
                error=CyteTypeAPIError(kind, f"Request to {endpoint} failed: {e}")
            )

        return self._to_outcome(endpoint, response)

    def _to_outcome(self, endpoint: str, response: requests.Response) -> ApiOutcome:
        status_code = response.status_code

        if status_code == 404:
            return ApiOutcome(status_code=404, body={})

        if status_code == 401:
            self.logger.debug(f"Authentication failed for {endpoint}")
            return ApiOutcome(
                status_code=401,
                error=CyteTypeAPIError(
                    ErrorKind.AUTH,
                    "Authentication failed: Invalid or expired auth token",
                    status_code=401
                )
            )

        if status_code == 403:
            self.logger.debug(f"Authorization failed for {endpoint}")
            return ApiOutcome(
                status_code=403,
                error=CyteTypeAPIError(
                    ErrorKind.AUTH,
                    "Authorization failed: Access denied",
                    status_code=403
                )
            )

        if status_code < 200 or status_code >= 300:
            try:
                error_body = response.text or "Unknown error"
            except Exception:
                error_body = "Unknown error"
            return ApiOutcome(
                status_code=status_code,
                error=CyteTypeAPIError(
                    ErrorKind.API,
                    f"HTTP {status_code} error: {error_body}",
                    status_code=status_code
                )
            )

        try:
            data = response.json()
        except ValueError as e:
            self.logger.debug(f"Error parsing JSON response from {endpoint}: {e}")
            return ApiOutcome(
                status_code=status_code,
                error=CyteTypeAPIError(
                    ErrorKind.API,
                    f"Invalid JSON response: {e}",
                    status_code=status_code
                )
            )

        return ApiOutcome(status_code=status_code, body=data)

    def get_status(self, job_id: str, auth_token: Optional[str] = None) -> ApiOutcome:
        """GET status/<job_id>."""
        return self.perform_request(f"status/{job_id}", auth_token=auth_token)

    def get_results(self, job_id: str, auth_token: Optional[str] = None) -> ApiOutcome:
        """GET results/<job_id>."""
        return self.perform_request(f"results/{job_id}", auth_token=auth_token)

    def submit_job(
        self,
        payload: Mapping[str, Any],
        auth_token: Optional[str] = None
    ) -> str:
        """
        Submit a job.

        Args:
            payload: Finished request body
            auth_token: Optional bearer token

        Returns:
            Job identifier

        Raises:
            CyteTypeAPIError: Classified transport/HTTP failure (auth, network...)
            JobSubmissionError: Any other submission failure
        """
        if payload is None:
            raise JobSubmissionError("Payload cannot be None")

        self.logger.info(f"Submitting job to API {self.api_url}")

        outcome = self.perform_request(
            "annotate",
            method="POST",
            body=payload,
            auth_token=auth_token,
            timeout=SUBMIT_TIMEOUT
        )

        if outcome.error is not None:
            self.logger.error(f"Job submission failed: {outcome.error.message}")
            raise outcome.error

        if outcome.status_code != 200:
            raise JobSubmissionError(
                f"Job submission failed: HTTP {outcome.status_code}",
                status_code=outcome.status_code
            )

        job_id = outcome.body.get('job_id') if isinstance(outcome.body, dict) else None
        if not isinstance(job_id, str) or not job_id.strip():
            raise JobSubmissionError("API response did not contain a valid 'job_id'")

        self.logger.debug(f"Job submitted successfully. Job ID: {job_id}")
        return job_id
