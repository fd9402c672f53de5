"""Combines status and results fetches into one job snapshot."""

import logging
from typing import Optional

from cytetype.domain.exceptions import CyteTypeAPIError
from cytetype.domain.models import JobSnapshot, JobStatus
from cytetype.domain.protocols import ITransport


class StatusResolver:
    """
    Reads a job's server-side state.
    Implements IStatusResolver protocol.
    """

    def __init__(self, transport: ITransport, logger: Optional[logging.Logger] = None):
        self._transport = transport
        self._logger = logger or logging.getLogger(__name__)

    def resolve(self, job_id: str, auth_token: Optional[str] = None) -> JobSnapshot:
        """
        Fetch the current snapshot of a job.

        Args:
            job_id: Job identifier
            auth_token: Optional bearer token

        Returns:
            JobSnapshot. A 404 on the status endpoint is the ``not_found``
            snapshot, not an error.

        Raises:
            CyteTypeAPIError: Already classified failures, unchanged. Any
                other exception becomes an ``error`` snapshot.
        """
        try:
            return self._resolve(job_id, auth_token)
        except CyteTypeAPIError:
            raise
        except Exception as e:
            self._logger.debug(f"Unexpected error while resolving job {job_id}: {e}")
            return JobSnapshot(
                status=JobStatus.ERROR,
                message=f"Error checking job status: {e}"
            )

    def _resolve(self, job_id: str, auth_token: Optional[str]) -> JobSnapshot:
        outcome = self._transport.get_status(job_id, auth_token).raise_for_error()

        if outcome.is_not_found:
            return JobSnapshot(status=JobStatus.NOT_FOUND, message="Job not found")

        status_data = outcome.body if isinstance(outcome.body, dict) else {}
        reported = status_data.get('jobStatus')
        status = JobStatus.from_server(reported)

        if status is JobStatus.COMPLETED:
            return self._fetch_results(job_id, auth_token, status_data)

        if status is JobStatus.FAILED:
            return JobSnapshot(status=JobStatus.FAILED, message="Job failed", raw_status=status_data)

        if status in (JobStatus.PROCESSING, JobStatus.PENDING):
            return JobSnapshot(
                status=status,
                message=f"Job is {status.value}",
                raw_status=status_data
            )

        return JobSnapshot(
            status=JobStatus.UNKNOWN,
            message=f"Unknown job status: {reported}",
            raw_status=status_data
        )

    def _fetch_results(self, job_id: str, auth_token: Optional[str], status_data: dict) -> JobSnapshot:
        """Completed on the server; unreadable results downgrade to failed."""
        try:
            outcome = self._transport.get_results(job_id, auth_token).raise_for_error()
        except CyteTypeAPIError as e:
            if e.is_auth:
                raise
            return self._results_unavailable(e.message, status_data)
        except Exception as e:
            return self._results_unavailable(str(e), status_data)

        if outcome.is_not_found:
            return JobSnapshot(
                status=JobStatus.FAILED,
                message="Job completed but results are unavailable",
                raw_status=status_data
            )

        return JobSnapshot(
            status=JobStatus.COMPLETED,
            message="Job completed successfully",
            result=outcome.body,
            raw_status=status_data
        )

    @staticmethod
    def _results_unavailable(reason: str, status_data: dict) -> JobSnapshot:
        return JobSnapshot(
            status=JobStatus.FAILED,
            message=f"Job completed but results unavailable: {reason}",
            raw_status=status_data
        )
