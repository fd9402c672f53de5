"""High-level client for submitting and following annotation jobs."""

import threading
from typing import Optional, Mapping, Any, List

from cytetype.domain.exceptions import CyteTypeAPIError, ErrorKind
from cytetype.domain.models import AnnotationRecord, JobSnapshot
from cytetype.domain.protocols import ITransport, IStatusResolver, IProgressSink
from cytetype.infrastructure.api import HttpTransport, StatusResolver
from cytetype.infrastructure.config import ClientConfig
from cytetype.application.normalizer import ResultNormalizer
from cytetype.application.poller import JobPoller
from cytetype.shared.logging import get_logger

logger = get_logger(__name__)


class AnnotationClient:
    """Wires transport, resolver and poller together for one API endpoint."""

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport: Optional[ITransport] = None,
        resolver: Optional[IStatusResolver] = None,
        poller: Optional[JobPoller] = None
    ):
        self.config = config or ClientConfig()
        self._transport = transport or HttpTransport(api_url=self.config.api_url)
        self._resolver = resolver or StatusResolver(self._transport)
        self._normalizer = ResultNormalizer()
        self._poller = poller or JobPoller(
            self._resolver,
            policy=self.config.poll_policy(),
            normalizer=self._normalizer
        )

    @property
    def poller(self) -> JobPoller:
        return self._poller

    def submit(self, payload: Mapping[str, Any]) -> str:
        """Submit a finished payload and return the job id."""
        job_id = self._transport.submit_job(payload, self.config.auth_token)
        logger.info(f"Job submitted. Report: {self.report_url(job_id)}")
        return job_id

    def report_url(self, job_id: str) -> str:
        return self._transport.report_url(job_id)

    def status(self, job_id: str) -> JobSnapshot:
        """Read the job's current state once."""
        return self._resolver.resolve(job_id, self.config.auth_token)

    def poll(
        self,
        job_id: str,
        cluster_label_map: Optional[Mapping[str, str]] = None,
        progress: Optional[IProgressSink] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> List[AnnotationRecord]:
        """Wait for an already submitted job and return its records."""
        return self._poller.run(
            job_id,
            auth_token=self.config.auth_token,
            progress=progress,
            cluster_label_map=cluster_label_map,
            cancel_event=cancel_event
        )

    def annotate(
        self,
        payload: Mapping[str, Any],
        cluster_label_map: Optional[Mapping[str, str]] = None,
        progress: Optional[IProgressSink] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> List[AnnotationRecord]:
        """
        Submit a payload and wait for its annotations.

        Args:
            payload: Finished ``/annotate`` body
            cluster_label_map: Server cluster id -> caller's label. Taken
                from ``payload['input_data']['clusterLabels']`` when omitted.
            progress: Optional progress sink
            cancel_event: Optional cancellation flag

        Returns:
            Normalized annotation records
        """
        if cluster_label_map is None:
            input_data = payload.get('input_data') or {}
            if isinstance(input_data, Mapping):
                cluster_label_map = input_data.get('clusterLabels') or None

        job_id = self.submit(payload)
        return self.poll(
            job_id,
            cluster_label_map=cluster_label_map,
            progress=progress,
            cancel_event=cancel_event
        )

    def fetch_results(
        self,
        job_id: str,
        cluster_label_map: Optional[Mapping[str, str]] = None
    ) -> List[AnnotationRecord]:
        """
        Fetch results of a job that finished earlier.

        Raises:
            CyteTypeAPIError: kind ``notFound`` when the server has no results
        """
        outcome = self._transport.get_results(job_id, self.config.auth_token).raise_for_error()
        if outcome.is_not_found:
            raise CyteTypeAPIError(
                ErrorKind.NOT_FOUND,
                f"No results found for job {job_id}",
                status_code=404
            )
        return self._normalizer.normalize(outcome.body, cluster_label_map)
