"""Polling state machine for remote annotation jobs."""

import time
import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Optional, Mapping, Sequence, Any, Dict, List, Callable, Tuple, Union

from cytetype.domain.exceptions import (
    ErrorKind,
    CyteTypeAPIError,
    JobFailedError,
    PollCancelledError,
    PollTimeoutError,
)
from cytetype.domain.models import AnnotationRecord, ClusterStatusMap, JobSnapshot, JobStatus
from cytetype.domain.protocols import IStatusResolver, IProgressSink, IMetricsCollector
from cytetype.application.normalizer import ResultNormalizer
from cytetype.shared.logging import get_logger
from cytetype.shared.metrics import MetricsCollector
from cytetype.shared.retry import PollPolicy

# Decoded body of a completed job: a JSON object or array
Result = Union[Dict[str, Any], List[Any]]


@dataclass(frozen=True)
class PollState:
    """Values carried from one poll iteration to the next."""

    consecutive_not_found: int = 0
    last_cluster_status: ClusterStatusMap = field(default_factory=dict)
    frame: int = 0
    not_found_warnings: int = 0


def track_not_found(state: PollState, has_token: bool, threshold: int) -> Tuple[PollState, bool]:
    """
    Count a ``not_found`` poll.

    The count only runs while an auth token is in use. Reaching the
    threshold asks for one warning and resets the count.

    Returns:
        (new state, whether to warn)
    """
    if not has_token:
        return state, False

    count = state.consecutive_not_found + 1
    if count >= threshold:
        return replace(
            state,
            consecutive_not_found=0,
            not_found_warnings=state.not_found_warnings + 1
        ), True
    return replace(state, consecutive_not_found=count), False


class JobPoller:
    """Polls a submitted job until it completes, fails or times out."""

    def __init__(
        self,
        resolver: IStatusResolver,
        policy: Optional[PollPolicy] = None,
        normalizer: Optional[ResultNormalizer] = None,
        metrics: Optional[IMetricsCollector] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None
    ):
        self._resolver = resolver
        self._policy = policy or PollPolicy()
        self._normalizer = normalizer or ResultNormalizer()
        self._metrics = metrics or MetricsCollector()
        self._sleep = sleep
        self._clock = clock
        self._logger = logger or get_logger(__name__)

    @property
    def metrics(self) -> IMetricsCollector:
        return self._metrics

    def run(
        self,
        job_id: str,
        poll_interval: Optional[float] = None,
        timeout: Optional[float] = None,
        auth_token: Optional[str] = None,
        progress: Optional[IProgressSink] = None,
        cluster_label_map: Optional[Mapping[str, str]] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> List[AnnotationRecord]:
        """Poll until completion and return the normalized records."""
        raw = self.wait_for_result(
            job_id,
            poll_interval=poll_interval,
            timeout=timeout,
            auth_token=auth_token,
            progress=progress,
            cancel_event=cancel_event
        )
        return self._normalizer.normalize(raw, cluster_label_map)

    def wait_for_result(
        self,
        job_id: str,
        poll_interval: Optional[float] = None,
        timeout: Optional[float] = None,
        auth_token: Optional[str] = None,
        progress: Optional[IProgressSink] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> Result:
        """
        Poll until the job reaches a terminal state.

        All loop state lives in this call, so one poller can follow
        several jobs at once.

        Args:
            job_id: Job identifier
            poll_interval: Overrides the policy's interval
            timeout: Overrides the policy's overall budget
            auth_token: Optional bearer token
            progress: Optional per-cluster progress sink
            cancel_event: Checked at every loop head

        Returns:
            Raw results payload of the completed job (an object or an array)

        Raises:
            PollTimeoutError: Budget exhausted
            JobFailedError: Server reported the job failed
            PollCancelledError: cancel_event was set
            CyteTypeAPIError: Auth failures and any non-network error
        """
        policy = self._policy
        if poll_interval is not None:
            policy = replace(policy, poll_interval=poll_interval)
        if timeout is not None:
            policy = replace(policy, timeout=timeout)

        run_started = self._clock()
        self._logger.info(f"CyteType job (id: {job_id}) submitted. Polling for results...")
        if policy.settle_delay > 0:
            self._sleep(policy.settle_delay)

        state = PollState()
        start = self._clock()
        try:
            while True:
                if cancel_event is not None and cancel_event.is_set():
                    raise PollCancelledError(f"Polling for job {job_id} was cancelled")

                if self._clock() - start > policy.timeout:
                    raise PollTimeoutError()

                try:
                    snapshot = self._resolver.resolve(job_id, auth_token)
                except CyteTypeAPIError as e:
                    if not self._should_retry(job_id, e):
                        raise
                    self._metrics.increment_counter('network_retries')
                    state = self._wait(
                        state, policy, policy.network_retry_interval(),
                        state.last_cluster_status, progress
                    )
                    continue

                self._metrics.increment_counter('status_polls')
                state, result = self._step(job_id, snapshot, state, policy, auth_token, progress)
                if result is not None:
                    return result
        finally:
            self._metrics.record_duration('poll_job', self._clock() - run_started)

    def _step(
        self,
        job_id: str,
        snapshot: JobSnapshot,
        state: PollState,
        policy: PollPolicy,
        auth_token: Optional[str],
        progress: Optional[IProgressSink]
    ) -> Tuple[PollState, Optional[Result]]:
        """Apply one snapshot; the result is set once the job completed."""
        status = snapshot.status
        cluster_status = snapshot.cluster_status

        if status is not JobStatus.NOT_FOUND:
            state = replace(state, consecutive_not_found=0)

        if status is JobStatus.COMPLETED:
            if progress is not None and cluster_status:
                progress.finish(cluster_status)
            self._logger.info(f"Job {job_id} completed successfully.")
            return state, self._structured(snapshot.result)

        if status is JobStatus.FAILED:
            if (progress is not None and cluster_status
                    and cluster_status != state.last_cluster_status):
                progress.finish(cluster_status)
            raise JobFailedError(snapshot.message or "Unknown server error")

        if status in (JobStatus.PROCESSING, JobStatus.PENDING):
            self._logger.debug(
                f"Job {job_id} status: {status.value}. Waiting {policy.poll_interval}s..."
            )
        elif status is JobStatus.NOT_FOUND:
            self._metrics.increment_counter('not_found')
            state, warn = track_not_found(
                state, auth_token is not None, policy.not_found_warning_threshold
            )
            if warn:
                self._logger.warning("Getting consecutive 404 responses with auth token. This might indicate authentication issues.")
                self._logger.warning("Please verify your auth_token is valid and has proper permissions")
                self._logger.warning("If you're using a shared server, contact your administrator.")
            self._logger.debug(
                f"Results endpoint not ready yet for job {job_id} (404). Waiting {policy.poll_interval}s..."
            )
        else:
            # UNKNOWN and ERROR: keep polling, never crash on what the server sends
            self._metrics.increment_counter('unknown_status')
            self._logger.warning(
                f"Job {job_id} has unknown status: '{status.value}' ({snapshot.message}). Continuing..."
            )

        state = self._wait(state, policy, policy.poll_interval, cluster_status, progress)
        return replace(state, last_cluster_status=cluster_status), None

    @staticmethod
    def _structured(result: Any) -> Result:
        """A completed job must carry a JSON object or array."""
        if isinstance(result, Mapping):
            return dict(result)
        if isinstance(result, Sequence) and not isinstance(result, (str, bytes)):
            return list(result)
        raise CyteTypeAPIError(
            ErrorKind.API,
            f"Expected structured result, got {type(result).__name__}"
        )

    def _should_retry(self, job_id: str, error: CyteTypeAPIError) -> bool:
        if error.is_auth:
            self._logger.error(error.message)
            self._logger.error("Check auth_token validity and permissions")
            return False
        if error.is_retryable:
            self._logger.debug(f"Network error for {job_id}: {error.message}. Retrying...")
            return True
        return False

    def _wait(
        self,
        state: PollState,
        policy: PollPolicy,
        duration: float,
        cluster_status: ClusterStatusMap,
        progress: Optional[IProgressSink]
    ) -> PollState:
        """Sleep in ticks, animating progress between them."""
        frame = state.frame
        for piece in policy.ticks(duration):
            self._sleep(piece)
            frame += 1
            if progress is not None and cluster_status:
                progress.update(cluster_status, frame)
        return replace(state, frame=frame)
