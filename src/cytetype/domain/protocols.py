"""Protocol definitions for dependency inversion."""

from typing import Protocol, Optional, Mapping, Any

from .models import ApiOutcome, JobSnapshot


class ITransport(Protocol):
    """Interface for issuing single authenticated HTTP calls."""

    def perform_request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Optional[Mapping[str, Any]] = None,
        auth_token: Optional[str] = None,
        timeout: Optional[float] = None
    ) -> ApiOutcome:
        """Perform one request and return a typed outcome."""
        ...

    def get_status(self, job_id: str, auth_token: Optional[str] = None) -> ApiOutcome:
        """Fetch the status endpoint for a job."""
        ...

    def get_results(self, job_id: str, auth_token: Optional[str] = None) -> ApiOutcome:
        """Fetch the results endpoint for a job."""
        ...

    def submit_job(
        self,
        payload: Mapping[str, Any],
        auth_token: Optional[str] = None
    ) -> str:
        """Submit a job and return its identifier."""
        ...

    def report_url(self, job_id: str) -> str:
        """Human-facing report URL for a job."""
        ...


class IStatusResolver(Protocol):
    """Interface for turning status/results fetches into a snapshot."""

    def resolve(self, job_id: str, auth_token: Optional[str] = None) -> JobSnapshot:
        """Fetch the current state of a job."""
        ...


class IProgressSink(Protocol):
    """Interface for rendering per-cluster progress."""

    def update(self, cluster_status: Mapping[str, str], frame: int) -> None:
        """Render an in-progress frame."""
        ...

    def finish(self, cluster_status: Mapping[str, str]) -> None:
        """Render the final frame."""
        ...


class IMetricsCollector(Protocol):
    """Interface for collecting metrics."""

    def start_timer(self, name: str) -> None:
        """Start a named timer."""
        ...

    def stop_timer(self, name: str) -> float:
        """Stop a named timer and return elapsed time."""
        ...

    def record_duration(self, name: str, seconds: float) -> None:
        """Store a duration measured by the caller."""
        ...

    def increment_counter(self, name: str, amount: int = 1) -> None:
        """Increment a counter."""
        ...

    def get_summary(self) -> dict:
        """Get summary of all metrics."""
        ...
