"""Domain layer package."""

from .models import (
    JobIdentifier,
    ClusterStatusMap,
    JobStatus,
    ApiOutcome,
    JobSnapshot,
    AnnotationRecord,
    AnnotationTable,
)
from .exceptions import (
    ErrorKind,
    DomainException,
    ConfigurationError,
    PayloadValidationError,
    PollCancelledError,
    CyteTypeAPIError,
    JobSubmissionError,
    JobFailedError,
    PollTimeoutError,
)
from .protocols import (
    ITransport,
    IStatusResolver,
    IProgressSink,
    IMetricsCollector,
)

__all__ = [
    # Models
    "JobIdentifier",
    "ClusterStatusMap",
    "JobStatus",
    "ApiOutcome",
    "JobSnapshot",
    "AnnotationRecord",
    "AnnotationTable",
    # Exceptions
    "ErrorKind",
    "DomainException",
    "ConfigurationError",
    "PayloadValidationError",
    "PollCancelledError",
    "CyteTypeAPIError",
    "JobSubmissionError",
    "JobFailedError",
    "PollTimeoutError",
    # Protocols
    "ITransport",
    "IStatusResolver",
    "IProgressSink",
    "IMetricsCollector",
]
