"""Client for the CyteType remote annotation API."""

__version__ = "0.1.0"

from cytetype.domain.exceptions import (
    ErrorKind,
    CyteTypeAPIError,
    JobFailedError,
    PollTimeoutError,
    PollCancelledError,
)
from cytetype.domain.models import JobStatus, JobSnapshot, AnnotationRecord, AnnotationTable
from cytetype.domain.query import build_query
from cytetype.infrastructure.config import ClientConfig, ConfigLoader
from cytetype.application import AnnotationClient, JobPoller, ResultNormalizer

__all__ = [
    "__version__",
    "ErrorKind",
    "CyteTypeAPIError",
    "JobFailedError",
    "PollTimeoutError",
    "PollCancelledError",
    "JobStatus",
    "JobSnapshot",
    "AnnotationRecord",
    "AnnotationTable",
    "build_query",
    "ClientConfig",
    "ConfigLoader",
    "AnnotationClient",
    "JobPoller",
    "ResultNormalizer",
]
