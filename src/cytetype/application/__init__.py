"""Application layer package."""

from cytetype.application.normalizer import ResultNormalizer
from cytetype.application.poller import JobPoller, PollState, track_not_found
from cytetype.application.client import AnnotationClient

__all__ = ["ResultNormalizer", "JobPoller", "PollState", "track_not_found", "AnnotationClient"]
