"""
Unit tests for domain models and exceptions.
"""

import pytest

from cytetype.domain.models import (
    ApiOutcome,
    JobSnapshot,
    JobStatus,
    AnnotationRecord,
    AnnotationTable,
)
from cytetype.domain.exceptions import (
    ErrorKind,
    CyteTypeAPIError,
    JobFailedError,
    JobSubmissionError,
    PollTimeoutError,
    DomainException,
)


class TestJobStatus:
    """Test JobStatus enum."""

    @pytest.mark.parametrize("value", ["pending", "processing", "completed", "failed"])
    def test_from_server_known(self, value):
        """Test the four server statuses are recognised."""
        assert JobStatus.from_server(value).value == value

    @pytest.mark.parametrize("value", ["queued", "not_found", "", None, 3])
    def test_from_server_unknown(self, value):
        """Test everything else maps to None."""
        assert JobStatus.from_server(value) is None

    def test_terminal(self):
        """Test terminal statuses."""
        assert JobStatus.COMPLETED.is_terminal
        assert JobStatus.FAILED.is_terminal
        assert not JobStatus.NOT_FOUND.is_terminal
        assert not JobStatus.PROCESSING.is_terminal


class TestApiOutcome:
    """Test ApiOutcome invariants."""

    def test_body_and_error_exclusive(self):
        """Test an outcome cannot carry both."""
        with pytest.raises(ValueError):
            ApiOutcome(500, body={"a": 1}, error=CyteTypeAPIError(ErrorKind.API, "x"))

    def test_raise_for_error(self):
        """Test error is raised and success returns self."""
        error = CyteTypeAPIError(ErrorKind.NETWORK, "down")
        with pytest.raises(CyteTypeAPIError) as exc_info:
            ApiOutcome(0, error=error).raise_for_error()
        assert exc_info.value is error

        outcome = ApiOutcome(200, body={"ok": True})
        assert outcome.raise_for_error() is outcome
        assert outcome.ok

    def test_not_found(self):
        """Test 404 detection."""
        assert ApiOutcome(404, body={}).is_not_found
        assert not ApiOutcome(200, body={}).is_not_found


class TestJobSnapshot:
    """Test JobSnapshot."""

    def test_result_only_when_completed(self):
        """Test result on a non-completed snapshot is rejected."""
        with pytest.raises(ValueError):
            JobSnapshot(status=JobStatus.FAILED, result={"annotations": []})

    def test_cluster_status(self):
        """Test per-cluster map is read from the raw status."""
        snapshot = JobSnapshot(
            status=JobStatus.PROCESSING,
            raw_status={"jobStatus": "processing", "clusterStatus": {1: "completed"}}
        )
        assert snapshot.cluster_status == {"1": "completed"}

    def test_cluster_status_missing(self):
        """Test empty map when the server omits it."""
        assert JobSnapshot(status=JobStatus.PENDING).cluster_status == {}
        assert JobSnapshot(
            status=JobStatus.PENDING, raw_status={"clusterStatus": "bad"}
        ).cluster_status == {}


class TestAnnotationTable:
    """Test AnnotationTable helpers."""

    def test_lookup_and_rows(self):
        """Test lookup by cluster id and row export."""
        table = AnnotationTable([
            AnnotationRecord(cluster_id="a", annotation="T cell"),
            AnnotationRecord(cluster_id="b"),
        ])

        assert len(table) == 2
        assert table["a"].annotation == "T cell"
        assert table.to_rows()[1]["ontologyTerm"] == "Unknown"
        with pytest.raises(KeyError):
            table["missing"]


class TestExceptions:
    """Test error taxonomy."""

    def test_str_includes_kind(self):
        """Test string form."""
        error = CyteTypeAPIError(ErrorKind.NOT_FOUND, "No results")
        assert str(error) == "CyteType API Error [notFound]: No results"
        assert isinstance(error, DomainException)

    def test_subclass_kinds(self):
        """Test subclasses carry their fixed kind."""
        assert JobFailedError("boom").kind is ErrorKind.API
        assert JobFailedError("boom").message == "Server error: boom"
        assert JobSubmissionError("nope").kind is ErrorKind.API
        assert PollTimeoutError().kind is ErrorKind.TIMEOUT

    def test_helpers(self):
        """Test is_auth and is_retryable."""
        assert CyteTypeAPIError(ErrorKind.AUTH, "x").is_auth
        assert CyteTypeAPIError(ErrorKind.NETWORK, "x").is_retryable
        assert not CyteTypeAPIError(ErrorKind.API, "x").is_retryable
