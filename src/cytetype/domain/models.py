"""Domain models for the remote annotation job lifecycle."""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, Dict, Any, Union, List

from .exceptions import CyteTypeAPIError


JobIdentifier = str

# Cluster id -> one of pending/processing/completed/failed
ClusterStatusMap = Dict[str, str]


class JobStatus(Enum):
    """State of a job as seen by one poll."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    NOT_FOUND = "not_found"
    UNKNOWN = "unknown"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        """Check if polling should stop on this status."""
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)

    @classmethod
    def from_server(cls, value: Any) -> Optional["JobStatus"]:
        """
        Map a server-reported ``jobStatus`` string to a status.

        Only the four values the server is allowed to report are accepted;
        anything else returns None so the caller can build an ``unknown``
        snapshot.
        """
        reported = {
            "pending": cls.PENDING,
            "processing": cls.PROCESSING,
            "completed": cls.COMPLETED,
            "failed": cls.FAILED,
        }
        if isinstance(value, str):
            return reported.get(value)
        return None


@dataclass(frozen=True)
class ApiOutcome:
    """Result of one HTTP attempt."""

    status_code: int
    body: Union[Dict[str, Any], List[Any], str, None] = None
    error: Optional[CyteTypeAPIError] = None

    def __post_init__(self):
        if self.error is not None and self.body not in (None, "", {}):
            raise ValueError("ApiOutcome cannot carry both a body and an error")

    @property
    def ok(self) -> bool:
        """True when the call produced a usable response."""
        return self.error is None

    @property
    def is_not_found(self) -> bool:
        return self.error is None and self.status_code == 404

    def raise_for_error(self) -> "ApiOutcome":
        """Raise the classified error, if any; otherwise return self."""
        if self.error is not None:
            raise self.error
        return self


@dataclass(frozen=True)
class JobSnapshot:
    """Point-in-time read of a job's server-side state."""

    status: JobStatus
    message: str = ""
    result: Union[Dict[str, Any], List[Any], None] = None
    raw_status: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        if self.result is not None and self.status is not JobStatus.COMPLETED:
            raise ValueError(
                f"Snapshot result is only allowed for completed jobs, got {self.status.value}"
            )

    @property
    def cluster_status(self) -> ClusterStatusMap:
        """Per-cluster progress nested in the raw status body."""
        if not isinstance(self.raw_status, dict):
            return {}
        clusters = self.raw_status.get("clusterStatus") or {}
        if not isinstance(clusters, dict):
            return {}
        return {str(k): str(v) for k, v in clusters.items()}

    def __str__(self) -> str:
        return f"JobSnapshot({self.status.value}: {self.message})"


@dataclass(frozen=True)
class AnnotationRecord:
    """One row of the normalized annotation table."""

    cluster_id: str
    annotation: str = "Unknown"
    ontology_term: str = "Unknown"
    granular_annotation: str = ""
    cell_state: str = ""
    justification: str = ""
    supporting_markers: str = ""
    conflicting_markers: str = ""
    missing_expression: str = ""
    unexpected_expression: str = ""

    def to_dict(self) -> Dict[str, str]:
        """Convert to a row keyed by the server's camelCase column names."""
        row = asdict(self)
        return {
            "clusterId": row["cluster_id"],
            "annotation": row["annotation"],
            "ontologyTerm": row["ontology_term"],
            "granularAnnotation": row["granular_annotation"],
            "cellState": row["cell_state"],
            "justification": row["justification"],
            "supportingMarkers": row["supporting_markers"],
            "conflictingMarkers": row["conflicting_markers"],
            "missingExpression": row["missing_expression"],
            "unexpectedExpression": row["unexpected_expression"],
        }


@dataclass
class AnnotationTable:
    """
    Ordered collection of annotation records.

    Keeps the server's ordering and also allows lookup by cluster id.
    """

    records: List[AnnotationRecord] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    def __getitem__(self, cluster_id: str) -> AnnotationRecord:
        for record in self.records:
            if record.cluster_id == cluster_id:
                return record
        raise KeyError(cluster_id)

    @property
    def cluster_ids(self) -> List[str]:
        return [r.cluster_id for r in self.records]

    def column(self, name: str) -> Dict[str, str]:
        """Map cluster id -> value of one record field (e.g. 'annotation')."""
        return {r.cluster_id: getattr(r, name) for r in self.records}

    def to_rows(self) -> List[Dict[str, str]]:
        return [r.to_dict() for r in self.records]
