"""Turns a raw results payload into annotation records."""

from typing import Optional, Mapping, Sequence, Any, List, Union

from cytetype.domain.exceptions import CyteTypeAPIError, ErrorKind
from cytetype.domain.models import AnnotationRecord, AnnotationTable

MARKER_SEPARATOR = "; "


def _text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, (list, tuple)):
        return MARKER_SEPARATOR.join(str(v) for v in value)
    return str(value)


class ResultNormalizer:
    """
    Maps the server's results payload to a flat, ordered table.

    The payload is only partially trusted: missing fields get defaults
    instead of failing the whole table.
    """

    def normalize(
        self,
        raw_result: Union[Mapping[str, Any], Sequence[Any]],
        cluster_label_map: Optional[Mapping[str, str]] = None
    ) -> List[AnnotationRecord]:
        """
        Build one record per entry of ``raw_result['annotations']``.

        Args:
            raw_result: Decoded body of the results endpoint
            cluster_label_map: Server cluster id -> caller's cluster label

        Returns:
            Records in the order the server listed them. A JSON array
            carries no ``annotations`` key and yields no records.
        """
        if isinstance(raw_result, Sequence) and not isinstance(raw_result, (str, bytes)):
            return []
        if not isinstance(raw_result, Mapping):
            raise CyteTypeAPIError(
                ErrorKind.API,
                f"Expected structured result, got {type(raw_result).__name__}"
            )

        labels = {str(k): str(v) for k, v in (cluster_label_map or {}).items()}
        entries = raw_result.get('annotations') or []
        if not isinstance(entries, list):
            return []

        return [self._to_record(entry, labels) for entry in entries]

    def normalize_table(
        self,
        raw_result: Mapping[str, Any],
        cluster_label_map: Optional[Mapping[str, str]] = None
    ) -> AnnotationTable:
        return AnnotationTable(self.normalize(raw_result, cluster_label_map))

    def _to_record(self, entry: Any, labels: Mapping[str, str]) -> AnnotationRecord:
        latest = entry.get('latest') if isinstance(entry, Mapping) else None
        ann = latest.get('annotation') if isinstance(latest, Mapping) else None
        if not isinstance(ann, Mapping):
            ann = {}

        server_id = _text(ann.get('clusterId'))
        return AnnotationRecord(
            cluster_id=labels.get(server_id, server_id),
            annotation=_text(ann.get('annotation'), "Unknown"),
            ontology_term=_text(ann.get('cellOntologyTerm'), "Unknown"),
            granular_annotation=_text(ann.get('granularAnnotation')),
            cell_state=_text(ann.get('cellState')),
            justification=_text(ann.get('justification')),
            supporting_markers=_text(ann.get('supportingMarkers')),
            conflicting_markers=_text(ann.get('conflictingMarkers')),
            missing_expression=_text(ann.get('missingExpression')),
            unexpected_expression=_text(ann.get('unexpectedExpression')),
        )
