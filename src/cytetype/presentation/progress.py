"""Plain-text per-cluster progress line for the console."""

import sys
from typing import Mapping, List, TextIO, Optional

SPINNER_CHARS = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"

STATUS_SYMBOLS = {
    "completed": "✓",
    "processing": "●",
    "pending": "○",
    "failed": "✗",
}

FAILED_PER_LINE = 4


def progress_bar(cluster_status: Mapping[str, str]) -> str:
    """One symbol per cluster, ordered by cluster id."""
    return "".join(
        STATUS_SYMBOLS.get(cluster_status[cid], "?") for cid in sorted(cluster_status)
    )


class ClusterProgressRenderer:
    """
    Writes a carriage-return-refreshed progress line.
    Implements IProgressSink protocol.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream or sys.stdout

    def update(self, cluster_status: Mapping[str, str], frame: int) -> None:
        if not cluster_status:
            return
        spinner = SPINNER_CHARS[frame % len(SPINNER_CHARS)]
        done = self._count(cluster_status, "completed")
        line = f"{spinner} [{progress_bar(cluster_status)}] {done}/{len(cluster_status)} completed"
        self._stream.write(f"\r{line}")
        self._stream.flush()

    def finish(self, cluster_status: Mapping[str, str]) -> None:
        if not cluster_status:
            return
        total = len(cluster_status)
        done = self._count(cluster_status, "completed")
        failed = self._count(cluster_status, "failed")

        line = f"[DONE] [{progress_bar(cluster_status)}] {done}/{total}"
        if failed > 0 and done < total:
            line += f" ({failed} failed)"
        elif done == total:
            line += " completed"
        self._stream.write(f"\r{line}\n")

        for details in self.failed_lines(cluster_status):
            self._stream.write(f"  {details}\n")
        self._stream.flush()

    @staticmethod
    def failed_lines(cluster_status: Mapping[str, str]) -> List[str]:
        """Failed clusters, four to a line."""
        failed = [f"✗ Cluster {cid}" for cid, s in cluster_status.items() if s == "failed"]
        return [
            " | ".join(failed[i:i + FAILED_PER_LINE])
            for i in range(0, len(failed), FAILED_PER_LINE)
        ]

    @staticmethod
    def _count(cluster_status: Mapping[str, str], status: str) -> int:
        return sum(1 for s in cluster_status.values() if s == status)
