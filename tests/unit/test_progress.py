"""
Unit tests for the console progress renderer.
"""

import io

from cytetype.presentation.progress import ClusterProgressRenderer, progress_bar


class TestProgressBar:
    """Test symbol line."""

    def test_sorted_symbols(self):
        """Test one symbol per cluster sorted by id."""
        bar = progress_bar({"b": "pending", "a": "completed", "c": "processing", "d": "failed"})
        assert bar == "✓○●✗"

    def test_unknown_status_symbol(self):
        """Test unrecognised statuses render as '?'."""
        assert progress_bar({"1": "weird"}) == "?"


class TestClusterProgressRenderer:
    """Test in-progress and final frames."""

    def test_update_frame(self):
        """Test spinner line is carriage-return refreshed."""
        stream = io.StringIO()
        renderer = ClusterProgressRenderer(stream)

        renderer.update({"1": "completed", "2": "processing"}, frame=0)

        assert stream.getvalue() == "\r⠋ [✓●] 1/2 completed"

    def test_spinner_wraps(self):
        """Test spinner cycles through its characters."""
        stream = io.StringIO()
        ClusterProgressRenderer(stream).update({"1": "pending"}, frame=11)

        assert stream.getvalue().startswith("\r⠙")

    def test_finish_all_completed(self):
        """Test final frame when everything completed."""
        stream = io.StringIO()
        ClusterProgressRenderer(stream).finish({"1": "completed", "2": "completed"})

        assert stream.getvalue() == "\r[DONE] [✓✓] 2/2 completed\n"

    def test_finish_with_failures(self):
        """Test failed clusters are counted and listed four per line."""
        stream = io.StringIO()
        clusters = {str(i): "failed" for i in range(1, 6)}
        clusters["0"] = "completed"

        ClusterProgressRenderer(stream).finish(clusters)

        lines = stream.getvalue().split("\n")
        assert lines[0] == "\r[DONE] [✓✗✗✗✗✗] 1/6 (5 failed)"
        assert lines[1] == "  ✗ Cluster 1 | ✗ Cluster 2 | ✗ Cluster 3 | ✗ Cluster 4"
        assert lines[2] == "  ✗ Cluster 5"

    def test_empty_map_renders_nothing(self):
        """Test empty maps are ignored."""
        stream = io.StringIO()
        renderer = ClusterProgressRenderer(stream)

        renderer.update({}, frame=1)
        renderer.finish({})

        assert stream.getvalue() == ""
