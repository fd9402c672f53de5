"""Test metrics collector."""

import pytest
import time

from cytetype.shared.metrics import MetricsCollector


def test_metrics_timer():
    """Test timer functionality."""
    metrics = MetricsCollector()

    metrics.start_timer('poll_job')
    time.sleep(0.01)
    elapsed = metrics.stop_timer('poll_job')

    assert elapsed > 0
    assert metrics.get_summary()['durations']['poll_job_duration'] == elapsed


def test_stop_unknown_timer():
    """Test stopping a timer that never started."""
    metrics = MetricsCollector()

    with pytest.raises(KeyError):
        metrics.stop_timer('missing')


def test_metrics_counter():
    """Test counter functionality."""
    metrics = MetricsCollector()

    metrics.increment_counter('status_polls')
    metrics.increment_counter('status_polls')
    metrics.increment_counter('status_polls', amount=3)

    assert metrics.get_counter('status_polls') == 5
    assert metrics.get_counter('network_retries') == 0


def test_metrics_reset():
    """Test reset clears counters and durations."""
    metrics = MetricsCollector()
    metrics.increment_counter('not_found')
    metrics.start_timer('poll_job')
    metrics.stop_timer('poll_job')

    metrics.reset()

    summary = metrics.get_summary()
    assert summary['counters'] == {}
    assert summary['durations'] == {}


def test_record_duration():
    """Test durations measured elsewhere are stored like timers."""
    metrics = MetricsCollector()

    metrics.record_duration('poll_job', 12.5)
    metrics.record_duration('poll_job', 3.0)

    assert metrics.get_summary()['durations'] == {'poll_job_duration': 3.0}
