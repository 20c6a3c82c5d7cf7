"""
Unit tests for replay diagnostics.

Tests cover:
- Known counters and drop reasons start at zero
- Drop reason accounting, including unknown codes
- Histogram distribution summary and size bound
- Snapshot copies, reset, global collector
- Concurrent updates
- Logged summary
"""

import logging
import threading

import pytest

from replay_core.metrics import MetricsCollector, get_metrics, reset_metrics


@pytest.fixture
def collector():
    """Standalone collector (not the global one)."""
    return MetricsCollector()


# =============================================================================
# Test Counters and Drop Reasons
# =============================================================================


class TestCounters:
    """Tests for counters and drop reasons."""

    def test_known_names_start_at_zero(self, collector):
        """Test every listed counter and reason is reported from the start."""
        snapshot = collector.snapshot()

        assert set(MetricsCollector.COUNTERS) <= set(snapshot.counters)
        assert all(snapshot.counters[name] == 0 for name in MetricsCollector.COUNTERS)
        assert snapshot.drop_reasons == {reason: 0 for reason in MetricsCollector.DROP_REASONS}

    def test_unlisted_counter_reads_zero(self, collector):
        """Test reading a counter nobody incremented."""
        assert collector.get_counter('never_used') == 0
        assert 'never_used' not in collector.snapshot().counters

    def test_increment_by_value(self, collector):
        """Test increments accumulate."""
        collector.increment('tracks_loaded', 3)
        collector.increment('tracks_loaded')

        assert collector.get_counter('tracks_loaded') == 4

    def test_drops_feed_total(self, collector):
        """Test each reason is kept apart and also summed into items_dropped."""
        collector.increment_drop('untimed_point', 4)
        collector.increment_drop('zero_distance_track')

        assert collector.get_drop_count('untimed_point') == 4
        assert collector.get_drop_count('zero_distance_track') == 1
        assert collector.get_counter('items_dropped') == 5
        assert collector.snapshot().total_dropped() == 5

    def test_unknown_reason_warns_and_counts(self, collector, caplog):
        """Test an unlisted reason is logged and still counted."""
        with caplog.at_level(logging.WARNING, logger='replay_core.metrics.counters'):
            collector.increment_drop('bad_reason')

        assert "bad_reason" in caplog.text
        assert collector.get_drop_count('bad_reason') == 1


# =============================================================================
# Test Histograms
# =============================================================================


class TestHistograms:
    """Tests for histogram recording."""

    def test_summary(self, collector):
        """Test distribution of recorded frame deltas."""
        for delta in (0.02, 0.03, 0.04, 0.05):
            collector.record_histogram('tick_delta_wall_s', delta)

        summary = collector.histogram_summary('tick_delta_wall_s')

        assert summary['count'] == 4
        assert summary['mean'] == pytest.approx(0.035)
        assert summary['p50'] == pytest.approx(0.035)
        assert summary['max'] == pytest.approx(0.05)
        assert 0.04 < summary['p95'] <= 0.05

    def test_no_samples(self, collector):
        """Test summary of an empty histogram is None."""
        assert collector.histogram_summary('tick_delta_wall_s') is None

    def test_bounded(self, collector):
        """Test the oldest samples are discarded past the size limit."""
        limit = MetricsCollector.HISTOGRAM_MAX_SAMPLES
        for i in range(limit + 10):
            collector.record_histogram('tick_delta_wall_s', float(i))

        summary = collector.histogram_summary('tick_delta_wall_s')

        assert summary['count'] < limit
        assert summary['max'] == float(limit + 9)


# =============================================================================
# Test Snapshot and Reset
# =============================================================================


class TestSnapshotAndReset:
    """Tests for snapshot() and reset()."""

    def test_snapshot_is_a_copy(self, collector):
        """Test later updates do not change an earlier snapshot."""
        collector.increment('scrubs')
        before = collector.snapshot()
        collector.increment('scrubs')

        assert before.counters['scrubs'] == 1
        assert collector.snapshot().counters['scrubs'] == 2

    def test_reset(self, collector):
        """Test reset zeroes counters and forgets histograms."""
        collector.increment('frames_ticked', 10)
        collector.increment_drop('stale_tick')
        collector.record_histogram('tick_delta_wall_s', 0.03)

        collector.reset()

        snapshot = collector.snapshot()
        assert snapshot.counters['frames_ticked'] == 0
        assert snapshot.total_dropped() == 0
        assert snapshot.histogram_sizes == {}

    def test_global_collector(self):
        """Test get_metrics() is shared until reset_metrics()."""
        first = get_metrics()
        first.increment('ranking_queries')
        assert get_metrics() is first

        reset_metrics()

        assert get_metrics() is not first
        assert get_metrics().get_counter('ranking_queries') == 0


# =============================================================================
# Test Concurrency
# =============================================================================


class TestConcurrency:
    """Tests for updates from several threads."""

    def test_parallel_updates(self, collector):
        """Test no increment is lost across threads."""

        def worker():
            for _ in range(500):
                collector.increment('position_queries')
                collector.increment_drop('stale_tick')
                collector.record_histogram('tick_delta_wall_s', 0.01)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert collector.get_counter('position_queries') == 4000
        assert collector.get_drop_count('stale_tick') == 4000
        assert collector.histogram_summary('tick_delta_wall_s')['count'] == 4000


# =============================================================================
# Test Log Summary
# =============================================================================


class TestLogSummary:
    """Tests for log_summary()."""

    def test_lists_activity(self, collector, caplog):
        """Test counters, skipped input and frame timing are logged."""
        collector.increment('frames_ticked', 90)
        collector.increment_drop('empty_track')
        collector.record_histogram('tick_delta_wall_s', 0.033)

        with caplog.at_level(logging.INFO, logger='replay_core.metrics.counters'):
            collector.log_summary()

        assert "frames_ticked" in caplog.text
        assert "skipped (empty_track)" in caplog.text
        assert "tick_delta_wall_s" in caplog.text
        assert "skipped (stale_tick)" not in caplog.text

    def test_custom_logger(self, collector, caplog):
        """Test the summary goes to a caller-supplied logger."""
        log = logging.getLogger('replay_cli')

        with caplog.at_level(logging.INFO, logger='replay_cli'):
            collector.log_summary(log)

        assert caplog.records
        assert all(r.name == 'replay_cli' for r in caplog.records)
