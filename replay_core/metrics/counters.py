"""
Replay diagnostics.

Counts what the engine does per session so a headless run can report it:
- Clock activity: frames ticked, scrubs, auto-stops at the race end
- Query load: position lookups, hint fallback scans, ranking passes
- Skipped input, keyed by reason (empty or zero-distance tracks, untimed
  GPX fixes, duplicate racers, ticks delivered while paused)
- Wall-clock delta between frames

All updates take one lock; frame callbacks and a reporting thread may
share a collector.
"""

import logging
import threading
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class MetricsSnapshot:
    """Copy of the collector state."""

    counters: Dict[str, int]
    drop_reasons: Dict[str, int]
    histogram_sizes: Dict[str, int]

    def total_dropped(self) -> int:
        """Items skipped across all reasons."""
        return sum(self.drop_reasons.values())


class MetricsCollector:
    """
    Thread-safe replay counters.

    Usage:
        metrics = MetricsCollector()
        metrics.increment('frames_ticked')
        metrics.increment_drop('stale_tick')
        metrics.record_histogram('tick_delta_wall_s', 0.033)
        metrics.log_summary()
    """

    COUNTERS = (
        'tracks_loaded',
        'frames_ticked',
        'position_queries',
        'hint_fallback_scans',
        'ranking_queries',
        'scrubs',
        'auto_stops',
    )

    DROP_REASONS = {
        'empty_track': 'Track has no points, no position available',
        'zero_distance_track': 'Track excluded from ranking (total distance 0)',
        'duplicate_racer': 'Second track for an already loaded racer id',
        'untimed_point': 'GPX point without timestamp skipped',
        'stale_tick': 'Frame callback delivered while paused',
    }

    # Oldest half is discarded when a histogram reaches this size
    HISTOGRAM_MAX_SAMPLES = 10000

    def __init__(self):
        """Initialize with every known counter and reason at zero."""
        self._lock = threading.Lock()
        self._counters: Counter = Counter()
        self._drops: Counter = Counter()
        self._histograms: Dict[str, List[float]] = {}
        self.reset()

    def increment(self, counter_name: str, value: int = 1):
        with self._lock:
            self._counters[counter_name] += value

    def increment_drop(self, reason: str, value: int = 1):
        """
        Count skipped input under a reason code.

        Unknown codes are counted too, with a warning.
        """
        if reason not in self.DROP_REASONS:
            logger.warning("Unknown drop reason '%s'", reason)

        with self._lock:
            self._drops[reason] += value
            self._counters['items_dropped'] += value

    def get_counter(self, counter_name: str) -> int:
        with self._lock:
            return self._counters[counter_name]

    def get_drop_count(self, reason: str) -> int:
        with self._lock:
            return self._drops[reason]

    def record_histogram(self, histogram_name: str, value: float):
        """Append a sample, keeping at most HISTOGRAM_MAX_SAMPLES."""
        with self._lock:
            samples = self._histograms.setdefault(histogram_name, [])
            samples.append(value)
            if len(samples) >= self.HISTOGRAM_MAX_SAMPLES:
                del samples[:self.HISTOGRAM_MAX_SAMPLES // 2]

    def histogram_summary(self, histogram_name: str) -> Optional[Dict[str, float]]:
        """
        Distribution of a histogram.

        Returns:
            Dict with count, mean, p50, p95, max; None if no samples
        """
        with self._lock:
            samples = np.array(self._histograms.get(histogram_name, ()), dtype=float)

        if samples.size == 0:
            return None

        p50, p95 = np.percentile(samples, [50, 95])
        return {
            'count': int(samples.size),
            'mean': float(samples.mean()),
            'p50': float(p50),
            'p95': float(p95),
            'max': float(samples.max()),
        }

    def snapshot(self) -> MetricsSnapshot:
        with self._lock:
            return MetricsSnapshot(
                counters=dict(self._counters),
                drop_reasons=dict(self._drops),
                histogram_sizes={k: len(v) for k, v in self._histograms.items()},
            )

    def reset(self):
        """Zero every counter and drop every histogram sample."""
        with self._lock:
            self._counters = Counter({name: 0 for name in self.COUNTERS})
            self._drops = Counter({reason: 0 for reason in self.DROP_REASONS})
            self._histograms = {}

    def log_summary(self, log: Optional[logging.Logger] = None):
        """
        Log counters, non-zero drop reasons and histogram distributions.

        Args:
            log: Logger to write to (defaults to this module's logger)
        """
        log = log or logger
        snapshot = self.snapshot()

        log.info("Replay metrics:")
        for name, value in sorted(snapshot.counters.items()):
            log.info("  %-22s %8d", name, value)

        for reason, count in sorted(snapshot.drop_reasons.items()):
            if count:
                log.info("  skipped (%s) %8d", reason, count)

        for name in sorted(snapshot.histogram_sizes):
            summary = self.histogram_summary(name)
            if summary:
                log.info("  %s: n=%d mean=%.4f p50=%.4f p95=%.4f max=%.4f",
                         name, summary['count'], summary['mean'], summary['p50'],
                         summary['p95'], summary['max'])
