"""
Metrics Module: Diagnostics, counters, histograms.

Usage:
    from replay_core.metrics import get_metrics

    metrics = get_metrics()
    metrics.increment('frames_ticked')
    metrics.increment_drop('zero_distance_track')
    metrics.record_histogram('tick_delta_wall_s', 0.016)
"""

from .counters import MetricsCollector

# Global singleton for easy access
_global_metrics = None


def get_metrics() -> MetricsCollector:
    """
    Get the global metrics collector singleton.

    Returns:
        MetricsCollector instance
    """
    global _global_metrics
    if _global_metrics is None:
        _global_metrics = MetricsCollector()
    return _global_metrics


def reset_metrics():
    """Reset global metrics (for testing)."""
    global _global_metrics
    _global_metrics = MetricsCollector()


__all__ = ['MetricsCollector', 'get_metrics', 'reset_metrics']
