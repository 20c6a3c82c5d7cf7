"""
Timeline State Schema.

Snapshot of the simulation clock for a scrub-capable timeline control.
"""

from dataclasses import dataclass


def format_duration(seconds: float) -> str:
    """
    Format a duration as HH:MM:SS (floored to whole seconds).

    Args:
        seconds: Duration in seconds (negative values are shown as 00:00:00)

    Returns:
        Zero-padded HH:MM:SS string; hours may exceed two digits
    """
    total_seconds = max(int(seconds // 1), 0)
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    secs = total_seconds % 60
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


@dataclass
class TimelineState:
    """
    Simulation clock snapshot.

    Attributes:
        simulation_time: Current simulation instant (epoch seconds)
        progress_percent: Position on the timeline (0-100)
        elapsed_s: Simulation time since start (s)
        total_s: Race duration (s)
        is_playing: True while the clock advances
        speed_multiplier: Simulation seconds per wall-clock second
    """

    simulation_time: float
    progress_percent: float
    elapsed_s: float
    total_s: float
    is_playing: bool
    speed_multiplier: float

    @property
    def elapsed_label(self) -> str:
        """Elapsed time as HH:MM:SS."""
        return format_duration(self.elapsed_s)

    @property
    def total_label(self) -> str:
        """Race duration as HH:MM:SS."""
        return format_duration(self.total_s)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'simulation_time': self.simulation_time,
            'progress_percent': self.progress_percent,
            'elapsed_s': self.elapsed_s,
            'total_s': self.total_s,
            'elapsed_label': self.elapsed_label,
            'total_label': self.total_label,
            'is_playing': self.is_playing,
            'speed_multiplier': self.speed_multiplier,
        }
