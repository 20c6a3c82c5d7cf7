"""
Race Replay Core Package.

Replays GPS-tracked racers over a shared simulation timeline: interpolated
positions, speed/heading and live placings at any instant, driven by a
variable-speed, seekable animation clock.

Package structure:
- proto: Track input schemas and replay output schemas
- geo: Great-circle kinematics and slerp track interpolation
- domain: Live placings and the replay session facade
- timing: Simulation clock and host frame callback sources
- io: GPX loading
- metrics: Diagnostics, counters, histograms
"""

__version__ = "0.1.0"
