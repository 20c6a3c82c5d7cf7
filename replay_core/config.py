"""
Race replay configuration.
"""

# Replay clock configuration
REPLAY_CONFIG = {
    "initial_speed": 1.0,         # Simulation seconds per wall-clock second
    "frame_interval_s": 1 / 30,   # Fixed-interval host frame period (30 fps)
}

# Geometry configuration
KINEMATICS_CONFIG = {
    "earth_radius_m": 6371e3,     # Spherical Earth radius (meters)
    "slerp_epsilon_rad": 1e-6,    # Below this angular separation, no interpolation
}

# Output configuration (CLI host)
OUTPUT_CONFIG = {
    "print_interval": 30,         # Log leaderboard every 30 frames
    "leaderboard_size": 10,       # Rows shown per leaderboard log
}

# Logging configuration
LOGGING_CONFIG = {
    "level": "INFO",
    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}
