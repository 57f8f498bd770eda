"""
Simulation Constants
====================
Physical defaults, parameter ranges and timing constants shared by the
model, the trajectories and the tools.

Units are meters, kilograms and seconds unless a name says otherwise.
"""

import math
from typing import NamedTuple


class Range(NamedTuple):
    """Closed numeric interval [min, max]."""
    min: float
    max: float

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def clamp(self, value: float) -> float:
        return min(max(value, self.min), self.max)


def check_in_range(name: str, value, valid: Range) -> float:
    """
    Validate a user-supplied parameter at the model boundary.

    Raises ValueError for NaN/Infinity or values outside ``valid``.
    """
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"{name} must be a finite number, got {value!r}")
    if not valid.contains(value):
        raise ValueError(
            f"{name}={value} is outside the allowed range "
            f"[{valid.min}, {valid.max}]"
        )
    return value


# ── Physics ────────────────────────────────────────────────────────────────
GRAVITY_ON_EARTH = 9.8              # m/s²

# ── Cannonball defaults ────────────────────────────────────────────────────
CANNONBALL_MASS = 17.6              # kg
CANNONBALL_DIAMETER = 0.18          # m
CANNONBALL_DRAG_COEFFICIENT = 0.47

# ── Launch parameter ranges ───────────────────────────────────────────────
CANNON_HEIGHT_RANGE = Range(0.0, 15.0)          # m
CANNON_ANGLE_RANGE = Range(-90.0, 180.0)        # degrees
LAUNCH_VELOCITY_RANGE = Range(0.0, 50.0)        # m/s
SPEED_STANDARD_DEVIATION_RANGE = Range(0.0, 10.0)   # m/s
ANGLE_STANDARD_DEVIATION_RANGE = Range(0.0, 30.0)   # degrees

# ── Projectile ranges ─────────────────────────────────────────────────────
PROJECTILE_MASS_RANGE = Range(0.01, 5000.0)             # kg
PROJECTILE_DIAMETER_RANGE = Range(0.01, 3.0)            # m
PROJECTILE_DRAG_COEFFICIENT_RANGE = Range(0.04, 1.2)    # teardrop to almost hemisphere

# ── Environment ranges ────────────────────────────────────────────────────
ALTITUDE_RANGE = Range(0.0, 5000.0)     # m
GRAVITY_RANGE = Range(1.0, 20.0)        # m/s²

# ── Trajectory limits ─────────────────────────────────────────────────────
MAX_NUMBER_OF_TRAJECTORIES = 10
MAX_NUMBER_OF_TRAJECTORIES_STATS = 20
RAPID_FIRE_DELTA_TIME = 0.2             # s

GROUP_SIZE_DEFAULT = 10
GROUP_SIZE_RANGE = Range(1, 20)

# ── Timing ────────────────────────────────────────────────────────────────
SLOW_MOTION_FACTOR = 0.33
TIME_PER_DATA_POINT = 12                # ms, fixed sub-step of the model clock
TIME_PER_MINOR_DOT = 100                # ms

# ── Target ────────────────────────────────────────────────────────────────
TARGET_X_DEFAULT = 15.0                 # m
TARGET_X_STATS = 20.0                   # m
TARGET_WIDTH = 3.0                      # m
TARGET_POSITION_RANGE = Range(-100.0, 100.0)

# ── Zoom / data probe ─────────────────────────────────────────────────────
ZOOM_RANGE = Range(0.25, 2.0)
DEFAULT_ZOOM = 1.0
SENSING_RADIUS = 0.2                    # m at zoom 1
