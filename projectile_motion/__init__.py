"""
Projectile Motion
=================
Headless model of the classroom projectile motion simulation:
  - Cannon launch at a chosen speed, angle and height
  - Frame-stepped kinematics under gravity
  - Optional quadratic air resistance with altitude-dependent air density
  - Apex and landing detection, target scoring, data probe
  - Repeated firing with spread in speed and angle (statistics)

Trajectories are stepped with fixed 12 ms sub-steps and validated against
the closed-form parabola and a high-accuracy reference integration.
"""

from .atmosphere import air_temperature, air_pressure, air_density, atmosphere_profile
from .drag_model import ALL_OBJECT_TYPES, drag_force, cross_section_area
from .projectile import (
    ProjectileObjectType, LaunchConditions, ProjectileState, launch_velocity,
)
from .integrator import step, DataPoint
from .history import TrajectoryHistory
from .trajectory import Trajectory, TrajectoryResult, simulate_flight
from .target import Target
from .data_probe import DataProbe
from .stats import random_from_normal, VarianceNumber, summarize
from .model import ProjectileMotionModel, ModelOptions, PRESETS, TimeSpeed
from .validation import (
    validate_against_reference, run_all_validations,
    REFERENCE_VACUUM, REFERENCE_DRAG,
)

__version__ = "1.0.0"
__all__ = [
    'ProjectileObjectType', 'LaunchConditions', 'ProjectileState',
    'launch_velocity', 'step', 'DataPoint', 'TrajectoryHistory',
    'Trajectory', 'TrajectoryResult', 'simulate_flight',
    'Target', 'DataProbe',
    'ProjectileMotionModel', 'ModelOptions', 'PRESETS', 'TimeSpeed',
    'random_from_normal', 'VarianceNumber', 'summarize',
    'ALL_OBJECT_TYPES', 'drag_force', 'cross_section_area',
    'air_temperature', 'air_pressure', 'air_density', 'atmosphere_profile',
    'validate_against_reference', 'run_all_validations',
    'REFERENCE_VACUUM', 'REFERENCE_DRAG',
]
