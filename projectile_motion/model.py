"""
Simulation Model
================
The single controller that owns all simulation state: launch settings,
environment (gravity, altitude, air resistance), the fired trajectories,
the target and the data probe.

The host calls ``step(dt)`` once per frame with the elapsed wall time.
Elapsed time is fed into a constant-rate event timer so trajectories are
always advanced in fixed 12 ms sub-steps, whatever the frame rate.

Presets reproduce the defaults of the classroom screens:

  intro    — pumpkin from a 10 m cliff, horizontal launch, no drag
  drag     — generic object, air resistance on
  vectors  — generic object, air resistance on
  lab      — editable benchmark objects, no drag
  stats    — repeated firing with spread in speed and angle, 20 trajectories
"""

import math
import numpy as np
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from .atmosphere import air_density as compute_air_density
from .constants import (
    GRAVITY_ON_EARTH, check_in_range,
    CANNON_HEIGHT_RANGE, CANNON_ANGLE_RANGE, LAUNCH_VELOCITY_RANGE,
    SPEED_STANDARD_DEVIATION_RANGE, ANGLE_STANDARD_DEVIATION_RANGE,
    PROJECTILE_MASS_RANGE, PROJECTILE_DIAMETER_RANGE,
    PROJECTILE_DRAG_COEFFICIENT_RANGE, ALTITUDE_RANGE, GRAVITY_RANGE,
    MAX_NUMBER_OF_TRAJECTORIES, MAX_NUMBER_OF_TRAJECTORIES_STATS,
    RAPID_FIRE_DELTA_TIME, GROUP_SIZE_DEFAULT, GROUP_SIZE_RANGE,
    SLOW_MOTION_FACTOR, TIME_PER_DATA_POINT,
    TARGET_X_DEFAULT, TARGET_X_STATS, ZOOM_RANGE, DEFAULT_ZOOM,
)
from .data_probe import DataProbe
from .integrator import DataPoint
from .log import get_logger
from .projectile import LaunchConditions, ProjectileObjectType
from .stats import VarianceNumber
from .target import Target
from .trajectory import Trajectory

logger = get_logger(__name__)


BENCHMARK_OBJECTS = [
    'cannonball', 'tank_shell', 'golf_ball', 'baseball', 'football',
    'pumpkin', 'human', 'piano', 'car',
]


class TimeSpeed(Enum):
    NORMAL = 1.0
    SLOW = SLOW_MOTION_FACTOR


@dataclass
class ModelOptions:
    """
    Configuration of one simulation model.
    """
    object_types: List[str] = field(default_factory=lambda: ['companionless'])
    default_object_type: str = 'companionless'
    air_resistance_on: bool = False
    editable_object_types: bool = False
    max_projectiles: int = MAX_NUMBER_OF_TRAJECTORIES
    default_cannon_height: float = 0.0          # m
    default_cannon_angle: float = 80.0          # degrees
    default_initial_speed: float = 18.0         # m/s
    default_speed_standard_deviation: float = 0.0
    default_angle_standard_deviation: float = 0.0
    target_x: float = TARGET_X_DEFAULT          # m
    history_max_length: Optional[int] = None
    seed: Optional[int] = None

    def __post_init__(self):
        # each options object owns its list of object types
        self.object_types = list(self.object_types)
        if self.default_object_type not in self.object_types:
            raise ValueError(
                f"default_object_type '{self.default_object_type}' "
                f"is not one of {self.object_types}"
            )
        if self.max_projectiles < 1:
            raise ValueError(f"max_projectiles must be >= 1, got {self.max_projectiles}")

    @classmethod
    def from_preset(cls, name: str, **overrides) -> 'ModelOptions':
        if name not in PRESETS:
            raise ValueError(
                f"Unknown preset '{name}'. Available: {list(PRESETS.keys())}"
            )
        return replace(PRESETS[name], **overrides)


PRESETS = {
    'intro': ModelOptions(
        object_types=BENCHMARK_OBJECTS,
        default_object_type='pumpkin',
        default_cannon_height=10.0,
        default_cannon_angle=0.0,
        default_initial_speed=15.0,
    ),
    'drag': ModelOptions(air_resistance_on=True),
    'vectors': ModelOptions(air_resistance_on=True),
    'lab': ModelOptions(
        object_types=['custom'] + BENCHMARK_OBJECTS,
        default_object_type='cannonball',
        editable_object_types=True,
    ),
    'stats': ModelOptions(
        object_types=BENCHMARK_OBJECTS,
        default_object_type='cannonball',
        max_projectiles=MAX_NUMBER_OF_TRAJECTORIES_STATS,
        default_cannon_height=2.0,
        default_cannon_angle=60.0,
        default_initial_speed=15.0,
        default_speed_standard_deviation=1.0,
        default_angle_standard_deviation=2.0,
        target_x=TARGET_X_STATS,
    ),
}


class EventTimer:
    """
    Converts variable elapsed time into callbacks at a constant rate.
    """

    def __init__(self, period: float, callback: Callable[[], None]):
        self.period = period
        self.callback = callback
        self.time_before_next_event = period

    def step(self, dt: float) -> int:
        """Consume ``dt`` seconds, returning how many events fired."""
        fired = 0
        while dt >= self.time_before_next_event:
            dt -= self.time_before_next_event
            self.time_before_next_event = self.period
            self.callback()
            fired += 1
        self.time_before_next_event -= dt
        return fired

    def reset(self):
        self.time_before_next_event = self.period


StepUpdate = Tuple[Trajectory, List[DataPoint]]


class ProjectileMotionModel:
    """
    Owns and advances every trajectory of one simulation.

    Parameters
    ----------
    options : ModelOptions, optional
        Defaults and limits; see ``PRESETS`` for the screen configurations.
    """

    def __init__(self, options: Optional[ModelOptions] = None):
        self.options = options or ModelOptions()
        self.max_projectiles = self.options.max_projectiles
        self.rng = np.random.default_rng(self.options.seed)

        self.target = Target(self.options.target_x)
        self.data_probe = DataProbe(10.0, 10.0, zoom=DEFAULT_ZOOM)

        self.object_types = {
            key: ProjectileObjectType.from_key(key)
            for key in self.options.object_types
        }

        self.initial_speed = VarianceNumber(
            self.options.default_initial_speed, LAUNCH_VELOCITY_RANGE,
            self.options.default_speed_standard_deviation,
            SPEED_STANDARD_DEVIATION_RANGE, name='initial speed')
        self.cannon_angle = VarianceNumber(
            self.options.default_cannon_angle, CANNON_ANGLE_RANGE,
            self.options.default_angle_standard_deviation,
            ANGLE_STANDARD_DEVIATION_RANGE, name='cannon angle')

        self.trajectories: List[Trajectory] = []
        self._landed_listeners: List[Callable[[Trajectory], None]] = []
        self.event_timer = EventTimer(TIME_PER_DATA_POINT / 1000,
                                      self._step_fixed_interval)

        self._reset_settings()
        self._arm_default_trajectory()

    # ══════════════════════════════════════════════════════════════════════
    #  Settings
    # ══════════════════════════════════════════════════════════════════════

    def _reset_settings(self):
        self._cannon_height = self.options.default_cannon_height
        self.initial_speed.reset()
        self.cannon_angle.reset()
        for object_type in self.object_types.values():
            object_type.reset()
        self._selected_key = self.options.default_object_type
        selected = self.selected_object_type
        self._mass = selected.mass
        self._diameter = selected.diameter
        self._drag_coefficient = selected.drag_coefficient
        self._gravity = GRAVITY_ON_EARTH
        self._altitude = 0.0
        self._air_resistance_on = self.options.air_resistance_on
        self._zoom = DEFAULT_ZOOM
        self.data_probe.zoom = DEFAULT_ZOOM
        self.time_speed = TimeSpeed.NORMAL
        self.is_playing = True
        self.rapid_fire_mode = False
        self._group_size = GROUP_SIZE_DEFAULT
        self.time_since_last_projectile = 0.0

    @property
    def cannon_height(self) -> float:
        return self._cannon_height

    @cannon_height.setter
    def cannon_height(self, value: float):
        self._cannon_height = check_in_range('cannon height', value, CANNON_HEIGHT_RANGE)

    @property
    def selected_object_type(self) -> ProjectileObjectType:
        return self.object_types[self._selected_key]

    def select_object_type(self, key: str):
        """Choose the object to fire; copies its mass, diameter and Cd."""
        if key not in self.object_types:
            raise ValueError(
                f"Object type '{key}' is not available. "
                f"Available: {list(self.object_types.keys())}"
            )
        self._selected_key = key
        selected = self.selected_object_type
        self._mass = selected.mass
        self._diameter = selected.diameter
        self._drag_coefficient = selected.drag_coefficient

    @property
    def mass(self) -> float:
        return self._mass

    @mass.setter
    def mass(self, value: float):
        value = check_in_range('mass', value, PROJECTILE_MASS_RANGE)
        if self.options.editable_object_types:
            self.selected_object_type.edit(mass=value)
        self._mass = value

    @property
    def diameter(self) -> float:
        return self._diameter

    @diameter.setter
    def diameter(self, value: float):
        value = check_in_range('diameter', value, PROJECTILE_DIAMETER_RANGE)
        if self.options.editable_object_types:
            self.selected_object_type.edit(diameter=value)
        self._diameter = value

    @property
    def drag_coefficient(self) -> float:
        return self._drag_coefficient

    @drag_coefficient.setter
    def drag_coefficient(self, value: float):
        value = check_in_range('drag coefficient', value,
                               PROJECTILE_DRAG_COEFFICIENT_RANGE)
        if self.options.editable_object_types:
            self.selected_object_type.edit(drag_coefficient=value)
        self._drag_coefficient = value

    # ── Environment. Changes bend the path of projectiles already in flight.
    @property
    def gravity(self) -> float:
        return self._gravity

    @gravity.setter
    def gravity(self, value: float):
        value = check_in_range('gravity', value, GRAVITY_RANGE)
        if value != self._gravity:
            self._gravity = value
            self._mark_moving_trajectories_changed_mid_air()

    @property
    def altitude(self) -> float:
        return self._altitude

    @altitude.setter
    def altitude(self, value: float):
        value = check_in_range('altitude', value, ALTITUDE_RANGE)
        before = self.air_density
        self._altitude = value
        if self.air_density != before:
            self._mark_moving_trajectories_changed_mid_air()

    @property
    def air_resistance_on(self) -> bool:
        return self._air_resistance_on

    @air_resistance_on.setter
    def air_resistance_on(self, value: bool):
        before = self.air_density
        self._air_resistance_on = bool(value)
        if self.air_density != before:
            self._mark_moving_trajectories_changed_mid_air()

    @property
    def air_density(self) -> float:
        """kg/m³, derived from altitude; zero when air resistance is off."""
        return compute_air_density(self._altitude, self._air_resistance_on)

    @property
    def zoom(self) -> float:
        return self._zoom

    @zoom.setter
    def zoom(self, value: float):
        self._zoom = check_in_range('zoom', value, ZOOM_RANGE)
        self.data_probe.zoom = self._zoom

    @property
    def group_size(self) -> int:
        return self._group_size

    @group_size.setter
    def group_size(self, value: int):
        self._group_size = int(check_in_range('group size', value, GROUP_SIZE_RANGE))

    def _mark_moving_trajectories_changed_mid_air(self):
        for trajectory in self.trajectories:
            if trajectory.is_moving:
                trajectory.changed_in_mid_air = True

    # ══════════════════════════════════════════════════════════════════════
    #  Listeners
    # ══════════════════════════════════════════════════════════════════════

    def on_landed(self, listener: Callable[[Trajectory], None]):
        """Register ``listener(trajectory)``, called when a projectile lands."""
        self._landed_listeners.append(listener)

    def on_scored(self, listener: Callable[[int], None]):
        """Register ``listener(number_of_stars)``, called on a target hit."""
        self.target.on_scored(listener)

    # ══════════════════════════════════════════════════════════════════════
    #  Firing
    # ══════════════════════════════════════════════════════════════════════

    @property
    def number_of_moving_projectiles(self) -> int:
        return sum(1 for t in self.trajectories if t.is_moving)

    @property
    def fire_enabled(self) -> bool:
        return (not self.rapid_fire_mode
                and self.number_of_moving_projectiles < self.max_projectiles)

    @property
    def fire_multiple_enabled(self) -> bool:
        return (not self.rapid_fire_mode
                and self.number_of_moving_projectiles + self._group_size
                <= self.max_projectiles)

    def fire(self) -> List[Trajectory]:
        """Fire one projectile with the current settings, if firing is enabled."""
        if not self.fire_enabled:
            logger.debug("Fire ignored: %d projectiles moving, rapid fire=%s",
                         self.number_of_moving_projectiles, self.rapid_fire_mode)
            return []
        return self.fire_num_projectiles(1)

    def fire_multiple(self) -> List[Trajectory]:
        """Fire ``group_size`` projectiles at once, if they fit under the limit."""
        if not self.fire_multiple_enabled:
            logger.debug("Fire multiple ignored: group of %d would exceed %d",
                         self._group_size, self.max_projectiles)
            return []
        return self.fire_num_projectiles(self._group_size)

    def fire_num_projectiles(self, num_projectiles: int) -> List[Trajectory]:
        # The armed (unfired) trajectory is replaced by real shots
        self.trajectories = [t for t in self.trajectories if t.launched]

        fired = []
        for _ in range(num_projectiles):
            conditions = LaunchConditions(
                speed=self.initial_speed.randomized_value(self.rng),
                angle_deg=self.cannon_angle.randomized_value(self.rng),
                height=self._cannon_height,
            )
            for trajectory in self.trajectories:
                trajectory.rank += 1

            trajectory = self._create_trajectory(conditions)
            launch_point = trajectory.launch(self.air_density, self._gravity)
            self.trajectories.append(trajectory)
            self.data_probe.update_data_if_within_range(launch_point)
            fired.append(trajectory)
            logger.debug("Fired %s at %.2f m/s, %.1f°",
                         trajectory.object_type.name or 'projectile',
                         conditions.speed, conditions.angle_deg)

        self.limit_trajectories()
        return fired

    def _create_trajectory(self, conditions: LaunchConditions) -> Trajectory:
        return Trajectory(
            self.selected_object_type, conditions,
            mass=self._mass, diameter=self._diameter,
            drag_coefficient=self._drag_coefficient,
            history_max_length=self.options.history_max_length,
        )

    def _arm_default_trajectory(self):
        conditions = LaunchConditions(
            speed=self.options.default_initial_speed,
            angle_deg=self.options.default_cannon_angle,
            height=self.options.default_cannon_height,
        )
        self.trajectories = [self._create_trajectory(conditions)]

    def limit_trajectories(self):
        """Drop the oldest landed trajectories beyond ``max_projectiles``."""
        excess = len(self.trajectories) - self.max_projectiles
        if excess <= 0:
            return
        to_remove = []
        for trajectory in self.trajectories:
            if trajectory.reached_ground:
                to_remove.append(trajectory)
                if len(to_remove) >= excess:
                    break
        if to_remove:
            self.trajectories = [t for t in self.trajectories if t not in to_remove]
            if self.data_probe.is_active:
                self.data_probe.update_data(self.trajectories)

    def erase_trajectories(self):
        """Remove every trajectory, clearing their histories."""
        for trajectory in self.trajectories:
            trajectory.clear_history()
        self.trajectories = []
        if self.data_probe.is_active:
            self.data_probe.update_data(self.trajectories)

    # ══════════════════════════════════════════════════════════════════════
    #  Time stepping
    # ══════════════════════════════════════════════════════════════════════

    def step(self, dt: float):
        """
        Advance by ``dt`` seconds of host time (scaled in slow motion).
        """
        if not math.isfinite(dt) or dt < 0:
            raise ValueError(f"dt must be a finite non-negative number, got {dt!r}")
        if not self.is_playing:
            return

        scaled_dt = self.time_speed.value * dt
        self.event_timer.step(scaled_dt)

        if self.rapid_fire_mode:
            self.time_since_last_projectile += scaled_dt
            if self.time_since_last_projectile >= RAPID_FIRE_DELTA_TIME:
                self.fire_num_projectiles(1)
                self.time_since_last_projectile = 0.0

    def _step_fixed_interval(self):
        self.step_model_elements(TIME_PER_DATA_POINT / 1000)

    def step_model_elements(self, dt: float) -> List[StepUpdate]:
        """
        Step every projectile still in the air by exactly ``dt`` seconds.

        Also used directly for single-stepping while paused. Returns the
        data points each trajectory recorded.
        """
        updates = []
        air_density = self.air_density
        for trajectory in list(self.trajectories):
            if not trajectory.is_moving:
                continue
            points = trajectory.step(dt, air_density, self._gravity)
            for point in points:
                self.data_probe.update_data_if_within_range(point)
            if trajectory.reached_ground:
                self._handle_landing(trajectory)
            updates.append((trajectory, points))
        return updates

    def _handle_landing(self, trajectory: Trajectory):
        hit, stars = self.target.check_if_hit_target(trajectory.horizontal_displacement)
        trajectory.has_hit_target = hit
        logger.debug("Landed at x=%.3f m after %.3f s (hit=%s, stars=%d)",
                     trajectory.horizontal_displacement, trajectory.flight_time,
                     hit, stars)
        for listener in self._landed_listeners:
            listener(trajectory)

    # ══════════════════════════════════════════════════════════════════════
    #  Reset
    # ══════════════════════════════════════════════════════════════════════

    def reset(self):
        """
        Erase every trajectory, restore all settings and tools, and arm one
        default trajectory at the initial launch parameters.
        """
        self.erase_trajectories()
        self.target.reset()
        self.data_probe.reset()
        self.event_timer.reset()
        self._reset_settings()
        self._arm_default_trajectory()
        logger.info("Model reset")

    @property
    def landed_trajectories(self) -> Sequence[Trajectory]:
        return [t for t in self.trajectories if t.reached_ground]
