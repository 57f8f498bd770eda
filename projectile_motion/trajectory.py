"""
Trajectory Model
================
One fired projectile: its launch parameters, its current kinematic state,
the data points recorded along its path, and the path history used for
drawing.

Air density and gravity are read on every step, so changing them while a
projectile is in the air bends its path from that moment on. Mass,
diameter, drag coefficient, speed, angle and height only affect the next
projectile fired.

Units are meters, kilograms and seconds (mks).
"""

import numpy as np
from dataclasses import dataclass
from typing import List, Optional

from .constants import GRAVITY_ON_EARTH, TIME_PER_DATA_POINT
from .drag_model import cross_section_area, drag_force
from .history import TrajectoryHistory
from .integrator import DataPoint, next_position, step as integrate_step
from .projectile import LaunchConditions, ProjectileObjectType, ProjectileState


def _linear(a1: float, a2: float, b1: float, b2: float, a3: float) -> float:
    """Map a3 from the line through (a1, b1) and (a2, b2)."""
    return b1 + (a3 - a1) * (b2 - b1) / (a2 - a1)


class Trajectory:
    """
    Path of a single projectile from launch until it reaches the ground.

    A trajectory is created armed (not launched). ``launch()`` records the
    launch point; each ``step()`` records exactly one new position in
    ``history`` and returns the data points it added.
    """

    def __init__(self, object_type: ProjectileObjectType,
                 conditions: LaunchConditions,
                 mass: Optional[float] = None,
                 diameter: Optional[float] = None,
                 drag_coefficient: Optional[float] = None,
                 history_max_length: Optional[int] = None):
        self.object_type = object_type
        self.conditions = conditions
        self.mass = object_type.mass if mass is None else mass
        self.diameter = object_type.diameter if diameter is None else diameter
        self.drag_coefficient = (object_type.drag_coefficient
                                 if drag_coefficient is None else drag_coefficient)

        self.state = ProjectileState.from_launch(conditions)
        self.history = TrajectoryHistory(max_length=history_max_length)
        self.data_points: List[DataPoint] = []

        self.launched = False
        self.reached_ground = False
        self.apex_point: Optional[DataPoint] = None
        self.max_height = conditions.height
        self.horizontal_displacement = 0.0
        self.flight_time = 0.0
        self.has_hit_target = False
        self.changed_in_mid_air = False

        # 0 for the most recently fired trajectory, 1 for the one before...
        self.rank = 0

    # ── Physics helpers ───────────────────────────────────────────────────
    @property
    def area(self) -> float:
        return cross_section_area(self.diameter)

    def drag_force_for_velocity(self, velocity: np.ndarray,
                                air_density: float) -> np.ndarray:
        return drag_force(velocity, air_density, self.drag_coefficient, self.area)

    def _acceleration(self, drag: np.ndarray, gravity: float) -> np.ndarray:
        return np.array([drag[0] / self.mass, -gravity + drag[1] / self.mass])

    def _make_point(self, time: float, position: np.ndarray,
                    velocity: np.ndarray, air_density: float, gravity: float,
                    **flags) -> DataPoint:
        drag = self.drag_force_for_velocity(velocity, air_density)
        return DataPoint(
            time=time,
            position=np.asarray(position, dtype=float),
            air_density=air_density,
            velocity=np.asarray(velocity, dtype=float),
            acceleration=self._acceleration(drag, gravity),
            drag_force=drag,
            force_gravity=-gravity * self.mass,
            **flags,
        )

    # ── Lifecycle ─────────────────────────────────────────────────────────
    @property
    def is_moving(self) -> bool:
        return self.launched and not self.reached_ground

    def launch(self, air_density: float = 0.0,
               gravity: float = GRAVITY_ON_EARTH) -> DataPoint:
        """Record the launch point and start the flight."""
        if self.launched:
            raise RuntimeError("Trajectory has already been launched")
        point = self._make_point(
            0.0, self.conditions.initial_position(),
            self.conditions.initial_velocity_vector(), air_density, gravity)
        self.state = point.state
        self.launched = True
        self._add_data_point(point)
        self.history.record(point.position)
        return point

    def step(self, dt: float, air_density: float = 0.0,
             gravity: float = GRAVITY_ON_EARTH) -> List[DataPoint]:
        """
        Advance the projectile by ``dt`` seconds.

        Returns the data points added by this step, in time order: the
        interpolated apex (if it was crossed) followed by the new point.
        """
        if not self.launched:
            raise RuntimeError("Trajectory must be launched before stepping")
        if self.reached_ground:
            raise RuntimeError("Trajectories should not step after reaching ground")

        previous = self.data_points[-1]

        def acceleration_fn(velocity):
            return self._acceleration(
                self.drag_force_for_velocity(velocity, air_density), gravity)

        new_state = integrate_step(previous.state, dt, acceleration_fn)
        added = []

        if previous.velocity[1] > 0 and new_state.velocity[1] < 0:
            added.append(self._handle_apex(previous, new_state, dt,
                                           air_density, gravity))

        if new_state.y > 0:
            point = self._make_point(new_state.time, new_state.position,
                                     new_state.velocity, air_density, gravity)
        else:
            point = self._landing_point(previous, air_density, gravity)
            self.reached_ground = True

        self._add_data_point(point)
        self.history.record(point.position)
        self.state = point.state
        added.append(point)
        return added

    def _handle_apex(self, previous: DataPoint, new_state: ProjectileState,
                     dt: float, air_density: float, gravity: float) -> DataPoint:
        if self.apex_point is not None:
            raise RuntimeError("Trajectory already has an apex point")
        # Linear approximations when there is air resistance
        dt_to_apex = _linear(previous.velocity[1], new_state.velocity[1], 0, dt, 0)
        apex_x = _linear(0, dt, previous.position[0], new_state.x, dt_to_apex)
        apex_y = next_position(previous.position[1], previous.velocity[1],
                               previous.acceleration[1], dt_to_apex)
        apex_vx = _linear(0, dt, previous.velocity[0], new_state.velocity[0], dt_to_apex)
        apex_vy = _linear(0, dt, previous.velocity[1], new_state.velocity[1], dt_to_apex)

        new_drag = self.drag_force_for_velocity(new_state.velocity, air_density)
        apex_drag = np.array([
            _linear(0, dt, previous.drag_force[0], new_drag[0], dt_to_apex),
            _linear(0, dt, previous.drag_force[1], new_drag[1], dt_to_apex),
        ])

        apex_point = DataPoint(
            time=previous.time + dt_to_apex,
            position=np.array([apex_x, apex_y]),
            air_density=air_density,
            velocity=np.array([apex_vx, apex_vy]),
            acceleration=self._acceleration(apex_drag, gravity),
            drag_force=apex_drag,
            force_gravity=-gravity * self.mass,
            apex=True,
        )
        self.apex_point = apex_point
        self._add_data_point(apex_point)
        return apex_point

    def _landing_point(self, previous: DataPoint, air_density: float,
                       gravity: float) -> DataPoint:
        """Solve for the exact moment within the step the projectile hits y = 0."""
        x, y = previous.position
        vx, vy = previous.velocity
        ax, ay = previous.acceleration

        if ay == 0:
            if y == 0 or vy == 0:
                time_to_ground = 0.0
            else:
                time_to_ground = -y / vy
        else:
            square_root = -np.sqrt(max(vy * vy - 2 * ay * y, 0.0))
            time_to_ground = (square_root - vy) / ay

        landing_x = next_position(x, vx, ax, time_to_ground)
        impact_velocity = np.array([vx + ax * time_to_ground,
                                    vy + ay * time_to_ground])
        return self._make_point(previous.time + time_to_ground,
                                np.array([landing_x, 0.0]), impact_velocity,
                                air_density, gravity, reached_ground=True)

    def _add_data_point(self, point: DataPoint):
        self.data_points.append(point)
        self.max_height = max(point.position[1], self.max_height)
        self.horizontal_displacement = float(point.position[0])
        self.flight_time = point.time

    # ── Queries ───────────────────────────────────────────────────────────
    @property
    def current_point(self) -> Optional[DataPoint]:
        return self.data_points[-1] if self.data_points else None

    def nearest_point(self, x: float, y: float) -> Optional[DataPoint]:
        """
        Data point closest to (x, y), or None when nothing is recorded.
        Of two equally distant points the later one wins.
        """
        if not self.data_points:
            return None
        positions = np.array([p.position for p in self.data_points])
        distances = np.hypot(positions[:, 0] - x, positions[:, 1] - y)
        # last index of the minimum
        idx = len(distances) - 1 - int(np.argmin(distances[::-1]))
        return self.data_points[idx]

    def clear_history(self):
        self.history.clear()

    def __repr__(self):
        return (f"Trajectory({self.object_type.name!r}, "
                f"speed={self.conditions.speed}, angle={self.conditions.angle_deg}, "
                f"points={len(self.data_points)}, landed={self.reached_ground})")


@dataclass
class TrajectoryResult:
    """Complete flight output of one trajectory as arrays."""
    object_type: ProjectileObjectType
    conditions: LaunchConditions
    dt: float

    # Arrays, each of shape (N,)
    time: np.ndarray
    x: np.ndarray
    y: np.ndarray
    vx: np.ndarray
    vy: np.ndarray
    speed: np.ndarray
    density_history: np.ndarray
    apex: Optional[DataPoint] = None
    landed: bool = False

    @classmethod
    def from_trajectory(cls, trajectory: Trajectory, dt: float) -> 'TrajectoryResult':
        points = trajectory.data_points
        positions = np.array([p.position for p in points])
        velocities = np.array([p.velocity for p in points])
        return cls(
            object_type=trajectory.object_type,
            conditions=trajectory.conditions,
            dt=dt,
            time=np.array([p.time for p in points]),
            x=positions[:, 0],
            y=positions[:, 1],
            vx=velocities[:, 0],
            vy=velocities[:, 1],
            speed=np.linalg.norm(velocities, axis=1),
            density_history=np.array([p.air_density for p in points]),
            apex=trajectory.apex_point,
            landed=trajectory.reached_ground,
        )

    @property
    def range_total(self) -> float:
        """Horizontal displacement at landing (m)."""
        return float(self.x[-1])

    @property
    def max_height(self) -> float:
        """Maximum height reached (m)."""
        return float(np.max(self.y))

    @property
    def flight_time(self) -> float:
        """Total flight time (s)."""
        return float(self.time[-1])

    @property
    def impact_velocity(self) -> float:
        """Speed at landing (m/s)."""
        return float(self.speed[-1])

    @property
    def impact_angle_deg(self) -> float:
        """Angle of descent at landing (degrees below horizontal)."""
        return float(np.degrees(np.arctan2(-self.vy[-1], abs(self.vx[-1]))))

    def summary(self) -> str:
        """Human-readable summary string."""
        name = self.object_type.name or 'Projectile'
        lines = [
            f"╔══════════════════════════════════════════════════════╗",
            f"║  TRAJECTORY SUMMARY — {name:<30s} ║",
            f"╠══════════════════════════════════════════════════════╣",
            f"║  Mass         : {self.object_type.mass:>10.2f} kg{'':<23s} ║",
            f"║  Timestep     : {self.dt:<36.4f} ║",
            f"╠══════════════════════════════════════════════════════╣",
            f"║  Launch vel   : {self.conditions.speed:>10.1f} m/s{'':<22s} ║",
            f"║  Angle        : {self.conditions.angle_deg:>10.1f} °{'':<24s} ║",
            f"║  Height       : {self.conditions.height:>10.1f} m{'':<24s} ║",
            f"╠══════════════════════════════════════════════════════╣",
            f"║  Range        : {self.range_total:>10.2f} m{'':<24s} ║",
            f"║  Max height   : {self.max_height:>10.2f} m{'':<24s} ║",
            f"║  Flight time  : {self.flight_time:>10.2f} s{'':<24s} ║",
            f"║  Impact vel   : {self.impact_velocity:>10.2f} m/s{'':<22s} ║",
            f"║  Impact angle : {self.impact_angle_deg:>10.1f} °{'':<24s} ║",
            f"╚══════════════════════════════════════════════════════╝",
        ]
        return '\n'.join(lines)


def simulate_flight(object_type: ProjectileObjectType,
                    conditions: LaunchConditions,
                    air_density: float = 0.0,
                    gravity: float = GRAVITY_ON_EARTH,
                    dt: float = TIME_PER_DATA_POINT / 1000,
                    max_time: float = 300.0) -> TrajectoryResult:
    """
    Fire one projectile and step it until it lands (or ``max_time`` passes).
    """
    trajectory = Trajectory(object_type, conditions)
    trajectory.launch(air_density, gravity)
    while not trajectory.reached_ground and trajectory.flight_time < max_time:
        trajectory.step(dt, air_density, gravity)
    return TrajectoryResult.from_trajectory(trajectory, dt)
