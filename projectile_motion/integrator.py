"""
Numerical Integration Engine
=============================
Advances a projectile's kinematic state by one time step.

Over a step the acceleration is held at its value from the start of the
step, so position and velocity follow the constant-acceleration kinematic
equations:

    v' = v + a·dt
    x' = x + v·dt + ½·a·dt²

Without drag the acceleration really is constant (0, -g) and the stepped
trajectory lands exactly on the closed-form parabola. With drag the new
acceleration is recomputed from the new velocity for the next step.

``step`` is a pure function: it returns a new ProjectileState and never
touches trajectory history. Recording is the caller's job.
"""

import math
import numpy as np
from dataclasses import dataclass
from typing import Callable, Optional

from .projectile import ProjectileState


AccelerationFn = Callable[[np.ndarray], np.ndarray]


def next_position(position: float, velocity: float, acceleration: float,
                  time: float) -> float:
    """1-D kinematic position after ``time`` under constant acceleration."""
    return position + velocity * time + 0.5 * acceleration * time * time


def step(state: ProjectileState, dt: float,
         acceleration_fn: Optional[AccelerationFn] = None) -> ProjectileState:
    """
    Advance ``state`` by ``dt`` seconds.

    Parameters
    ----------
    state : ProjectileState
        State at the start of the step (not modified)
    dt : float
        Time step in seconds, must be finite and > 0
    acceleration_fn : callable, optional
        Maps the new velocity [vx, vy] to the new acceleration. When None
        the acceleration is carried over unchanged.

    Returns
    -------
    ProjectileState at ``state.time + dt``
    """
    if not math.isfinite(dt) or dt <= 0:
        raise ValueError(f"dt must be a finite positive number, got {dt!r}")

    x, y = state.position
    vx, vy = state.velocity
    ax, ay = state.acceleration

    new_x = next_position(x, vx, ax, dt)
    new_y = next_position(y, vy, ay, dt)
    new_vx = vx + ax * dt
    new_vy = vy + ay * dt

    # If drag reverses vx within this step, stop horizontal motion at the
    # instant vx reaches zero instead of letting it swing back.
    if vx != 0 and ax != 0 and np.sign(new_vx) != np.sign(vx):
        new_vx = 0.0
        new_x = next_position(x, vx, ax, -vx / ax)

    new_velocity = np.array([new_vx, new_vy])
    if acceleration_fn is None:
        new_acceleration = np.array(state.acceleration, dtype=float)
    else:
        new_acceleration = np.asarray(acceleration_fn(new_velocity), dtype=float)

    return ProjectileState(
        position=np.array([new_x, new_y]),
        velocity=new_velocity,
        acceleration=new_acceleration,
        time=state.time + dt,
    )


@dataclass(frozen=True)
class DataPoint:
    """Snapshot of a projectile on its trajectory, recorded once per step."""
    time: float                 # s since fire
    position: np.ndarray        # [x, y] m
    air_density: float          # kg/m³
    velocity: np.ndarray        # [vx, vy] m/s
    acceleration: np.ndarray    # [ax, ay] m/s²
    drag_force: np.ndarray      # [Fx, Fy] N
    force_gravity: float        # N, negative (downward)
    apex: bool = False
    reached_ground: bool = False

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))

    @property
    def state(self) -> ProjectileState:
        return ProjectileState(
            position=self.position,
            velocity=self.velocity,
            acceleration=self.acceleration,
            time=self.time,
        )

    def __eq__(self, other):
        if not isinstance(other, DataPoint):
            return NotImplemented
        return (self.time == other.time
                and np.array_equal(self.position, other.position)
                and self.air_density == other.air_density
                and np.array_equal(self.velocity, other.velocity)
                and np.array_equal(self.acceleration, other.acceleration)
                and np.array_equal(self.drag_force, other.drag_force)
                and self.force_gravity == other.force_gravity)

    __hash__ = None
