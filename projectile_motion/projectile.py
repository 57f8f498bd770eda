"""
Projectile Definition & Launch State
====================================
Defines the projectile object types, the launch conditions chosen on the
cannon, and the kinematic state a trajectory advances.

Coordinate system:
  x = horizontal displacement from the cannon (m)
  y = height above the ground (vertical, up positive) (m)
"""

import math
import numpy as np
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .constants import (
    GRAVITY_ON_EARTH, Range, check_in_range,
    CANNON_HEIGHT_RANGE, CANNON_ANGLE_RANGE, LAUNCH_VELOCITY_RANGE,
    PROJECTILE_MASS_RANGE, PROJECTILE_DIAMETER_RANGE,
    PROJECTILE_DRAG_COEFFICIENT_RANGE,
)
from .drag_model import (
    ALL_OBJECT_TYPES, DEFAULT_DRAG_COEFFICIENT_RANGE, cross_section_area,
)


@dataclass
class ProjectileObjectType:
    """
    A kind of object the cannon can fire.

    Mass, diameter and drag coefficient are editable within the object's
    own ranges; the values the object was created with are remembered so
    ``reset()`` can restore them.
    """
    name: Optional[str] = "Cannonball"
    mass: float = 17.6                  # kg
    diameter: float = 0.18              # m
    drag_coefficient: float = 0.47
    benchmark: Optional[str] = 'cannonball'
    rotates: bool = False
    mass_range: Range = Range(1.0, 31.0)
    diameter_range: Range = Range(0.1, 1.0)
    drag_coefficient_range: Range = Range(*DEFAULT_DRAG_COEFFICIENT_RANGE)
    color: str = field(default='#ff6b35', repr=False)

    def __post_init__(self):
        self.mass_range = Range(*self.mass_range)
        self.diameter_range = Range(*self.diameter_range)
        self.drag_coefficient_range = Range(*self.drag_coefficient_range)
        self.mass = check_in_range('mass', self.mass, PROJECTILE_MASS_RANGE)
        self.diameter = check_in_range('diameter', self.diameter,
                                       PROJECTILE_DIAMETER_RANGE)
        self.drag_coefficient = check_in_range(
            'drag_coefficient', self.drag_coefficient,
            PROJECTILE_DRAG_COEFFICIENT_RANGE)
        self.initial_mass = self.mass
        self.initial_diameter = self.diameter
        self.initial_drag_coefficient = self.drag_coefficient

    @classmethod
    def from_key(cls, key: str) -> 'ProjectileObjectType':
        """Build a fresh (editable) object type from the benchmark catalogue."""
        if key not in ALL_OBJECT_TYPES:
            raise ValueError(
                f"Unknown object type '{key}'. "
                f"Available: {list(ALL_OBJECT_TYPES.keys())}"
            )
        data = ALL_OBJECT_TYPES[key]
        return cls(
            name=data['name'],
            mass=data['mass'],
            diameter=data['diameter'],
            drag_coefficient=data['drag_coefficient'],
            benchmark=key,
            rotates=data['rotates'],
            mass_range=data['mass_range'],
            diameter_range=data['diameter_range'],
            drag_coefficient_range=data.get('drag_coefficient_range',
                                            DEFAULT_DRAG_COEFFICIENT_RANGE),
            color=data['color'],
        )

    @property
    def area(self) -> float:
        """Cross-sectional area (m²)."""
        return cross_section_area(self.diameter)

    def edit(self, mass: Optional[float] = None,
             diameter: Optional[float] = None,
             drag_coefficient: Optional[float] = None):
        """Change editable values, each checked against this object's range."""
        if mass is not None:
            self.mass = check_in_range('mass', mass, self.mass_range)
        if diameter is not None:
            self.diameter = check_in_range('diameter', diameter,
                                           self.diameter_range)
        if drag_coefficient is not None:
            self.drag_coefficient = check_in_range(
                'drag_coefficient', drag_coefficient,
                self.drag_coefficient_range)

    def reset(self):
        self.mass = self.initial_mass
        self.diameter = self.initial_diameter
        self.drag_coefficient = self.initial_drag_coefficient


def launch_velocity(speed: float, angle_deg: float) -> Tuple[float, float]:
    """
    Decompose launch speed (m/s) and angle (degrees above horizontal)
    into (vx0, vy0).
    """
    angle = angle_deg * math.pi / 180
    return speed * math.cos(angle), speed * math.sin(angle)


@dataclass
class LaunchConditions:
    """
    Launch parameters for one shot.
    """
    speed: float = 18.0             # m/s
    angle_deg: float = 80.0         # degrees above horizontal
    height: float = 0.0             # m, cannon height above ground

    def __post_init__(self):
        self.speed = check_in_range('speed', self.speed, LAUNCH_VELOCITY_RANGE)
        self.angle_deg = check_in_range('angle_deg', self.angle_deg,
                                        CANNON_ANGLE_RANGE)
        self.height = check_in_range('height', self.height, CANNON_HEIGHT_RANGE)

    def initial_velocity_vector(self) -> np.ndarray:
        """Convert launch speed + angle to [vx, vy]."""
        return np.array(launch_velocity(self.speed, self.angle_deg))

    def initial_position(self) -> np.ndarray:
        """Starting position [x, y]."""
        return np.array([0.0, self.height])


@dataclass(frozen=True)
class ProjectileState:
    """Kinematic state of one projectile at one instant."""
    position: np.ndarray                # [x, y] m
    velocity: np.ndarray                # [vx, vy] m/s
    acceleration: np.ndarray = field(
        default_factory=lambda: np.array([0.0, -GRAVITY_ON_EARTH]))  # m/s²
    time: float = 0.0                   # s since launch

    @classmethod
    def from_launch(cls, conditions: LaunchConditions,
                    acceleration: Optional[np.ndarray] = None,
                    gravity: float = GRAVITY_ON_EARTH) -> 'ProjectileState':
        if acceleration is None:
            acceleration = np.array([0.0, -gravity])
        return cls(
            position=conditions.initial_position(),
            velocity=conditions.initial_velocity_vector(),
            acceleration=np.asarray(acceleration, dtype=float),
        )

    @property
    def x(self) -> float:
        return float(self.position[0])

    @property
    def y(self) -> float:
        return float(self.position[1])

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))
