"""
Aerodynamic Drag Model
======================
Quadratic air resistance for the benchmark projectile objects.

Each object type carries a constant drag coefficient (Cd). The drag force
opposes motion relative to still air:

    F_drag = -½ ρ A Cd |v| v,    A = π d² / 4

Benchmark mass / diameter / Cd values (and the ranges a user may edit
them within) follow the ones students meet in the classroom: a cannonball,
a pumpkin, a baseball, a car, and so on.
"""

import numpy as np

from .constants import (
    CANNONBALL_MASS, CANNONBALL_DIAMETER, CANNONBALL_DRAG_COEFFICIENT,
    PROJECTILE_DRAG_COEFFICIENT_RANGE,
)


# ══════════════════════════════════════════════════════════════════════════
#  Benchmark objects: mass (kg), diameter (m), Cd, editable ranges
# ══════════════════════════════════════════════════════════════════════════

CANNONBALL_DATA = {
    'name': 'Cannonball',
    'color': '#455a64',
    'mass': CANNONBALL_MASS,
    'diameter': CANNONBALL_DIAMETER,
    'drag_coefficient': CANNONBALL_DRAG_COEFFICIENT,
    'rotates': False,
    'mass_range': (1.0, 31.0),
    'diameter_range': (0.1, 1.0),
}

PUMPKIN_DATA = {
    'name': 'Pumpkin',
    'color': '#ff6b35',
    'mass': 5.0,
    'diameter': 0.37,
    'drag_coefficient': 0.6,
    'rotates': False,
    'mass_range': (1.0, 1000.0),
    'diameter_range': (0.1, 3.0),
}

BASEBALL_DATA = {
    'name': 'Baseball',
    'color': '#eceff1',
    'mass': 0.15,
    'diameter': 0.07,
    'drag_coefficient': 0.35,
    'rotates': False,
    'mass_range': (0.01, 5.0),
    'diameter_range': (0.01, 1.0),
}

CAR_DATA = {
    'name': 'Car',
    'color': '#ff5252',
    'mass': 2000.0,
    'diameter': 2.0,
    'drag_coefficient': 0.55,
    'rotates': True,
    'mass_range': (100.0, 5000.0),
    'diameter_range': (0.5, 3.0),
}

FOOTBALL_DATA = {
    'name': 'Football',
    'color': '#8d6e63',
    'mass': 0.41,
    'diameter': 0.17,
    'drag_coefficient': 0.05,
    'rotates': True,
    'mass_range': (0.01, 5.0),
    'diameter_range': (0.01, 1.0),
}

HUMAN_DATA = {
    'name': 'Human',
    'color': '#ffeb3b',
    'mass': 70.0,
    'diameter': 0.5,
    'drag_coefficient': 0.6,
    'rotates': True,
    'mass_range': (10.0, 200.0),
    'diameter_range': (0.1, 1.5),
}

# The piano accepts the full drag coefficient range
PIANO_DATA = {
    'name': 'Piano',
    'color': '#e040fb',
    'mass': 400.0,
    'diameter': 2.2,
    'drag_coefficient': PROJECTILE_DRAG_COEFFICIENT_RANGE.max,
    'rotates': False,
    'mass_range': (50.0, 1000.0),
    'diameter_range': (0.5, 3.0),
    'drag_coefficient_range': tuple(PROJECTILE_DRAG_COEFFICIENT_RANGE),
}

GOLF_BALL_DATA = {
    'name': 'Golf Ball',
    'color': '#00e676',
    'mass': 0.05,
    'diameter': 0.04,
    'drag_coefficient': 0.25,
    'rotates': False,
    'mass_range': (0.01, 5.0),
    'diameter_range': (0.01, 1.0),
}

TANK_SHELL_DATA = {
    'name': 'Tank Shell',
    'color': '#00d4ff',
    'mass': 42.0,
    'diameter': 0.15,
    'drag_coefficient': 0.06,
    'rotates': True,
    'mass_range': (5.0, 200.0),
    'diameter_range': (0.1, 1.0),
}

# User-editable object on the lab screen
CUSTOM_DATA = {
    'name': 'Custom',
    'color': '#26c6da',
    'mass': 100.0,
    'diameter': 1.0,
    'drag_coefficient': CANNONBALL_DRAG_COEFFICIENT,
    'rotates': True,
    'mass_range': (1.0, 5000.0),
    'diameter_range': (0.01, 3.0),
    'drag_coefficient_range': (0.04, 1.0),
}

# Single generic object for screens without an object selector
COMPANIONLESS_DATA = {
    'name': None,
    'color': '#ff6b35',
    'mass': 5.0,
    'diameter': 0.8,
    'drag_coefficient': CANNONBALL_DRAG_COEFFICIENT,
    'rotates': True,
    'mass_range': (1.0, 10.0),
    'diameter_range': (0.1, 1.0),
}

# Collect all object types, keyed by benchmark
ALL_OBJECT_TYPES = {
    'cannonball': CANNONBALL_DATA,
    'pumpkin': PUMPKIN_DATA,
    'baseball': BASEBALL_DATA,
    'car': CAR_DATA,
    'football': FOOTBALL_DATA,
    'human': HUMAN_DATA,
    'piano': PIANO_DATA,
    'golf_ball': GOLF_BALL_DATA,
    'tank_shell': TANK_SHELL_DATA,
    'custom': CUSTOM_DATA,
    'companionless': COMPANIONLESS_DATA,
}

# Default editable Cd range; most objects have a max of 1
DEFAULT_DRAG_COEFFICIENT_RANGE = (PROJECTILE_DRAG_COEFFICIENT_RANGE.min, 1.0)


# ══════════════════════════════════════════════════════════════════════════
#  Drag force
# ══════════════════════════════════════════════════════════════════════════

def cross_section_area(diameter: float) -> float:
    """Reference cross-sectional area (m²) of a projectile of given diameter."""
    return np.pi * diameter * diameter / 4.0


def drag_force(velocity: np.ndarray, rho: float, cd: float,
               area: float) -> np.ndarray:
    """
    Compute aerodynamic drag force vector (N).

    F_drag = -½ ρ |v|² Cd A v̂

    Parameters
    ----------
    velocity : np.ndarray
        Velocity relative to still air [vx, vy] (m/s)
    rho : float
        Air density (kg/m³); 0 disables drag
    cd : float
        Drag coefficient (dimensionless)
    area : float
        Reference cross-sectional area (m²)

    Returns
    -------
    np.ndarray
        Drag force vector [Fx, Fy] (N)
    """
    velocity = np.asarray(velocity, dtype=float)
    v_mag = np.linalg.norm(velocity)
    if v_mag < 1e-10 or rho == 0.0:
        return np.zeros_like(velocity)

    return -0.5 * rho * area * cd * v_mag * velocity


def drag_acceleration(velocity: np.ndarray, rho: float, cd: float,
                      area: float, mass: float, gravity: float) -> np.ndarray:
    """Total acceleration [ax, ay] from gravity plus drag (m/s²)."""
    return drag_force(velocity, rho, cd, area) / mass + np.array([0.0, -gravity])
