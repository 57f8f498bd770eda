"""
Validation Against Reference Solutions
======================================
Checks the frame-stepped trajectories against independent solutions:

  - Without air resistance: the closed-form kinematic equations
        x(t) = v₀ cos θ · t
        y(t) = h + v₀ sin θ · t − ½ g t²
  - With air resistance: a high-accuracy adaptive integration of the same
    equations of motion (scipy ``solve_ivp``, DOP853, tight tolerances),
    stopped by a ground-crossing event.

Each reference launch is run through ``simulate_flight`` with the model's
fixed 12 ms step and compared on range, maximum height and flight time.
"""

import numpy as np
from dataclasses import dataclass
from typing import List, Optional
from scipy.integrate import solve_ivp

from .atmosphere import air_density
from .constants import GRAVITY_ON_EARTH, TIME_PER_DATA_POINT
from .drag_model import drag_acceleration
from .projectile import LaunchConditions, ProjectileObjectType, launch_velocity
from .trajectory import simulate_flight


# ══════════════════════════════════════════════════════════════════════════
#  Reference launches
# ══════════════════════════════════════════════════════════════════════════

# (object, speed m/s, angle °, height m, altitude m or None for no drag)
REFERENCE_VACUUM = {
    'name': 'No air resistance',
    'launches': [
        ('cannonball', 18.0, 80.0, 0.0, None),
        ('cannonball', 20.0, 45.0, 0.0, None),
        ('pumpkin', 15.0, 0.0, 10.0, None),
        ('golf_ball', 25.0, 30.0, 5.0, None),
        ('baseball', 30.0, 60.0, 2.0, None),
    ],
}

REFERENCE_DRAG = {
    'name': 'Air resistance (sea level and altitude)',
    'launches': [
        ('cannonball', 18.0, 80.0, 0.0, 0.0),
        ('pumpkin', 20.0, 45.0, 0.0, 0.0),
        ('baseball', 30.0, 30.0, 2.0, 0.0),
        ('golf_ball', 30.0, 45.0, 0.0, 2500.0),
        ('piano', 25.0, 45.0, 10.0, 5000.0),
    ],
}


@dataclass
class FlightMetrics:
    range: float            # m
    max_height: float       # m
    flight_time: float      # s


@dataclass
class ValidationResult:
    """Result of one validation comparison."""
    label: str
    ref_range: float
    sim_range: float
    range_error_pct: float
    ref_max_height: float
    sim_max_height: float
    height_error_pct: float
    ref_flight_time: float
    sim_flight_time: float
    time_error_pct: float


def _error_pct(sim: float, ref: float) -> float:
    if ref == 0:
        return 0.0 if sim == 0 else float('inf')
    return 100.0 * (sim - ref) / ref


# ══════════════════════════════════════════════════════════════════════════
#  Reference solutions
# ══════════════════════════════════════════════════════════════════════════

def closed_form_position(conditions: LaunchConditions, t,
                         gravity: float = GRAVITY_ON_EARTH) -> np.ndarray:
    """Drag-free position at time(s) ``t``; shape (2,) or (N, 2)."""
    vx0, vy0 = launch_velocity(conditions.speed, conditions.angle_deg)
    t = np.asarray(t, dtype=float)
    x = vx0 * t
    y = conditions.height + vy0 * t - 0.5 * gravity * t ** 2
    return np.stack([x, y], axis=-1)


def closed_form_metrics(conditions: LaunchConditions,
                        gravity: float = GRAVITY_ON_EARTH) -> FlightMetrics:
    vx0, vy0 = launch_velocity(conditions.speed, conditions.angle_deg)
    h = conditions.height
    flight_time = (vy0 + np.sqrt(vy0 ** 2 + 2 * gravity * h)) / gravity
    max_height = h + vy0 ** 2 / (2 * gravity) if vy0 > 0 else h
    return FlightMetrics(range=vx0 * flight_time, max_height=max_height,
                         flight_time=flight_time)


def drag_reference_metrics(object_type: ProjectileObjectType,
                           conditions: LaunchConditions, rho: float,
                           gravity: float = GRAVITY_ON_EARTH,
                           max_time: float = 300.0) -> FlightMetrics:
    """High-accuracy solution with quadratic drag via ``solve_ivp``."""
    mass = object_type.mass
    area = object_type.area
    cd = object_type.drag_coefficient

    def rhs(t, s):
        a = drag_acceleration(s[2:], rho, cd, area, mass, gravity)
        return [s[2], s[3], a[0], a[1]]

    def hit_ground(t, s):
        return s[1]
    hit_ground.terminal = True
    hit_ground.direction = -1

    def apex(t, s):
        return s[3]
    apex.direction = -1

    vx0, vy0 = launch_velocity(conditions.speed, conditions.angle_deg)
    sol = solve_ivp(rhs, (0.0, max_time), [0.0, conditions.height, vx0, vy0],
                    method='DOP853', events=[hit_ground, apex],
                    rtol=1e-10, atol=1e-10)

    if len(sol.t_events[0]):
        flight_time = float(sol.t_events[0][0])
        landing_x = float(sol.y_events[0][0][0])
    else:
        flight_time = float(sol.t[-1])
        landing_x = float(sol.y[0][-1])
    if len(sol.t_events[1]):
        max_height = float(sol.y_events[1][0][1])
    else:
        max_height = conditions.height

    return FlightMetrics(range=landing_x, max_height=max_height,
                         flight_time=flight_time)


# ══════════════════════════════════════════════════════════════════════════
#  Comparisons
# ══════════════════════════════════════════════════════════════════════════

def validate_against_reference(reference: dict,
                               dt: float = TIME_PER_DATA_POINT / 1000,
                               gravity: float = GRAVITY_ON_EARTH,
                               verbose: bool = True) -> List[ValidationResult]:
    """
    Run the stepped simulation for each reference launch and compare it
    against the matching reference solution.
    """
    results = []

    if verbose:
        print(f"\n{'='*86}")
        print(f"  VALIDATION: {reference['name']}   (dt = {dt*1000:.0f} ms)")
        print(f"{'='*86}")
        print(f"{'Launch':<28} {'Ref R':>8} {'Sim R':>8} {'Err %':>7} "
              f"{'Ref H':>7} {'Sim H':>7} {'Err %':>7} "
              f"{'Ref T':>6} {'Sim T':>6} {'Err %':>7}")
        print("-" * 86)

    for key, speed, angle, height, altitude in reference['launches']:
        object_type = ProjectileObjectType.from_key(key)
        cond = LaunchConditions(speed=speed, angle_deg=angle, height=height)

        if altitude is None:
            rho = 0.0
            ref = closed_form_metrics(cond, gravity)
        else:
            rho = air_density(altitude)
            ref = drag_reference_metrics(object_type, cond, rho, gravity)

        sim = simulate_flight(object_type, cond, air_density=rho,
                              gravity=gravity, dt=dt)

        label = f"{object_type.name} {speed:.0f} m/s @ {angle:.0f}°"
        vr = ValidationResult(
            label=label,
            ref_range=ref.range,
            sim_range=sim.range_total,
            range_error_pct=_error_pct(sim.range_total, ref.range),
            ref_max_height=ref.max_height,
            sim_max_height=sim.max_height,
            height_error_pct=_error_pct(sim.max_height, ref.max_height),
            ref_flight_time=ref.flight_time,
            sim_flight_time=sim.flight_time,
            time_error_pct=_error_pct(sim.flight_time, ref.flight_time),
        )
        results.append(vr)

        if verbose:
            print(f"{label:<28} {vr.ref_range:>8.2f} {vr.sim_range:>8.2f} "
                  f"{vr.range_error_pct:>+7.3f} "
                  f"{vr.ref_max_height:>7.2f} {vr.sim_max_height:>7.2f} "
                  f"{vr.height_error_pct:>+7.3f} "
                  f"{vr.ref_flight_time:>6.2f} {vr.sim_flight_time:>6.2f} "
                  f"{vr.time_error_pct:>+7.3f}")

    if verbose:
        avg_range_err = np.mean([abs(r.range_error_pct) for r in results])
        avg_height_err = np.mean([abs(r.height_error_pct) for r in results])
        avg_time_err = np.mean([abs(r.time_error_pct) for r in results])
        print("-" * 86)
        print(f"  Mean absolute errors — Range: {avg_range_err:.3f}% | "
              f"Height: {avg_height_err:.3f}% | Time: {avg_time_err:.3f}%")
        status = "✓ PASS" if avg_range_err < 1.0 else "✗ NEEDS SMALLER STEP"
        print(f"  Status: {status}")
        print(f"{'='*86}\n")

    return results


def max_deviation_from_closed_form(conditions: LaunchConditions,
                                   dt: float = TIME_PER_DATA_POINT / 1000,
                                   gravity: float = GRAVITY_ON_EARTH,
                                   object_type: Optional[ProjectileObjectType] = None
                                   ) -> float:
    """
    Largest distance (m) between any stepped in-flight point and the
    closed-form parabola at the same time, without air resistance.
    """
    object_type = object_type or ProjectileObjectType.from_key('cannonball')
    result = simulate_flight(object_type, conditions, air_density=0.0,
                             gravity=gravity, dt=dt)
    stepped = np.column_stack([result.x, result.y])
    exact = closed_form_position(conditions, result.time, gravity)
    return float(np.max(np.linalg.norm(stepped - exact, axis=1)))


def run_all_validations(verbose: bool = True):
    """Run validation against all reference launch sets."""
    all_results = {}
    for ref_data in [REFERENCE_VACUUM, REFERENCE_DRAG]:
        results = validate_against_reference(ref_data, verbose=verbose)
        all_results[ref_data['name']] = results
    return all_results


if __name__ == "__main__":
    run_all_validations(verbose=True)
