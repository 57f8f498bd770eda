"""
Unit Tests for Projectile Motion Physics
========================================
Tests the atmosphere, drag, integration and trajectory modules for correctness.
Run: python -m pytest tests/ -v
"""

import sys
import os
import math
import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from projectile_motion.atmosphere import (
    air_temperature, air_pressure, air_density, atmosphere_profile,
)
from projectile_motion.drag_model import (
    ALL_OBJECT_TYPES, drag_force, cross_section_area,
)
from projectile_motion.history import TrajectoryHistory
from projectile_motion.integrator import step, next_position
from projectile_motion.projectile import (
    LaunchConditions, ProjectileObjectType, ProjectileState, launch_velocity,
)
from projectile_motion.trajectory import Trajectory, simulate_flight
from projectile_motion.validation import (
    closed_form_metrics, closed_form_position, max_deviation_from_closed_form,
    validate_against_reference, REFERENCE_VACUUM, REFERENCE_DRAG,
)

G = 9.8


def launched_state(speed, angle_deg, height=0.0):
    cond = LaunchConditions(speed=speed, angle_deg=angle_deg, height=height)
    return ProjectileState.from_launch(cond)


class TestAtmosphere:
    """Verify the atmosphere model against known values."""

    def test_sea_level_temperature(self):
        assert abs(air_temperature(0) - 15.04) < 1e-9

    def test_sea_level_pressure(self):
        assert abs(air_pressure(0) - 101.4) < 0.05

    def test_sea_level_density(self):
        assert abs(air_density(0) - 1.2266) < 1e-3

    def test_density_zero_without_air_resistance(self):
        assert air_density(0, air_resistance_on=False) == 0.0
        assert air_density(3000, air_resistance_on=False) == 0.0

    def test_density_decreases_with_altitude(self):
        assert air_density(0) > air_density(2500) > air_density(5000)

    def test_stratosphere_is_isothermal(self):
        assert air_temperature(12000) == air_temperature(20000)

    def test_profile_shapes(self):
        alts = np.linspace(0, 5000, 11)
        profile = atmosphere_profile(alts)
        for key in ('temperature', 'pressure', 'density'):
            assert profile[key].shape == alts.shape


class TestDragModel:
    """Verify the quadratic drag force."""

    def test_all_object_types_build(self):
        for key in ALL_OBJECT_TYPES:
            obj = ProjectileObjectType.from_key(key)
            assert obj.mass_range.contains(obj.mass)
            assert obj.diameter_range.contains(obj.diameter)
            assert obj.drag_coefficient_range.contains(obj.drag_coefficient)

    def test_unknown_object_type_raises(self):
        with pytest.raises(ValueError):
            ProjectileObjectType.from_key('anvil')

    def test_cross_section_area(self):
        assert abs(cross_section_area(0.18) - np.pi * 0.09 ** 2) < 1e-12

    def test_drag_force_opposes_motion(self):
        v = np.array([10.0, 5.0])
        F = drag_force(v, rho=1.2, cd=0.47, area=0.025)
        assert np.dot(F, v) < 0

    def test_drag_force_magnitude(self):
        v = np.array([3.0, 4.0])
        F = drag_force(v, rho=1.0, cd=0.5, area=2.0)
        assert abs(np.linalg.norm(F) - 0.5 * 1.0 * 2.0 * 0.5 * 25.0) < 1e-12

    def test_drag_force_zero_at_rest(self):
        F = drag_force(np.array([0.0, 0.0]), rho=1.2, cd=0.47, area=0.025)
        assert np.allclose(F, 0.0)

    def test_drag_force_zero_in_vacuum(self):
        F = drag_force(np.array([10.0, -3.0]), rho=0.0, cd=0.47, area=0.025)
        assert np.allclose(F, 0.0)


class TestProjectile:
    """Verify launch conditions and object editing."""

    def test_launch_velocity_components(self):
        vx, vy = launch_velocity(20.0, 45.0)
        assert abs(vx - 20 / math.sqrt(2)) < 1e-12
        assert abs(vy - 20 / math.sqrt(2)) < 1e-12

    def test_initial_velocity_vector(self):
        cond = LaunchConditions(speed=18.0, angle_deg=80.0)
        v = cond.initial_velocity_vector()
        assert abs(np.linalg.norm(v) - 18.0) < 1e-12

    def test_launch_out_of_range_raises(self):
        with pytest.raises(ValueError):
            LaunchConditions(speed=-1.0)
        with pytest.raises(ValueError):
            LaunchConditions(angle_deg=200.0)
        with pytest.raises(ValueError):
            LaunchConditions(height=16.0)

    def test_non_finite_launch_raises(self):
        with pytest.raises(ValueError):
            LaunchConditions(speed=float('nan'))
        with pytest.raises(ValueError):
            LaunchConditions(height=float('inf'))

    def test_edit_respects_object_range(self):
        obj = ProjectileObjectType.from_key('cannonball')
        obj.edit(mass=20.0)
        assert obj.mass == 20.0
        with pytest.raises(ValueError):
            obj.edit(mass=40.0)
        obj.reset()
        assert obj.mass == 17.6


class TestIntegrator:
    """Verify a single step and repeated steps of the kinematic update."""

    def test_single_step_45_degrees(self):
        state = launched_state(20.0, 45.0)
        new = step(state, 0.1)
        v0 = 20 / math.sqrt(2)
        assert abs(new.velocity[0] - v0) < 1e-9
        assert abs(new.velocity[1] - (v0 - 0.98)) < 1e-9
        assert abs(new.x - 0.1 * v0) < 1e-9
        assert abs(new.y - (0.1 * v0 - 0.049)) < 1e-9
        assert abs(new.time - 0.1) < 1e-15

    def test_step_does_not_modify_input(self):
        state = launched_state(20.0, 45.0)
        before = state.position.copy()
        step(state, 0.1)
        assert np.array_equal(state.position, before)

    def test_matches_closed_form_without_drag(self):
        """Constant-acceleration steps land exactly on the parabola."""
        cond = LaunchConditions(speed=20.0, angle_deg=45.0)
        state = ProjectileState.from_launch(cond)
        for _ in range(50):
            state = step(state, 0.1)
            exact = closed_form_position(cond, state.time)
            assert np.max(np.abs(state.position - exact)) < 1e-9

    def test_zero_gravity_is_uniform_motion(self):
        state = ProjectileState(position=np.array([0.0, 5.0]),
                                velocity=np.array([3.0, 1.0]),
                                acceleration=np.array([0.0, 0.0]))
        for _ in range(10):
            state = step(state, 0.5)
        assert np.allclose(state.position, [15.0, 10.0])
        assert np.allclose(state.velocity, [3.0, 1.0])

    def test_horizontal_reversal_stops_at_zero(self):
        state = ProjectileState(position=np.array([0.0, 10.0]),
                                velocity=np.array([1.0, 0.0]),
                                acceleration=np.array([-100.0, -G]))
        new = step(state, 0.1)
        assert new.velocity[0] == 0.0
        assert abs(new.x - next_position(0.0, 1.0, -100.0, 0.01)) < 1e-12

    def test_vertical_launch_keeps_x(self):
        state = launched_state(10.0, 90.0)
        for _ in range(20):
            state = step(state, 0.05)
        assert abs(state.x) < 1e-9

    def test_acceleration_fn_sets_new_acceleration(self):
        state = launched_state(10.0, 30.0)
        new = step(state, 0.1, lambda v: np.array([-v[0], -G]))
        assert abs(new.acceleration[0] + new.velocity[0]) < 1e-12

    @pytest.mark.parametrize("dt", [0.0, -0.01, float('nan'), float('inf')])
    def test_invalid_dt_raises(self, dt):
        with pytest.raises(ValueError):
            step(launched_state(10.0, 30.0), dt)


class TestHistory:
    """Verify trajectory path history."""

    def test_empty_history(self):
        history = TrajectoryHistory()
        assert len(history) == 0
        assert history.points.shape == (0, 2)
        assert history.latest is None

    def test_records_in_order(self):
        history = TrajectoryHistory()
        for i in range(5):
            history.record((i, 2 * i))
        assert len(history) == 5
        assert np.array_equal(history.points[:, 0], np.arange(5))
        assert history.latest == (4.0, 8.0)

    def test_max_length_drops_oldest(self):
        history = TrajectoryHistory(max_length=3)
        for i in range(5):
            history.record((i, 0))
        assert [p[0] for p in history] == [2.0, 3.0, 4.0]

    def test_clear(self):
        history = TrajectoryHistory()
        history.record((1, 1))
        history.clear()
        assert len(history) == 0

    def test_invalid_max_length_raises(self):
        with pytest.raises(ValueError):
            TrajectoryHistory(max_length=0)


class TestTrajectory:
    """Verify launch, stepping, apex and landing of one trajectory."""

    def make(self, speed=18.0, angle=80.0, height=0.0, key='cannonball'):
        return Trajectory(ProjectileObjectType.from_key(key),
                          LaunchConditions(speed=speed, angle_deg=angle, height=height))

    def test_armed_trajectory_has_empty_history(self):
        trajectory = self.make()
        assert not trajectory.launched
        assert len(trajectory.history) == 0

    def test_history_grows_by_one_per_step(self):
        trajectory = self.make()
        trajectory.launch()
        for n in range(1, 201):
            trajectory.step(0.012)
            assert len(trajectory.history) == n + 1
        # apex crossed: one extra data point, but no extra history entry
        assert trajectory.apex_point is not None
        assert len(trajectory.data_points) == 202

    def test_apex_matches_closed_form(self):
        cond = LaunchConditions(speed=18.0, angle_deg=80.0)
        result = simulate_flight(ProjectileObjectType.from_key('cannonball'), cond)
        vy0 = 18.0 * math.sin(math.radians(80.0))
        assert result.apex is not None
        assert abs(result.apex.time - vy0 / G) < 1e-9
        assert abs(result.apex.position[1] - vy0 ** 2 / (2 * G)) < 1e-9

    def test_landing_matches_closed_form(self):
        cond = LaunchConditions(speed=20.0, angle_deg=45.0, height=5.0)
        result = simulate_flight(ProjectileObjectType.from_key('cannonball'), cond)
        ref = closed_form_metrics(cond)
        assert result.landed
        assert result.y[-1] == 0.0
        assert abs(result.range_total - ref.range) < 1e-9
        assert abs(result.flight_time - ref.flight_time) < 1e-9

    def test_zero_angle_from_height_is_monotonic(self):
        cond = LaunchConditions(speed=15.0, angle_deg=0.0, height=10.0)
        result = simulate_flight(ProjectileObjectType.from_key('pumpkin'), cond)
        assert result.apex is None
        assert np.all(np.diff(result.x) > 0)
        assert np.all(np.diff(result.y) < 0)
        assert abs(result.range_total - 15.0 * math.sqrt(2 * 10.0 / G)) < 1e-9

    def test_complementary_angles_from_ground(self):
        obj = ProjectileObjectType.from_key('cannonball')
        r30 = simulate_flight(obj, LaunchConditions(speed=20.0, angle_deg=30.0))
        r60 = simulate_flight(obj, LaunchConditions(speed=20.0, angle_deg=60.0))
        assert abs(r30.range_total - r60.range_total) < 1e-9

    def test_complementary_angles_from_height(self):
        """From above the ground the lower angle travels farther."""
        obj = ProjectileObjectType.from_key('cannonball')
        r30 = simulate_flight(obj, LaunchConditions(speed=20.0, angle_deg=30.0, height=10.0))
        r60 = simulate_flight(obj, LaunchConditions(speed=20.0, angle_deg=60.0, height=10.0))
        assert r30.range_total > r60.range_total

    def test_drag_reduces_range_and_height(self):
        obj = ProjectileObjectType.from_key('pumpkin')
        cond = LaunchConditions(speed=20.0, angle_deg=45.0)
        vacuum = simulate_flight(obj, cond)
        air = simulate_flight(obj, cond, air_density=air_density(0))
        assert air.range_total < vacuum.range_total
        assert air.max_height < vacuum.max_height

    def test_step_before_launch_raises(self):
        with pytest.raises(RuntimeError):
            self.make().step(0.012)

    def test_step_after_landing_raises(self):
        trajectory = self.make(speed=5.0, angle=45.0)
        trajectory.launch()
        while not trajectory.reached_ground:
            trajectory.step(0.012)
        with pytest.raises(RuntimeError):
            trajectory.step(0.012)

    def test_launch_twice_raises(self):
        trajectory = self.make()
        trajectory.launch()
        with pytest.raises(RuntimeError):
            trajectory.launch()

    def test_nearest_point(self):
        trajectory = self.make()
        trajectory.launch()
        for _ in range(10):
            trajectory.step(0.012)
        target = trajectory.data_points[5]
        found = trajectory.nearest_point(*target.position)
        assert found is target


class TestValidation:
    """Verify the stepped simulation against reference solutions."""

    def test_max_deviation_without_drag(self):
        cond = LaunchConditions(speed=18.0, angle_deg=80.0)
        assert max_deviation_from_closed_form(cond) < 1e-9

    def test_vacuum_reference(self):
        results = validate_against_reference(REFERENCE_VACUUM, verbose=False)
        for r in results:
            assert abs(r.range_error_pct) < 1e-6
            assert abs(r.height_error_pct) < 1e-6
            assert abs(r.time_error_pct) < 1e-6

    def test_drag_reference_within_one_percent(self):
        results = validate_against_reference(REFERENCE_DRAG, verbose=False)
        for r in results:
            assert abs(r.range_error_pct) < 1.0
            assert abs(r.height_error_pct) < 1.0
            assert abs(r.time_error_pct) < 1.0


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
