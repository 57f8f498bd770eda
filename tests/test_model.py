"""
Unit Tests for the Simulation Model
===================================
Firing, time stepping, reset, target scoring, data probe and statistics.
Run: python -m pytest tests/ -v
"""

import logging
import sys
import os
import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from projectile_motion.constants import LAUNCH_VELOCITY_RANGE, Range
from projectile_motion.data_probe import DataProbe, point_is_readable
from projectile_motion.log import LOG_LEVEL_ENV, get_logger
from projectile_motion.model import (
    EventTimer, ModelOptions, PRESETS, ProjectileMotionModel, TimeSpeed,
)
from projectile_motion.stats import VarianceNumber, random_from_normal, summarize
from projectile_motion.target import Target

DT = 0.012


def run_until_landed(model, max_steps=5000):
    for _ in range(max_steps):
        if not model.number_of_moving_projectiles:
            return
        model.step(DT)
    raise AssertionError("projectiles did not land")


def launched(model):
    return [t for t in model.trajectories if t.launched]


class TestReset:
    """Reset restores settings and arms one unfired trajectory."""

    def test_initial_state(self):
        model = ProjectileMotionModel()
        assert len(model.trajectories) == 1
        armed = model.trajectories[0]
        assert not armed.launched
        assert len(armed.history) == 0

    def test_reset_after_firing(self):
        model = ProjectileMotionModel()
        model.fire()
        for _ in range(20):
            model.step(DT)
        model.gravity = 5.0
        model.cannon_height = 7.0
        model.reset()
        assert len(model.trajectories) == 1
        assert not model.trajectories[0].launched
        assert len(model.trajectories[0].history) == 0
        assert model.gravity == 9.8
        assert model.cannon_height == 0.0

    def test_reset_is_idempotent(self):
        model = ProjectileMotionModel(ModelOptions.from_preset('intro'))
        model.fire()
        model.reset()
        first = (len(model.trajectories), model.cannon_height,
                 model.selected_object_type.name, model.air_density)
        model.reset()
        second = (len(model.trajectories), model.cannon_height,
                  model.selected_object_type.name, model.air_density)
        assert first == second

    def test_erase_trajectories(self):
        model = ProjectileMotionModel()
        model.fire()
        model.erase_trajectories()
        assert model.trajectories == []


class TestFiring:
    """Firing limits, groups and rapid fire."""

    def test_fire_replaces_armed_trajectory(self):
        model = ProjectileMotionModel()
        fired = model.fire()
        assert len(fired) == 1
        assert model.trajectories == fired
        assert len(fired[0].history) == 1

    def test_history_grows_per_fixed_step(self):
        model = ProjectileMotionModel()
        trajectory = model.fire()[0]
        for _ in range(10):
            model.step(DT)
        assert len(trajectory.history) == 11

    def test_fire_limit(self):
        model = ProjectileMotionModel()
        for _ in range(10):
            assert model.fire()
        assert not model.fire_enabled
        assert model.fire() == []
        assert model.number_of_moving_projectiles == 10

    def test_fire_multiple(self):
        model = ProjectileMotionModel()
        fired = model.fire_multiple()
        assert len(fired) == model.group_size
        assert not model.fire_multiple_enabled
        assert model.fire_multiple() == []

    def test_ranks_newest_first(self):
        model = ProjectileMotionModel()
        first = model.fire()[0]
        second = model.fire()[0]
        assert second.rank == 0
        assert first.rank == 1

    def test_limit_drops_oldest_landed(self):
        model = ProjectileMotionModel()
        oldest = model.fire()[0]
        run_until_landed(model)
        for _ in range(10):
            model.fire()
        assert len(model.trajectories) == 10
        assert oldest not in model.trajectories

    def test_rapid_fire(self):
        model = ProjectileMotionModel()
        model.rapid_fire_mode = True
        assert model.fire() == []
        for _ in range(17):
            model.step(DT)
        assert len(launched(model)) == 1
        for _ in range(17):
            model.step(DT)
        assert len(launched(model)) == 2

    def test_stats_preset_spreads_launches(self):
        model = ProjectileMotionModel(ModelOptions.from_preset('stats', seed=7))
        fired = model.fire_multiple()
        speeds = [t.conditions.speed for t in fired]
        assert len(set(speeds)) > 1
        assert all(LAUNCH_VELOCITY_RANGE.contains(s) for s in speeds)

    def test_seed_reproducible(self):
        a = ProjectileMotionModel(ModelOptions.from_preset('stats', seed=3))
        b = ProjectileMotionModel(ModelOptions.from_preset('stats', seed=3))
        speeds_a = [t.conditions.speed for t in a.fire_multiple()]
        speeds_b = [t.conditions.speed for t in b.fire_multiple()]
        assert speeds_a == speeds_b


class TestStepping:
    """Time stepping through the fixed-interval event timer."""

    def test_event_timer_counts(self):
        calls = []
        timer = EventTimer(0.25, lambda: calls.append(1))
        assert timer.step(0.625) == 2
        assert timer.step(0.125) == 1
        assert len(calls) == 3

    def test_slow_motion(self):
        model = ProjectileMotionModel()
        model.time_speed = TimeSpeed.SLOW
        trajectory = model.fire()[0]
        for _ in range(3):
            model.step(DT)
        assert len(trajectory.history) == 1
        model.step(DT)
        assert len(trajectory.history) == 2

    def test_paused_model_does_not_step(self):
        model = ProjectileMotionModel()
        trajectory = model.fire()[0]
        model.is_playing = False
        model.step(1.0)
        assert len(trajectory.history) == 1

    def test_single_step_while_paused(self):
        model = ProjectileMotionModel()
        trajectory = model.fire()[0]
        model.is_playing = False
        updates = model.step_model_elements(DT)
        assert updates[0][0] is trajectory
        assert len(trajectory.history) == 2

    def test_zero_dt_is_noop(self):
        model = ProjectileMotionModel()
        trajectory = model.fire()[0]
        model.step(0.0)
        assert len(trajectory.history) == 1

    @pytest.mark.parametrize("dt", [-0.1, float('nan'), float('inf')])
    def test_invalid_dt_raises(self, dt):
        with pytest.raises(ValueError):
            ProjectileMotionModel().step(dt)

    def test_landed_listener(self):
        model = ProjectileMotionModel()
        landed = []
        model.on_landed(landed.append)
        trajectory = model.fire()[0]
        run_until_landed(model)
        assert landed == [trajectory]
        assert model.landed_trajectories == [trajectory]


class TestSettings:
    """Validated settings, presets and mid-air changes."""

    def test_presets(self):
        intro = ModelOptions.from_preset('intro')
        assert intro.default_object_type == 'pumpkin'
        assert intro.default_cannon_height == 10.0
        assert ModelOptions.from_preset('drag').air_resistance_on

    def test_preset_overrides(self):
        options = ModelOptions.from_preset('intro', default_initial_speed=20.0)
        assert options.default_initial_speed == 20.0
        assert options.default_object_type == 'pumpkin'

    def test_unknown_preset_raises(self):
        with pytest.raises(ValueError):
            ModelOptions.from_preset('moon')

    def test_invalid_default_object_raises(self):
        with pytest.raises(ValueError):
            ModelOptions(default_object_type='piano')

    def test_out_of_range_settings_raise(self):
        model = ProjectileMotionModel()
        with pytest.raises(ValueError):
            model.cannon_height = 20.0
        with pytest.raises(ValueError):
            model.gravity = float('nan')
        with pytest.raises(ValueError):
            model.altitude = -1.0
        with pytest.raises(ValueError):
            model.select_object_type('anvil')

    def test_air_density_derived(self):
        model = ProjectileMotionModel()
        assert model.air_density == 0.0
        model.air_resistance_on = True
        assert abs(model.air_density - 1.2266) < 1e-3
        model.altitude = 5000.0
        assert model.air_density < 1.0

    def test_environment_change_marks_moving(self):
        model = ProjectileMotionModel()
        landed = model.fire()[0]
        run_until_landed(model)
        moving = model.fire()[0]
        model.step(DT)
        model.gravity = 5.0
        assert moving.changed_in_mid_air
        assert not landed.changed_in_mid_air

    def test_air_resistance_toggle_marks_moving(self):
        model = ProjectileMotionModel()
        moving = model.fire()[0]
        model.air_resistance_on = True
        assert moving.changed_in_mid_air

    def test_gravity_change_bends_path_in_flight(self):
        ranges = []
        for change_gravity in (False, True):
            model = ProjectileMotionModel()
            trajectory = model.fire()[0]
            for _ in range(50):
                model.step(DT)
            if change_gravity:
                model.gravity = 5.0
            run_until_landed(model)
            ranges.append(trajectory.horizontal_displacement)
        assert ranges[1] > ranges[0]

    def test_preset_lists_not_shared(self):
        options = ModelOptions.from_preset('intro')
        options.object_types.append('custom')
        assert 'custom' not in PRESETS['stats'].object_types
        assert 'custom' not in PRESETS['intro'].object_types
        assert 'custom' not in ModelOptions.from_preset('intro').object_types

    def test_lab_edits_selected_object(self):
        model = ProjectileMotionModel(ModelOptions.from_preset('lab'))
        model.mass = 20.0
        assert model.selected_object_type.mass == 20.0
        with pytest.raises(ValueError):
            model.mass = 40.0

    def test_fixed_objects_are_not_edited(self):
        model = ProjectileMotionModel()
        model.mass = 20.0
        assert model.mass == 20.0
        assert model.selected_object_type.mass == 5.0

    def test_new_mass_used_by_next_projectile(self):
        model = ProjectileMotionModel(ModelOptions.from_preset('lab'))
        first = model.fire()[0]
        model.mass = 25.0
        second = model.fire()[0]
        assert first.mass == 17.6
        assert second.mass == 25.0


class TestTarget:
    """Star scoring and hit notification."""

    def test_scoring_rings(self):
        target = Target(15.0)
        assert target.score(15.4) == 3
        assert target.score(14.1) == 2
        assert target.score(16.4) == 1
        assert target.score(16.6) == 0

    def test_hit_notifies(self):
        target = Target(15.0)
        scored = []
        target.on_scored(scored.append)
        assert target.check_if_hit_target(15.2) == (True, 3)
        assert target.check_if_hit_target(30.0) == (False, 0)
        assert scored == [3]

    def test_target_out_of_range_raises(self):
        with pytest.raises(ValueError):
            Target(150.0)

    def test_model_scores_landing(self):
        model = ProjectileMotionModel(ModelOptions.from_preset('intro'))
        model.target.x = 21.4
        scored = []
        model.on_scored(scored.append)
        trajectory = model.fire()[0]
        run_until_landed(model)
        assert trajectory.has_hit_target
        assert scored == [3]


class TestDataProbe:
    """Reading data points near the probe."""

    def test_reads_apex(self):
        model = ProjectileMotionModel()
        trajectory = model.fire()[0]
        run_until_landed(model)
        apex = trajectory.apex_point
        model.data_probe.move_to(*apex.position, trajectories=model.trajectories)
        assert model.data_probe.data_point is apex

    def test_nothing_in_range(self):
        model = ProjectileMotionModel()
        model.fire()
        run_until_landed(model)
        model.data_probe.move_to(90.0, 90.0, trajectories=model.trajectories)
        assert model.data_probe.data_point is None

    def test_zoom_shrinks_sensing_radius(self):
        probe = DataProbe(0.0, 0.0)
        assert probe.point_within_tolerance([0.15, 0.0])
        probe.zoom = 2.0
        assert not probe.point_within_tolerance([0.15, 0.0])

    def test_launch_point_is_readable(self):
        model = ProjectileMotionModel()
        trajectory = model.fire()[0]
        assert point_is_readable(trajectory.data_points[0])
        assert not point_is_readable(None)


class TestStatistics:
    """Spread in launch parameters and group summaries."""

    def test_zero_deviation_returns_value(self):
        number = VarianceNumber(15.0, Range(0, 50), 0.0, Range(0, 10))
        assert number.randomized_value(np.random.default_rng(0)) == 15.0

    def test_samples_clamped_to_range(self):
        number = VarianceNumber(1.0, Range(0, 50), 10.0, Range(0, 10))
        rng = np.random.default_rng(1)
        samples = [number.randomized_value(rng) for _ in range(200)]
        assert min(samples) >= 0.0
        assert max(samples) <= 50.0

    def test_normal_sample_mean(self):
        rng = np.random.default_rng(42)
        samples = [random_from_normal(5.0, 1.0, rng) for _ in range(10000)]
        assert abs(np.mean(samples) - 5.0) < 0.05
        assert abs(np.std(samples) - 1.0) < 0.05

    def test_invalid_deviation_raises(self):
        number = VarianceNumber(15.0, Range(0, 50), 0.0, Range(0, 10))
        with pytest.raises(ValueError):
            number.standard_deviation = 11.0

    def test_summarize_needs_landed(self):
        model = ProjectileMotionModel()
        model.fire()
        assert summarize(model.trajectories) is None

    def test_summarize_group(self):
        model = ProjectileMotionModel(ModelOptions.from_preset('stats', seed=11))
        model.fire_multiple()
        run_until_landed(model)
        stats = summarize(model.trajectories)
        assert stats.count == model.group_size
        assert stats.std_range > 0
        assert 0.0 <= stats.hit_ratio <= 1.0


class TestLogging:
    """Logger level from the environment."""

    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv(LOG_LEVEL_ENV, 'debug')
        logger = get_logger('projectile_motion.tests.debug_level')
        assert logger.level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self, monkeypatch):
        monkeypatch.setenv(LOG_LEVEL_ENV, 'verbose')
        logger = get_logger('projectile_motion.tests.unknown_level')
        assert logger.level == logging.INFO


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
