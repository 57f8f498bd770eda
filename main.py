#!/usr/bin/env python3
"""
═══════════════════════════════════════════════════════════════════════════════
  PROJECTILE MOTION — Main Runner
═══════════════════════════════════════════════════════════════════════════════

  Executes the complete simulation pipeline:
    1. Atmosphere model (air density vs altitude)
    2. Single trajectory from the chosen launch settings
    3. Object comparison (same launch, every benchmark object)
    4. Model run: fire a group of projectiles at the target
    5. Validation against closed-form and reference solutions
    6. Report plots

  All outputs saved to the --out directory (default outputs/).

  Usage:
    python main.py                              # Run everything
    python main.py --quick                      # Skip the plots
    python main.py --preset stats --angle 45    # Override launch settings
═══════════════════════════════════════════════════════════════════════════════
"""

import argparse
import math
import sys
import os
import time

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from projectile_motion.atmosphere import air_temperature, air_pressure, air_density
from projectile_motion.constants import (
    ALTITUDE_RANGE, TIME_PER_DATA_POINT, check_in_range,
)
from projectile_motion.drag_model import ALL_OBJECT_TYPES
from projectile_motion.log import get_logger
from projectile_motion.model import ModelOptions, PRESETS, ProjectileMotionModel
from projectile_motion.projectile import LaunchConditions, ProjectileObjectType
from projectile_motion.stats import summarize
from projectile_motion.trajectory import simulate_flight
from projectile_motion.validation import (
    validate_against_reference, max_deviation_from_closed_form,
    REFERENCE_VACUUM, REFERENCE_DRAG,
)

logger = get_logger("projectile_motion.main")


def banner():
    print("""
╔═══════════════════════════════════════════════════════════════════════╗
║                                                                       ║
║     PROJECTILE MOTION                                                 ║
║     ─────────────────────────────────────────────────────             ║
║     Cannon launch · Gravity · Air resistance · Target · Statistics    ║
║     Fixed 12 ms steps │ Validated against closed form + DOP853        ║
║                                                                       ║
╚═══════════════════════════════════════════════════════════════════════╝
""")


def section(title):
    print(f"\n{'─'*60}")
    print(f"  {title}")
    print(f"{'─'*60}")


def positive_float(text):
    value = float(text)
    if not math.isfinite(value) or value <= 0:
        raise argparse.ArgumentTypeError(f"must be > 0, got {text}")
    return value


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Projectile motion simulation runner")
    parser.add_argument('--preset', default='lab', choices=sorted(PRESETS),
                        help="model configuration (default: lab)")
    parser.add_argument('--object', dest='object_type', default=None,
                        choices=sorted(ALL_OBJECT_TYPES),
                        help="object to fire (default: the preset's object)")
    parser.add_argument('--speed', type=float, default=None, help="launch speed (m/s)")
    parser.add_argument('--angle', type=float, default=None, help="launch angle (degrees)")
    parser.add_argument('--height', type=float, default=None, help="cannon height (m)")
    parser.add_argument('--air-resistance', action='store_true',
                        help="switch air resistance on")
    parser.add_argument('--altitude', type=float, default=0.0,
                        help="altitude for air density (m)")
    parser.add_argument('--dt', type=positive_float, default=TIME_PER_DATA_POINT / 1000,
                        help="time step for single flights (s)")
    parser.add_argument('--out', default='outputs', help="output directory")
    parser.add_argument('--quick', action='store_true', help="skip the plots")
    return parser.parse_args(argv)


def build_options(args) -> ModelOptions:
    overrides = {}
    if args.speed is not None:
        overrides['default_initial_speed'] = args.speed
    if args.angle is not None:
        overrides['default_cannon_angle'] = args.angle
    if args.height is not None:
        overrides['default_cannon_height'] = args.height
    if args.air_resistance:
        overrides['air_resistance_on'] = True
    if args.object_type is not None:
        base = PRESETS[args.preset]
        object_types = list(base.object_types)
        if args.object_type not in object_types:
            object_types.append(args.object_type)
        overrides['object_types'] = object_types
        overrides['default_object_type'] = args.object_type
    return ModelOptions.from_preset(args.preset, **overrides)


def main(argv=None):
    start_time = time.time()
    args = parse_args(argv)
    try:
        options = build_options(args)
        conditions = LaunchConditions(speed=options.default_initial_speed,
                                      angle_deg=options.default_cannon_angle,
                                      height=options.default_cannon_height)
        altitude = check_in_range('altitude', args.altitude, ALTITUDE_RANGE)
        rho = air_density(altitude, options.air_resistance_on)
    except ValueError as e:
        logger.error("Invalid settings: %s", e)
        return 2

    banner()
    logger.info("Preset %s, object %s, air resistance %s",
                args.preset, options.default_object_type,
                'on' if options.air_resistance_on else 'off')

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 1: Atmosphere
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 1: Atmosphere Model")
    print(f"  {'Alt (m)':>8} {'T (°C)':>8} {'P (kPa)':>9} {'ρ (kg/m³)':>11}")
    for h in [0, 500, 1000, 2000, 3000, 4000, 5000]:
        print(f"  {h:>8} {air_temperature(h):>8.2f} {air_pressure(h):>9.2f} "
              f"{air_density(h):>11.5f}")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 2: Single Trajectory
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 2: Single Trajectory")
    object_type = ProjectileObjectType.from_key(options.default_object_type)
    result = simulate_flight(object_type, conditions, air_density=rho, dt=args.dt)
    print(result.summary())
    if result.apex is not None:
        print(f"  Apex at t={result.apex.time:.3f} s, "
              f"x={result.apex.position[0]:.3f} m, y={result.apex.position[1]:.3f} m")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 3: Object Comparison
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 3: Object Comparison (Same Launch Conditions)")
    comparison = {}
    rho_drag = air_density(altitude)
    for key in ALL_OBJECT_TYPES:
        if key in ('custom', 'companionless'):
            continue
        r = simulate_flight(ProjectileObjectType.from_key(key), conditions,
                            air_density=rho_drag, dt=args.dt)
        comparison[key] = r
        print(f"  {r.object_type.name:<14s}  Range: {r.range_total:>7.2f} m  "
              f"Max height: {r.max_height:>6.2f} m  ToF: {r.flight_time:>5.2f} s")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 4: Model Run
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 4: Model Run")
    model = ProjectileMotionModel(options)
    model.altitude = altitude
    stars_earned = []
    model.on_scored(stars_earned.append)

    fired = model.fire_multiple() or model.fire()
    print(f"  Fired {len(fired)} projectile(s) at the target (x = {model.target.x:.1f} m)")
    frame_dt = 1 / 60
    frames = 0
    while model.number_of_moving_projectiles and frames < 60 * 120:
        model.step(frame_dt)
        frames += 1

    stats = summarize(model.trajectories)
    if stats is not None:
        print(f"  Landed:      {stats.count}")
        print(f"  Range:       {stats.mean_range:.2f} ± {stats.std_range:.2f} m")
        print(f"  Flight time: {stats.mean_flight_time:.2f} ± {stats.std_flight_time:.2f} s")
        print(f"  Max height:  {stats.mean_max_height:.2f} ± {stats.std_max_height:.2f} m")
        print(f"  Hit ratio:   {stats.hit_ratio:.0%}  Stars: {sum(stars_earned)}")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 5: Validation
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 5: Validation")
    deviation = max_deviation_from_closed_form(conditions)
    print(f"  Max deviation from closed-form parabola: {deviation:.3e} m")
    val_vacuum = validate_against_reference(REFERENCE_VACUUM)
    val_drag = validate_against_reference(REFERENCE_DRAG)

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 6: Plots
    # ══════════════════════════════════════════════════════════════════════
    if args.quick:
        section("PHASE 6: Plots SKIPPED (--quick mode)")
    else:
        section("PHASE 6: Plots")
        # matplotlib is only needed from here on
        import matplotlib.pyplot as plt
        from projectile_motion.visualization import (
            plot_trajectory, plot_model_trajectories, plot_object_comparison,
            plot_air_density, plot_validation, ensure_output_dir,
        )
        out = ensure_output_dir(args.out)
        plots = [
            ('01_air_density.png', lambda p: plot_air_density(save_path=p)),
            ('02_trajectory.png', lambda p: plot_trajectory(result, save_path=p)),
            ('03_object_comparison.png',
             lambda p: plot_object_comparison(comparison, save_path=p)),
            ('04_model_trajectories.png',
             lambda p: plot_model_trajectories(model, save_path=p)),
            ('05_validation_vacuum.png',
             lambda p: plot_validation(val_vacuum, REFERENCE_VACUUM, save_path=p)),
            ('06_validation_drag.png',
             lambda p: plot_validation(val_drag, REFERENCE_DRAG, save_path=p)),
        ]
        for filename, make in plots:
            path = os.path.join(out, filename)
            plt.close(make(path))
            print(f"  ✓ Saved: {path}")

    elapsed = time.time() - start_time
    section("COMPLETE")
    print(f"\n  Total runtime: {elapsed:.1f} seconds\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
