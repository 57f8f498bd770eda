"""
Visualization Engine
====================
Report plots for trajectory analysis:
  1. Single trajectory (height vs horizontal distance)
  2. Every trajectory path recorded by a model, with the target
  3. Object-type comparison (same launch, different objects)
  4. Air density profile
  5. Validation against reference solutions
"""

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from typing import Dict, List
import os

from .atmosphere import atmosphere_profile
from .constants import ALTITUDE_RANGE
from .model import ProjectileMotionModel
from .trajectory import TrajectoryResult
from .validation import ValidationResult


# ── Style Configuration ───────────────────────────────────────────────────
STYLE = {
    'bg_color': '#0a0a0a',
    'text_color': '#e0e0e0',
    'grid_color': '#333333',
    'air_resistance_on': '#fc28fc',
    'air_resistance_off': '#2979ff',
}

LEGEND_STYLE = dict(facecolor='#1a1a1a', edgecolor='#444',
                    labelcolor=STYLE['text_color'])


def _apply_dark_style(fig, axes):
    """Apply consistent dark theme to figure and axes."""
    fig.patch.set_facecolor(STYLE['bg_color'])
    if not isinstance(axes, np.ndarray):
        axes = [axes]
    else:
        axes = axes.flatten()

    for ax in axes:
        ax.set_facecolor(STYLE['bg_color'])
        ax.tick_params(colors=STYLE['text_color'])
        ax.xaxis.label.set_color(STYLE['text_color'])
        ax.yaxis.label.set_color(STYLE['text_color'])
        ax.title.set_color(STYLE['text_color'])
        ax.grid(True, color=STYLE['grid_color'], alpha=0.4, linewidth=0.5)
        for spine in ax.spines.values():
            spine.set_color(STYLE['grid_color'])


def _save(fig, save_path):
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight',
                    facecolor=STYLE['bg_color'])


def ensure_output_dir(path: str = 'outputs'):
    os.makedirs(path, exist_ok=True)
    return path


# ══════════════════════════════════════════════════════════════════════════
#  1. Single Trajectory Plot
# ══════════════════════════════════════════════════════════════════════════

def plot_trajectory(result: TrajectoryResult, save_path: str = None,
                    show: bool = False) -> plt.Figure:
    """Height vs horizontal distance for a single trajectory."""
    fig, ax = plt.subplots(figsize=(12, 6))
    _apply_dark_style(fig, ax)

    drag_on = bool(np.any(result.density_history > 0))
    color = STYLE['air_resistance_on'] if drag_on else STYLE['air_resistance_off']
    ax.plot(result.x, result.y, color=color, linewidth=2.5,
            label=result.object_type.name or 'Projectile')

    ax.plot(result.x[0], result.y[0], 'o', color='#00e676', markersize=10,
            label='Launch', zorder=5)
    if result.landed:
        ax.plot(result.x[-1], result.y[-1], 'x', color='#ff5252',
                markersize=12, markeredgewidth=3, label='Landing', zorder=5)
    if result.apex is not None:
        ax.plot(result.apex.position[0], result.apex.position[1], '^',
                color='#ffeb3b', markersize=10, label='Apex', zorder=5)

    ax.set_xlabel('Horizontal distance (m)', fontsize=12)
    ax.set_ylabel('Height (m)', fontsize=12)
    ax.set_title(f'Projectile Trajectory — {result.object_type.name or "Projectile"} '
                 f'(v₀={result.conditions.speed:.1f} m/s, '
                 f'θ={result.conditions.angle_deg:.0f}°, '
                 f'h={result.conditions.height:.1f} m)',
                 fontsize=13, fontweight='bold')
    ax.legend(loc='upper right', fontsize=10, **LEGEND_STYLE)
    ax.set_ylim(bottom=0)

    plt.tight_layout()
    _save(fig, save_path)
    if show:
        plt.show()
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  2. Model Paths
# ══════════════════════════════════════════════════════════════════════════

def plot_model_trajectories(model: ProjectileMotionModel,
                            save_path: str = None) -> plt.Figure:
    """All recorded paths of a model; older trajectories fade out."""
    fig, ax = plt.subplots(figsize=(12, 6))
    _apply_dark_style(fig, ax)

    color = (STYLE['air_resistance_on'] if model.air_resistance_on
             else STYLE['air_resistance_off'])
    for trajectory in model.trajectories:
        points = trajectory.history.points
        if len(points) == 0:
            continue
        alpha = max(0.15, 1.0 - 0.1 * trajectory.rank)
        ax.plot(points[:, 0], points[:, 1], color=color, linewidth=2, alpha=alpha)
        if trajectory.reached_ground:
            marker_color = '#00e676' if trajectory.has_hit_target else '#ff5252'
            ax.plot(points[-1, 0], points[-1, 1], 'x', color=marker_color,
                    markersize=10, markeredgewidth=2.5, alpha=alpha)

    target = model.target
    ax.plot([target.x - target.width / 2, target.x + target.width / 2], [0, 0],
            color='#ffeb3b', linewidth=6, solid_capstyle='butt', label='Target')

    ax.set_xlabel('Horizontal distance (m)', fontsize=12)
    ax.set_ylabel('Height (m)', fontsize=12)
    ax.set_title(f'Trajectories — {len(model.trajectories)} fired',
                 fontsize=13, fontweight='bold')
    ax.legend(loc='upper right', fontsize=10, **LEGEND_STYLE)
    ax.set_ylim(bottom=0)

    plt.tight_layout()
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  3. Object Comparison
# ══════════════════════════════════════════════════════════════════════════

def plot_object_comparison(results: Dict[str, TrajectoryResult],
                           save_path: str = None) -> plt.Figure:
    """Side-by-side paths and ranges for different projectile objects."""
    fig, axes = plt.subplots(1, 2, figsize=(16, 6))
    _apply_dark_style(fig, axes)

    ax = axes[0]
    for key, res in results.items():
        ax.plot(res.x, res.y, color=res.object_type.color, linewidth=2,
                label=res.object_type.name or key)
    ax.set_xlabel('Horizontal distance (m)')
    ax.set_ylabel('Height (m)')
    ax.set_title('Trajectory Comparison', fontweight='bold')
    ax.legend(fontsize=9, **LEGEND_STYLE)
    ax.set_ylim(bottom=0)

    ax = axes[1]
    names = [res.object_type.name or key for key, res in results.items()]
    ranges = [res.range_total for res in results.values()]
    colors = [res.object_type.color for res in results.values()]
    bars = ax.barh(names, ranges, color=colors, alpha=0.85, edgecolor='#555')
    ax.set_xlabel('Range (m)')
    ax.set_title('Range Comparison', fontweight='bold')
    for bar, r in zip(bars, ranges):
        ax.text(bar.get_width() + 0.1, bar.get_y() + bar.get_height()/2,
                f'{r:.1f} m', va='center', color=STYLE['text_color'], fontsize=10)

    fig.suptitle('Object Comparison — Same Launch Conditions',
                 fontsize=15, fontweight='bold', color=STYLE['text_color'], y=1.02)
    plt.tight_layout()
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  4. Air Density Profile
# ══════════════════════════════════════════════════════════════════════════

def plot_air_density(save_path: str = None) -> plt.Figure:
    """Temperature, pressure and density over the altitude range of the model."""
    altitudes = np.linspace(ALTITUDE_RANGE.min, ALTITUDE_RANGE.max, 200)
    profile = atmosphere_profile(altitudes)

    fig, axes = plt.subplots(1, 3, figsize=(15, 6), sharey=True)
    _apply_dark_style(fig, axes)

    params = [
        ('Temperature (°C)', profile['temperature'], '#ff6b35'),
        ('Pressure (kPa)', profile['pressure'], '#00d4ff'),
        ('Density (kg/m³)', profile['density'], '#00e676'),
    ]
    for ax, (title, data, color) in zip(axes, params):
        ax.plot(data, altitudes, color=color, linewidth=2)
        ax.set_xlabel(title, fontsize=10)

    axes[0].set_ylabel('Altitude (m)', fontsize=12)
    fig.suptitle('Atmosphere Model', fontsize=14, fontweight='bold',
                 color=STYLE['text_color'])
    plt.tight_layout()
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  5. Validation Plot
# ══════════════════════════════════════════════════════════════════════════

def plot_validation(validation_results: List[ValidationResult],
                    reference_data: dict, save_path: str = None) -> plt.Figure:
    """Plot simulated vs reference range and the percentage errors."""
    fig, axes = plt.subplots(1, 2, figsize=(15, 6))
    _apply_dark_style(fig, axes)

    labels = [v.label for v in validation_results]
    idx = np.arange(len(labels))

    ax = axes[0]
    ax.bar(idx - 0.2, [v.ref_range for v in validation_results], width=0.4,
           color='#ffeb3b', label='Reference')
    ax.bar(idx + 0.2, [v.sim_range for v in validation_results], width=0.4,
           color='#00d4ff', label='Stepped simulation')
    ax.set_xticks(idx)
    ax.set_xticklabels(labels, rotation=20, ha='right', fontsize=8)
    ax.set_ylabel('Range (m)')
    ax.set_title(f'Range Validation — {reference_data["name"]}', fontweight='bold')
    ax.legend(fontsize=10, **LEGEND_STYLE)

    ax = axes[1]
    errors = [v.range_error_pct for v in validation_results]
    colors = ['#00e676' if abs(e) < 1 else '#ff5252' for e in errors]
    ax.bar(idx, errors, color=colors, alpha=0.8)
    ax.axhline(y=0, color='#888', linewidth=0.5)
    ax.set_xticks(idx)
    ax.set_xticklabels(labels, rotation=20, ha='right', fontsize=8)
    ax.set_ylabel('Range Error (%)')
    ax.set_title('Validation Error', fontweight='bold')

    plt.tight_layout()
    _save(fig, save_path)
    return fig
