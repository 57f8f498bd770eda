"""
Data probe tool: reads the time, position, velocity and acceleration of
the data point nearest to where it is placed in the play area.
"""

from typing import Optional, Sequence

import numpy as np

from .constants import SENSING_RADIUS, TIME_PER_MINOR_DOT
from .integrator import DataPoint
from .trajectory import Trajectory


def point_is_readable(point: Optional[DataPoint]) -> bool:
    """
    Only the apex, the landing point and points on the 100 ms dots can be read.
    """
    if point is None:
        return False
    return (point.apex
            or point.position[1] == 0
            or round(point.time * 1000) % TIME_PER_MINOR_DOT == 0)


class DataProbe:
    """
    Parameters
    ----------
    x, y : float
        Initial position in model coordinates (m)
    zoom : float
        Current zoom of the play area; the sensing radius shrinks as it grows
    """

    def __init__(self, x: float = 10.0, y: float = 10.0, zoom: float = 1.0):
        self.initial_position = np.array([x, y], dtype=float)
        self.position = self.initial_position.copy()
        self.zoom = zoom
        self.is_active = False
        self.data_point: Optional[DataPoint] = None

    def reset(self):
        self.position = self.initial_position.copy()
        self.data_point = None
        self.is_active = False

    def move_to(self, x: float, y: float,
                trajectories: Sequence[Trajectory] = ()):
        self.position = np.array([x, y], dtype=float)
        self.update_data(trajectories)

    def point_within_tolerance(self, position) -> bool:
        distance = np.linalg.norm(np.asarray(position) - self.position)
        return bool(distance <= SENSING_RADIUS / self.zoom)

    def update_data(self, trajectories: Sequence[Trajectory]):
        """Search the trajectories, newest first, for a point near the probe."""
        for trajectory in reversed(list(trajectories)):
            apex = trajectory.apex_point
            if apex is not None and self.point_within_tolerance(apex.position):
                self.data_point = apex
                return
            point = trajectory.nearest_point(*self.position)
            if point_is_readable(point) and self.point_within_tolerance(point.position):
                self.data_point = point
                return
        self.data_point = None

    def update_data_if_within_range(self, point: DataPoint):
        """Show a freshly recorded point if it is readable and close enough."""
        if point_is_readable(point) and self.point_within_tolerance(point.position):
            self.data_point = point
