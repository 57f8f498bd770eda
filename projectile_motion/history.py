"""
Trajectory path history: the ordered positions a projectile has passed
through, kept only so the path can be drawn.
"""

from collections import deque
from typing import Iterator, Optional, Tuple

import numpy as np


class TrajectoryHistory:
    """
    Append-only sequence of (x, y) positions in chronological order.

    ``max_length`` optionally caps memory by dropping the oldest points;
    by default the history is unbounded and only ``clear()`` removes points.
    """

    def __init__(self, max_length: Optional[int] = None):
        if max_length is not None and max_length < 1:
            raise ValueError(f"max_length must be >= 1, got {max_length}")
        self.max_length = max_length
        self._points = deque(maxlen=max_length)

    def record(self, position) -> None:
        x, y = position
        self._points.append((float(x), float(y)))

    def clear(self) -> None:
        self._points.clear()

    @property
    def points(self) -> np.ndarray:
        """Positions as an (N, 2) array."""
        if not self._points:
            return np.empty((0, 2))
        return np.array(self._points)

    @property
    def latest(self) -> Optional[Tuple[float, float]]:
        return self._points[-1] if self._points else None

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[Tuple[float, float]]:
        return iter(list(self._points))

    def __repr__(self):
        return f"TrajectoryHistory(points={len(self)}, max_length={self.max_length})"
