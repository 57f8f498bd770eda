"""
Target scoring: landed projectiles report their x position and earn up
to three stars depending on how close to the bullseye they land.
"""

from typing import Callable, List, Tuple

from .constants import (
    TARGET_POSITION_RANGE, TARGET_WIDTH, check_in_range,
)
from .log import get_logger

logger = get_logger(__name__)


class Target:
    """
    A target lying on the ground at ``x``, ``width`` meters across.

    Scored listeners receive the number of stars of every hit.
    """

    def __init__(self, initial_x: float, width: float = TARGET_WIDTH):
        self.initial_x = check_in_range('target x', initial_x, TARGET_POSITION_RANGE)
        self.width = width
        self._x = self.initial_x
        self._scored_listeners: List[Callable[[int], None]] = []

    @property
    def x(self) -> float:
        return self._x

    @x.setter
    def x(self, value: float):
        self._x = check_in_range('target x', value, TARGET_POSITION_RANGE)

    def on_scored(self, listener: Callable[[int], None]):
        """Register ``listener(number_of_stars)``, called on every hit."""
        self._scored_listeners.append(listener)

    def reset(self):
        self._x = self.initial_x

    def score(self, projectile_x: float) -> int:
        """Stars earned by a projectile landing at ``projectile_x`` (0 to 3)."""
        distance = abs(projectile_x - self._x)
        if distance <= self.width / 6:        # center circle
            return 3
        elif distance <= self.width / 3:      # middle circle
            return 2
        elif distance <= self.width / 2:      # just on the target
            return 1
        return 0

    def check_if_hit_target(self, projectile_x: float) -> Tuple[bool, int]:
        """
        Score a landed projectile and notify listeners if it hit.

        Returns (hit, number_of_stars).
        """
        stars = self.score(projectile_x)
        if stars:
            logger.debug("Target hit at x=%.3f m: %d star(s)", projectile_x, stars)
            for listener in self._scored_listeners:
                listener(stars)
        return stars > 0, stars
