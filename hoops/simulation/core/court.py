"""Court geometry and coordinate system.

Single coordinate system used throughout the simulation: the court plane in
court units with the origin at the top-left corner, height above the floor
as a separate z value on the ball.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .vec2 import Vec2


# =============================================================================
# Court Dimensions (court units)
# =============================================================================

COURT_WIDTH = 1000.0
COURT_HEIGHT = 600.0

BOUNDARY_MARGIN = 50.0          # Players are held inside this margin
OUT_OF_BOUNDS_SLACK = 20.0      # Ball may drift this far past the margin

HOOP_OFFSET = 90.0              # Hoop distance from its baseline
HOOP_RADIUS = 15.0
SCORE_WINDOW_HEIGHT = 30.0      # Ball must be at or below this height to score

THREE_POINT_DISTANCE = 400.0    # Release distance beyond which a make is worth 3
MID_RANGE_DISTANCE = 200.0


class Side(str, Enum):
    """Team side tag."""
    HOME = "home"
    AWAY = "away"

    @property
    def opponent(self) -> Side:
        return Side.AWAY if self == Side.HOME else Side.HOME


# =============================================================================
# Court
# =============================================================================

@dataclass(frozen=True)
class Court:
    """Court rectangle plus the two hoops.

    Home attacks the right hoop, away attacks the left hoop.
    """
    width: float = COURT_WIDTH
    height: float = COURT_HEIGHT
    margin: float = BOUNDARY_MARGIN
    out_of_bounds_slack: float = OUT_OF_BOUNDS_SLACK
    hoop_offset: float = HOOP_OFFSET
    hoop_radius: float = HOOP_RADIUS

    @property
    def center(self) -> Vec2:
        return Vec2(self.width / 2, self.height / 2)

    @property
    def left_hoop(self) -> Vec2:
        return Vec2(self.hoop_offset, self.height / 2)

    @property
    def right_hoop(self) -> Vec2:
        return Vec2(self.width - self.hoop_offset, self.height / 2)

    # =========================================================================
    # Side-relative helpers
    # =========================================================================

    def attacking_hoop(self, side: Side) -> Vec2:
        """Hoop the given side shoots at."""
        return self.right_hoop if side == Side.HOME else self.left_hoop

    def defending_hoop(self, side: Side) -> Vec2:
        """Hoop the given side protects."""
        return self.attacking_hoop(side.opponent)

    def attacker_of(self, hoop: Vec2) -> Side:
        """Side credited when the ball drops through this hoop."""
        return Side.HOME if hoop == self.right_hoop else Side.AWAY

    def attack_direction(self, side: Side) -> float:
        """+1 if the side attacks toward +X, -1 otherwise."""
        return 1.0 if side == Side.HOME else -1.0

    def spot_in_front_of_hoop(self, side: Side, depth: float, lateral: float = 0.0) -> Vec2:
        """Point `depth` units in front of the attacked hoop, toward midcourt."""
        hoop = self.attacking_hoop(side)
        return Vec2(hoop.x - self.attack_direction(side) * depth, hoop.y + lateral)

    def mirror_for(self, side: Side, pos: Vec2) -> Vec2:
        """Mirror an away-perspective point for the given side.

        Formations are written for a team defending the left hoop (away
        attacks left, so home defends left); this flips them when needed.
        """
        if side == Side.HOME:
            return pos
        return Vec2(self.width - pos.x, pos.y)

    # =========================================================================
    # Bounds
    # =========================================================================

    @property
    def min_x(self) -> float:
        return self.margin

    @property
    def max_x(self) -> float:
        return self.width - self.margin

    @property
    def min_y(self) -> float:
        return self.margin

    @property
    def max_y(self) -> float:
        return self.height - self.margin

    def contains(self, pos: Vec2) -> bool:
        """True if pos is inside the playable (margin-inset) area."""
        return self.min_x <= pos.x <= self.max_x and self.min_y <= pos.y <= self.max_y

    def is_out_of_bounds(self, pos: Vec2) -> bool:
        """True if pos crossed the out-of-bounds line beyond the margin."""
        slack = self.out_of_bounds_slack
        return (
            pos.x < self.min_x - slack
            or pos.x > self.max_x + slack
            or pos.y < self.min_y - slack
            or pos.y > self.max_y + slack
        )
