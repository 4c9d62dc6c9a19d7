"""Movement profiles and solver.

Defines player movement capabilities and provides a single solver for all
player movement. Input and AI only ever add velocity or set a target; the
solver is the one place that steers, damps, caps and integrates.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..core.entities import BASE_MAX_SPEED, SPRINT_MAX_SPEED, Player


FRICTION = 0.9              # The single authoritative damping pass
ARRIVAL_RADIUS = 10.0       # Steering target is cleared inside this distance


@dataclass
class MovementProfile:
    """Defines how a player CAN move.

    Attributes:
        steering: Velocity added per tick while steering toward a target
        max_speed: Speed cap when not sprinting (units/tick)
        sprint_speed: Speed cap while sprinting
    """
    steering: float = 0.75
    max_speed: float = BASE_MAX_SPEED
    sprint_speed: float = SPRINT_MAX_SPEED

    @classmethod
    def from_attributes(cls, speed: int) -> MovementProfile:
        """Steering authority scales with the speed rating (0-99)."""
        return cls(steering=speed / 100)

    def cap_for(self, sprinting: bool) -> float:
        return self.sprint_speed if sprinting else self.max_speed

    def __repr__(self) -> str:
        return (
            f"MovementProfile(steer={self.steering:.2f}, "
            f"max={self.max_speed:.1f}, sprint={self.sprint_speed:.1f})"
        )


@dataclass
class MovementResult:
    """Result of one movement step, mostly for debugging."""
    arrived: bool = False
    capped: bool = False
    speed: float = 0.0


class MovementSolver:
    """Solves player movement each tick.

    This is the SINGLE source of truth for player kinematics. The order is
    steer, damp, then collisions run, then cap and integrate.
    """

    def steer(self, player: Player, profile: MovementProfile) -> bool:
        """Accelerate toward the player's target, if any.

        Returns:
            True if the player arrived this tick (target cleared)
        """
        if player.target is None:
            return False

        to_target = player.target - player.pos
        if to_target.length() <= ARRIVAL_RADIUS:
            player.target = None
            player.is_sprinting = False
            return True

        player.velocity = player.velocity + to_target.normalized() * profile.steering
        return False

    def damp(self, player: Player) -> None:
        player.velocity = player.velocity * FRICTION

    def cap_and_integrate(self, player: Player, profile: MovementProfile) -> MovementResult:
        """Rescale velocity to the speed cap, then move."""
        cap = profile.cap_for(player.is_sprinting)
        speed = player.velocity.length()
        capped = speed > cap
        if capped:
            player.velocity = player.velocity.clamped(cap)
            speed = cap
        player.pos = player.pos + player.velocity
        return MovementResult(capped=capped, speed=speed)

    def solve(self, player: Player, profile: MovementProfile) -> MovementResult:
        """Full step for a player with no contacts (steer, damp, cap, move)."""
        arrived = self.steer(player, profile)
        self.damp(player)
        result = self.cap_and_integrate(player, profile)
        result.arrived = arrived
        return result

