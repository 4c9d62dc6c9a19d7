"""Core entities: players and the ball.

Entities hold mutable simulation state and a small amount of self-contained
per-tick behavior (animation timers, stamina, ball snapping). Everything that
touches more than one entity lives in physics, ai or the orchestrator.
"""

from __future__ import annotations

import random
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .court import MID_RANGE_DISTANCE, THREE_POINT_DISTANCE, Side
from .geometry import clamp
from .vec2 import Vec2


# =============================================================================
# Constants
# =============================================================================

PLAYER_RADIUS = 20.0
BALL_RADIUS = 10.0

BASE_MAX_SPEED = 2.0            # units/tick
SPRINT_MAX_SPEED = 4.0
SPRINT_ACCEL_MULTIPLIER = 1.5
SPRINT_STAMINA_COST = 1.0       # per tick
STAMINA_REGEN = 0.5             # per tick

TRAJECTORY_LENGTH = 20
SPIN_FACTOR = 0.1
RECATCH_WINDOW = 0.25           # seconds the releasing player can't re-catch

ATTRIBUTE_MIN = 40
ATTRIBUTE_MAX = 99


# =============================================================================
# Enums
# =============================================================================

class Role(str, Enum):
    """Player positions."""
    PG = "PG"
    SG = "SG"
    SF = "SF"
    PF = "PF"
    C = "C"

    @property
    def is_frontcourt(self) -> bool:
        return self in (Role.PF, Role.C)


class DribbleMove(str, Enum):
    """Dribble types a ball handler can perform."""
    NORMAL = "normal"
    CROSSOVER = "crossover"
    BEHIND_BACK = "behind_back"
    SPIN = "spin"


# Dribble move -> (dribble timer ticks, spin animation ticks)
DRIBBLE_TIMINGS: dict[DribbleMove, tuple[int, int]] = {
    DribbleMove.NORMAL: (10, 0),
    DribbleMove.CROSSOVER: (20, 30),
    DribbleMove.BEHIND_BACK: (25, 0),
    DribbleMove.SPIN: (30, 30),
}

# Height and strength aren't rated attributes; both are proxies derived from role.
ROLE_HEIGHT: dict[Role, int] = {
    Role.C: 210,
    Role.PF: 205,
    Role.SF: 200,
    Role.SG: 195,
    Role.PG: 185,
}

ROLE_STRENGTH: dict[Role, int] = {
    Role.C: 85,
    Role.PF: 80,
    Role.SF: 70,
    Role.SG: 62,
    Role.PG: 55,
}


# =============================================================================
# Player Components
# =============================================================================

@dataclass
class PlayerAttributes:
    """Player ratings (40-99 scale)."""
    speed: int = 75
    shooting: int = 75
    dribbling: int = 75
    defense: int = 75
    stamina: int = 85
    three_point: int = 75

    @classmethod
    def with_variance(
        cls,
        template: PlayerAttributes,
        rng: random.Random,
        variance: int = 5,
    ) -> PlayerAttributes:
        """Copy a template with a small random spread on every rating."""
        def vary(value: int) -> int:
            value += rng.randint(-variance, variance)
            return int(clamp(value, ATTRIBUTE_MIN, ATTRIBUTE_MAX))

        return cls(
            speed=vary(template.speed),
            shooting=vary(template.shooting),
            dribbling=vary(template.dribbling),
            defense=vary(template.defense),
            stamina=vary(template.stamina),
            three_point=vary(template.three_point),
        )


@dataclass
class PlayerStats:
    """Per-game counters."""
    points: int = 0
    rebounds: int = 0
    assists: int = 0
    steals: int = 0
    blocks: int = 0
    turnovers: int = 0
    fouls: int = 0
    shots_attempted: int = 0
    shots_made: int = 0
    three_attempted: int = 0
    three_made: int = 0

    @property
    def field_goal_pct(self) -> float:
        if self.shots_attempted == 0:
            return 0.0
        return self.shots_made / self.shots_attempted * 100


@dataclass
class Animation:
    """Short-lived animation timers, in ticks."""
    jump: int = 0
    spin: int = 0
    fade: int = 0

    def tick(self) -> None:
        self.jump = max(0, self.jump - 1)
        self.spin = max(0, self.spin - 1)
        self.fade = max(0, self.fade - 1)

    @property
    def active(self) -> bool:
        return self.jump > 0 or self.spin > 0 or self.fade > 0


# =============================================================================
# Player
# =============================================================================

@dataclass
class Player:
    """A player on the court.

    Attributes:
        id: Unique identifier, e.g. "home-PG"
        side: Team side
        role: Position
        pos: Current position on the court plane
        velocity: Current velocity (units/tick)
        target: Optional steering target set by the AI or a tactic
        home_pos: Formation spot used on resets
    """
    id: str
    name: str
    side: Side
    role: Role
    number: int = 0

    pos: Vec2 = field(default_factory=Vec2.zero)
    velocity: Vec2 = field(default_factory=Vec2.zero)
    radius: float = PLAYER_RADIUS
    target: Optional[Vec2] = None
    is_sprinting: bool = False

    attributes: PlayerAttributes = field(default_factory=PlayerAttributes)
    current_stamina: float = -1.0

    # Session state
    has_ball: bool = False
    is_controlled: bool = False
    is_shooting: bool = False
    dribble: DribbleMove = DribbleMove.NORMAL
    dribble_timer: int = 0
    animation: Animation = field(default_factory=Animation)

    stats: PlayerStats = field(default_factory=PlayerStats)
    home_pos: Optional[Vec2] = None

    def __post_init__(self) -> None:
        if self.current_stamina < 0:
            self.current_stamina = float(self.attributes.stamina)
        if self.home_pos is None:
            self.home_pos = self.pos

    # =========================================================================
    # Derived properties
    # =========================================================================

    @property
    def max_speed(self) -> float:
        return SPRINT_MAX_SPEED if self.is_sprinting else BASE_MAX_SPEED

    @property
    def height(self) -> int:
        return ROLE_HEIGHT[self.role]

    @property
    def strength(self) -> int:
        return ROLE_STRENGTH[self.role]

    @property
    def stamina_ratio(self) -> float:
        if self.attributes.stamina <= 0:
            return 0.0
        return self.current_stamina / self.attributes.stamina

    @property
    def speed(self) -> float:
        return self.velocity.length()

    # =========================================================================
    # Per-tick self update
    # =========================================================================

    def update(self) -> None:
        """Advance timers and regenerate stamina.

        Position integration and friction are owned by the physics pass.
        """
        self.animation.tick()
        if self.is_shooting and self.animation.jump == 0:
            self.is_shooting = False

        if self.dribble_timer > 0:
            self.dribble_timer -= 1
            if self.dribble_timer == 0:
                self.dribble = DribbleMove.NORMAL

        self.current_stamina = min(
            float(self.attributes.stamina),
            self.current_stamina + STAMINA_REGEN,
        )

    # =========================================================================
    # Actions
    # =========================================================================

    def move(self, direction: Vec2, sprint: bool = False) -> None:
        """Accelerate along an input direction.

        The direction is normalized; sprinting costs stamina and is only
        honored while stamina remains.
        """
        direction = direction.normalized()
        if direction == Vec2.zero():
            self.is_sprinting = False
            return

        accel = self.attributes.speed / 100
        self.is_sprinting = sprint and self.current_stamina > 0
        if self.is_sprinting:
            accel *= SPRINT_ACCEL_MULTIPLIER
            self.current_stamina = max(0.0, self.current_stamina - SPRINT_STAMINA_COST)

        self.velocity = self.velocity + direction * accel

    def nudge(self, direction: Vec2, magnitude: float) -> None:
        """Add an impulse along a direction (AI steering kicks)."""
        self.velocity = self.velocity + direction.normalized() * magnitude

    def set_target(self, target: Optional[Vec2], sprint: bool = False) -> None:
        self.target = target
        self.is_sprinting = sprint and target is not None

    def perform_dribble(self, move: DribbleMove) -> bool:
        """Start a dribble move. Only a ball handler can dribble."""
        if not self.has_ball:
            return False
        timer, spin = DRIBBLE_TIMINGS[move]
        self.dribble = move
        self.dribble_timer = timer
        if spin:
            self.animation.spin = spin
        return True

    def pump_fake(self) -> bool:
        """Fake a shot. Only a ball handler not already shooting can fake."""
        if not self.has_ball or self.is_shooting:
            return False
        self.animation.fade = 30
        return True

    def begin_shot(self) -> None:
        """Enter the shooting animation; cleared when the jump timer runs out."""
        self.is_shooting = True
        self.animation.jump = 30

    def shot_chance(self, distance: float, defense_pressure: float) -> float:
        """Make probability for a shot from this distance under pressure."""
        base = self.attributes.shooting / 100
        if distance > THREE_POINT_DISTANCE:
            distance_factor = self.attributes.three_point / 100
        elif distance > MID_RANGE_DISTANCE:
            distance_factor = 0.8
        else:
            distance_factor = 1.0
        defense_factor = 1.0 - defense_pressure / 100
        chance = base * distance_factor * defense_factor * self.stamina_ratio
        return clamp(chance, 0.1, 0.9)

    # =========================================================================
    # Resets
    # =========================================================================

    def reset_position(self, pos: Optional[Vec2] = None) -> None:
        """Return to a spot (default: formation spot) at rest."""
        self.pos = pos if pos is not None else self.home_pos
        self.velocity = Vec2.zero()
        self.target = None
        self.is_sprinting = False
        self.is_shooting = False
        self.dribble = DribbleMove.NORMAL
        self.dribble_timer = 0
        self.animation = Animation()

    def reset_stats(self) -> None:
        self.stats = PlayerStats()
        self.current_stamina = float(self.attributes.stamina)

    def __repr__(self) -> str:
        return f"Player({self.id}, {self.name}, pos={self.pos})"


# =============================================================================
# Ball
# =============================================================================

@dataclass
class ShotAttempt:
    """Bookkeeping for a released shot, read by score detection."""
    shooter_id: str
    side: Side
    release_pos: Vec2
    distance: float
    is_three_attempt: bool = False
    made: bool = False
    blocked: bool = False

    @property
    def can_score(self) -> bool:
        """Rolled a make at release and was neither blocked nor deflected."""
        return self.made and not self.blocked

    @property
    def points(self) -> int:
        return 3 if self.distance > THREE_POINT_DISTANCE else 2


@dataclass
class Ball:
    """The basketball.

    The ball is either held (holder_id set, position locked to the holder),
    in the air (free flight under gravity), or dead (neither, e.g. between a
    score and the inbound). holder_id is a handle, never an owning reference.
    """
    pos: Vec2 = field(default_factory=Vec2.zero)
    z: float = 0.0
    velocity: Vec2 = field(default_factory=Vec2.zero)
    vz: float = 0.0
    spin: float = 0.0
    radius: float = BALL_RADIUS

    holder_id: Optional[str] = None
    in_air: bool = False
    bounces: int = 0
    trajectory: deque = field(default_factory=lambda: deque(maxlen=TRAJECTORY_LENGTH))

    shot: Optional[ShotAttempt] = None
    last_holder_id: Optional[str] = None
    last_passer_id: Optional[str] = None
    release_time: float = -1.0

    @property
    def is_held(self) -> bool:
        return self.holder_id is not None

    @property
    def is_dead(self) -> bool:
        return self.holder_id is None and not self.in_air

    @property
    def is_descending(self) -> bool:
        return self.in_air and self.vz < 0

    @property
    def is_loose(self) -> bool:
        """In play with nobody in control: it has hit the floor or been blocked."""
        return self.in_air and (self.bounces > 0 or (self.shot is not None and self.shot.blocked))

    def attach(self, holder_id: str) -> None:
        """Put the ball in a player's hands."""
        self.holder_id = holder_id
        self.in_air = False
        self.velocity = Vec2.zero()
        self.vz = 0.0
        self.z = 0.0
        self.shot = None
        self.bounces = 0
        self.trajectory.clear()

    def launch(
        self,
        velocity: Vec2,
        vz: float,
        now: float,
        z: float = 0.0,
    ) -> None:
        """Release the ball into free flight from its current position."""
        self.last_holder_id = self.holder_id
        self.release_time = now
        self.holder_id = None
        self.in_air = True
        self.velocity = velocity
        self.vz = vz
        self.z = z
        self.bounces = 0
        self.trajectory.clear()

    def can_be_caught_by(self, player_id: str, now: float) -> bool:
        """The releasing player can't catch their own shot or pass right away."""
        if player_id != self.last_holder_id:
            return True
        return now - self.release_time >= RECATCH_WINDOW

    def stop(self) -> None:
        """Kill the ball: no holder, no flight, no motion."""
        self.holder_id = None
        self.in_air = False
        self.velocity = Vec2.zero()
        self.vz = 0.0
        self.z = 0.0

    def place(self, pos: Vec2) -> None:
        self.stop()
        self.pos = pos
        self.trajectory.clear()

    def reset(self, center: Vec2) -> None:
        self.place(center)
        self.spin = 0.0
        self.shot = None
        self.last_holder_id = None
        self.last_passer_id = None
        self.release_time = -1.0

    def update(self, holder: Optional[Player]) -> None:
        """Self-update: snap to the holder, or record flight history.

        Flight integration itself is the physics pass.
        """
        if holder is not None:
            self.pos = Vec2(holder.pos.x, holder.pos.y - holder.radius)
            self.z = 0.0
            return

        if self.in_air:
            self.spin += self.velocity.length() * SPIN_FACTOR
            self.trajectory.append((self.pos.x, self.pos.y, self.z))

    def __repr__(self) -> str:
        state = "held" if self.is_held else "air" if self.in_air else "dead"
        return f"Ball({state}, pos={self.pos}, z={self.z:.1f})"
