"""Input commands for the controlled (home) player.

Raw key and mouse capture belongs to the UI; this module only accepts
abstract intents and applies them on simulation time. Every command returns
False and changes nothing when it isn't valid right now (no ball, cooldown,
already shooting).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .ai.situation import defensive_pressure
from .context import SimulationContext
from .core.court import Side
from .core.entities import DribbleMove, Player
from .core.events import EventType
from .core.vec2 import Vec2
from .physics.launch import release_shot

logger = logging.getLogger(__name__)


# =============================================================================
# Shot meter
# =============================================================================

METER_STEP = 2.0                # Power gained per meter tick
METER_INTERVAL = 0.05           # Seconds per meter tick
METER_MAX = 100.0

DRIBBLE_COOLDOWN = 0.5          # seconds
SWITCH_COOLDOWN = 0.3


class ShotTiming(str, Enum):
    WEAK = "weak"
    GOOD = "good"
    PERFECT = "perfect"
    STRONG = "strong"


TIMING_FACTOR: dict[ShotTiming, float] = {
    ShotTiming.PERFECT: 1.1,
    ShotTiming.GOOD: 1.0,
    ShotTiming.WEAK: 0.7,
    ShotTiming.STRONG: 0.7,
}


def timing_for(power: float) -> ShotTiming:
    """Label a 0-100 meter reading."""
    if power < 30:
        return ShotTiming.WEAK
    if power > 70:
        return ShotTiming.STRONG
    if 45 < power < 55:
        return ShotTiming.PERFECT
    return ShotTiming.GOOD


@dataclass
class ShotMeter:
    """Charge meter that sweeps 0 → 100 → 0 while the shot button is held."""
    power: float = 0.0
    rising: bool = True
    charging: bool = False
    _carry: float = 0.0

    def start(self) -> None:
        self.power = 0.0
        self.rising = True
        self.charging = True
        self._carry = 0.0

    def advance(self, dt: float) -> None:
        """Step the meter by however many meter ticks fit in dt seconds."""
        if not self.charging:
            return
        self._carry += dt
        while self._carry >= METER_INTERVAL - 1e-9:
            self._carry -= METER_INTERVAL
            self._step()

    def _step(self) -> None:
        if self.rising:
            self.power = min(METER_MAX, self.power + METER_STEP)
            if self.power >= METER_MAX:
                self.rising = False
        else:
            self.power = max(0.0, self.power - METER_STEP)
            if self.power <= 0:
                self.rising = True

    def release(self) -> float:
        """Stop charging. Returns the reading at release."""
        self.charging = False
        return self.power

    @property
    def timing(self) -> ShotTiming:
        return timing_for(self.power)


# =============================================================================
# Controller
# =============================================================================

class InputController:
    """Applies commands to the controlled player of one side."""

    def __init__(self, ctx: SimulationContext, side: Side = Side.HOME):
        self.ctx = ctx
        self.side = side
        self.intent = Vec2.zero()
        self.sprint = False
        self.meter = ShotMeter()
        self._last_dribble: Optional[float] = None
        self._last_switch: Optional[float] = None

    @property
    def player(self) -> Optional[Player]:
        return self.ctx.controlled_player(self.side)

    def reset(self) -> None:
        self.intent = Vec2.zero()
        self.sprint = False
        self.meter = ShotMeter()
        self._last_dribble = None
        self._last_switch = None

    def _cooled_down(self, last: Optional[float], cooldown: float) -> bool:
        return last is None or self.ctx.now - last >= cooldown - 1e-9

    # =========================================================================
    # Per tick
    # =========================================================================

    def apply(self, dt: float) -> None:
        """Push the held movement intent into the controlled player."""
        self.meter.advance(dt)
        player = self.player
        if player is None or self.intent == Vec2.zero():
            return
        player.move(self.intent, self.sprint)

    # =========================================================================
    # Commands
    # =========================================================================

    def set_movement_intent(self, dx: float, dy: float, sprint: bool = False) -> bool:
        self.intent = Vec2(dx, dy)
        self.sprint = sprint
        return self.player is not None

    def start_shot_charge(self) -> bool:
        player = self.player
        if player is None or not player.has_ball or player.is_shooting or self.meter.charging:
            return False
        self.meter.start()
        return True

    def release_shot(self, power: Optional[float] = None, aim: Optional[Vec2] = None) -> bool:
        """Shoot with the meter reading, or an explicit 0-1 power."""
        player = self.player
        reading = self.meter.release()
        if player is None or not player.has_ball or player.is_shooting:
            return False

        if power is not None:
            reading = max(0.0, min(1.0, power)) * METER_MAX
        timing = timing_for(reading)

        hoop = self.ctx.court.attacking_hoop(player.side)
        distance = player.pos.distance_to(hoop)
        pressure = defensive_pressure(player, self.ctx.opponents(player.side))
        accuracy = player.shot_chance(distance, pressure) * TIMING_FACTOR[timing]

        release_shot(self.ctx, player, accuracy, power=reading / METER_MAX, aim=aim)
        logger.debug(f"{player.id} released at {reading:.0f} ({timing.value})")
        return True

    def perform_dribble(self, move: DribbleMove) -> bool:
        player = self.player
        if player is None or not self._cooled_down(self._last_dribble, DRIBBLE_COOLDOWN):
            return False
        if not player.perform_dribble(move):
            return False

        self._last_dribble = self.ctx.now
        self.ctx.emit(
            EventType.DRIBBLE_MOVE,
            player_id=player.id,
            description=f"{player.name} {move.value.replace('_', ' ')}",
            move=move.value,
        )
        return True

    def pump_fake(self) -> bool:
        player = self.player
        if player is None or not player.pump_fake():
            return False
        self.ctx.emit(EventType.PUMP_FAKE, player_id=player.id, description=f"{player.name} pump fakes")
        return True

    def switch_player(self) -> bool:
        """Hand control to the next player on the roster."""
        if not self._cooled_down(self._last_switch, SWITCH_COOLDOWN):
            return False

        roster = self.ctx.team(self.side).roster
        current = self.player
        if current is None or len(roster) < 2:
            return False

        following = roster[(roster.index(current) + 1) % len(roster)]
        current.is_controlled = False
        following.is_controlled = True
        following.target = None
        self._last_switch = self.ctx.now

        self.ctx.emit(
            EventType.PLAYER_SWITCH,
            player_id=following.id,
            target_id=current.id,
            description=f"Control to {following.name}",
        )
        return True
