"""Deferred effects keyed by simulation time.

Made-shot scoring, ball relocation after a dead ball, catch-and-shoot
follow-ups and similar "a moment later" effects go through this queue instead
of wall-clock callbacks. Each effect remembers the match generation it was
scheduled in; stopping or resetting the match bumps the generation, so
anything still queued from before is dropped when it comes due.

Pausing does not touch the queue. Simulation time doesn't advance while
paused, so queued effects simply wait and fire after resume.
"""

from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass, field
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(order=True)
class ScheduledEffect:
    """One queued effect. Ordered by fire time, then scheduling order."""
    fire_at: float
    sequence: int
    generation: int = field(compare=False)
    name: str = field(compare=False)
    callback: Callable[[], None] = field(compare=False, repr=False)


class EffectScheduler:
    """Min-heap of deferred effects with a match generation token."""

    def __init__(self) -> None:
        self._queue: list[ScheduledEffect] = []
        self._sequence = 0
        self.generation = 0

    def schedule(
        self,
        now: float,
        delay_ms: float,
        name: str,
        callback: Callable[[], None],
    ) -> ScheduledEffect:
        """Queue `callback` to run once simulation time reaches now + delay."""
        self._sequence += 1
        effect = ScheduledEffect(
            fire_at=now + delay_ms / 1000.0,
            sequence=self._sequence,
            generation=self.generation,
            name=name,
            callback=callback,
        )
        heapq.heappush(self._queue, effect)
        return effect

    def advance(self, now: float) -> list[str]:
        """Run every effect due at or before `now`.

        Effects scheduled by a callback for the same instant run in the
        same call. Stale-generation effects are dropped.

        Returns:
            Names of the effects that ran
        """
        fired: list[str] = []
        while self._queue and self._queue[0].fire_at <= now + 1e-9:
            effect = heapq.heappop(self._queue)
            if effect.generation != self.generation:
                logger.debug(f"Dropping stale effect {effect.name} (gen {effect.generation})")
                continue
            effect.callback()
            fired.append(effect.name)
        return fired

    def invalidate(self) -> int:
        """Start a new generation.

        Already-queued effects stay in the heap but belong to the old
        generation, so `advance` drops them when they come due.

        Returns:
            The new generation number
        """
        self.generation += 1
        return self.generation

    def cancel(self, name: str) -> int:
        """Drop queued effects with the given name. Returns how many."""
        before = len(self._queue)
        self._queue = [e for e in self._queue if e.name != name]
        heapq.heapify(self._queue)
        return before - len(self._queue)

    def is_pending(self, name: str) -> bool:
        return any(e.name == name for e in self.pending)

    @property
    def pending(self) -> list[ScheduledEffect]:
        """Live (current-generation) effects in firing order."""
        return sorted(e for e in self._queue if e.generation == self.generation)

    def __len__(self) -> int:
        return len(self.pending)
