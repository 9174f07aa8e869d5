# veilborn/battle/sequencer.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List

from veilborn.debug.debug_logger import log as battle_log


@dataclass
class ScheduledCall:
    """A deferred callback waiting for sequencer time to reach `due_ms`."""

    due_ms: float
    order: int
    func: Callable[[], None]
    label: str = ""

    def sort_key(self) -> tuple[float, int]:
        return (self.due_ms, self.order)


@dataclass
class ActionSequencer:
    """
    Cooperative deferred-callback queue for battle presentation beats.

    Battle logic mutates state synchronously, then asks the sequencer to
    play the visual beat (impact, shake) and to move the phase forward a
    little later. Time only advances through update(dt), which the world
    tick calls once per frame, so callbacks never overlap each other or
    the engine's own synchronous code.

    Contract:
      - schedule_after(delay_ms, fn): fn runs exactly once, after at least
        delay_ms of sequencer time.
      - Due callbacks fire in (due time, scheduling order).
      - A callback scheduled while firing joins the same pass if already due.
      - There is no cancellation. Callbacks guard their own preconditions.
    """

    now_ms: float = 0.0
    _pending: List[ScheduledCall] = field(default_factory=list)
    _order: int = 0

    def schedule_after(self, delay_ms: float, func: Callable[[], None], *, label: str = "") -> ScheduledCall:
        call = ScheduledCall(
            due_ms=self.now_ms + max(0.0, float(delay_ms)),
            order=self._order,
            func=func,
            label=label,
        )
        self._order += 1
        self._pending.append(call)
        battle_log("sequencer", f"schedule {label or func!r} +{delay_ms}ms (due {call.due_ms:.0f})")
        return call

    def update(self, dt: float) -> int:
        """Advance by dt seconds and fire everything due. Returns how many fired."""
        self.now_ms += max(0.0, dt) * 1000.0
        fired = 0

        while True:
            due = [c for c in self._pending if c.due_ms <= self.now_ms]
            if not due:
                break
            call = min(due, key=ScheduledCall.sort_key)
            self._pending.remove(call)
            battle_log("sequencer", f"fire {call.label or call.func!r} at {self.now_ms:.0f}ms")
            call.func()
            fired += 1

        return fired

    @property
    def pending(self) -> int:
        return len(self._pending)

    def is_busy(self) -> bool:
        return bool(self._pending)

    def pending_labels(self) -> list[str]:
        return [c.label for c in sorted(self._pending, key=ScheduledCall.sort_key)]
