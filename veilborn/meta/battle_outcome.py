# veilborn/meta/battle_outcome.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BattleOutcome:
    """
    Pure, world-facing result of a battle session.
    Built by the turn machine at resolution time and consumed by the
    encounter controller (cooldown, boss gating, pose restore).
    """
    victory: bool
    enemy_id: str
    boss_defeated: bool = False
    session_serial: int = 0

    @property
    def defeat(self) -> bool:
        return not self.victory
