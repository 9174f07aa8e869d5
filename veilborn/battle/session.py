# veilborn/battle/session.py

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from veilborn.actors.enemy_sheet import Enemy
from veilborn.actors.party_sheet import PartyMember, living_indices
from veilborn.battle.action_phases import BattlePhase


@dataclass
class BattleSession:
    """
    BattleSession is the keeper of battle truth for one encounter.

    It owns:
        - the phase (idle / player_turn / enemy_turn)
        - the active actor cursor (index into the *current* living list)
        - the session-scoped Enemy copy
        - a serial number so deferred callbacks can tell whether the
          session they were scheduled for is still the live one

    It does NOT:
        - decide damage math (damage.py)
        - schedule anything (sequencer.py)
        - decide when encounters start (encounters/controller.py)

    The party list is shared with the world and persists across sessions.
    """

    party: List[PartyMember]
    enemy: Optional[Enemy] = None
    phase: str = BattlePhase.IDLE
    active_actor_index: int = 0
    serial: int = 0
    outcome_pending: bool = False
    turn_count: int = 0

    @property
    def active(self) -> bool:
        return self.phase != BattlePhase.IDLE

    def living(self) -> List[int]:
        return living_indices(self.party)

    def current_actor_index(self) -> Optional[int]:
        """Party index of the active actor, or None when nobody stands."""
        living = self.living()
        if not living:
            return None
        return living[self.active_actor_index % len(living)]

    def accepts_input(self) -> bool:
        return (
            self.phase == BattlePhase.PLAYER_TURN
            and not self.outcome_pending
            and self.enemy is not None
        )

    def set_phase(self, phase: str) -> None:
        if phase not in BattlePhase.ALL:
            raise ValueError(f"Unknown battle phase {phase!r}")
        self.phase = phase

    def clear(self) -> None:
        self.enemy = None
        self.phase = BattlePhase.IDLE
        self.active_actor_index = 0
        self.outcome_pending = False
        self.turn_count = 0
