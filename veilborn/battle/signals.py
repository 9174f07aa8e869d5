# veilborn/battle/signals.py
#
# Outbound boundary of the battle core. Everything presentation needs to
# know is published on the EventRouter under the topics below; the core
# never waits on (or reads back from) a listener.

from __future__ import annotations

from typing import Optional, Sequence

from veilborn.router import EventRouter

TOPIC_LOG = "battle.log"
TOPIC_PARTY_CHANGED = "party.changed"
TOPIC_DAMAGE = "battle.damage"
TOPIC_SESSION_START = "battle.session_start"
TOPIC_SESSION_END = "battle.session_end"
TOPIC_ACTION_MENU = "battle.action_menu"
TOPIC_CUE = "fx.cue"
TOPIC_RUN_RESET = "world.run_reset"

TARGET_PARTY = "party"
TARGET_ENEMY = "enemy"

CUE_LUNGE = "lunge"
CUE_IMPACT = "impact"
CUE_SHAKE = "shake"
CUE_FLASH = "flash"


class BattleSignals:
    """Named hooks over the router, one per presentation callback."""

    def __init__(self, router: EventRouter) -> None:
        self.router = router

    def on_log_message(self, text: str) -> None:
        self.router.emit(TOPIC_LOG, text=text)

    def on_party_state_changed(self) -> None:
        self.router.emit(TOPIC_PARTY_CHANGED)

    def on_damage_feedback(
        self,
        amount: int,
        target_kind: str,
        is_critical: bool,
        is_heal: bool,
        *,
        target_index: int = 0,
    ) -> None:
        self.router.emit(
            TOPIC_DAMAGE,
            amount=int(amount),
            target_kind=target_kind,
            target_index=target_index,
            is_critical=bool(is_critical),
            is_heal=bool(is_heal),
        )

    def on_session_start(self, enemy_name: str, *, is_boss: bool = False) -> None:
        self.router.emit(TOPIC_SESSION_START, enemy_name=enemy_name, is_boss=is_boss)

    def on_session_end(self, victory: bool) -> None:
        self.router.emit(TOPIC_SESSION_END, victory=bool(victory))

    def on_action_menu_changed(
        self,
        current_actor_name: Optional[str],
        available_actions: Sequence[str],
        *,
        actor_index: Optional[int] = None,
    ) -> None:
        self.router.emit(
            TOPIC_ACTION_MENU,
            actor_name=current_actor_name,
            actor_index=actor_index,
            actions=list(available_actions),
        )

    def on_run_reset(self) -> None:
        self.router.emit(TOPIC_RUN_RESET)

    def on_presentation_cue(
        self,
        kind: str,
        strength: float,
        *,
        target_kind: Optional[str] = None,
        target_index: Optional[int] = None,
    ) -> None:
        self.router.emit(
            TOPIC_CUE,
            kind=kind,
            strength=float(strength),
            target_kind=target_kind,
            target_index=target_index,
        )
