# veilborn/battle/turn_machine.py

from __future__ import annotations

from typing import Any, Callable, List, Optional

from veilborn.actors.enemy_sheet import Enemy
from veilborn.actors.party_sheet import PartyMember, any_alive
from veilborn.battle.action_phases import BattlePhase, PlayerAction
from veilborn.battle.damage import (
    dread_art,
    enemy_strike,
    heal_most_wounded,
    player_strike,
)
from veilborn.battle.sequencer import ActionSequencer
from veilborn.battle.session import BattleSession
from veilborn.battle.signals import (
    BattleSignals,
    CUE_FLASH,
    CUE_IMPACT,
    CUE_LUNGE,
    CUE_SHAKE,
    TARGET_ENEMY,
    TARGET_PARTY,
)
from veilborn.battle.tuning import BattleTuning, DEFAULT_TUNING
from veilborn.debug.debug_logger import BattleDebug
from veilborn.meta.battle_outcome import BattleOutcome

ResolvedHook = Callable[[BattleOutcome], None]
BossDownHook = Callable[[str], None]


class TurnMachine:
    """
    TurnMachine

    Drives one battle session through idle -> player_turn <-> enemy_turn
    -> idle.

    Responsibilities:
    - Validate player action selections (phase, active actor, gauge)
    - Apply the damage engine synchronously and narrate the result
    - Hand presentation beats and phase advancement to the ActionSequencer
    - Resolve victory/defeat and report a BattleOutcome to the world

    Non-responsibilities:
    - Does NOT decide when a session may start (EncounterController does)
    - Does NOT do damage math (damage.py)
    - Does NOT render anything (BattleSignals -> presentation)

    Every action commits its mutation and log line before anything gets
    scheduled. Scheduled callbacks carry the session serial they were made
    for and turn into no-ops once that session is gone.
    """

    def __init__(
        self,
        party: List[PartyMember],
        *,
        signals: BattleSignals,
        sequencer: ActionSequencer,
        rng: Any,
        tuning: BattleTuning = DEFAULT_TUNING,
        on_resolved: Optional[ResolvedHook] = None,
        on_boss_down: Optional[BossDownHook] = None,
    ) -> None:
        self.party = party
        self.session = BattleSession(party)
        self.signals = signals
        self.sequencer = sequencer
        self.rng = rng
        self.tuning = tuning
        self.on_resolved = on_resolved
        self.on_boss_down = on_boss_down
        self.debug = BattleDebug()
        self._next_serial = 1

    # ------------------------------------------------------------
    # Convenience
    # ------------------------------------------------------------
    @property
    def phase(self) -> str:
        return self.session.phase

    @property
    def enemy(self) -> Optional[Enemy]:
        return self.session.enemy

    def available_actions(self, member: PartyMember) -> List[str]:
        actions = [PlayerAction.ATTACK, PlayerAction.SKILL]
        if member.dread_ready:
            actions.append(PlayerAction.RESOURCE_ART)
        return actions

    def _is_live(self, serial: int) -> bool:
        return self.session.active and self.session.serial == serial

    def _publish_menu(self) -> None:
        if not self.session.accepts_input():
            self.signals.on_action_menu_changed(None, [])
            return

        idx = self.session.current_actor_index()
        if idx is None:
            self.signals.on_action_menu_changed(None, [])
            return

        actor = self.party[idx]
        self.signals.on_action_menu_changed(actor.name, self.available_actions(actor), actor_index=idx)

    # ============================================================
    # Session lifecycle
    # ============================================================
    def begin(self, enemy: Enemy) -> bool:
        if self.session.active:
            self.debug.turn(f"begin({enemy.name}) rejected: session {self.session.serial} still active")
            return False
        if not any_alive(self.party):
            self.debug.turn(f"begin({enemy.name}) rejected: nobody in the party can fight")
            return False

        self.session.clear()
        self.session.serial = self._next_serial
        self._next_serial += 1
        self.session.enemy = enemy
        self.session.active_actor_index = 0
        self.session.set_phase(BattlePhase.PLAYER_TURN)

        self.debug.turn(f"session {self.session.serial} begins vs {enemy.name}")
        self.debug.enemy_snapshot(enemy)

        self.signals.on_session_start(enemy.name, is_boss=enemy.is_boss)
        self.signals.on_log_message(f"Encounter! {enemy.name} appears.")
        self.signals.on_log_message("Enemy HP is hidden. Fight smart.")
        self.signals.on_party_state_changed()
        self._publish_menu()
        return True

    def reset(self) -> None:
        """Drop any session without resolving it (run reset)."""
        if self.session.active:
            self.debug.turn(f"session {self.session.serial} dropped by reset")
        self.session.clear()
        self.session.serial = 0

    def _schedule_resolution(self, victory: bool, delay_ms: int) -> None:
        enemy = self.session.enemy
        outcome = BattleOutcome(
            victory=victory,
            enemy_id=enemy.id if enemy is not None else "",
            boss_defeated=bool(victory and enemy is not None and enemy.is_boss),
            session_serial=self.session.serial,
        )
        self.session.outcome_pending = True
        if outcome.boss_defeated:
            self.debug.turn(f"session {outcome.session_serial}: boss {outcome.enemy_id} down")
            if self.on_boss_down is not None:
                self.on_boss_down(outcome.enemy_id)
        self._publish_menu()

        self.sequencer.schedule_after(
            delay_ms,
            lambda: self._resolve(outcome),
            label="victory" if victory else "defeat",
        )

    def _resolve(self, outcome: BattleOutcome) -> None:
        if not self._is_live(outcome.session_serial):
            self.debug.turn(f"stale resolution for session {outcome.session_serial} ignored")
            return

        self.debug.turn(
            f"session {outcome.session_serial} resolves: {'victory' if outcome.victory else 'defeat'}"
        )
        self.debug.party_snapshot(self.party)

        self.session.clear()
        if self.on_resolved is not None:
            self.on_resolved(outcome)

        self.signals.on_session_end(outcome.victory)
        self.signals.on_party_state_changed()

    # ============================================================
    # Inbound: player action selection
    # ============================================================
    def _accept(self, actor_index: int, action: str) -> Optional[PartyMember]:
        if not self.session.accepts_input():
            self.debug.turn(
                f"{action}({actor_index}) ignored: phase={self.session.phase} "
                f"pending={self.session.outcome_pending}"
            )
            return None

        current = self.session.current_actor_index()
        if current is None or actor_index != current:
            self.debug.turn(f"{action}({actor_index}) ignored: active actor is {current}")
            return None

        member = self.party[actor_index]
        if not member.alive:
            self.debug.turn(f"{action}({actor_index}) ignored: {member.name} is down")
            return None
        return member

    def select_attack(self, actor_index: int) -> bool:
        actor = self._accept(actor_index, PlayerAction.ATTACK)
        if actor is None:
            return False
        self._player_strike(actor_index, actor, 1.0, label=f"{actor.name} attacks!")
        return True

    def select_skill(self, actor_index: int) -> bool:
        actor = self._accept(actor_index, PlayerAction.SKILL)
        if actor is None:
            return False
        if actor.skill.is_heal:
            return self._player_heal(actor_index, actor)
        self._player_strike(
            actor_index,
            actor,
            actor.skill.multiplier,
            label=f"{actor.name} uses {actor.skill.name}!",
        )
        return True

    def select_resource_art(self, actor_index: int) -> bool:
        actor = self._accept(actor_index, PlayerAction.RESOURCE_ART)
        if actor is None:
            return False
        if not actor.dread_ready:
            self.debug.turn(f"Dread Art ignored: {actor.name} at {actor.display_dread}/100")
            return False
        return self._player_dread_art(actor_index, actor)

    # ------------------------------------------------------------
    # Player actions
    # ------------------------------------------------------------
    def _player_strike(self, idx: int, actor: PartyMember, multiplier: float, *, label: str) -> None:
        enemy = self.session.enemy
        result = player_strike(actor, enemy, multiplier, self.rng, self.tuning)
        strong = multiplier > self.tuning.strong_strike_mult

        self.signals.on_log_message(f"{label} {'CRIT! ' if result.critical else ''}({result.damage})")
        self.signals.on_damage_feedback(result.damage, TARGET_ENEMY, result.critical, False)
        self.signals.on_party_state_changed()

        if result.target_down:
            self.signals.on_log_message(f"{enemy.name} collapses.")

        self.signals.on_presentation_cue(
            CUE_LUNGE, 0.82 if strong else 0.62, target_kind=TARGET_PARTY, target_index=idx
        )
        self._schedule_impact(
            TARGET_ENEMY,
            0,
            impact=0.2 if strong else 0.13,
            shake=0.18 if strong else 0.12,
            delay_ms=self.tuning.impact_delay_strong_ms if strong else self.tuning.impact_delay_ms,
        )

        if result.target_down:
            self._schedule_resolution(True, self.tuning.victory_delay_ms)
            return
        self._advance_turn(self.tuning.advance_delay_ms)

    def _player_heal(self, idx: int, actor: PartyMember) -> bool:
        result = heal_most_wounded(actor, self.party, self.tuning)
        if result is None:
            self.debug.turn(f"{actor.skill.name} ignored: no living ally to mend")
            return False

        target = self.party[result.target_index]
        self.signals.on_log_message(
            f"{actor.name} uses {actor.skill.name} on {target.name} (+{result.amount})."
        )
        self.signals.on_damage_feedback(
            result.amount, TARGET_PARTY, False, True, target_index=result.target_index
        )
        self.signals.on_party_state_changed()
        self.signals.on_presentation_cue(CUE_FLASH, 1.0, target_kind=TARGET_PARTY, target_index=idx)
        self.signals.on_presentation_cue(CUE_SHAKE, 0.06)

        self._advance_turn(self.tuning.advance_delay_ms)
        return True

    def _player_dread_art(self, idx: int, actor: PartyMember) -> bool:
        enemy = self.session.enemy
        result = dread_art(actor, enemy, self.rng, self.tuning)
        if result is None:
            return False

        self.signals.on_log_message(f"{actor.name} unleashes a Dread Art! ({result.damage})")
        self.signals.on_damage_feedback(result.damage, TARGET_ENEMY, True, False)
        self.signals.on_party_state_changed()

        if result.target_down:
            self.signals.on_log_message(f"{enemy.name} is severed from the field.")

        self.signals.on_presentation_cue(CUE_LUNGE, 0.82, target_kind=TARGET_PARTY, target_index=idx)
        self.signals.on_presentation_cue(CUE_SHAKE, 0.2)
        self.signals.on_presentation_cue(CUE_FLASH, 1.4, target_kind=TARGET_ENEMY, target_index=0)
        self._schedule_impact(
            TARGET_ENEMY, 0, impact=0.2, shake=0.18, delay_ms=self.tuning.impact_delay_strong_ms
        )

        if result.target_down:
            self._schedule_resolution(True, self.tuning.victory_delay_art_ms)
        else:
            self._advance_turn(self.tuning.advance_delay_art_ms)
        return True

    # ------------------------------------------------------------
    # Presentation beats
    # ------------------------------------------------------------
    def _schedule_impact(
        self,
        target_kind: str,
        target_index: int,
        *,
        impact: float,
        shake: float,
        delay_ms: int,
    ) -> None:
        serial = self.session.serial

        def _impact() -> None:
            if self.session.serial != serial:
                return
            self.signals.on_presentation_cue(
                CUE_IMPACT, impact, target_kind=target_kind, target_index=target_index
            )
            self.signals.on_presentation_cue(CUE_SHAKE, shake)

        self.sequencer.schedule_after(delay_ms, _impact, label="impact")

    # ============================================================
    # Turn advancement
    # ============================================================
    def _advance_turn(self, enemy_delay_ms: int) -> None:
        living = self.session.living()
        if not living:
            self._schedule_resolution(False, self.tuning.defeat_delay_empty_ms)
            return

        self.session.active_actor_index = (self.session.active_actor_index + 1) % len(living)

        if self.session.active_actor_index != 0:
            # Next living member decides immediately.
            self._publish_menu()
            return

        self.session.set_phase(BattlePhase.ENEMY_TURN)
        self.debug.turn(f"session {self.session.serial}: enemy_turn")
        self._publish_menu()

        serial = self.session.serial
        self.sequencer.schedule_after(
            enemy_delay_ms,
            lambda: self._enemy_turn(serial),
            label="enemy_turn",
        )

    def _enemy_turn(self, serial: int) -> None:
        if not self._is_live(serial) or self.session.phase != BattlePhase.ENEMY_TURN:
            self.debug.turn(f"stale enemy turn for session {serial} ignored")
            return

        enemy = self.session.enemy
        living = self.session.living()
        if not living:
            self._schedule_resolution(False, self.tuning.defeat_delay_empty_ms)
            return

        target_idx = self.rng.choice(living)
        target = self.party[target_idx]
        result = enemy_strike(enemy, target, self.rng, self.tuning)

        self.signals.on_log_message(
            f"{enemy.name} strikes {target.name}! {'CRIT! ' if result.critical else ''}({result.damage})"
        )
        self.signals.on_damage_feedback(
            result.damage, TARGET_PARTY, result.critical, False, target_index=target_idx
        )
        self.signals.on_party_state_changed()

        boss = enemy.is_boss
        self.signals.on_presentation_cue(
            CUE_LUNGE, 1.0 if boss else 0.75, target_kind=TARGET_ENEMY, target_index=0
        )
        self._schedule_impact(
            TARGET_PARTY,
            target_idx,
            impact=0.16 if boss else 0.11,
            shake=0.2 if boss else 0.14,
            delay_ms=(
                self.tuning.enemy_impact_delay_boss_ms if boss else self.tuning.enemy_impact_delay_ms
            ),
        )

        if not any_alive(self.party):
            self.signals.on_log_message("The party is overwhelmed.")
            self._schedule_resolution(False, self.tuning.defeat_delay_ms)
            return

        self.session.turn_count += 1
        self.session.active_actor_index = 0
        self.session.set_phase(BattlePhase.PLAYER_TURN)
        self.debug.turn(f"session {serial}: player_turn (round {self.session.turn_count + 1})")
        self._publish_menu()
