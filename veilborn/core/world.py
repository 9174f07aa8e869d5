# veilborn/core/world.py
from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from veilborn.actors.enemy_sheet import EnemyTemplate, register_enemy_templates, spawn_enemy
from veilborn.actors.party_sheet import PartyMember, any_alive, new_default_party
from veilborn.actors.veil_road import VEIL_ROAD_ROSTER
from veilborn.battle.sequencer import ActionSequencer
from veilborn.battle.signals import BattleSignals
from veilborn.battle.tuning import BattleTuning
from veilborn.battle.turn_machine import TurnMachine
from veilborn.debug.debug_logger import BattleDebug
from veilborn.meta.battle_outcome import BattleOutcome
from veilborn.overworld.encounters.controller import EncounterController
from veilborn.overworld.encounters.registry import default_zones
from veilborn.overworld.encounters.spec import EncounterRules, EncounterZone, PlayerPose
from veilborn.router import EventRouter


class WorldMode:
    WORLD = "world"
    BATTLE = "battle"


@dataclass
class WorldConfig:
    # Determinism (optional)
    seed: Optional[int] = None

    # Square play area, +/- this many units on both axes.
    world_bound: float = 110.0

    # Units per second; used by the sandbox input loop.
    walk_speed: float = 8.0
    sprint_speed: float = 12.0

    tuning: BattleTuning = field(default_factory=BattleTuning)
    rules: EncounterRules = field(default_factory=EncounterRules)

    enemy_roster: Tuple[EnemyTemplate, ...] = VEIL_ROAD_ROSTER


class PrototypeWorld:
    """
    Owns every piece of shared mutable state for one run: the party, the
    zones and cooldown (via EncounterController), the battle session (via
    TurnMachine), the sequencer and the player pose.

    Per tick:
        1) cooldown decrements
        2) sequencer fires whatever came due
        3) zone bookkeeping + trigger check (world mode only)
    """

    def __init__(
        self,
        cfg: Optional[WorldConfig] = None,
        *,
        router: Optional[EventRouter] = None,
        rng: Optional[random.Random] = None,
        party: Optional[List[PartyMember]] = None,
        zones: Optional[List[EncounterZone]] = None,
    ) -> None:
        self.cfg = cfg or WorldConfig()
        self.rng = rng if rng is not None else random.Random(self.cfg.seed)
        self.debug = BattleDebug()

        register_enemy_templates(self.cfg.enemy_roster)

        self.router = router or EventRouter()
        self.signals = BattleSignals(self.router)
        self.party: List[PartyMember] = party if party is not None else new_default_party()
        self.sequencer = ActionSequencer()

        self.turns = TurnMachine(
            self.party,
            signals=self.signals,
            sequencer=self.sequencer,
            rng=self.rng,
            tuning=self.cfg.tuning,
            on_resolved=self._on_resolved,
            on_boss_down=self._on_boss_down,
        )
        self.encounters = EncounterController(
            zones=zones if zones is not None else default_zones(),
            rng=self.rng,
            rules=self.cfg.rules,
        )

        self.pose = PlayerPose()
        self.mode: str = WorldMode.WORLD
        self.last_outcome: Optional[BattleOutcome] = None

    # ------------------------------------------------------------
    # Read-only views for HUD / tests
    # ------------------------------------------------------------
    @property
    def phase(self) -> str:
        return self.turns.phase

    @property
    def session(self):
        return self.turns.session

    @property
    def enemy(self):
        return self.turns.enemy

    @property
    def boss_cleared(self) -> bool:
        return self.encounters.boss_cleared

    @property
    def cooldown_remaining(self) -> float:
        return self.encounters.cooldown_left

    @property
    def zones(self) -> List[EncounterZone]:
        return self.encounters.zones

    def current_actor_index(self) -> Optional[int]:
        if not self.turns.session.accepts_input():
            return None
        return self.turns.session.current_actor_index()

    # ------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------
    def tick(self, dt: float) -> None:
        self.encounters.advance_cooldown(dt)
        self.sequencer.update(dt)

        blocked = (
            self.mode != WorldMode.WORLD
            or self.turns.session.active
            or not any_alive(self.party)
        )
        request = self.encounters.check_zones(self.pose, session_active=blocked)
        if request is None:
            return

        enemy = spawn_enemy(request.enemy_id)
        self.encounters.capture_return(self.pose)
        self.mode = WorldMode.BATTLE
        self.debug.world(f"enter battle: zone={request.zone_id} enemy={enemy.id}")

        if not self.turns.begin(enemy):
            self.mode = WorldMode.WORLD
            self.debug.world("battle refused by turn machine; staying in world mode")

    # ------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------
    def _clamp(self, v: float) -> float:
        b = self.cfg.world_bound
        return max(-b, min(b, v))

    def move_player(self, dx: float, dz: float, yaw: Optional[float] = None) -> bool:
        if self.mode != WorldMode.WORLD:
            return False
        self.pose.x = self._clamp(self.pose.x + dx)
        self.pose.z = self._clamp(self.pose.z + dz)
        if yaw is not None:
            self.pose.yaw = yaw
        elif dx or dz:
            self.pose.yaw = math.atan2(dx, dz)
        return True

    def place_player(self, x: float, z: float, yaw: float = 0.0) -> bool:
        if self.mode != WorldMode.WORLD:
            return False
        self.pose.x = self._clamp(x)
        self.pose.z = self._clamp(z)
        self.pose.yaw = yaw
        return True

    # ------------------------------------------------------------
    # Player actions (forwarded to the turn machine)
    # ------------------------------------------------------------
    def select_attack(self, actor_index: int) -> bool:
        return self.turns.select_attack(actor_index)

    def select_skill(self, actor_index: int) -> bool:
        return self.turns.select_skill(actor_index)

    def select_resource_art(self, actor_index: int) -> bool:
        return self.turns.select_resource_art(actor_index)

    # ------------------------------------------------------------
    # Session end / run reset
    # ------------------------------------------------------------
    def _on_boss_down(self, enemy_id: str) -> None:
        self.encounters.mark_boss_cleared()
        self.debug.world(f"boss {enemy_id!r} down; boss zone sealed")

    def _on_resolved(self, outcome: BattleOutcome) -> None:
        pose = self.encounters.finish(outcome)
        if pose is not None:
            self.pose = pose
        self.mode = WorldMode.WORLD
        self.last_outcome = outcome
        self.debug.world(
            f"back to world at ({self.pose.x:.1f}, {self.pose.z:.1f}); "
            f"cooldown={self.encounters.cooldown_left:.2f}s boss_cleared={self.encounters.boss_cleared}"
        )

    def request_run_reset(self) -> None:
        for member in self.party:
            member.restore()
        self.turns.reset()
        self.encounters.reset()
        self.pose = PlayerPose()
        self.mode = WorldMode.WORLD
        self.last_outcome = None
        self.debug.world("run reset")

        self.signals.on_run_reset()
        self.signals.on_party_state_changed()
        self.signals.on_action_menu_changed(None, [])
