from __future__ import annotations

from typing import List, Optional

from veilborn.debug.debug_logger import log as battle_log
from veilborn.meta.battle_outcome import BattleOutcome
from veilborn.overworld.encounters.registry import get_pool
from veilborn.overworld.encounters.spec import (
    EncounterRequest,
    EncounterRules,
    EncounterZone,
    PlayerPose,
)


class EncounterController:
    """Tiny deterministic encounter controller.

    Proximity model:
      - a single cooldown timer (seconds) counts down once per tick
      - while it is positive, or while a session runs, nothing triggers
      - otherwise the first enabled zone (list order) containing the
        player wins; overlapping zones beyond the first are ignored
      - encounter zones pick uniformly from their pool, boss zones yield
        the fixed boss until it has been beaten once this run

    All randomness comes from the provided rng.
    """

    def __init__(
        self,
        *,
        zones: List[EncounterZone],
        rng,
        rules: EncounterRules = EncounterRules(),
    ) -> None:
        self.zones = zones
        self.rules = rules
        self._rng = rng
        self._cooldown_left: float = 0.0
        self._boss_cleared: bool = False
        self._return_pose: Optional[PlayerPose] = None

    @property
    def cooldown_left(self) -> float:
        return self._cooldown_left

    @property
    def boss_cleared(self) -> bool:
        return self._boss_cleared

    @property
    def return_pose(self) -> Optional[PlayerPose]:
        return self._return_pose

    def zone(self, zone_id: str) -> Optional[EncounterZone]:
        for z in self.zones:
            if z.id == zone_id:
                return z
        return None

    def reset(self) -> None:
        self._cooldown_left = 0.0
        self._boss_cleared = False
        self._return_pose = None
        for z in self.zones:
            z.enabled = True

    # ------------------------------------------------------------
    # Per-tick bookkeeping
    # ------------------------------------------------------------
    def advance_cooldown(self, dt: float) -> None:
        if self._cooldown_left <= 0.0:
            return
        left = max(0.0, self._cooldown_left - max(0.0, dt))
        if left <= self.rules.cooldown_epsilon:
            left = 0.0
        self._cooldown_left = left

    def _enforce_boss_gate(self) -> None:
        if not self._boss_cleared:
            return
        for z in self.zones:
            if z.is_boss and z.enabled:
                z.enabled = False
                battle_log("encounter", f"zone {z.id!r} sealed (boss cleared)")

    def check_zones(self, pose: PlayerPose, *, session_active: bool) -> Optional[EncounterRequest]:
        self._enforce_boss_gate()

        if session_active or self._cooldown_left > 0.0:
            return None

        for z in self.zones:
            if not z.enabled:
                continue
            if not z.contains(pose.x, pose.z):
                continue

            if z.is_boss:
                if self._boss_cleared:
                    return None
                request = EncounterRequest(zone_id=z.id, enemy_id=z.boss_id, is_boss=True)
            else:
                pool = get_pool(z.pool_id)
                request = EncounterRequest(zone_id=z.id, enemy_id=self._rng.choice(pool))

            battle_log(
                "encounter",
                f"zone {z.id!r} triggers {request.enemy_id!r} at ({pose.x:.1f}, {pose.z:.1f})",
            )
            return request

        return None

    # ------------------------------------------------------------
    # Session boundaries
    # ------------------------------------------------------------
    def capture_return(self, pose: PlayerPose) -> None:
        self._return_pose = pose.copy()

    def mark_boss_cleared(self) -> None:
        """Boss HP hit zero. Sealed from this moment, not when the session ends."""
        if not self._boss_cleared:
            battle_log("encounter", "boss cleared")
        self._boss_cleared = True
        self._enforce_boss_gate()

    def finish(self, outcome: BattleOutcome) -> Optional[PlayerPose]:
        """
        Session ended: arm the cooldown and hand back the pose captured at
        trigger time.
        """
        self._cooldown_left = max(0.0, float(self.rules.cooldown_s))

        pose, self._return_pose = self._return_pose, None
        battle_log(
            "encounter",
            f"session {outcome.session_serial} finished "
            f"({'victory' if outcome.victory else 'defeat'}); cooldown {self._cooldown_left:.1f}s",
        )
        return pose
