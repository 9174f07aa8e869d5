from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional


class ZoneKind:
    ENCOUNTER = "encounter"
    BOSS = "boss"

    ALL = (ENCOUNTER, BOSS)


@dataclass(frozen=True)
class EncounterRules:
    """Pure data rules for when zone triggers may fire (time-based)."""

    # After any session ends, suppress triggers for this many seconds.
    cooldown_s: float = 2.2

    # Remaining cooldown below this snaps to zero (float drift from dt sums).
    cooldown_epsilon: float = 1e-9


@dataclass
class EncounterZone:
    """
    A circular trigger area on the world plane (x, z).

    `encounter` zones draw from the opponent pool named by `pool_id`;
    `boss` zones always yield `boss_id`.
    """
    id: str
    x: float
    z: float
    radius: float
    kind: str = ZoneKind.ENCOUNTER
    pool_id: Optional[str] = None
    boss_id: Optional[str] = None
    enabled: bool = True

    def __post_init__(self) -> None:
        if self.kind not in ZoneKind.ALL:
            raise ValueError(f"Zone {self.id!r}: unknown kind {self.kind!r}")
        if self.radius <= 0:
            raise ValueError(f"Zone {self.id!r}: radius must be positive")
        if self.kind == ZoneKind.BOSS and not self.boss_id:
            raise ValueError(f"Boss zone {self.id!r} needs a boss_id")
        if self.kind == ZoneKind.ENCOUNTER and not self.pool_id:
            raise ValueError(f"Encounter zone {self.id!r} needs a pool_id")

    @property
    def is_boss(self) -> bool:
        return self.kind == ZoneKind.BOSS

    def contains(self, x: float, z: float) -> bool:
        return math.hypot(x - self.x, z - self.z) <= self.radius


@dataclass
class PlayerPose:
    """Where the explorer stands on the world plane and which way it faces."""
    x: float = 0.0
    z: float = 0.0
    yaw: float = 0.0

    def copy(self) -> "PlayerPose":
        return PlayerPose(self.x, self.z, self.yaw)


@dataclass(frozen=True)
class EncounterRequest:
    """Minimal battle request emitted by the overworld."""
    zone_id: str
    enemy_id: str
    is_boss: bool = False
