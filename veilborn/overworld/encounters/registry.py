from __future__ import annotations

from typing import Dict, List, Tuple

from veilborn.actors.veil_road import BOSS_ID
from veilborn.overworld.encounters.spec import EncounterZone, ZoneKind

DEFAULT_POOL_ID = "easy"

_POOLS: Dict[str, Tuple[str, ...]] = {}


def register_pool(pool_id: str, enemy_ids: Tuple[str, ...]) -> None:
    if not isinstance(pool_id, str) or not pool_id.strip():
        raise ValueError("pool id must be a non-empty string")
    if not enemy_ids:
        raise ValueError(f"pool {pool_id!r} must list at least one enemy")
    _POOLS[pool_id] = tuple(enemy_ids)


def get_pool(pool_id: str) -> Tuple[str, ...]:
    """Unknown pool ids fall back to the easy pool."""
    pool = _POOLS.get(pool_id)
    if pool is None:
        pool = _POOLS.get(DEFAULT_POOL_ID)
    if pool is None:
        raise KeyError(f"No pool {pool_id!r} and no {DEFAULT_POOL_ID!r} fallback registered")
    return pool


def default_zones() -> List[EncounterZone]:
    """Fresh zone list for the Veil Road map (created once per world)."""
    return [
        EncounterZone(id="easy", x=-40.0, z=28.0, radius=4.2, kind=ZoneKind.ENCOUNTER, pool_id="easy"),
        EncounterZone(id="mid", x=35.0, z=-18.0, radius=4.2, kind=ZoneKind.ENCOUNTER, pool_id="mid"),
        EncounterZone(id="hard", x=15.0, z=55.0, radius=4.2, kind=ZoneKind.ENCOUNTER, pool_id="hard"),
        EncounterZone(
            id=f"boss_{BOSS_ID}", x=60.0, z=60.0, radius=5.2, kind=ZoneKind.BOSS, boss_id=BOSS_ID
        ),
    ]


# ------------------------------------------------------------
# Seed pools
# ------------------------------------------------------------

def _seed_defaults() -> None:
    register_pool("easy", ("sewer_gnawer", "thread_mite", "lantern_thief"))
    register_pool("mid", ("knot_wisp", "lantern_thief", "sewer_gnawer"))
    register_pool("hard", ("thicket_stalker", "knot_wisp", "lantern_thief"))


_seed_defaults()
