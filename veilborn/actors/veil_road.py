# veilborn/actors/veil_road.py
#
# The Veil Road roster: five roadside opponents plus the Knotling Matron,
# the run's only boss. The world registers it once at boot.

from __future__ import annotations

from typing import Tuple

from veilborn.actors.enemy_sheet import EnemyTemplate

BOSS_ID = "knotling_matron"

VEIL_ROAD_ROSTER: Tuple[EnemyTemplate, ...] = (
    EnemyTemplate(
        id="sewer_gnawer", name="Sewer Gnawer",
        max_hp=60, atk=10, defense=4, spd=8, tint=(77, 183, 163),
    ),
    EnemyTemplate(
        id="thread_mite", name="Thread Mite",
        max_hp=48, atk=9, defense=3, spd=12, tint=(138, 118, 255),
    ),
    EnemyTemplate(
        id="lantern_thief", name="Lantern Thief",
        max_hp=72, atk=12, defense=5, spd=10, tint=(244, 193, 107),
    ),
    EnemyTemplate(
        id="knot_wisp", name="Knot Wisp",
        max_hp=58, atk=11, defense=4, spd=13, tint=(152, 169, 255),
    ),
    EnemyTemplate(
        id="thicket_stalker", name="Thicket Stalker",
        max_hp=110, atk=18, defense=8, spd=12, tint=(104, 214, 197),
    ),
    # Boss
    EnemyTemplate(
        id=BOSS_ID, name="Knotling Matron",
        max_hp=320, atk=22, defense=10, spd=9, is_boss=True, tint=(224, 122, 143),
    ),
)
