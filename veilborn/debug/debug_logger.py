# veilborn/debug/debug_logger.py

from __future__ import annotations
from typing import Iterable, Any

# ----------------------------------------------------------------------
# Core debug toggles
# ----------------------------------------------------------------------

DEBUG_ENABLED: bool = True

ENABLED_CATEGORIES: set[str] = {
    "world",      # mode switches, run reset, player pose restore
    "encounter",  # zone checks, cooldown, boss gating
    "turn",       # phase changes, rejected inputs
    "damage",     # rolls and formula breakdowns
    "sequencer",  # scheduled / fired callbacks
}

def enable_categories(*cats: str) -> None:
    ENABLED_CATEGORIES.update(cats)

def disable_categories(*cats: str) -> None:
    for c in cats:
        ENABLED_CATEGORIES.discard(c)

def set_categories(cats: Iterable[str]) -> None:
    global ENABLED_CATEGORIES
    ENABLED_CATEGORIES = set(cats)

def log(category: str, message: str) -> None:
    if not DEBUG_ENABLED:
        return
    if category not in ENABLED_CATEGORIES:
        return
    print(f"[VEILBORN {category.upper()}] {message}")


# ----------------------------------------------------------------------
# High-level Battle Debug Helper
# ----------------------------------------------------------------------

class BattleDebug:
    """
    Helper that formats structured debug messages for the battle engine.

    TurnMachine and the world context call these helpers instead of
    hand-rolling debug strings. Lower-level modules (damage, sequencer,
    encounter controller) call log() with their category directly.
    """

    # --------------------------------------------------------------
    # Category shorthands
    # --------------------------------------------------------------
    def world(self, msg: str) -> None:
        log("world", msg)

    def turn(self, msg: str) -> None:
        log("turn", msg)

    # --------------------------------------------------------------
    # Snapshots
    # --------------------------------------------------------------
    def party_snapshot(self, party: Iterable[Any]) -> None:
        rows = []
        for i, c in enumerate(party):
            name = getattr(c, "name", f"P{i}")
            hp = getattr(c, "hp", None)
            max_hp = getattr(c, "max_hp", None)
            dread = getattr(c, "dread", 0.0)
            rows.append(
                f"  [P{i}] {name}: HP {hp}/{max_hp}  Dread {int(dread)}/100"
            )
        body = "\n".join(rows)
        log("turn", "[PARTY]\n" + body)

    def enemy_snapshot(self, enemy: Any) -> None:
        if enemy is None:
            log("turn", "[ENEMY] none")
            return
        name = getattr(enemy, "name", "E0")
        hp = getattr(enemy, "hp", None)
        max_hp = getattr(enemy, "max_hp", None)
        boss = " (boss)" if getattr(enemy, "is_boss", False) else ""
        log("turn", f"[ENEMY] {name}{boss}: HP {hp}/{max_hp}")
