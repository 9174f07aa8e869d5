# veilborn/actors/enemy_sheet.py
#
# Enemy templates (static, registered once per process) and the
# session-scoped Enemy record spawned from them. Every encounter gets a
# fresh copy; partial health never carries over between encounters.

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple


# ------------------------------------------------------------
# Enemy Templates
# ------------------------------------------------------------

@dataclass(frozen=True)
class EnemyTemplate:
    id: str
    name: str
    max_hp: int
    atk: int
    defense: int
    spd: int
    is_boss: bool = False
    tint: Tuple[int, int, int] = (104, 214, 197)  # presentation hint only


@dataclass
class Enemy:
    """Session-scoped opponent. Discarded when the session resolves."""
    id: str
    name: str
    max_hp: int
    atk: int
    defense: int
    spd: int
    is_boss: bool = False
    template_id: str = ""
    hp: Optional[int] = None

    def __post_init__(self) -> None:
        if self.max_hp <= 0:
            raise ValueError(f"{self.id}: max_hp must be positive (got {self.max_hp})")
        if self.hp is None:
            self.hp = self.max_hp
        if not 0 <= self.hp <= self.max_hp:
            raise ValueError(f"{self.id}: hp {self.hp} outside 0..{self.max_hp}")

    @property
    def alive(self) -> bool:
        return self.hp > 0

    def apply_hp_delta(self, delta: int) -> int:
        before = self.hp
        self.hp = max(0, min(self.max_hp, self.hp + int(delta)))
        return self.hp - before


# ------------------------------------------------------------
# Global enemy template registry
# ------------------------------------------------------------

ENEMY_TEMPLATES: Dict[str, EnemyTemplate] = {}


def register_enemy_template(tpl: EnemyTemplate) -> None:
    """
    Register an EnemyTemplate by id.

    Idempotent: if the id already exists, we keep the first registration.
    (Rosters may be registered more than once by tests and the sandbox.)
    """
    tid = getattr(tpl, "id", None)
    if not tid:
        raise ValueError("EnemyTemplate missing required field: id")

    if tid in ENEMY_TEMPLATES:
        return

    ENEMY_TEMPLATES[tid] = tpl


def register_enemy_templates(templates: Iterable[EnemyTemplate]) -> int:
    """Register a whole roster; returns how many ids were new."""
    added = 0
    for tpl in templates:
        if tpl.id not in ENEMY_TEMPLATES:
            added += 1
        register_enemy_template(tpl)
    return added


def get_enemy_template(template_id: str) -> EnemyTemplate:
    tpl = ENEMY_TEMPLATES.get(template_id)
    if tpl is None:
        known = ", ".join(sorted(ENEMY_TEMPLATES))
        raise KeyError(f"Unknown enemy template {template_id!r}. Known: {known}")
    return tpl


# ------------------------------------------------------------
# Factory: fresh Enemy from template
# ------------------------------------------------------------

def spawn_enemy_from_template(template: EnemyTemplate) -> Enemy:
    return Enemy(
        id=template.id,
        name=template.name,
        max_hp=template.max_hp,
        atk=template.atk,
        defense=template.defense,
        spd=template.spd,
        is_boss=template.is_boss,
        template_id=template.id,
    )


def spawn_enemy(template_id: str) -> Enemy:
    return spawn_enemy_from_template(get_enemy_template(template_id))
