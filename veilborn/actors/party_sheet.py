# veilborn/actors/party_sheet.py
#
# Party records for the battle core: stats, the dread gauge and each
# member's single skill. Records are created once at boot and persist for
# the whole run; only the damage engine mutates them during a session.

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

DREAD_CAP: float = 100.0

SKILL_DAMAGE = "damage"
SKILL_HEAL = "heal"


# ------------------------------------------------------------
# Skills
# ------------------------------------------------------------

@dataclass(frozen=True)
class SkillDef:
    """
    One signature skill per member.

      - kind "damage": multiplier applied to the standard damage formula
      - kind "heal":   fixed restore amount on the most wounded living ally
    """
    name: str
    kind: str
    multiplier: float = 1.0
    heal_amount: int = 0

    def __post_init__(self) -> None:
        if self.kind not in (SKILL_DAMAGE, SKILL_HEAL):
            raise ValueError(f"Unknown skill kind {self.kind!r} for {self.name!r}")
        if self.kind == SKILL_HEAL and self.heal_amount <= 0:
            raise ValueError(f"Heal skill {self.name!r} needs a positive heal_amount")
        if self.kind == SKILL_DAMAGE and self.multiplier <= 0:
            raise ValueError(f"Damage skill {self.name!r} needs a positive multiplier")

    @property
    def is_heal(self) -> bool:
        return self.kind == SKILL_HEAL


# ------------------------------------------------------------
# Party member record
# ------------------------------------------------------------

@dataclass
class PartyMember:
    id: str
    name: str
    max_hp: int
    atk: int
    defense: int
    spd: int  # stored, not consulted by turn order
    skill: SkillDef
    hp: Optional[int] = None
    dread: float = 0.0

    def __post_init__(self) -> None:
        if self.max_hp <= 0:
            raise ValueError(f"{self.id}: max_hp must be positive (got {self.max_hp})")
        if self.hp is None:
            self.hp = self.max_hp
        if not 0 <= self.hp <= self.max_hp:
            raise ValueError(f"{self.id}: hp {self.hp} outside 0..{self.max_hp}")
        if not 0.0 <= self.dread <= DREAD_CAP:
            raise ValueError(f"{self.id}: dread {self.dread} outside 0..{DREAD_CAP:g}")

    @property
    def alive(self) -> bool:
        return self.hp > 0

    @property
    def dread_ready(self) -> bool:
        return self.dread >= DREAD_CAP

    @property
    def display_dread(self) -> int:
        return int(math.floor(self.dread))

    @property
    def missing_hp(self) -> int:
        return self.max_hp - self.hp

    def apply_hp_delta(self, delta: int) -> int:
        """Clamp HP into [0, max_hp]; returns the delta actually applied."""
        before = self.hp
        self.hp = max(0, min(self.max_hp, self.hp + int(delta)))
        return self.hp - before

    def apply_dread_delta(self, delta: float) -> float:
        before = self.dread
        self.dread = max(0.0, min(DREAD_CAP, self.dread + float(delta)))
        return self.dread - before

    def status_label(self) -> str:
        if not self.alive:
            return "Down"
        if self.dread_ready:
            return "Dread Art READY"
        return "—"

    def restore(self) -> None:
        self.hp = self.max_hp
        self.dread = 0.0


# ------------------------------------------------------------
# Static definitions
# ------------------------------------------------------------

@dataclass(frozen=True)
class PartyTemplate:
    id: str
    name: str
    max_hp: int
    atk: int
    defense: int
    spd: int
    skill: SkillDef

    def instantiate(self) -> PartyMember:
        return PartyMember(
            id=self.id,
            name=self.name,
            max_hp=self.max_hp,
            atk=self.atk,
            defense=self.defense,
            spd=self.spd,
            skill=self.skill,
        )


DEFAULT_PARTY: Tuple[PartyTemplate, ...] = (
    PartyTemplate(
        id="cael", name="Cael", max_hp=120, atk=16, defense=8, spd=10,
        skill=SkillDef(name="Cleave", kind=SKILL_DAMAGE, multiplier=1.25),
    ),
    PartyTemplate(
        id="serah", name="Serah Mourn", max_hp=95, atk=14, defense=6, spd=14,
        skill=SkillDef(name="Sunder", kind=SKILL_DAMAGE, multiplier=1.15),
    ),
    PartyTemplate(
        id="iri", name="Iri Voss", max_hp=105, atk=12, defense=7, spd=9,
        skill=SkillDef(name="Mend", kind=SKILL_HEAL, heal_amount=26),
    ),
)


def new_default_party(templates: Sequence[PartyTemplate] = DEFAULT_PARTY) -> List[PartyMember]:
    return [tpl.instantiate() for tpl in templates]


# ------------------------------------------------------------
# Queries over the party list
# ------------------------------------------------------------

def living_indices(party: Sequence[PartyMember]) -> List[int]:
    """Indices of living members in party array order (never re-sorted)."""
    return [i for i, m in enumerate(party) if m.alive]


def any_alive(party: Sequence[PartyMember]) -> bool:
    return any(m.alive for m in party)


def most_wounded_index(party: Sequence[PartyMember]) -> Optional[int]:
    """
    Living member with the most missing HP.

    Ties go to the first living index encountered. A fully healthy party
    therefore resolves to the first living member.
    """
    best: Optional[int] = None
    best_missing = -1
    for i in living_indices(party):
        missing = party[i].missing_hp
        if missing > best_missing:
            best_missing = missing
            best = i
    return best
