# veilborn/battle/damage.py
#
# Centralized damage & dread model.
# Every strike in the game (party attack, skill, Dread Art, opponent blow)
# flows through the helpers below. They never raise: callers guard the
# preconditions (living actor, active opponent) before calling in.

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from veilborn.actors.party_sheet import PartyMember, most_wounded_index
from veilborn.battle.tuning import BattleTuning, DEFAULT_TUNING, EnemyCritPolicy
from veilborn.debug.debug_logger import log as battle_log


# ------------------------------------------------------------
# Results
# ------------------------------------------------------------

@dataclass(frozen=True)
class StrikeResult:
    damage: int
    critical: bool
    target_down: bool
    dread_gained: float = 0.0


@dataclass(frozen=True)
class HealResult:
    target_index: int
    amount: int          # fixed skill amount (what gets narrated)
    restored: int        # what actually landed after the max_hp clamp
    dread_gained: float


# ------------------------------------------------------------
# Primitive rolls
# ------------------------------------------------------------

def roll_critical(rng: Any, chance: float = DEFAULT_TUNING.crit_chance) -> bool:
    return rng.random() < chance


def compute_damage(
    attack: float,
    defense: float,
    multiplier: float,
    rng: Any,
    tuning: BattleTuning = DEFAULT_TUNING,
) -> int:
    """
    floor((attack - defense) * multiplier + jitter), jitter in [-2, 2].

    Floored to 1 no matter how far defense outweighs attack.
    """
    jitter = rng.uniform(tuning.jitter_lo, tuning.jitter_hi)
    raw = math.floor((attack - defense) * multiplier + jitter)
    return max(1, int(raw))


def apply_critical(damage: int, multiplier: float) -> int:
    return max(1, int(math.floor(damage * multiplier)))


def dread_art_damage(
    attack: float,
    defense: float,
    rng: Any,
    tuning: BattleTuning = DEFAULT_TUNING,
) -> int:
    jitter = rng.uniform(tuning.dread_art_jitter_lo, tuning.dread_art_jitter_hi)
    raw = math.floor(attack * tuning.dread_art_atk_mult - defense + jitter)
    return max(1, int(raw))


def enemy_critical(
    rng: Any,
    is_boss: bool,
    tuning: BattleTuning = DEFAULT_TUNING,
) -> bool:
    policy = tuning.enemy_crit_policy

    # The standard roll always happens first so every policy consumes the
    # same random stream up to this point.
    crit = roll_critical(rng, tuning.crit_chance)
    if not is_boss or policy == EnemyCritPolicy.STANDARD_ONLY:
        return crit
    if policy == EnemyCritPolicy.BOSS_NEVER_CRITS:
        return False
    return rng.random() < tuning.boss_crit_chance


# ------------------------------------------------------------
# Dread gauge
# ------------------------------------------------------------

def accrue_dread(
    member: PartyMember,
    damage: int,
    was_critical: bool,
    *,
    receiving: bool,
    tuning: BattleTuning = DEFAULT_TUNING,
) -> float:
    """
    Fill the gauge from damage dealt (0.35/dmg, +10 on crit) or received
    (0.45/dmg, +6 on crit). Returns the amount that actually landed.
    """
    if receiving:
        amount = damage * tuning.dread_receive_rate
        if was_critical:
            amount += tuning.dread_receive_crit_bonus
    else:
        amount = damage * tuning.dread_deal_rate
        if was_critical:
            amount += tuning.dread_deal_crit_bonus
    return member.apply_dread_delta(amount)


def consume_dread(member: PartyMember) -> bool:
    """Spend a full gauge. Below the cap nothing changes."""
    if not member.dread_ready:
        return False
    member.dread = 0.0
    return True


# ------------------------------------------------------------
# Composite actions (mutate, then report)
# ------------------------------------------------------------

def player_strike(
    actor: PartyMember,
    enemy: Any,
    multiplier: float,
    rng: Any,
    tuning: BattleTuning = DEFAULT_TUNING,
) -> StrikeResult:
    crit = roll_critical(rng, tuning.crit_chance)
    dmg = compute_damage(actor.atk, enemy.defense, multiplier, rng, tuning)
    if crit:
        dmg = apply_critical(dmg, tuning.player_crit_mult)

    enemy.apply_hp_delta(-dmg)
    gained = accrue_dread(actor, dmg, crit, receiving=False, tuning=tuning)

    battle_log(
        "damage",
        f"{actor.name} -> {enemy.name}: atk={actor.atk} def={enemy.defense} "
        f"mult={multiplier:g} crit={crit} dmg={dmg} dread+={gained:.2f}",
    )
    return StrikeResult(damage=dmg, critical=crit, target_down=not enemy.alive, dread_gained=gained)


def dread_art(
    actor: PartyMember,
    enemy: Any,
    rng: Any,
    tuning: BattleTuning = DEFAULT_TUNING,
) -> Optional[StrikeResult]:
    """
    Full-gauge strike. Returns None (and touches nothing) when the gauge
    is not full. Always presented as a critical.
    """
    if not consume_dread(actor):
        return None

    dmg = dread_art_damage(actor.atk, enemy.defense, rng, tuning)
    enemy.apply_hp_delta(-dmg)

    battle_log("damage", f"{actor.name} Dread Art -> {enemy.name}: dmg={dmg}")
    return StrikeResult(damage=dmg, critical=True, target_down=not enemy.alive)


def enemy_strike(
    enemy: Any,
    target: PartyMember,
    rng: Any,
    tuning: BattleTuning = DEFAULT_TUNING,
) -> StrikeResult:
    crit = enemy_critical(rng, bool(getattr(enemy, "is_boss", False)), tuning)
    dmg = compute_damage(enemy.atk, target.defense, 1.0, rng, tuning)
    if crit:
        dmg = apply_critical(dmg, tuning.enemy_crit_mult)

    target.apply_hp_delta(-dmg)
    gained = accrue_dread(target, dmg, crit, receiving=True, tuning=tuning)

    battle_log(
        "damage",
        f"{enemy.name} -> {target.name}: atk={enemy.atk} def={target.defense} "
        f"crit={crit} dmg={dmg} hp={target.hp}/{target.max_hp}",
    )
    return StrikeResult(damage=dmg, critical=crit, target_down=not target.alive, dread_gained=gained)


def heal_most_wounded(
    healer: PartyMember,
    party: Sequence[PartyMember],
    tuning: BattleTuning = DEFAULT_TUNING,
) -> Optional[HealResult]:
    idx = most_wounded_index(party)
    if idx is None:
        return None

    amount = int(healer.skill.heal_amount)
    restored = party[idx].apply_hp_delta(amount)
    gained = healer.apply_dread_delta(tuning.heal_dread_gain)

    battle_log("damage", f"{healer.name} heals {party[idx].name}: +{amount} (landed {restored})")
    return HealResult(target_index=idx, amount=amount, restored=restored, dread_gained=gained)
