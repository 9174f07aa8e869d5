# veilborn/battle/tuning.py

from __future__ import annotations

from dataclasses import dataclass


class EnemyCritPolicy:
    """
    How opponent critical hits are rolled.

    BOSS_OVERRIDE:    the standard roll is evaluated first; a boss then
                      replaces it with its own independent roll.
    BOSS_NEVER_CRITS: standard roll, always False for bosses.
    STANDARD_ONLY:    standard roll for everyone, bosses included.
    """
    BOSS_OVERRIDE = "boss_override"
    BOSS_NEVER_CRITS = "boss_never_crits"
    STANDARD_ONLY = "standard_only"

    ALL = (BOSS_OVERRIDE, BOSS_NEVER_CRITS, STANDARD_ONLY)


@dataclass(frozen=True)
class BattleTuning:
    """Pure data knobs for the damage engine and the action sequencer."""

    # --- Critical hits ---
    crit_chance: float = 0.10          # player strikes + non-boss opponents
    boss_crit_chance: float = 0.06
    player_crit_mult: float = 1.9
    enemy_crit_mult: float = 1.7
    enemy_crit_policy: str = EnemyCritPolicy.BOSS_OVERRIDE

    # --- Standard damage ---
    jitter_lo: float = -2.0
    jitter_hi: float = 2.0

    # --- Dread Art ---
    dread_art_atk_mult: float = 2.1
    dread_art_jitter_lo: float = 0.0
    dread_art_jitter_hi: float = 6.0

    # --- Dread accrual ---
    dread_deal_rate: float = 0.35
    dread_receive_rate: float = 0.45
    dread_deal_crit_bonus: float = 10.0
    dread_receive_crit_bonus: float = 6.0
    heal_dread_gain: float = 12.0

    # Skill multipliers above this read as a heavy swing in presentation.
    strong_strike_mult: float = 1.4

    # --- Sequencer delays (ms) ---
    impact_delay_ms: int = 95
    impact_delay_strong_ms: int = 120
    enemy_impact_delay_ms: int = 100
    enemy_impact_delay_boss_ms: int = 120
    advance_delay_ms: int = 550        # attack / skill -> enemy turn
    advance_delay_art_ms: int = 650    # Dread Art -> enemy turn
    victory_delay_ms: int = 550
    victory_delay_art_ms: int = 650
    defeat_delay_ms: int = 650         # lethal enemy strike
    defeat_delay_empty_ms: int = 500   # enemy turn finds nobody standing

    def __post_init__(self) -> None:
        if self.enemy_crit_policy not in EnemyCritPolicy.ALL:
            raise ValueError(f"Unknown enemy_crit_policy {self.enemy_crit_policy!r}")
        for name in ("crit_chance", "boss_crit_chance"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within 0..1 (got {value})")


DEFAULT_TUNING = BattleTuning()
