import pytest

from veilborn.actors.enemy_sheet import spawn_enemy
from veilborn.actors.party_sheet import DREAD_CAP, new_default_party
from veilborn.battle.damage import (
    accrue_dread,
    compute_damage,
    consume_dread,
    dread_art,
    dread_art_damage,
    enemy_critical,
    enemy_strike,
    heal_most_wounded,
    player_strike,
)
from veilborn.battle.tuning import BattleTuning, EnemyCritPolicy


def test_damage_never_drops_below_one(rng):
    rng.uniforms = [-2.0]
    assert compute_damage(5, 50, 1.0, rng) == 1


@pytest.mark.parametrize("jitter, expected", [(-2.0, 10), (0.0, 12), (1.99, 13), (2.0, 14)])
def test_standard_damage_window(rng, jitter, expected):
    # Cael (16 ATK) into a Sewer Gnawer (4 DEF)
    rng.uniforms = [jitter]
    assert compute_damage(16, 4, 1.0, rng) == expected


def test_attack_on_sewer_gnawer_without_crit(rng):
    cael = new_default_party()[0]
    gnawer = spawn_enemy("sewer_gnawer")

    result = player_strike(cael, gnawer, 1.0, rng)

    assert not result.critical
    assert 10 <= result.damage <= 14
    assert gnawer.hp == 60 - result.damage
    assert cael.dread == pytest.approx(result.damage * 0.35)


def test_player_crit_multiplies_and_adds_bonus_dread(rng):
    cael = new_default_party()[0]
    gnawer = spawn_enemy("sewer_gnawer")
    rng.randoms = [0.05]
    rng.uniforms = [0.0]

    result = player_strike(cael, gnawer, 1.0, rng)

    assert result.critical
    assert result.damage == 22  # floor(12 * 1.9)
    assert cael.dread == pytest.approx(22 * 0.35 + 10)


def test_dread_art_range_and_spend(rng):
    cael = new_default_party()[0]
    cael.dread = DREAD_CAP
    gnawer = spawn_enemy("sewer_gnawer")

    result = dread_art(cael, gnawer, rng)

    assert result is not None
    assert result.critical
    assert 29 <= result.damage <= 35
    assert cael.dread == 0.0
    assert gnawer.hp == 60 - result.damage


@pytest.mark.parametrize("jitter, expected", [(0.0, 29), (6.0, 35)])
def test_dread_art_damage_bounds(rng, jitter, expected):
    rng.uniforms = [jitter]
    assert dread_art_damage(16, 4, rng) == expected


def test_dread_art_below_cap_changes_nothing(rng):
    cael = new_default_party()[0]
    cael.dread = 99.9
    gnawer = spawn_enemy("sewer_gnawer")

    assert dread_art(cael, gnawer, rng) is None
    assert cael.dread == 99.9
    assert gnawer.hp == 60
    assert rng.calls == []


def test_full_gauge_is_spent_once():
    cael = new_default_party()[0]
    cael.dread = DREAD_CAP
    assert consume_dread(cael) is True
    assert consume_dread(cael) is False


def test_dread_clamps_at_cap():
    serah = new_default_party()[1]
    serah.dread = 95.0
    gained = accrue_dread(serah, 40, True, receiving=True)
    assert serah.dread == DREAD_CAP
    assert gained == pytest.approx(5.0)


def test_enemy_strike_fills_receiver_gauge(rng):
    iri = new_default_party()[2]
    wisp = spawn_enemy("knot_wisp")
    rng.uniforms = [0.0]

    result = enemy_strike(wisp, iri, rng)

    assert result.damage == 4  # 11 - 7
    assert iri.hp == 101
    assert iri.dread == pytest.approx(4 * 0.45)


def test_boss_override_replaces_standard_roll(rng):
    rng.randoms = [0.01, 0.5]
    assert enemy_critical(rng, is_boss=True) is False

    rng.randoms = [0.5, 0.01]
    assert enemy_critical(rng, is_boss=True) is True


def test_standard_opponents_use_single_roll(rng):
    rng.randoms = [0.01]
    assert enemy_critical(rng, is_boss=False) is True
    assert rng.calls == ["random"]


def test_boss_never_crits_policy(rng):
    tuning = BattleTuning(enemy_crit_policy=EnemyCritPolicy.BOSS_NEVER_CRITS)
    rng.randoms = [0.0]
    assert enemy_critical(rng, is_boss=True, tuning=tuning) is False


def test_unknown_crit_policy_is_rejected():
    with pytest.raises(ValueError):
        BattleTuning(enemy_crit_policy="sometimes")


def test_heal_targets_most_wounded():
    party = new_default_party()
    party[0].hp = 40   # missing 80
    party[1].hp = 95   # missing 0
    party[2].hp = 10   # missing 95

    result = heal_most_wounded(party[2], party)

    assert result.target_index == 2
    assert party[2].hp == 36
    assert party[2].dread == pytest.approx(12.0)


def test_heal_skips_the_fallen_and_clamps():
    party = new_default_party()
    party[0].hp = 0
    party[1].hp = 90

    result = heal_most_wounded(party[2], party)

    assert result.target_index == 1
    assert result.amount == 26
    assert result.restored == 5
    assert party[1].hp == 95
    assert party[0].hp == 0


def test_heal_on_full_party_lands_on_first_living():
    party = new_default_party()
    result = heal_most_wounded(party[2], party)
    assert result.target_index == 0
    assert result.restored == 0
