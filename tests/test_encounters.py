import pytest

from veilborn.meta.battle_outcome import BattleOutcome
from veilborn.overworld.encounters.controller import EncounterController
from veilborn.overworld.encounters.registry import default_zones, get_pool
from veilborn.overworld.encounters.spec import (
    EncounterRules,
    EncounterZone,
    PlayerPose,
    ZoneKind,
)


@pytest.fixture
def controller(rng):
    return EncounterController(zones=default_zones(), rng=rng)


def _victory(boss=False):
    return BattleOutcome(victory=True, enemy_id="x", boss_defeated=boss, session_serial=1)


def test_cooldown_snaps_to_zero_after_two_point_two_seconds(controller):
    controller.finish(_victory())
    assert controller.cooldown_left == pytest.approx(2.2)

    controller.advance_cooldown(1.0)
    controller.advance_cooldown(1.0)
    assert controller.cooldown_left > 0.0

    controller.advance_cooldown(0.2)
    assert controller.cooldown_left == 0.0


def test_no_trigger_during_cooldown_or_session(controller):
    pose = PlayerPose(-40.0, 28.0)

    assert controller.check_zones(pose, session_active=True) is None

    controller.finish(_victory())
    assert controller.check_zones(pose, session_active=False) is None

    controller.advance_cooldown(5.0)
    request = controller.check_zones(pose, session_active=False)
    assert request.zone_id == "easy"
    assert request.enemy_id == "sewer_gnawer"
    assert not request.is_boss


def test_outside_every_zone_nothing_happens(controller):
    assert controller.check_zones(PlayerPose(0.0, 0.0), session_active=False) is None


def test_zone_rim_counts_as_inside(controller):
    pose = PlayerPose(-40.0 + 4.1, 28.0)
    assert controller.check_zones(pose, session_active=False) is not None


def test_first_zone_in_list_order_wins(rng):
    zones = [
        EncounterZone(id="a", x=0.0, z=0.0, radius=5.0, pool_id="hard"),
        EncounterZone(id="b", x=1.0, z=0.0, radius=5.0, pool_id="mid"),
    ]
    controller = EncounterController(zones=zones, rng=rng)

    request = controller.check_zones(PlayerPose(0.5, 0.0), session_active=False)
    assert request.zone_id == "a"
    assert request.enemy_id == "thicket_stalker"


def test_disabled_zones_are_skipped(controller):
    controller.zone("easy").enabled = False
    assert controller.check_zones(PlayerPose(-40.0, 28.0), session_active=False) is None


def test_pool_draw_uses_the_rng(rng, controller):
    rng.choices = [2]
    request = controller.check_zones(PlayerPose(35.0, -18.0), session_active=False)
    assert request.enemy_id == "sewer_gnawer"  # mid pool, third entry


def test_unknown_pool_falls_back_to_easy():
    assert get_pool("no_such_pool") == get_pool("easy")


def test_boss_zone_stays_sealed_once_cleared(controller):
    boss_pose = PlayerPose(60.0, 60.0)
    zone = controller.zone("boss_knotling_matron")

    request = controller.check_zones(boss_pose, session_active=False)
    assert request.is_boss
    assert request.enemy_id == "knotling_matron"

    controller.mark_boss_cleared()
    assert controller.boss_cleared
    assert not zone.enabled

    controller.finish(_victory(boss=True))

    zone.enabled = True
    controller.advance_cooldown(10.0)
    assert controller.check_zones(boss_pose, session_active=False) is None
    assert not zone.enabled


def test_defeat_by_the_boss_keeps_the_zone_open(controller):
    controller.finish(BattleOutcome(victory=False, enemy_id="knotling_matron"))
    assert not controller.boss_cleared
    assert controller.zone("boss_knotling_matron").enabled


def test_finish_hands_back_a_copy_of_the_trigger_pose(controller):
    pose = PlayerPose(-40.0, 28.0, 1.5)
    controller.capture_return(pose)
    pose.x = 99.0

    restored = controller.finish(_victory())
    assert (restored.x, restored.z, restored.yaw) == (-40.0, 28.0, 1.5)
    assert controller.return_pose is None


def test_finish_alone_does_not_seal_the_boss_zone(controller):
    controller.finish(_victory(boss=True))
    assert not controller.boss_cleared
    assert controller.zone("boss_knotling_matron").enabled
    assert controller.cooldown_left == 2.2


def test_reset_reopens_everything(controller):
    controller.mark_boss_cleared()
    controller.finish(_victory(boss=True))
    controller.reset()

    assert controller.cooldown_left == 0.0
    assert not controller.boss_cleared
    assert all(z.enabled for z in controller.zones)


def test_custom_cooldown_rule(rng):
    controller = EncounterController(
        zones=default_zones(), rng=rng, rules=EncounterRules(cooldown_s=0.5)
    )
    controller.finish(_victory())
    controller.advance_cooldown(0.5)
    assert controller.cooldown_left == 0.0


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(id="z", x=0, z=0, radius=0, pool_id="easy"),
        dict(id="z", x=0, z=0, radius=3, kind="swamp", pool_id="easy"),
        dict(id="z", x=0, z=0, radius=3, kind=ZoneKind.BOSS),
        dict(id="z", x=0, z=0, radius=3, kind=ZoneKind.ENCOUNTER),
    ],
)
def test_invalid_zones_are_rejected(kwargs):
    with pytest.raises(ValueError):
        EncounterZone(**kwargs)
