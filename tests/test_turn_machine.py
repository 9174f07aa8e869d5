import pytest

from veilborn.actors.enemy_sheet import spawn_enemy
from veilborn.battle.action_phases import BattlePhase, PlayerAction
from veilborn.battle.sequencer import ActionSequencer
from veilborn.battle.signals import BattleSignals
from veilborn.battle.turn_machine import TurnMachine
from veilborn.actors.party_sheet import new_default_party
from veilborn.core.world import WorldMode


def test_encounter_opens_on_first_living_member(world, recorder, enter_zone):
    enter_zone("easy")

    assert world.mode == WorldMode.BATTLE
    assert world.phase == BattlePhase.PLAYER_TURN
    assert world.enemy.id == "sewer_gnawer"
    assert world.current_actor_index() == 0
    assert recorder.logs()[:2] == [
        "Encounter! Sewer Gnawer appears.",
        "Enemy HP is hidden. Fight smart.",
    ]
    start = recorder.of("battle.session_start")[0]
    assert start == {"enemy_name": "Sewer Gnawer", "is_boss": False}
    menu = recorder.of("battle.action_menu")[-1]
    assert menu["actor_name"] == "Cael"
    assert menu["actions"] == [PlayerAction.ATTACK, PlayerAction.SKILL]


def test_turn_order_is_party_order_then_enemy(world, recorder, enter_zone):
    enter_zone("easy")
    party = world.party

    assert world.select_attack(0)
    assert world.enemy.hp == 48
    assert world.current_actor_index() == 1

    assert world.select_skill(1)
    assert world.enemy.hp == 37
    assert world.current_actor_index() == 2

    assert world.select_skill(2)
    assert world.phase == BattlePhase.ENEMY_TURN
    assert world.current_actor_index() is None

    world.tick(0.6)

    assert world.phase == BattlePhase.PLAYER_TURN
    assert world.current_actor_index() == 0
    assert party[0].hp == 118
    assert recorder.logs()[2:] == [
        "Cael attacks! (12)",
        "Serah Mourn uses Sunder! (11)",
        "Iri Voss uses Mend on Cael (+26).",
        "Sewer Gnawer strikes Cael! (2)",
    ]


def test_phase_sequence_over_two_full_rounds(world, enter_zone):
    enter_zone("easy")
    phases = []

    for _ in range(2):
        phases.append(world.phase)
        world.select_attack(0)
        phases.append(world.phase)
        world.select_skill(1)
        phases.append(world.phase)
        world.select_skill(2)
        phases.append(world.phase)
        world.tick(0.6)

    P, E = BattlePhase.PLAYER_TURN, BattlePhase.ENEMY_TURN
    assert phases == [P, P, P, E, P, P, P, E]
    assert world.phase == P
    assert world.current_actor_index() == 0
    assert world.enemy.alive


def test_out_of_turn_selections_are_ignored(world, enter_zone):
    enter_zone("easy")

    assert not world.select_attack(1)
    assert not world.select_skill(2)
    assert not world.select_resource_art(0)
    assert world.enemy.hp == 60
    assert world.current_actor_index() == 0

    world.select_attack(0)
    world.select_attack(1)
    world.select_attack(2)
    assert world.phase == BattlePhase.ENEMY_TURN

    hp = world.enemy.hp
    assert not world.select_attack(0)
    assert world.enemy.hp == hp


def test_fallen_members_are_skipped(world, rng, recorder, enter_zone):
    world.party[1].hp = 0
    enter_zone("easy")

    assert world.current_actor_index() == 0
    world.select_attack(0)
    assert world.current_actor_index() == 2
    assert not world.select_attack(1)

    rng.choices = [1]
    world.select_attack(2)
    world.tick(0.6)

    # living list is [0, 2]; choice index 1 lands on Iri
    assert "Sewer Gnawer strikes Iri Voss! (3)" in recorder.logs()
    assert world.party[2].hp == 102
    assert world.party[1].hp == 0


def test_dread_art_through_the_menu(world, recorder, enter_zone):
    world.party[0].dread = 100.0
    enter_zone("easy")

    assert recorder.of("battle.action_menu")[-1]["actions"] == [
        PlayerAction.ATTACK,
        PlayerAction.SKILL,
        PlayerAction.RESOURCE_ART,
    ]
    assert world.select_resource_art(0)

    assert recorder.logs()[-1] == "Cael unleashes a Dread Art! (32)"
    assert world.enemy.hp == 28
    assert world.party[0].dread == 0.0
    damage = recorder.of("battle.damage")[-1]
    assert damage["is_critical"] is True
    assert world.current_actor_index() == 1


def test_dread_art_below_cap_is_a_no_op(world, enter_zone):
    world.party[0].dread = 99.0
    enter_zone("easy")

    assert not world.select_resource_art(0)
    assert world.enemy.hp == 60
    assert world.party[0].dread == 99.0
    assert world.current_actor_index() == 0


def test_state_changes_land_before_anything_is_scheduled(world, recorder, enter_zone):
    enter_zone("easy")
    recorder.clear()

    world.select_attack(0)

    assert world.enemy.hp == 48
    assert recorder.topics()[:3] == ["battle.log", "battle.damage", "party.changed"]
    assert [c["kind"] for c in recorder.cues()] == ["lunge"]
    assert world.sequencer.pending_labels() == ["impact"]

    world.tick(0.1)
    assert [c["kind"] for c in recorder.cues()] == ["lunge", "impact", "shake"]
    assert recorder.cues("impact")[0]["target_kind"] == "enemy"


def test_victory_resolves_after_the_delay(world, recorder, enter_zone):
    enter_zone("easy")
    world.enemy.hp = 5

    world.select_attack(0)

    assert "Sewer Gnawer collapses." in recorder.logs()
    assert world.session.outcome_pending
    assert world.current_actor_index() is None
    assert recorder.of("battle.action_menu")[-1]["actions"] == []
    assert not world.select_skill(0)

    world.tick(0.5)
    assert world.mode == WorldMode.BATTLE

    world.tick(0.1)
    assert world.mode == WorldMode.WORLD
    assert world.phase == BattlePhase.IDLE
    assert recorder.of("battle.session_end") == [{"victory": True}]
    assert world.last_outcome.victory
    assert not world.last_outcome.boss_defeated


def test_defeat_when_the_last_member_falls(world, recorder, enter_zone):
    world.party[0].hp = 1
    world.party[1].hp = 0
    world.party[2].hp = 0
    enter_zone("easy")

    world.select_attack(0)
    assert world.phase == BattlePhase.ENEMY_TURN

    world.tick(0.6)
    assert "The party is overwhelmed." in recorder.logs()
    assert world.party[0].hp == 0
    assert world.mode == WorldMode.BATTLE

    world.tick(0.7)
    assert world.mode == WorldMode.WORLD
    assert recorder.of("battle.session_end") == [{"victory": False}]
    assert world.last_outcome.defeat


def test_at_most_one_session(world, enter_zone):
    enter_zone("easy")
    serial = world.session.serial

    assert not world.turns.begin(spawn_enemy("thread_mite"))
    assert world.enemy.id == "sewer_gnawer"
    assert world.session.serial == serial

    assert not world.move_player(5.0, 0.0)
    world.tick(0.0)
    assert world.session.serial == serial


def test_begin_refuses_a_fallen_party(router):
    party = new_default_party()
    for m in party:
        m.hp = 0
    machine = TurnMachine(
        party, signals=BattleSignals(router), sequencer=ActionSequencer(), rng=None
    )

    assert not machine.begin(spawn_enemy("sewer_gnawer"))
    assert machine.phase == BattlePhase.IDLE


def test_enemy_blow_cues_target_the_struck_member(world, recorder, enter_zone):
    enter_zone("easy")
    world.select_attack(0)
    world.select_attack(1)
    world.select_attack(2)
    recorder.clear()

    world.tick(0.6)
    assert recorder.cues("lunge")[-1]["strength"] == pytest.approx(0.75)
    assert recorder.cues("lunge")[-1]["target_kind"] == "enemy"

    world.tick(0.1)
    impact = recorder.cues("impact")[-1]
    assert impact["target_kind"] == "party"
    assert impact["target_index"] == 0
    assert impact["strength"] == pytest.approx(0.11)
