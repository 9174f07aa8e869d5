# veilborn/battle/action_phases.py

class BattlePhase:
    IDLE = "idle"
    PLAYER_TURN = "player_turn"
    ENEMY_TURN = "enemy_turn"

    ALL = (IDLE, PLAYER_TURN, ENEMY_TURN)


class PlayerAction:
    ATTACK = "attack"
    SKILL = "skill"
    RESOURCE_ART = "resource_art"
