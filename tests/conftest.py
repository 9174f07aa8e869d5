from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

from veilborn.actors.enemy_sheet import register_enemy_templates
from veilborn.actors.veil_road import VEIL_ROAD_ROSTER
from veilborn.core.world import PrototypeWorld, WorldConfig
from veilborn.debug import debug_logger
from veilborn.router import EventRouter


class ScriptedRng:
    """
    Deterministic stand-in for random.Random.

    random() pops from `randoms` (default 0.99: no crit ever lands),
    uniform(a, b) pops from `uniforms` (default: the midpoint),
    choice(seq) pops an index from `choices` (default: the first element).
    """

    def __init__(
        self,
        randoms: Sequence[float] = (),
        uniforms: Sequence[float] = (),
        choices: Sequence[int] = (),
    ) -> None:
        self.randoms = list(randoms)
        self.uniforms = list(uniforms)
        self.choices = list(choices)
        self.calls: List[str] = []

    def random(self) -> float:
        self.calls.append("random")
        return self.randoms.pop(0) if self.randoms else 0.99

    def uniform(self, a: float, b: float) -> float:
        self.calls.append("uniform")
        return self.uniforms.pop(0) if self.uniforms else (a + b) / 2.0

    def choice(self, seq):
        self.calls.append("choice")
        idx = self.choices.pop(0) if self.choices else 0
        return seq[idx % len(seq)]


class Recorder:
    """Catch-all router listener keeping (topic, payload) in emit order."""

    def __init__(self, router: EventRouter) -> None:
        self.events: List[Tuple[str, Dict[str, Any]]] = []
        router.subscribe_all(self._on_event)

    def _on_event(self, topic: str, data: Dict[str, Any]) -> None:
        self.events.append((topic, dict(data)))

    def topics(self) -> List[str]:
        return [t for t, _ in self.events]

    def of(self, topic: str) -> List[Dict[str, Any]]:
        return [d for t, d in self.events if t == topic]

    def logs(self) -> List[str]:
        return [d["text"] for d in self.of("battle.log")]

    def cues(self, kind: Optional[str] = None) -> List[Dict[str, Any]]:
        return [d for d in self.of("fx.cue") if kind is None or d["kind"] == kind]

    def clear(self) -> None:
        self.events.clear()


@pytest.fixture(autouse=True, scope="session")
def _roster_registered():
    register_enemy_templates(VEIL_ROAD_ROSTER)


@pytest.fixture(autouse=True)
def _quiet_debug_log(monkeypatch):
    monkeypatch.setattr(debug_logger, "DEBUG_ENABLED", False)


@pytest.fixture
def rng() -> ScriptedRng:
    return ScriptedRng()


@pytest.fixture
def router() -> EventRouter:
    return EventRouter()


@pytest.fixture
def recorder(router) -> Recorder:
    return Recorder(router)


@pytest.fixture
def world(router, rng) -> PrototypeWorld:
    return PrototypeWorld(WorldConfig(seed=7), router=router, rng=rng)


@pytest.fixture
def enter_zone(world):
    """Stand in the middle of a zone and run one zero-length tick."""

    def _enter(zone_id: str) -> None:
        zone = next(z for z in world.zones if z.id == zone_id)
        world.place_player(zone.x, zone.z)
        world.tick(0.0)

    return _enter
