# veilborn/ui/frontend.py

from __future__ import annotations

import math
import random
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional, Tuple

import pygame

from veilborn.battle.action_phases import PlayerAction
from veilborn.battle.signals import (
    CUE_FLASH,
    CUE_IMPACT,
    CUE_LUNGE,
    CUE_SHAKE,
    TARGET_ENEMY,
    TARGET_PARTY,
    TOPIC_ACTION_MENU,
    TOPIC_CUE,
    TOPIC_DAMAGE,
    TOPIC_LOG,
    TOPIC_RUN_RESET,
    TOPIC_SESSION_END,
    TOPIC_SESSION_START,
)
from veilborn.core.world import PrototypeWorld, WorldMode
from veilborn.debug.debug_logger import log as battle_log


OVERLAY_TEXT = {
    True: ("Victory", "You survive the clash. The road opens again."),
    False: ("Defeat", "You fall back and regroup at the last safe footing."),
}

ACTION_LABELS = {
    PlayerAction.ATTACK: "[1] Attack",
    PlayerAction.SKILL: "[2] Skill",
    PlayerAction.RESOURCE_ART: "[3] Dread Art",
}


@dataclass
class FrontendConfig:
    window_size: tuple[int, int] = (1024, 768)
    caption: str = "Veilborn Oath - Prototype"
    font_name: str = "consolas"
    font_size: int = 16

    # Presentation only: the world itself never clamps dt.
    max_frame_dt: float = 0.033

    log_lines: int = 9

    # World units -> pixels on the top-down map.
    map_scale: float = 3.0

    # Cue strengths are in world units; these turn them into pixels.
    shake_px: float = 60.0
    lunge_px: float = 40.0


@dataclass
class DamageNumber:
    """Floating combat text over a battle slot."""
    text: str
    pos: pygame.Vector2
    critical: bool = False
    heal: bool = False
    age: float = 0.0
    pop: float = 0.1
    drift: pygame.Vector2 = field(default_factory=lambda: pygame.Vector2(0.0, 0.0))

    @property
    def lifetime(self) -> float:
        if self.heal:
            return 1.0
        return 1.05 if self.critical else 0.95

    @property
    def rise_speed(self) -> float:
        # px/s
        if self.heal:
            return 39.0
        return 49.0 if self.critical else 43.0

    @property
    def alive(self) -> bool:
        return self.age < self.lifetime

    @property
    def alpha(self) -> float:
        return max(0.0, 1.0 - self.age / self.lifetime)

    @property
    def scale(self) -> float:
        return 1.0 + (self.pop / 0.1) * 0.28 if self.pop > 0 else 1.0

    @property
    def color(self) -> Tuple[int, int, int]:
        if self.heal:
            return (110, 240, 150)
        if self.critical:
            return (255, 210, 90)
        return (255, 235, 235)

    def update(self, dt: float) -> None:
        self.age += dt
        # Hang briefly before drifting upward.
        hang = 0.12
        move = (self.age / hang) * 0.22 if self.age < hang else 1.0
        self.pos.y -= self.rise_speed * dt * move
        self.pos += self.drift * dt * move
        self.pop = max(0.0, self.pop - dt)


@dataclass
class SlotPulse:
    """Short-lived lunge / hit / flash timer attached to one battle slot."""
    kind: str
    strength: float
    duration: float
    t: float = 0.0

    @property
    def k(self) -> float:
        if self.duration <= 0:
            return 0.0
        return max(0.0, 1.0 - self.t / self.duration)


class PrototypeFrontend:
    """
    pygame presentation for a PrototypeWorld.

    Laws:
      - No simulation authority: all state changes go through the world's
        inbound calls (tick, select_*, move_player, request_run_reset).
      - Everything drawn comes from router events or read-only world views.
    """

    def __init__(
        self,
        world: PrototypeWorld,
        cfg: Optional[FrontendConfig] = None,
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.world = world
        self.cfg = cfg or FrontendConfig()
        # Cosmetic jitter only; never shared with the battle rng.
        self._fx_rng = rng or random.Random()

        self.log: Deque[str] = deque(maxlen=self.cfg.log_lines)
        self.damage_numbers: List[DamageNumber] = []
        self.pulses: Dict[Tuple[str, int], List[SlotPulse]] = {}

        self.menu_actor: Optional[str] = None
        self.menu_actor_index: Optional[int] = None
        self.menu_actions: List[str] = []

        self.enemy_name: Optional[str] = None
        self.enemy_is_boss = False

        self.overlay: Optional[Tuple[str, str]] = (
            "Veilborn Oath",
            "Walk into a glowing ring to start a fight. Enter to begin.",
        )

        self.shake_t = 0.0
        self.shake_dur = 0.12
        self.shake_mag = 0.0
        self.shake_offset = pygame.Vector2(0, 0)

        self._font: Optional[pygame.font.Font] = None
        self._font_big: Optional[pygame.font.Font] = None

        self._register_handlers()

    # ------------------------------------------------------------------
    # Router wiring
    # ------------------------------------------------------------------
    def _register_handlers(self) -> None:
        r = self.world.router
        r.subscribe(TOPIC_LOG, self._on_log)
        r.subscribe(TOPIC_DAMAGE, self._on_damage)
        r.subscribe(TOPIC_SESSION_START, self._on_session_start)
        r.subscribe(TOPIC_SESSION_END, self._on_session_end)
        r.subscribe(TOPIC_ACTION_MENU, self._on_action_menu)
        r.subscribe(TOPIC_CUE, self._on_cue)
        r.subscribe(TOPIC_RUN_RESET, self._on_run_reset)

    def _on_log(self, topic: str, data: Dict[str, Any]) -> None:
        self.log.append(str(data.get("text", "")))

    def _on_session_start(self, topic: str, data: Dict[str, Any]) -> None:
        self.log.clear()
        self.enemy_name = data.get("enemy_name")
        self.enemy_is_boss = bool(data.get("is_boss", False))
        self.overlay = None
        self.pulses.clear()

    def _on_session_end(self, topic: str, data: Dict[str, Any]) -> None:
        self.enemy_name = None
        self.enemy_is_boss = False
        self.overlay = OVERLAY_TEXT[bool(data.get("victory"))]

    def _on_action_menu(self, topic: str, data: Dict[str, Any]) -> None:
        self.menu_actor = data.get("actor_name")
        self.menu_actor_index = data.get("actor_index")
        self.menu_actions = list(data.get("actions") or [])

    def _on_damage(self, topic: str, data: Dict[str, Any]) -> None:
        target_kind = data.get("target_kind", TARGET_ENEMY)
        target_index = int(data.get("target_index") or 0)
        heal = bool(data.get("is_heal"))
        crit = bool(data.get("is_critical"))
        amount = int(data.get("amount", 0))

        anchor = self._slot_anchor(target_kind, target_index)
        self.damage_numbers.append(
            DamageNumber(
                text=f"+{amount}" if heal else str(amount),
                pos=pygame.Vector2(anchor) + pygame.Vector2(0, -30),
                critical=crit,
                heal=heal,
                drift=pygame.Vector2(
                    self._fx_rng.uniform(-7.0, 7.0), self._fx_rng.uniform(-6.0, 6.0)
                ),
            )
        )

    def _on_cue(self, topic: str, data: Dict[str, Any]) -> None:
        kind = data.get("kind")
        strength = float(data.get("strength", 0.0))

        if kind == CUE_SHAKE:
            self.add_shake(strength, 0.11 + strength * 0.2)
            return

        target_kind = data.get("target_kind") or TARGET_ENEMY
        target_index = int(data.get("target_index") or 0)
        duration = {CUE_LUNGE: 0.2, CUE_IMPACT: 0.18, CUE_FLASH: 0.1}.get(kind)
        if duration is None:
            battle_log("world", f"frontend: unknown cue {kind!r}")
            return
        self.pulses.setdefault((target_kind, target_index), []).append(
            SlotPulse(kind=kind, strength=strength, duration=duration)
        )

    def _on_run_reset(self, topic: str, data: Dict[str, Any]) -> None:
        self.log.clear()
        self.damage_numbers.clear()
        self.pulses.clear()
        self.enemy_name = None
        self.overlay = None
        self.shake_t = 0.0
        self.shake_mag = 0.0

    # ------------------------------------------------------------------
    # Shake
    # ------------------------------------------------------------------
    def add_shake(self, mag: float, dur: float) -> None:
        self.shake_mag = max(self.shake_mag, mag)
        self.shake_dur = max(0.05, dur)
        self.shake_t = self.shake_dur

    def _update_shake(self, dt: float) -> None:
        if self.shake_t <= 0:
            self.shake_offset.update(0, 0)
            return
        self.shake_t = max(0.0, self.shake_t - dt)
        k = self.shake_t / self.shake_dur
        px = self.shake_mag * self.cfg.shake_px * k
        self.shake_offset.update(
            self._fx_rng.uniform(-1, 1) * px,
            self._fx_rng.uniform(-1, 1) * px * 0.55,
        )
        if self.shake_t == 0:
            self.shake_mag = 0.0

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------
    def handle_event(self, event: pygame.event.Event) -> bool:
        """Returns False when the frontend wants to quit."""
        if event.type == pygame.QUIT:
            return False
        if event.type != pygame.KEYDOWN:
            return True

        key = event.key
        if key == pygame.K_ESCAPE:
            return False
        if key == pygame.K_r:
            self.world.request_run_reset()
            return True
        if self.overlay is not None:
            if key in (pygame.K_RETURN, pygame.K_SPACE, pygame.K_KP_ENTER):
                self.overlay = None
            return True

        idx = self.world.current_actor_index()
        if idx is None:
            return True
        if key in (pygame.K_1, pygame.K_KP1):
            self.world.select_attack(idx)
        elif key in (pygame.K_2, pygame.K_KP2):
            self.world.select_skill(idx)
        elif key in (pygame.K_3, pygame.K_KP3):
            self.world.select_resource_art(idx)
        return True

    def movement_from_keys(self, pressed) -> Tuple[float, float, bool]:
        """(x, z, sprint) from a pygame key state; x/z normalized."""
        mx = mz = 0.0
        if pressed[pygame.K_w] or pressed[pygame.K_UP]:
            mz += 1.0
        if pressed[pygame.K_s] or pressed[pygame.K_DOWN]:
            mz -= 1.0
        if pressed[pygame.K_d] or pressed[pygame.K_RIGHT]:
            mx += 1.0
        if pressed[pygame.K_a] or pressed[pygame.K_LEFT]:
            mx -= 1.0
        length = math.hypot(mx, mz)
        if length > 0:
            mx, mz = mx / length, mz / length
        sprint = bool(pressed[pygame.K_LSHIFT] or pressed[pygame.K_RSHIFT])
        return mx, mz, sprint

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------
    def update(self, dt: float, pressed=None) -> None:
        dt = max(0.0, min(self.cfg.max_frame_dt, dt))

        if pressed is not None and self.overlay is None and self.world.mode == WorldMode.WORLD:
            mx, mz, sprint = self.movement_from_keys(pressed)
            if mx or mz:
                speed = self.world.cfg.sprint_speed if sprint else self.world.cfg.walk_speed
                self.world.move_player(mx * speed * dt, mz * speed * dt)

        self.world.tick(dt)

        for num in self.damage_numbers:
            num.update(dt)
        self.damage_numbers = [n for n in self.damage_numbers if n.alive]

        for key in list(self.pulses):
            alive = []
            for p in self.pulses[key]:
                p.t += dt
                if p.k > 0:
                    alive.append(p)
            if alive:
                self.pulses[key] = alive
            else:
                del self.pulses[key]

        self._update_shake(dt)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------
    def _slot_anchor(self, target_kind: str, target_index: int) -> Tuple[int, int]:
        w, h = self.cfg.window_size
        if target_kind == TARGET_PARTY:
            return (int(w * 0.22), int(h * 0.25) + target_index * 90)
        return (int(w * 0.7), int(h * 0.33))

    def _slot_offset(self, target_kind: str, target_index: int) -> pygame.Vector2:
        off = pygame.Vector2(0, 0)
        for p in self.pulses.get((target_kind, target_index), []):
            if p.kind == CUE_LUNGE:
                # Out and back: peaks mid-pulse.
                reach = math.sin((1.0 - p.k) * math.pi) * p.strength * self.cfg.lunge_px
                off.x += reach if target_kind == TARGET_PARTY else -reach
            elif p.kind == CUE_IMPACT:
                off.x += math.sin(p.t * 90.0) * p.strength * self.cfg.lunge_px * 0.5 * p.k
        return off

    def _slot_flash(self, target_kind: str, target_index: int) -> float:
        k = 0.0
        for p in self.pulses.get((target_kind, target_index), []):
            if p.kind in (CUE_FLASH, CUE_IMPACT):
                k = max(k, p.k * min(1.0, p.strength))
        return k

    # ------------------------------------------------------------------
    # Draw
    # ------------------------------------------------------------------
    def _fonts(self) -> Tuple[pygame.font.Font, pygame.font.Font]:
        if self._font is None:
            self._font = pygame.font.SysFont(self.cfg.font_name, self.cfg.font_size)
            self._font_big = pygame.font.SysFont(self.cfg.font_name, self.cfg.font_size * 2, bold=True)
        return self._font, self._font_big

    def draw(self, screen: pygame.Surface) -> None:
        screen.fill((14, 16, 26))
        if self.world.mode == WorldMode.BATTLE:
            self._draw_battle(screen)
        else:
            self._draw_map(screen)
        self._draw_log(screen)
        self._draw_hud(screen)
        if self.overlay is not None:
            self._draw_overlay(screen)

    def _draw_map(self, screen: pygame.Surface) -> None:
        font, _ = self._fonts()
        w, h = screen.get_size()
        cx, cy = w // 2, int(h * 0.4)
        s = self.cfg.map_scale
        b = self.world.cfg.world_bound

        bounds = pygame.Rect(0, 0, int(2 * b * s), int(2 * b * s))
        bounds.center = (cx, cy)
        pygame.draw.rect(screen, (40, 48, 70), bounds, 1)

        for z in self.world.zones:
            pos = (int(cx + z.x * s), int(cy - z.z * s))
            radius = max(2, int(z.radius * s))
            if not z.enabled:
                color = (70, 70, 80)
            elif z.is_boss:
                color = (255, 122, 136)
            else:
                color = (112, 224, 164)
            pygame.draw.circle(screen, color, pos, radius, 2)
            label = font.render(z.id, True, color)
            screen.blit(label, (pos[0] + radius + 4, pos[1] - 8))

        pose = self.world.pose
        px, py = int(cx + pose.x * s), int(cy - pose.z * s)
        pygame.draw.circle(screen, (240, 240, 255), (px, py), 5)
        tip = (int(px + math.sin(pose.yaw) * 10), int(py - math.cos(pose.yaw) * 10))
        pygame.draw.line(screen, (240, 240, 255), (px, py), tip, 2)

    def _draw_battle(self, screen: pygame.Surface) -> None:
        font, font_big = self._fonts()
        shake = self.shake_offset

        # Enemy: name banner only, HP stays hidden.
        ex, ey = self._slot_anchor(TARGET_ENEMY, 0)
        off = self._slot_offset(TARGET_ENEMY, 0) + shake
        size = 120 if self.enemy_is_boss else 80
        rect = pygame.Rect(0, 0, size, size)
        rect.center = (int(ex + off.x), int(ey + off.y))
        base = (190, 70, 90) if self.enemy_is_boss else (150, 90, 110)
        flash = self._slot_flash(TARGET_ENEMY, 0)
        color = tuple(min(255, int(c + (255 - c) * flash * 0.55)) for c in base)
        pygame.draw.rect(screen, color, rect)
        if self.enemy_name:
            title = font_big.render(self.enemy_name, True, (255, 230, 235))
            screen.blit(title, title.get_rect(midbottom=(rect.centerx, rect.top - 8)))
            hp = font.render("HP ???", True, (200, 180, 190))
            screen.blit(hp, hp.get_rect(midtop=(rect.centerx, rect.bottom + 6)))

        # Party panel
        for i, member in enumerate(self.world.party):
            ax, ay = self._slot_anchor(TARGET_PARTY, i)
            off = self._slot_offset(TARGET_PARTY, i) + shake
            box = pygame.Rect(0, 0, 48, 48)
            box.center = (int(ax + off.x), int(ay + off.y))
            base = (120, 170, 230) if member.alive else (60, 60, 70)
            flash = self._slot_flash(TARGET_PARTY, i)
            color = tuple(min(255, int(c + (255 - c) * flash * 0.35)) for c in base)
            pygame.draw.rect(screen, color, box)
            if i == self.menu_actor_index and self.menu_actions:
                pygame.draw.rect(screen, (255, 230, 140), box.inflate(8, 8), 2)

            tx = box.right + 14
            lines = [
                f"{member.name}",
                f"HP {member.hp}/{member.max_hp}   Dread {member.display_dread}/100",
                member.status_label(),
            ]
            for j, line in enumerate(lines):
                screen.blit(font.render(line, True, (230, 230, 245)), (tx, box.top - 12 + j * 18))

        # Action menu
        if self.menu_actions:
            w, h = screen.get_size()
            y = int(h * 0.62)
            head = font.render(f"{self.menu_actor}'s move:", True, (255, 230, 140))
            screen.blit(head, (int(w * 0.55), y))
            for j, action in enumerate(self.menu_actions):
                label = ACTION_LABELS.get(action, action)
                if action == PlayerAction.SKILL and self.menu_actor_index is not None:
                    label = f"{label} ({self.world.party[self.menu_actor_index].skill.name})"
                screen.blit(font.render(label, True, (240, 240, 255)), (int(w * 0.55), y + 22 + j * 20))

        # Floating numbers
        for num in self.damage_numbers:
            surf = (font_big if num.critical else font).render(num.text, True, num.color)
            if num.scale != 1.0:
                sw, sh = surf.get_size()
                surf = pygame.transform.smoothscale(surf, (int(sw * num.scale), int(sh * num.scale)))
            surf.set_alpha(int(255 * num.alpha))
            pos = num.pos + shake
            screen.blit(surf, surf.get_rect(center=(int(pos.x), int(pos.y))))

    def _draw_log(self, screen: pygame.Surface) -> None:
        font, _ = self._fonts()
        w, h = screen.get_size()
        top = h - 16 - self.cfg.log_lines * 18
        panel = pygame.Rect(8, top - 6, int(w * 0.5), self.cfg.log_lines * 18 + 12)
        pygame.draw.rect(screen, (8, 10, 18), panel)
        for i, line in enumerate(self.log):
            screen.blit(font.render(line, True, (210, 214, 230)), (16, top + i * 18))

    def _draw_hud(self, screen: pygame.Surface) -> None:
        font, _ = self._fonts()
        w = self.world
        lines = [
            f"MODE {w.mode.upper()}   phase={w.phase}",
            f"pos=({w.pose.x:.1f}, {w.pose.z:.1f})   cooldown={w.cooldown_remaining:.1f}s",
            f"boss cleared: {'yes' if w.boss_cleared else 'no'}",
            "WASD/arrows move  Shift sprint  1/2/3 act  R reset  Esc quit",
        ]
        y = 8
        for line in lines:
            screen.blit(font.render(line, True, (255, 255, 255)), (10, y))
            y += 18

    def _draw_overlay(self, screen: pygame.Surface) -> None:
        font, font_big = self._fonts()
        title, text = self.overlay
        shade = pygame.Surface(screen.get_size(), pygame.SRCALPHA)
        shade.fill((0, 0, 0, 150))
        screen.blit(shade, (0, 0))

        cx, cy = screen.get_width() // 2, screen.get_height() // 2
        t = font_big.render(title, True, (255, 240, 220))
        screen.blit(t, t.get_rect(center=(cx, cy - 20)))
        s = font.render(text, True, (230, 230, 240))
        screen.blit(s, s.get_rect(center=(cx, cy + 16)))
        hint = font.render("Enter to continue", True, (170, 170, 190))
        screen.blit(hint, hint.get_rect(center=(cx, cy + 44)))
