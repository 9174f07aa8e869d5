import os
import sys
from pathlib import Path

# --- ensure project root is importable ---
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

import pygame

from veilborn.core.world import PrototypeWorld, WorldConfig
from veilborn.ui.frontend import FrontendConfig, PrototypeFrontend


def main() -> int:
    seed_env = os.environ.get("VEILBORN_SEED")
    cfg = WorldConfig(seed=int(seed_env) if seed_env else None)
    fe_cfg = FrontendConfig()

    pygame.init()
    pygame.display.set_caption(fe_cfg.caption)
    screen = pygame.display.set_mode(fe_cfg.window_size)
    clock = pygame.time.Clock()

    world = PrototypeWorld(cfg)
    frontend = PrototypeFrontend(world, fe_cfg)

    print("[ZONES]")
    for z in world.zones:
        print(f"  {z.id}: ({z.x:.0f}, {z.z:.0f}) r={z.radius}")

    running = True
    while running:
        dt = clock.tick(60) / 1000.0

        for e in pygame.event.get():
            if not frontend.handle_event(e):
                running = False

        frontend.update(dt, pygame.key.get_pressed())
        frontend.draw(screen)

        pygame.display.flip()

    pygame.quit()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
