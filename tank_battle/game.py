from __future__ import annotations

from typing import List

import pygame

from .config import Settings, load_settings
from .context import Command, Controls
from .render import Renderer
from .simulation import Simulation
from .ui import GameUI


KEY_COMMANDS = {
    pygame.K_RETURN: Command.START,
    pygame.K_KP_ENTER: Command.START,
    pygame.K_p: Command.TOGGLE_PAUSE,
    pygame.K_r: Command.RESTART,
}


def controls_from_keys(keys) -> Controls:
    return Controls(
        turn_left=bool(keys[pygame.K_LEFT]),
        turn_right=bool(keys[pygame.K_RIGHT]),
        forward=bool(keys[pygame.K_w]),
        backward=bool(keys[pygame.K_s]),
        strafe_left=bool(keys[pygame.K_a]),
        strafe_right=bool(keys[pygame.K_d]),
        fire=bool(keys[pygame.K_SPACE]),
    )


class Game:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.clock = pygame.time.Clock()
        self.screen = pygame.display.set_mode((settings.arena.width, settings.arena.height))
        pygame.display.set_caption(settings.window.title)
        self.sim = Simulation(settings)
        self.renderer = Renderer(self.screen, settings)
        self.ui = GameUI(settings.arena.width, settings.arena.height)

    def run(self) -> None:
        running = True
        fps = self.settings.window.fps
        while running:
            dt = self.clock.tick(fps) / 1000.0
            commands: List[Command] = []
            for event in pygame.event.get():
                self.ui.process_event(event)
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key in KEY_COMMANDS:
                        commands.append(KEY_COMMANDS[event.key])

            snap = self.sim.tick(dt, controls_from_keys(pygame.key.get_pressed()), commands)
            self.renderer.draw(self.sim, dt)
            self.ui.update_hud(snap)
            self.ui.update(dt)
            self.ui.draw(self.screen)
            pygame.display.flip()

    @staticmethod
    def init_pygame() -> None:
        pygame.init()


def run_game() -> None:
    Game.init_pygame()
    settings = load_settings()
    Game(settings).run()
    pygame.quit()


if __name__ == "__main__":
    run_game()
