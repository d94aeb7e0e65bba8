from __future__ import annotations

from pathlib import Path
from typing import Optional

import pygame
import pygame_gui

from .context import GameMode
from .simulation import Snapshot


OVERLAY_TEXT = {
    GameMode.INTRO: ("Tank Battle", "Press <b>Enter</b> to start.<br>W/S drive, A/D strafe, arrows turn, Space fires."),
    GameMode.PAUSED: ("Paused", "Press <b>P</b> to resume."),
    GameMode.WIN: ("Victory!", "All enemies destroyed. Score <b>{score}</b>.<br>Press <b>Enter</b> to play again."),
    GameMode.LOSE: ("Defeat", "Your tank was destroyed. Score <b>{score}</b>.<br>Press <b>Enter</b> to play again."),
}


class GameUI:
    def __init__(self, width: int, height: int) -> None:
        theme_path = Path('assets/ui/theme.json')
        self.manager = pygame_gui.UIManager((width, height), theme_path if theme_path.exists() else None)
        self.width = width
        self.height = height

        self.hud_panel: Optional[pygame_gui.elements.UIPanel] = None
        self.lives_label: Optional[pygame_gui.elements.UILabel] = None
        self.score_label: Optional[pygame_gui.elements.UILabel] = None
        self.level_label: Optional[pygame_gui.elements.UILabel] = None
        self.enemies_label: Optional[pygame_gui.elements.UILabel] = None

        self.overlay_panel: Optional[pygame_gui.elements.UIPanel] = None
        self.overlay_mode: Optional[GameMode] = None

    def process_event(self, event: pygame.event.Event) -> None:
        self.manager.process_events(event)

    def update(self, dt: float) -> None:
        self.manager.update(dt)

    def draw(self, surface: pygame.Surface) -> None:
        self.manager.draw_ui(surface)

    # HUD
    def ensure_hud(self) -> None:
        if self.hud_panel is not None:
            return
        self.hud_panel = pygame_gui.elements.UIPanel(pygame.Rect(10, 10, 420, 30), manager=self.manager)
        self.lives_label = pygame_gui.elements.UILabel(pygame.Rect(4, 2, 90, 22), text='Lives 3', manager=self.manager, container=self.hud_panel)
        self.score_label = pygame_gui.elements.UILabel(pygame.Rect(98, 2, 130, 22), text='Score 0', manager=self.manager, container=self.hud_panel)
        self.level_label = pygame_gui.elements.UILabel(pygame.Rect(232, 2, 80, 22), text='Level 1', manager=self.manager, container=self.hud_panel)
        self.enemies_label = pygame_gui.elements.UILabel(pygame.Rect(316, 2, 96, 22), text='Enemies 0', manager=self.manager, container=self.hud_panel)

    def update_hud(self, snap: Snapshot) -> None:
        self.ensure_hud()
        self.lives_label.set_text(f'Lives {snap.lives}')
        self.score_label.set_text(f'Score {snap.score}')
        self.level_label.set_text(f'Level {snap.level_index}')
        self.enemies_label.set_text(f'Enemies {snap.enemies}')
        self.sync_overlay(snap)

    # Mode overlay
    def sync_overlay(self, snap: Snapshot) -> None:
        if snap.mode is self.overlay_mode:
            return
        self.close_overlay()
        self.overlay_mode = snap.mode
        text = OVERLAY_TEXT.get(snap.mode)
        if text is None:
            return
        title, body = text
        w, h = 460, 170
        x, y = (self.width - w) // 2, (self.height - h) // 2
        self.overlay_panel = pygame_gui.elements.UIPanel(pygame.Rect(x, y, w, h), manager=self.manager, object_id='#overlay')
        pygame_gui.elements.UILabel(pygame.Rect(10, 10, w - 20, 30), text=title, manager=self.manager, container=self.overlay_panel)
        pygame_gui.elements.UITextBox(html_text=body.format(score=snap.score), relative_rect=pygame.Rect(10, 46, w - 20, h - 60), manager=self.manager, container=self.overlay_panel)

    def close_overlay(self) -> None:
        if self.overlay_panel is not None:
            self.overlay_panel.kill()
            self.overlay_panel = None
        self.overlay_mode = None
