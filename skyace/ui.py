from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import pygame
import pygame_gui

from .snapshot import HudSummary, UpgradeRow, WaveSummary
from .state import GameState

UPGRADE_LABELS: Dict[str, str] = {
    "maxHealth": "Hull Integrity",
    "armor": "Armor Plating",
    "speed": "Engine Power",
    "fireRate": "Fire Rate",
    "damage": "Gun Caliber",
    "missiles": "Homing Missiles",
}

Command = Tuple[str, Optional[str]]


class GameUI:
    """HUD plus one screen panel per non-playing state.

    Buttons are mapped to simulation commands; pressing one calls
    ``on_command(name, arg)``.
    """

    def __init__(self, width: int, height: int, on_command: Callable[[str, Optional[str]], None]) -> None:
        theme_path = Path('assets/ui/theme.json')
        self.manager = pygame_gui.UIManager((width, height), theme_path if theme_path.exists() else None)
        self.width = width
        self.height = height
        self.on_command = on_command

        self.screen_panel: Optional[pygame_gui.elements.UIPanel] = None
        self.screen_state: Optional[GameState] = None
        self.buttons: Dict[pygame_gui.elements.UIButton, Command] = {}
        self.credits_label: Optional[pygame_gui.elements.UILabel] = None

        # HUD elements
        self.hud_panel: Optional[pygame_gui.elements.UIPanel] = None
        self.hp_bar: Optional[pygame_gui.elements.UIProgressBar] = None
        self.armor_bar: Optional[pygame_gui.elements.UIProgressBar] = None
        self.special_bar: Optional[pygame_gui.elements.UIProgressBar] = None
        self.wave_label: Optional[pygame_gui.elements.UILabel] = None
        self.credits_hud_label: Optional[pygame_gui.elements.UILabel] = None
        self.enemies_label: Optional[pygame_gui.elements.UILabel] = None

    def process_event(self, event: pygame.event.Event) -> None:
        self.manager.process_events(event)
        self.handle_ui_event(event)

    def handle_ui_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame_gui.UI_BUTTON_PRESSED:
            return
        cmd = self.buttons.get(event.ui_element)
        if cmd is not None:
            # The panel is stale once a command runs; it is rebuilt next frame
            self.buttons.clear()
            self.on_command(*cmd)

    def update(self, dt: float) -> None:
        self.manager.update(dt)

    def draw(self, surface: pygame.Surface) -> None:
        self.manager.draw_ui(surface)

    # Screens
    def show_screen(
        self,
        state: GameState,
        rows: List[UpgradeRow],
        summary: WaveSummary,
        force: bool = False,
    ) -> None:
        """Build the panel for ``state``; no-op when it is already shown."""
        if state == self.screen_state and not force:
            return
        self.close_screen()
        self.screen_state = state
        if state == GameState.PLAYING:
            self.ensure_hud()
            self.hud_panel.show()
            return
        if self.hud_panel is not None:
            self.hud_panel.hide()

        w, h = 520, 420
        x, y = (self.width - w) // 2, (self.height - h) // 2
        self.screen_panel = pygame_gui.elements.UIPanel(pygame.Rect(x, y, w, h), manager=self.manager)
        if state == GameState.MENU:
            self._title("SKY ACE: WARZONE SKIES")
            self._label(60, "Fly, fight, survive the waves.")
            self._button(20, 110, "Start", ("start", None))
            self._button(200, 110, "Hangar", ("open_hangar", None))
        elif state == GameState.HANGAR:
            self._build_hangar(rows, summary.credits)
        elif state == GameState.WAVE_COMPLETE:
            self._title(f"WAVE {summary.wave} COMPLETE")
            self._label(60, f"Enemies destroyed: {summary.wave_kills}")
            self._label(86, f"Wave bonus: {summary.wave_bonus}")
            self._label(112, f"Credits: {summary.credits}")
            self._button(20, 160, "Next Wave", ("next_wave", None))
            self._button(200, 160, "Hangar", ("open_hangar", None))
        elif state == GameState.GAME_OVER:
            self._title("GAME OVER")
            self._label(60, f"Reached wave {summary.wave}")
            self._label(86, f"Credits: {summary.credits}")
            self._button(20, 140, "Retry", ("retry", None))
            self._button(200, 140, "Hangar", ("open_hangar", None))
            self._button(380, 140, "Menu", ("menu", None), width=120)

    def _build_hangar(self, rows: List[UpgradeRow], credits: int) -> None:
        self._title("HANGAR")
        self.credits_label = self._label(50, f"Credits: {credits}")
        y = 86
        for row in rows:
            name = UPGRADE_LABELS.get(row.kind, row.kind)
            btn = self._button(
                20, y, f"{name}  Lv {row.level}  ({row.next_cost})", ("purchase", row.kind), width=480, height=32,
            )
            if not row.affordable:
                btn.disable()
            y += 38
        self._button(20, y + 8, "Launch", ("start", None))
        self._button(200, y + 8, "Menu", ("menu", None))

    def close_screen(self) -> None:
        if self.screen_panel is not None:
            self.screen_panel.kill()
            self.screen_panel = None
        self.buttons.clear()
        self.credits_label = None
        self.screen_state = None

    def _title(self, text: str) -> pygame_gui.elements.UILabel:
        return pygame_gui.elements.UILabel(pygame.Rect(10, 10, 480, 30), text=text,
                                           manager=self.manager, container=self.screen_panel)

    def _label(self, y: int, text: str) -> pygame_gui.elements.UILabel:
        return pygame_gui.elements.UILabel(pygame.Rect(10, y, 480, 24), text=text,
                                           manager=self.manager, container=self.screen_panel)

    def _button(self, x: int, y: int, text: str, cmd: Command, width: int = 160, height: int = 36) -> pygame_gui.elements.UIButton:
        btn = pygame_gui.elements.UIButton(relative_rect=pygame.Rect(x, y, width, height), text=text,
                                           manager=self.manager, container=self.screen_panel)
        self.buttons[btn] = cmd
        return btn

    # HUD helpers
    def ensure_hud(self) -> None:
        if self.hud_panel is not None:
            return
        self.hud_panel = pygame_gui.elements.UIPanel(pygame.Rect(10, 10, 360, 84), manager=self.manager)
        for i, name in enumerate(("HP", "AR", "SP")):
            pygame_gui.elements.UILabel(pygame.Rect(4, i * 20, 28, 18), text=name, manager=self.manager, container=self.hud_panel)
        self.hp_bar = pygame_gui.elements.UIProgressBar(pygame.Rect(34, 2, 180, 14), manager=self.manager, container=self.hud_panel)
        self.armor_bar = pygame_gui.elements.UIProgressBar(pygame.Rect(34, 22, 180, 14), manager=self.manager, container=self.hud_panel)
        self.special_bar = pygame_gui.elements.UIProgressBar(pygame.Rect(34, 42, 180, 14), manager=self.manager, container=self.hud_panel)
        self.wave_label = pygame_gui.elements.UILabel(pygame.Rect(222, 0, 130, 18), text='Wave 1', manager=self.manager, container=self.hud_panel)
        self.credits_hud_label = pygame_gui.elements.UILabel(pygame.Rect(222, 20, 130, 18), text='Credits 0', manager=self.manager, container=self.hud_panel)
        self.enemies_label = pygame_gui.elements.UILabel(pygame.Rect(222, 40, 130, 18), text='Enemies 0', manager=self.manager, container=self.hud_panel)

    def update_hud(self, hud: HudSummary) -> None:
        self.ensure_hud()
        self.hp_bar.set_current_progress(max(0.0, min(100.0, hud.health_pct)))
        self.armor_bar.set_current_progress(max(0.0, min(100.0, hud.armor_pct)))
        self.special_bar.set_current_progress(max(0.0, min(100.0, hud.special_pct)))
        self.wave_label.set_text(f'Wave {hud.wave}')
        self.credits_hud_label.set_text(f'Credits {hud.credits}')
        self.enemies_label.set_text(f'Enemies {hud.remaining_enemies}')
