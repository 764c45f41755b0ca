from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, FrozenSet, Tuple

log = logging.getLogger(__name__)


class GameState(str, Enum):
    MENU = "menu"
    HANGAR = "hangar"
    PLAYING = "playing"
    WAVE_COMPLETE = "waveComplete"
    GAME_OVER = "gameOver"


class TransitionError(RuntimeError):
    pass


# command -> (allowed source states, target state)
TRANSITIONS: Dict[str, Tuple[FrozenSet[GameState], GameState]] = {
    "start": (frozenset({GameState.MENU, GameState.HANGAR}), GameState.PLAYING),
    "open_hangar": (frozenset({GameState.MENU, GameState.WAVE_COMPLETE, GameState.GAME_OVER}), GameState.HANGAR),
    "menu": (frozenset({GameState.HANGAR, GameState.GAME_OVER}), GameState.MENU),
    "next_wave": (frozenset({GameState.WAVE_COMPLETE}), GameState.PLAYING),
    "retry": (frozenset({GameState.GAME_OVER}), GameState.PLAYING),
    "wave_complete": (frozenset({GameState.PLAYING}), GameState.WAVE_COMPLETE),
    "game_over": (frozenset({GameState.PLAYING}), GameState.GAME_OVER),
}


class StateMachine:
    def __init__(self, state: GameState = GameState.MENU) -> None:
        self.state = state
        self.previous = state

    def can(self, command: str) -> bool:
        sources, _ = TRANSITIONS[command]
        return self.state in sources

    def fire(self, command: str) -> GameState:
        if command not in TRANSITIONS:
            raise TransitionError(f"Unknown command: {command}")
        sources, target = TRANSITIONS[command]
        if self.state not in sources:
            raise TransitionError(f"Cannot {command} from {self.state.value}")
        log.debug("State %s -> %s (%s)", self.state.value, target.value, command)
        self.previous, self.state = self.state, target
        return target
