from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional
import random

from .arena import Level


class GameMode(Enum):
    INTRO = "intro"
    RUNNING = "running"
    PAUSED = "paused"
    WIN = "win"
    LOSE = "lose"


class Command(Enum):
    START = "start"
    RESTART = "restart"
    TOGGLE_PAUSE = "toggle_pause"


@dataclass
class Controls:
    """Held input state, sampled once per tick."""
    turn_left: bool = False
    turn_right: bool = False
    forward: bool = False
    backward: bool = False
    strafe_left: bool = False
    strafe_right: bool = False
    fire: bool = False

    @property
    def turn(self) -> int:
        return int(self.turn_right) - int(self.turn_left)

    @property
    def thrust(self) -> int:
        return int(self.forward) - int(self.backward)

    @property
    def strafe(self) -> int:
        return int(self.strafe_right) - int(self.strafe_left)


@dataclass
class EffectCue:
    x: float
    y: float
    color: tuple[int, int, int]
    count: int


@dataclass
class RunStats:
    time_sec: float = 0.0
    kills: int = 0
    shots_fired: int = 0
    final_score: Optional[int] = None


@dataclass
class GameContext:
    mode: GameMode = GameMode.INTRO
    rng: random.Random = field(default_factory=lambda: random.Random(2025))
    # Cosmetic randomness is kept apart so particles never perturb AI rolls
    fx_rng: random.Random = field(default_factory=lambda: random.Random(1337))
    width: int = 0
    height: int = 0
    level: Optional[Level] = None
    level_index: int = 1
    score: int = 0
    lives: int = 3
    controls: Controls = field(default_factory=Controls)
    cues: List[EffectCue] = field(default_factory=list)
    stats: RunStats = field(default_factory=RunStats)

    @property
    def running(self) -> bool:
        return self.mode is GameMode.RUNNING

    def set_mode(self, mode: GameMode) -> None:
        if mode is self.mode:
            return
        print(f"[Mode] {self.mode.value} -> {mode.value} (score {self.score}, lives {self.lives})")
        self.mode = mode
        if mode in (GameMode.WIN, GameMode.LOSE):
            self.stats.final_score = self.score

    def emit(self, x: float, y: float, color: tuple[int, int, int], count: int) -> None:
        self.cues.append(EffectCue(x, y, color, count))
