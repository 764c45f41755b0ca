from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


@dataclass
class WindowConfig:
    width: int = 960
    height: int = 540
    title: str = "Sky Ace: Warzone Skies"
    fps: int = 60


@dataclass
class InputConfig:
    backend: str = "keyboard"  # 'keyboard' or 'touch'
    thrust_step: float = 0.02
    stick_radius: float = 45.0
    stick_deadzone: float = 0.3


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class Settings:
    window: WindowConfig = field(default_factory=WindowConfig)
    input: InputConfig = field(default_factory=InputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    seed: Optional[int] = None


def load_settings(path: str | Path = "config/settings.yaml") -> Settings:
    p = Path(path)
    raw: Dict[str, Any] = {}
    if p.exists():
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}

    win = raw.get("window", {})
    window = WindowConfig(
        width=int(win.get("width", 960)),
        height=int(win.get("height", 540)),
        title=str(win.get("title", "Sky Ace: Warzone Skies")),
        fps=int(win.get("fps", 60)),
    )

    inp = raw.get("input", {})
    backend = str(inp.get("backend", "keyboard"))
    if backend not in ("keyboard", "touch"):
        raise ValueError(f"Unknown input backend: {backend}")
    input_cfg = InputConfig(
        backend=backend,
        thrust_step=float(inp.get("thrust_step", 0.02)),
        stick_radius=float(inp.get("stick_radius", 45.0)),
        stick_deadzone=float(inp.get("stick_deadzone", 0.3)),
    )

    lg = raw.get("logging", {})
    logging_cfg = LoggingConfig(level=str(lg.get("level", "INFO")).upper())

    seed = raw.get("seed")
    return Settings(
        window=window,
        input=input_cfg,
        logging=logging_cfg,
        seed=int(seed) if seed is not None else None,
    )
