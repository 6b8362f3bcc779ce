"""
Central configuration for the reading load engine host.
All values can be overridden via environment variables or a local config.json.

Engine thresholds live in readload.inference.thresholds and are not
configurable.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

_ROOT = Path(__file__).parent.parent
_CONFIG_FILE = _ROOT / "config.json"


@dataclass
class Config:
    # API
    api_host: str = "127.0.0.1"
    api_port: int = 8765
    cors_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"]
    )
    ws_push_interval_s: float = 1.0

    # Session
    min_dwell_report_seconds: float = 2.0    # dwell reports at or below this are ignored
    break_suggestion_seconds: int = 480      # sustained strain before suggesting a pause
    top_friction_count: int = 3

    # Logging
    log_level: str = "info"

    @classmethod
    def load(cls, config_file: Path = _CONFIG_FILE) -> "Config":
        cfg = cls()
        if config_file.exists():
            overrides = json.loads(config_file.read_text())
            for k, v in overrides.items():
                if hasattr(cfg, k):
                    setattr(cfg, k, v)
        # environment variable overrides (RLE_*)
        for k in cfg.__dataclass_fields__:  # type: ignore[attr-defined]
            env_key = f"RLE_{k.upper()}"
            if env_key in os.environ:
                raw = os.environ[env_key]
                current = getattr(cfg, k)
                if isinstance(current, list):
                    setattr(cfg, k, [s.strip() for s in raw.split(",") if s.strip()])
                else:
                    setattr(cfg, k, type(current)(raw))
        return cfg


# Module-level singleton
config = Config.load()
