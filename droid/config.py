"""
DroidMaze — droid/config.py
Mission configuration loaded from TOML and validated by Pydantic.
=================================================================
Version:     0.1
Stack:       Python 3.11+ | Pydantic v2 | tomllib
Status:      Configuration layer.
"""

import tomllib
from pathlib import Path
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ================================================================================
# SCHEMA
# ================================================================================

class MissionConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    render: bool = False
    frame_delay: float = Field(default=0.0, ge=0.0)   # seconds between rendered frames
    stop_at_target: bool = False
    start: Tuple[int, int] = (1, 1)                   # oracle start, in map file coordinates
    droid_glyph: str = "D"
    path_glyph: str = "*"

    @field_validator("droid_glyph", "path_glyph")
    @classmethod
    def _single_char(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError("glyphs must be exactly one character")
        return value

# ================================================================================
# LOADER & CACHE
# ================================================================================

DATA_DIR = Path(__file__).parent.parent / "data"
DEFAULT_CONFIG_PATH = DATA_DIR / "config.toml"

_CONFIG_CACHE: Optional[MissionConfig] = None


def load_config(path: Optional[Path] = None) -> MissionConfig:
    """
    Loads the [mission] table of a TOML file.
    An explicit path must exist; the default file falls back to defaults when absent.
    Only the default file is cached.
    """
    global _CONFIG_CACHE
    if path is None:
        if _CONFIG_CACHE is not None:
            return _CONFIG_CACHE
        if not DEFAULT_CONFIG_PATH.exists():
            _CONFIG_CACHE = MissionConfig()
            return _CONFIG_CACHE
        _CONFIG_CACHE = _read(DEFAULT_CONFIG_PATH)
        return _CONFIG_CACHE

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    return _read(path)


def _read(path: Path) -> MissionConfig:
    with open(path, "rb") as f:
        data = tomllib.load(f)
    return MissionConfig(**data.get("mission", {}))
