import os
from enum import Enum
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

QUALITY_MIN = 18
QUALITY_MAX = 35
MIN_WIDTH = 100
MIN_HEIGHT = 50

class SpeedPreset(str, Enum):
    """x265 presets, fastest first."""
    ULTRAFAST = "ultrafast"
    SUPERFAST = "superfast"
    VERYFAST = "veryfast"
    FASTER = "faster"
    FAST = "fast"
    MEDIUM = "medium"
    SLOW = "slow"
    SLOWER = "slower"
    VERYSLOW = "veryslow"

    @classmethod
    def names(cls):
        return [p.value for p in cls]

def detect_cpu_count() -> int:
    """Host capability query: number of usable execution units."""
    return os.cpu_count() or 1

class JobConfiguration(BaseModel):
    model_config = ConfigDict(frozen=True)

    quality: int = Field(default=26, ge=QUALITY_MIN, le=QUALITY_MAX)
    speed: SpeedPreset = SpeedPreset.SLOWER
    max_width: int = Field(default=1920, ge=MIN_WIDTH)
    max_height: int = Field(default=1080, ge=MIN_HEIGHT)
    force: bool = False
    cpu_count: int = Field(default_factory=detect_cpu_count, ge=1)
    output_dir: Path = Path("_recompressed")
    timeout_seconds: Optional[float] = Field(default=None, gt=0)
    debug: bool = False

    @field_validator('speed', mode='before')
    @classmethod
    def normalize_speed(cls, v):
        if isinstance(v, str):
            name = v.strip().lower()
            if name not in SpeedPreset.names():
                raise ValueError(f"Unknown speed preset '{v}'. Must be one of: {', '.join(SpeedPreset.names())}.")
            return name
        return v

    @property
    def staging_dir(self) -> Path:
        return self.output_dir / "_working"

    @property
    def pools(self) -> int:
        return max(1, self.cpu_count)

    @property
    def frame_threads(self) -> int:
        return max(1, self.cpu_count // 2)
