"""HandArt configuration.

All tunables live in one dataclass tree with sensible defaults. A YAML
file may override any subset of them:

    canvas:
      width: 1280
      height: 720
    brush:
      color: "#5C9CF1"
      size: 8
    particles:
      seed: 7
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_PALETTE = [
    "#F15C5C",
    "#F1A35C",
    "#F1E05C",
    "#7CD65C",
    "#5CC8F1",
    "#5C6FF1",
    "#B05CF1",
    "#000000",
]


@dataclass
class CanvasConfig:
    width: int = 1280
    height: int = 720
    background: str = "#ffffff"


@dataclass
class SmoothingConfig:
    window: int = 5


@dataclass
class StrokeConfig:
    min_distance: float = 2.0
    max_points: int = 100
    keep_points: int = 50
    tail: int = 3


@dataclass
class ParticleConfig:
    batch_size: int = 5
    max_speed: float = 5.0
    min_size: float = 5.0
    max_size: float = 25.0
    gravity: float = 0.5
    decay: float = 0.02
    min_life: float = 0.01
    fade_alpha: float = 0.05
    fps: int = 60
    seed: Optional[int] = None


@dataclass
class HistoryConfig:
    capacity: int = 50


@dataclass
class BrushConfig:
    color: str = "#F15C5C"
    size: float = 5.0
    min_size: float = 1.0
    max_size: float = 50.0
    palette: list[str] = field(default_factory=lambda: list(DEFAULT_PALETTE))


@dataclass
class CameraConfig:
    index: int = 0
    width: int = 1280
    height: int = 720


@dataclass
class DetectorConfig:
    max_hands: int = 2
    model_complexity: int = 1
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5
    segmentation_model: int = 1
    blur: bool = True


def _section(cls, data: Optional[dict]):
    """Build a section dataclass, ignoring unknown keys."""
    data = data or {}
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class AppConfig:
    canvas: CanvasConfig = field(default_factory=CanvasConfig)
    smoothing: SmoothingConfig = field(default_factory=SmoothingConfig)
    stroke: StrokeConfig = field(default_factory=StrokeConfig)
    particles: ParticleConfig = field(default_factory=ParticleConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    brush: BrushConfig = field(default_factory=BrushConfig)
    camera: CameraConfig = field(default_factory=CameraConfig)
    detector: DetectorConfig = field(default_factory=DetectorConfig)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> AppConfig:
        data = data or {}
        return cls(
            canvas=_section(CanvasConfig, data.get("canvas")),
            smoothing=_section(SmoothingConfig, data.get("smoothing")),
            stroke=_section(StrokeConfig, data.get("stroke")),
            particles=_section(ParticleConfig, data.get("particles")),
            history=_section(HistoryConfig, data.get("history")),
            brush=_section(BrushConfig, data.get("brush")),
            camera=_section(CameraConfig, data.get("camera")),
            detector=_section(DetectorConfig, data.get("detector")),
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> AppConfig:
        """Load configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)

        if data is not None and not isinstance(data, dict):
            raise ValueError(f"{path}: expected a mapping at the top level")
        return cls.from_dict(data)

    def to_yaml(self, path: str | Path):
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)


def load_config(path: Optional[str | Path] = None) -> AppConfig:
    if path is None:
        return AppConfig()
    return AppConfig.from_yaml(path)
