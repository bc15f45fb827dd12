"""
Render configuration: YAML file -> RenderConfig, with CLI overrides on top.

Example (configs/buddhabrot.yaml):

    width: 1024
    height: 1024
    iterations: 100000        # or [5000, 500, 50] with mode: rgb
    samples: 20
    mode: mono
    symmetry: none
    postprocess:
      normalize: false
      gamma: 1.0
    output:
      path: output/buddhabrot.png
      float_path: output/buddhabrot.npy
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import List, Optional, Union

import yaml

MODES = ("mono", "rgb")
SYMMETRIES = ("none", "reflect", "rotate")

# nested YAML sections -> flat RenderConfig field names
_SECTIONS = {
    "postprocess": {
        "normalize": "normalize",
        "exposure": "exposure",
        "gamma": "gamma",
        "black_point": "black_point",
        "clamp": "clamp",
        "colormap": "colormap",
    },
    "output": {
        "path": "output",
        "float_path": "float_output",
    },
}


@dataclass
class RenderConfig:
    width: int = 1024
    height: int = 1024
    iterations: Union[int, List[int]] = 100000
    samples: int = 20
    workers: Optional[int] = None
    batch_size: int = 8192
    progress_update: int = 8192
    seed: Optional[int] = None
    mode: str = "mono"
    symmetry: str = "none"

    normalize: bool = False
    exposure: float = 0.0
    gamma: float = 1.0
    black_point: float = 0.0
    clamp: bool = True
    colormap: Optional[str] = None

    output: Optional[str] = "output/buddhabrot.png"
    float_output: Optional[str] = "output/buddhabrot.npy"

    passes: List[int] = field(init=False, default_factory=list)

    def __post_init__(self):
        self.validate()

    def validate(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")
        if self.samples < 0:
            raise ValueError(f"samples must be >= 0, got {self.samples}")
        if self.mode not in MODES:
            raise ValueError(f"Unknown mode: {self.mode}")
        if self.symmetry not in SYMMETRIES:
            raise ValueError(f"Unknown symmetry mode: {self.symmetry}")
        if self.symmetry == "rotate" and self.width != self.height:
            raise ValueError(f"rotate symmetry needs a square image, got {self.width}x{self.height}")

        iters = self.iterations
        if isinstance(iters, (list, tuple)):
            iters = [int(i) for i in iters]
        else:
            iters = [int(iters)]
        if self.mode == "rgb" and len(iters) != 3:
            raise ValueError(f"rgb mode needs three iteration limits, got {len(iters)}")
        if self.mode == "mono" and len(iters) != 1:
            raise ValueError(f"mono mode needs one iteration limit, got {len(iters)}")
        if any(i < 1 for i in iters):
            raise ValueError(f"Iteration limits must be >= 1, got {iters}")
        self.passes = iters

    @classmethod
    def from_dict(cls, data: dict) -> "RenderConfig":
        data = dict(data or {})
        flat = {}
        for section, mapping in _SECTIONS.items():
            sub = data.pop(section, None) or {}
            if not isinstance(sub, dict):
                raise ValueError(f"Config section '{section}' must be a mapping")
            for key, value in sub.items():
                if key not in mapping:
                    raise ValueError(f"Unknown key in '{section}': {key}")
                flat[mapping[key]] = value

        known = {f.name for f in fields(cls) if f.init}
        for key, value in data.items():
            if key not in known:
                raise ValueError(f"Unknown config key: {key}")
            flat[key] = value
        return cls(**flat)

    def with_overrides(self, **overrides) -> "RenderConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)


def load_config(path) -> RenderConfig:
    path = Path(path)
    with open(path, "r") as f:
        data = yaml.safe_load(f)
    return RenderConfig.from_dict(data)
