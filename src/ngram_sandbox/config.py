"""
Configuration Module

Default settings for the n-gram sandbox: decoding temperature, model order,
closest-context blending and animation speed.
"""

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .models import SUPPORTED_ORDERS

TEMPERATURE_RANGE = (0.0, 2.0)


def clamp_temperature(value: float) -> float:
    """Clamp to the range offered by the UI slider; the core accepts any value >= 0."""
    low, high = TEMPERATURE_RANGE
    return min(max(value, low), high)


@dataclass
class SandboxConfig:
    """
    Configuration for the n-gram sandbox.

    Attributes:
        temperature: Sampling temperature (0 = greedy decoding)
        order: Default model order used for generation (2, 3 or 4)
        closest_limit: Number of nearby contexts blended for sparse orders
        weighted_orders: Orders answered by closest-context blending on a miss
        animation_interval: Seconds between tokens in animated mode
        corpus_id: Built-in corpus trained at startup
        batch_sizes: Token counts offered for batch generation
        seed: Optional seed for the random source
    """

    temperature: float = 0.7
    order: int = 2
    closest_limit: int = 3
    weighted_orders: List[int] = field(default_factory=lambda: [4])
    animation_interval: float = 0.2
    corpus_id: str = "basic"
    batch_sizes: List[int] = field(default_factory=lambda: [10, 50])
    seed: Optional[int] = None

    def __post_init__(self):
        if self.temperature < 0:
            raise ValueError(f"temperature must be >= 0, got {self.temperature}")
        if self.order not in SUPPORTED_ORDERS:
            raise ValueError(f"order must be one of {SUPPORTED_ORDERS}, got {self.order}")
        if self.closest_limit < 1:
            raise ValueError(f"closest_limit must be >= 1, got {self.closest_limit}")
        if any(o not in SUPPORTED_ORDERS for o in self.weighted_orders):
            raise ValueError(f"weighted_orders must be within {SUPPORTED_ORDERS}")
        if self.animation_interval < 0:
            raise ValueError(f"animation_interval must be >= 0, got {self.animation_interval}")

    @classmethod
    def from_dict(cls, config_dict: Dict) -> "SandboxConfig":
        """Create a config from a dictionary, ignoring unknown keys."""
        return cls(**{k: v for k, v in config_dict.items() if k in cls.__annotations__})

    @classmethod
    def from_json(cls, path) -> "SandboxConfig":
        with open(Path(path), "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> Dict:
        return asdict(self)
