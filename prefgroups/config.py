"""Tunables for the grouping engine, the graph search and the trial loop."""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Optional

from .errors import ConfigError

STRATEGIES = ("preferences", "cliques")


@dataclass(frozen=True)
class GroupingConfig:
    """Every knob the allocators and the optimizer read."""
    max_group_size: int = 4
    max_local_attempts: int = 20
    max_fill_draws: int = 100
    max_partition_attempts: int = 100
    trials: int = 1000
    seed: Optional[int] = None
    workers: int = 1
    strategy: str = "preferences"

    def validate(self) -> "GroupingConfig":
        """Raise ConfigError on the first invalid value; return self otherwise."""
        for name in ("max_group_size", "max_local_attempts", "max_fill_draws",
                     "max_partition_attempts", "trials", "workers"):
            value = getattr(self, name)
            if not isinstance(value, int) or value <= 0:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")
        if self.seed is not None and (not isinstance(self.seed, int) or self.seed < 0):
            raise ConfigError(f"seed must be a non-negative integer, got {self.seed!r}")
        if self.strategy not in STRATEGIES:
            raise ConfigError(f"Unknown strategy '{self.strategy}'. Allowed: {', '.join(STRATEGIES)}")
        return self

    def as_dict(self) -> dict:
        return asdict(self)
