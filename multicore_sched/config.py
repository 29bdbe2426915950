from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .models import PreconditionViolation

DEFAULT_QUANTA: Tuple[int, ...] = (10, 5, 20)


@dataclass(frozen=True)
class SimulationConfig:
    """
    Everything one comparison needs, passed explicitly to the engine and the
    workload generator.
    """

    process_count: int = 100
    core_count: int = 4
    quanta: Tuple[int, ...] = DEFAULT_QUANTA
    seed: int = 42
    max_arrival: int = 1000
    max_burst: int = 200

    def validate(self) -> "SimulationConfig":
        if self.process_count < 1:
            raise PreconditionViolation(f"process count must be positive, got {self.process_count}")
        if self.core_count < 1:
            raise PreconditionViolation(f"core count must be positive, got {self.core_count}")
        for q in self.quanta:
            if q <= 0:
                raise PreconditionViolation(f"round robin quantum must be positive, got {q}")
        if self.max_arrival < 0:
            raise PreconditionViolation(f"max arrival must be non-negative, got {self.max_arrival}")
        if self.max_burst < 1:
            raise PreconditionViolation(f"max burst must be positive, got {self.max_burst}")
        return self
