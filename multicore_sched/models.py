from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class PreconditionViolation(ValueError):
    """
    Structural input error detected before a simulation starts.
    """


class Policy(Enum):
    FCFS = "fcfs"
    SJF_NP = "sjf-np"
    SJF_P = "sjf-p"
    ROUND_ROBIN = "rr"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def shortest_first(self) -> bool:
        return self in (Policy.SJF_NP, Policy.SJF_P)

    @classmethod
    def parse(cls, name: str) -> "Policy":
        key = name.strip().lower()
        if key not in _ALIASES:
            raise ValueError(f"Unknown scheduling policy '{name}'")
        return _ALIASES[key]


_LABELS = {
    Policy.FCFS: "FCFS",
    Policy.SJF_NP: "SJF-NP",
    Policy.SJF_P: "SJF-P",
    Policy.ROUND_ROBIN: "RR",
}

_ALIASES = {
    "fcfs": Policy.FCFS,
    "sjf": Policy.SJF_NP,
    "sjf-np": Policy.SJF_NP,
    "sjf-p": Policy.SJF_P,
    "srtf": Policy.SJF_P,
    "rr": Policy.ROUND_ROBIN,
    "round-robin": Policy.ROUND_ROBIN,
}


@dataclass(frozen=True)
class Process:
    pid: str
    arrival_time: int
    burst_time: int


@dataclass
class ProcessRuntimeState:
    """
    Mutable bookkeeping for one process during a single simulation run.
    """

    remaining: int
    first_start: Optional[int] = None
    finish: Optional[int] = None


@dataclass
class CoreSlot:
    pid: Optional[str] = None
    quantum_left: int = 0
    slice_start: int = 0

    @property
    def idle(self) -> bool:
        return self.pid is None


@dataclass
class ScheduledSlice:
    """
    One contiguous slice of execution for a process on a single core.
    """

    core: int
    pid: str
    start_time: int
    end_time: int


@dataclass
class ProcessMetrics:
    pid: str
    arrival_time: int
    burst_time: int
    start_time: int
    completion_time: int
    waiting_time: int
    turnaround_time: int
    response_time: int


@dataclass(frozen=True)
class Metrics:
    avg_waiting: float
    avg_turnaround: float
    throughput: float
    cpu_utilization: float
    avg_response: float
    context_switches: int
    fairness: float


@dataclass
class SimulationRun:
    policy: Policy
    quantum: Optional[int]
    core_count: int
    processes: List[ProcessMetrics] = field(default_factory=list)
    timeline: List[ScheduledSlice] = field(default_factory=list)
    context_switches: int = 0
    busy_ticks: int = 0
    final_clock: int = 0
    metrics: Optional[Metrics] = None


@dataclass(frozen=True)
class LabeledResult:
    label: str
    metrics: Metrics
