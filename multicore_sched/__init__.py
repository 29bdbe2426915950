"""
Multicore CPU scheduling simulator.

Simulates FCFS, SJF (non-preemptive and preemptive) and Round Robin tick by
tick across several identical cores and compares the resulting metrics.
"""

from .engine import run_simulation, simulate
from .models import Metrics, Policy, PreconditionViolation, Process

__all__ = ["Metrics", "Policy", "PreconditionViolation", "Process", "cli", "run_simulation", "simulate"]
