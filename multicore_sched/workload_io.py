from __future__ import annotations

import csv
import json
import logging
import random
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

from .models import Process

logger = logging.getLogger(__name__)


def generate_workload(
    count: int,
    rng: random.Random,
    max_arrival: int = 1000,
    max_burst: int = 200,
) -> Dict[str, Tuple[int, int]]:
    """
    Sample ``count`` synthetic processes as ``{pid: (arrival, burst)}`` with
    pids ``P0`` .. ``P{count-1}``.

    Arrivals are uniform in ``[0, max_arrival]`` and bursts in
    ``[1, max_burst]``. All randomness comes from ``rng``.
    """
    workload: Dict[str, Tuple[int, int]] = {}
    for i in range(count):
        arrival = rng.randint(0, max_arrival)
        burst = rng.randint(1, max_burst)
        workload[f"P{i}"] = (arrival, burst)
    logger.debug("generated %d processes", count)
    return workload


def processes_from_workload(workload: Dict[str, Tuple[int, int]]) -> List[Process]:
    """
    Turn a generated workload into processes ordered by arrival time.
    """
    processes = [Process(pid=pid, arrival_time=arrival, burst_time=burst) for pid, (arrival, burst) in workload.items()]
    return sort_by_arrival(processes)


def sort_by_arrival(processes: Iterable[Process]) -> List[Process]:
    # Stable: processes arriving together keep their given order.
    return sorted(processes, key=lambda p: p.arrival_time)


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON or CSV file, ordered by arrival time.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        processes = _load_json(path)
    elif suffix == ".csv":
        processes = _load_csv(path)
    else:
        raise ValueError(f"Unsupported workload format: {suffix} (use .json or .csv)")

    logger.info("loaded %d processes from %s", len(processes), path)
    return sort_by_arrival(processes)


def save_workload(path: str | Path, processes: Iterable[Process]) -> Path:
    path = Path(path)
    data = [
        {"pid": p.pid, "arrival_time": p.arrival_time, "burst_time": p.burst_time}
        for p in processes
    ]
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    logger.info("wrote %d processes to %s", len(data), path)
    return path


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise ValueError("JSON workload must be a list of process objects")

    return [_process_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[Process]:
    processes: List[Process] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            processes.append(_process_from_mapping(row))
    return processes


def _process_from_mapping(mapping) -> Process:
    try:
        pid = str(mapping["pid"])
        arrival_time = int(mapping["arrival_time"])
        burst_time = int(mapping["burst_time"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid process entry: {mapping!r}") from exc

    return Process(pid=pid, arrival_time=arrival_time, burst_time=burst_time)
