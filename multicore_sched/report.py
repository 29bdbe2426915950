from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import List, Protocol, Sequence, Set

from matplotlib.figure import Figure

from .models import LabeledResult, Metrics

logger = logging.getLogger(__name__)

TABLE_HEADER = ["Alg", "AvgW", "AvgT", "Throughput", "CPUUtil", "AvgR", "CSwitch", "Fairness"]

# (metric field, chart title, y label, output file)
CHARTS = [
    ("avg_waiting", "Average Waiting Time", "ms", "avg_waiting.png"),
    ("avg_turnaround", "Average Turnaround Time", "ms", "avg_turnaround.png"),
    ("throughput", "Throughput (proc/ms)", "throughput", "throughput.png"),
    ("cpu_utilization", "CPU Utilization", "fraction", "cpu_util.png"),
    ("avg_response", "Average Response Time", "ms", "avg_response.png"),
    ("context_switches", "Context Switch Count", "# switches", "ctx_switches.png"),
    ("fairness", "Fairness Index", "Jain Index", "fairness.png"),
]


def _fmt(value: float) -> str:
    return format(value, "g")


def metrics_row(label: str, m: Metrics) -> List[str]:
    return [
        label,
        _fmt(m.avg_waiting),
        _fmt(m.avg_turnaround),
        _fmt(m.throughput),
        _fmt(m.cpu_utilization),
        _fmt(m.avg_response),
        str(m.context_switches),
        _fmt(m.fairness),
    ]


def write_results_table(path: str | Path, results: Sequence[LabeledResult]) -> Path:
    """
    Write one row per labeled result under the ``Alg,AvgW,...`` header.
    """
    path = Path(path)
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(TABLE_HEADER)
        for r in results:
            writer.writerow(metrics_row(r.label, r.metrics))
    logger.info("wrote %d result rows to %s", len(results), path)
    return path


def read_results_table(path: str | Path) -> List[LabeledResult]:
    path = Path(path)
    results: List[LabeledResult] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames != TABLE_HEADER:
            raise ValueError(f"Unexpected results header in {path}: {reader.fieldnames!r}")
        for row in reader:
            try:
                metrics = Metrics(
                    avg_waiting=float(row["AvgW"]),
                    avg_turnaround=float(row["AvgT"]),
                    throughput=float(row["Throughput"]),
                    cpu_utilization=float(row["CPUUtil"]),
                    avg_response=float(row["AvgR"]),
                    context_switches=int(row["CSwitch"]),
                    fairness=float(row["Fairness"]),
                )
            except (TypeError, ValueError) as exc:
                raise ValueError(f"Invalid results row: {row!r}") from exc
            results.append(LabeledResult(label=row["Alg"], metrics=metrics))
    return results


class ReportSink(Protocol):
    def render(self, table_path: Path) -> Set[Path]:
        ...


class ChartRenderer:
    """
    Renders one bar chart per metric column of a results table.
    """

    def __init__(self, output_dir: str | Path) -> None:
        self.output_dir = Path(output_dir)

    def render(self, table_path: Path) -> Set[Path]:
        results = read_results_table(table_path)
        if not results:
            raise ValueError(f"No results to chart in {table_path}")

        self.output_dir.mkdir(parents=True, exist_ok=True)
        labels = [r.label for r in results]
        written: Set[Path] = set()

        for field_name, title, ylabel, filename in CHARTS:
            values = [getattr(r.metrics, field_name) for r in results]
            fig = Figure(figsize=(8, 6))
            ax = fig.subplots()
            ax.bar(labels, values, edgecolor="black")
            ax.set_title(title)
            ax.set_ylabel(ylabel)
            ax.tick_params(axis="x", labelrotation=45)
            fig.tight_layout()

            out = self.output_dir / filename
            fig.savefig(out)
            written.add(out)

        logger.info("rendered %d charts into %s", len(written), self.output_dir)
        return written
