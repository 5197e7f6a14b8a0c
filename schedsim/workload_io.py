from __future__ import annotations

import csv
import json
import logging
import random
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional

from . import config
from .errors import InvalidProcessError, WorkloadFormatError
from .models import Process

logger = logging.getLogger(__name__)

FIELDNAMES = ["id", "label", "arrival_time", "burst_time", "priority"]


def make_process(
    id: int,
    label: str,
    arrival_time: int,
    burst_time: int,
    priority: int = 0,
) -> Process:
    """
    Build a Process, rejecting values the scheduler cannot simulate.
    """
    if arrival_time < 0:
        raise InvalidProcessError(f"{label}: arrival_time must be >= 0, got {arrival_time}")
    if burst_time < 1:
        raise InvalidProcessError(f"{label}: burst_time must be >= 1, got {burst_time}")
    return Process(id=id, label=label, arrival_time=arrival_time, burst_time=burst_time, priority=priority)


def validate_processes(processes: Iterable[Process]) -> List[Process]:
    processes = list(processes)
    seen = set()
    for p in processes:
        if p.id in seen:
            raise InvalidProcessError(f"Duplicate process id {p.id} ({p.label})")
        seen.add(p.id)
        # Re-run the field checks for records built without make_process.
        make_process(p.id, p.label, p.arrival_time, p.burst_time, p.priority)
    return processes


def normalize_quantum(value: Any) -> int:
    """
    Coerce a user-supplied quantum to a positive integer, falling back to 1.
    """
    try:
        quantum = int(value)
    except (TypeError, ValueError):
        # Numeric strings such as "2.5" truncate toward zero.
        try:
            quantum = int(float(value))
        except (TypeError, ValueError, OverflowError):
            quantum = 0

    if quantum < 1:
        logger.warning(f"Invalid quantum {value!r}; using 1")
        return 1
    return quantum


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON or CSV file into a list of Process objects.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix not in (".json", ".csv"):
        raise WorkloadFormatError(f"Unsupported workload format: {suffix} (use .json or .csv)")

    try:
        processes = _load_json(path) if suffix == ".json" else _load_csv(path)
    except (OSError, UnicodeDecodeError) as exc:
        raise WorkloadFormatError(f"{path}: cannot read workload ({exc})") from exc

    logger.info(f"Loaded {len(processes)} process(es) from {path}")
    return validate_processes(processes)


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise WorkloadFormatError(f"{path}: invalid JSON ({exc})") from exc

    if not isinstance(raw, list):
        raise WorkloadFormatError("JSON workload must be a list of process objects")

    return [_process_from_mapping(entry, row) for row, entry in enumerate(raw, start=1)]


def _load_csv(path: Path) -> List[Process]:
    processes: List[Process] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row, entry in enumerate(reader, start=1):
            processes.append(_process_from_mapping(entry, row))
    return processes


def _process_from_mapping(mapping: Mapping[str, Any], row: int) -> Process:
    try:
        id_val = mapping.get("id")
        pid = int(id_val) if id_val not in (None, "") else row
        label = str(mapping.get("label") or mapping.get("pid") or f"P{pid}")
        arrival_time = int(mapping["arrival_time"])
        burst_time = int(mapping["burst_time"])
        priority_val = mapping.get("priority")
        priority = int(priority_val) if priority_val not in (None, "") else 0
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise WorkloadFormatError(f"Invalid process entry: {mapping!r}") from exc

    return make_process(pid, label, arrival_time, burst_time, priority)


def save_workload(processes: Iterable[Process], path: str | Path) -> Path:
    path = Path(path)
    rows = [
        {
            "id": p.id,
            "label": p.label,
            "arrival_time": p.arrival_time,
            "burst_time": p.burst_time,
            "priority": p.priority,
        }
        for p in processes
    ]

    suffix = path.suffix.lower()
    if suffix == ".json":
        path.write_text(json.dumps(rows, indent=2) + "\n", encoding="utf-8")
    elif suffix == ".csv":
        with path.open("w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
            writer.writeheader()
            writer.writerows(rows)
    else:
        raise WorkloadFormatError(f"Unsupported workload format: {suffix} (use .json or .csv)")

    logger.info(f"Wrote {len(rows)} process(es) to {path}")
    return path


def generate_random_workload(count: int = config.RANDOM_COUNT, seed: Optional[int] = None) -> List[Process]:
    """
    Generate ``count`` processes labelled P1..Pn with small random timings.
    """
    rng = random.Random(seed)
    return [
        make_process(
            id=i,
            label=f"P{i}",
            arrival_time=rng.randint(*config.RANDOM_ARRIVAL_RANGE),
            burst_time=rng.randint(*config.RANDOM_BURST_RANGE),
            priority=rng.randint(*config.RANDOM_PRIORITY_RANGE),
        )
        for i in range(1, count + 1)
    ]
