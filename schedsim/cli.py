from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import config
from .algorithms import Algorithm, compare_algorithms, run_algorithm
from .errors import SchedulerError
from .gantt import build_process_table, build_rich_gantt
from .models import Process, SimulationResult
from .playback import iter_ticks
from .workload_io import generate_random_workload, load_workload, normalize_quantum, save_workload

logger = logging.getLogger(__name__)

ALGORITHM_CHOICES = [a.value for a in Algorithm]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schedsim",
        description="CPU scheduling simulator (FCFS, SJF, Priority, RR).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="count",
        default=0,
        help="Increase log output (-v for info, -vv for every dispatch).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a scheduling algorithm on a workload.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        type=str.lower,
        choices=ALGORITHM_CHOICES,
        help="Algorithm to use (fcfs, sjf, priority, rr).",
    )
    _add_workload_arguments(run_parser)
    run_parser.add_argument(
        "--quantum",
        "-q",
        default=config.DEFAULT_QUANTUM,
        help=f"Time quantum for round-robin (ignored by FCFS, SJF, Priority; default: {config.DEFAULT_QUANTUM}).",
    )
    run_parser.add_argument(
        "--step",
        action="store_true",
        help="Play the schedule back tick by tick in the terminal.",
    )
    run_parser.add_argument(
        "--step-delay",
        type=float,
        default=config.DEFAULT_STEP_DELAY,
        help=f"Seconds to wait between ticks when --step is used (default: {config.DEFAULT_STEP_DELAY}).",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run multiple algorithms on the same workload and compare average metrics.",
    )
    _add_workload_arguments(compare_parser)
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        type=str.lower,
        choices=ALGORITHM_CHOICES,
        default=list(config.DEFAULT_ALGORITHMS),
        help=f"Algorithms to compare (default: {' '.join(config.DEFAULT_ALGORITHMS)}).",
    )
    compare_parser.add_argument(
        "--quantum",
        "-q",
        default=config.DEFAULT_QUANTUM,
        help=f"Time quantum used for RR when included (default: {config.DEFAULT_QUANTUM}).",
    )

    generate_parser = subparsers.add_parser("generate", help="Write a random workload to a JSON or CSV file.")
    generate_parser.add_argument("output", help="Destination path (.json or .csv).")
    generate_parser.add_argument(
        "--count",
        "-n",
        type=int,
        default=config.RANDOM_COUNT,
        help=f"Number of processes (default: {config.RANDOM_COUNT}).",
    )
    generate_parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible workloads.")

    return parser


def _add_workload_arguments(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--workload",
        "-w",
        help="Path to JSON or CSV workload file.",
    )
    source.add_argument(
        "--random",
        "-r",
        type=int,
        metavar="N",
        help="Use N randomly generated processes instead of a file.",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for --random.")


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_processes(args: argparse.Namespace) -> List[Process]:
    if args.workload is not None:
        return load_workload(Path(args.workload))
    return generate_random_workload(args.random, seed=args.seed)


def _print_result(result: SimulationResult, processes: Sequence[Process], console: Console) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    console.print()

    panel, time_marks = build_rich_gantt(result)
    console.print(panel)
    if time_marks:
        console.print(time_marks)

    console.print()
    console.print(build_process_table(processes, result))
    console.print()

    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Avg waiting", f"{result.avg_waiting_time:.2f}")
    sys_table.add_row("Avg turnaround", f"{result.avg_turnaround_time:.2f}")
    sys_table.add_row("CPU utilization", f"{result.cpu_utilization:.2f}%")
    sys_table.add_row("Total duration", str(result.total_duration))

    console.print(sys_table)


def _print_comparison(results: Sequence[SimulationResult], console: Console) -> None:
    summary_table = Table(title="Algorithm comparison", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("CPU util.", justify="right")
    summary_table.add_column("Duration", justify="right")

    best_wait = min((r.avg_waiting_time for r in results), default=None)
    for result in results:
        style = "green" if result.avg_waiting_time == best_wait else None
        summary_table.add_row(
            result.algorithm,
            "" if result.quantum is None else str(result.quantum),
            f"{result.avg_waiting_time:.2f}",
            f"{result.avg_turnaround_time:.2f}",
            f"{result.cpu_utilization:.2f}%",
            str(result.total_duration),
            style=style,
        )

    console.print(summary_table)


def _animate_result(result: SimulationResult, delay: float, console: Console) -> None:
    """
    Tick-by-tick playback of the computed schedule.
    """
    if not result.schedule:
        console.print("[red]No execution to animate.[/red]")
        return

    console.print(f"[bold]Simulating {result.algorithm}[/bold] (duration {result.total_duration} time units)")
    console.print("[dim]Press Ctrl+C to skip animation.[/dim]")

    for tick, segment in iter_ticks(result):
        if segment is None:
            msg = f"t={tick:2d}: [dim]ready[/dim]"
        elif segment.is_idle:
            msg = f"t={tick:2d}: [dim]idle[/dim]"
        else:
            done = tick - segment.start
            msg = f"t={tick:2d}: {segment.label} [green]{'█' * done}[/green][dim]{'·' * (segment.duration - done)}[/dim]"
        console.print(msg)
        time.sleep(delay)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)
    console = Console()

    try:
        if args.command == "run":
            processes = _load_processes(args)
            result = run_algorithm(args.algorithm, processes, quantum=normalize_quantum(args.quantum))
            if args.step:
                try:
                    _animate_result(result, delay=args.step_delay, console=console)
                except KeyboardInterrupt:
                    console.print("[yellow]Animation skipped.[/yellow]")
            _print_result(result, processes, console)
            return 0

        if args.command == "compare":
            processes = _load_processes(args)
            results = compare_algorithms(processes, normalize_quantum(args.quantum), args.algorithms)
            _print_comparison(results, console)
            return 0

        if args.command == "generate":
            path = save_workload(generate_random_workload(args.count, seed=args.seed), args.output)
            console.print(f"Wrote {args.count} process(es) to [green]{path}[/green]")
            return 0
    except SchedulerError as exc:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]Error: {exc}[/red]")
        return 2

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
