from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .gantt import build_rich_gantt
from .metrics import RunSummary
from .ready_queue import SchedulingPolicy
from .simulator import Simulation, SimulationConfig
from .sweep import rate_range, sweep
from .workload import DEFAULT_MEAN_SERVICE_TIME, poisson_processes
from .workload_io import load_workload

DEFAULT_PROCESS_LIMIT = 10_000

logger = logging.getLogger(__name__)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--quantum",
        "-q",
        type=float,
        default=0.01,
        help="Time quantum for round-robin (ignored by PSJF, default: 0.01).",
    )
    parser.add_argument(
        "--service-time",
        type=float,
        default=DEFAULT_MEAN_SERVICE_TIME,
        help=f"Mean burst time of generated processes (default: {DEFAULT_MEAN_SERVICE_TIME}).",
    )
    parser.add_argument(
        "--processes",
        "-n",
        type=int,
        default=None,
        help=f"Stop after this many completions (default: {DEFAULT_PROCESS_LIMIT}, "
        "or the workload size with --workload).",
    )
    parser.add_argument(
        "--max-time",
        type=float,
        default=None,
        help="Cut the run off at this simulated time.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for workload generation.",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="simsched",
        description="Discrete-event CPU scheduling simulator (PSJF, Round Robin).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="count",
        default=0,
        help="Log run progress (-v) or every scheduling decision (-vv).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run one policy at one arrival rate or on a workload file.")
    run_parser.add_argument(
        "--policy",
        "-p",
        required=True,
        help="Scheduling policy to use (psjf, rr).",
    )
    source = run_parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--rate",
        "-r",
        type=float,
        help="Poisson arrival rate (processes per time unit).",
    )
    source.add_argument(
        "--workload",
        "-w",
        help="Path to JSON or CSV workload file.",
    )
    _add_common_arguments(run_parser)
    run_parser.add_argument(
        "--gantt",
        action="store_true",
        help="Print a Gantt chart of the run (best with small workloads).",
    )

    sweep_parser = subparsers.add_parser(
        "sweep",
        help="Run policies over a range of arrival rates and compare the metrics.",
    )
    sweep_parser.add_argument(
        "--policies",
        "-p",
        nargs="+",
        default=["psjf", "rr"],
        help="Policies to compare (default: psjf rr).",
    )
    rates = sweep_parser.add_mutually_exclusive_group(required=True)
    rates.add_argument(
        "--rates",
        "-r",
        type=float,
        nargs="+",
        help="Arrival rates to simulate.",
    )
    rates.add_argument(
        "--rate-range",
        type=float,
        nargs=3,
        metavar=("START", "STOP", "STEP"),
        help="Inclusive range of arrival rates, e.g. 1 30 1.",
    )
    _add_common_arguments(sweep_parser)
    sweep_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Run simulations on this many worker processes.",
    )

    return parser


def _configure_logging(verbosity: int) -> None:
    if verbosity <= 0:
        return
    level = logging.INFO if verbosity == 1 else logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _print_summary(summary: RunSummary, console: Console) -> None:
    console.print(f"[bold]Policy:[/bold] {summary.policy}")
    if summary.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {summary.quantum:g}")
    if summary.arrival_rate is not None:
        console.print(f"[bold]Arrival rate:[/bold] {summary.arrival_rate:g}")

    console.print()

    table = Table(title="Run metrics", box=box.SIMPLE_HEAVY)
    table.add_column("Metric")
    table.add_column("Value", justify="right")

    table.add_row("Final time", f"{summary.final_time:.4f}")
    table.add_row("Processes completed", str(summary.processes_completed))
    table.add_row("Processes handled", str(summary.processes_handled))
    table.add_row("CPU utilization", f"{summary.cpu_utilization * 100:.1f}%")
    table.add_row("Avg waiting", f"{summary.avg_waiting:.4f}")
    table.add_row("Avg turnaround", f"{summary.avg_turnaround:.4f}")
    table.add_row("Throughput (proc/time)", f"{summary.throughput:.3f}")
    table.add_row("Avg ready queue length", f"{summary.avg_ready_queue_length:.3f}")

    console.print(table)


def _print_sweep(summaries: List[RunSummary], console: Console) -> None:
    table = Table(title="Arrival rate sweep", box=box.SIMPLE_HEAVY)
    table.add_column("Policy")
    table.add_column("Rate", justify="right")
    table.add_column("Utilization", justify="right")
    table.add_column("Avg waiting", justify="right")
    table.add_column("Avg turnaround", justify="right")
    table.add_column("Throughput", justify="right")
    table.add_column("Avg queue", justify="right")

    for s in summaries:
        table.add_row(
            s.policy,
            f"{s.arrival_rate:g}",
            f"{s.cpu_utilization * 100:.1f}%",
            f"{s.avg_waiting:.4f}",
            f"{s.avg_turnaround:.4f}",
            f"{s.throughput:.3f}",
            f"{s.avg_ready_queue_length:.3f}",
        )

    console.print(table)


def _run_command(args: argparse.Namespace, console: Console) -> None:
    if args.workload:
        processes = load_workload(Path(args.workload))
        if not processes:
            raise ValueError(f"Workload is empty: {args.workload}")
        limit = args.processes if args.processes is not None else len(processes)
        arrival_rate = None
    else:
        processes = poisson_processes(args.rate, args.service_time, seed=args.seed)
        limit = args.processes if args.processes is not None else DEFAULT_PROCESS_LIMIT
        arrival_rate = args.rate

    config = SimulationConfig(
        policy=args.policy,
        quantum=args.quantum,
        process_limit=limit,
        max_time=args.max_time,
        record_timeline=args.gantt,
    )
    simulation = Simulation(processes, config, arrival_rate=arrival_rate)
    summary = simulation.run()

    if args.gantt:
        panel, time_marks = build_rich_gantt(simulation.timeline)
        console.print(panel)
        if time_marks:
            console.print(time_marks)
        console.print()

    _print_summary(summary, console)


def _sweep_command(args: argparse.Namespace, console: Console) -> None:
    rates = args.rates if args.rates else rate_range(*args.rate_range)
    summaries = sweep(
        args.policies,
        rates,
        quantum=args.quantum,
        mean_service_time=args.service_time,
        process_limit=args.processes if args.processes is not None else DEFAULT_PROCESS_LIMIT,
        max_time=args.max_time,
        seed=args.seed,
        workers=args.workers,
    )
    _print_sweep(summaries, console)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    console = Console()

    commands = {"run": _run_command, "sweep": _sweep_command}
    try:
        commands[args.command](args, console)
    except (ValueError, OSError) as exc:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]Error: {exc}[/red]")
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
