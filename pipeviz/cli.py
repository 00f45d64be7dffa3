import argparse
import json
import sys
from typing import List, Optional

from .base import InstructionNotFound
from .config import SimulationConfig, load_config
from .log import LogConfig, LogLevel, setup_logging
from .report import render_chart, snapshot
from .simulator import AutoRunner, Simulator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pipeviz",
        description="Step a 5-stage instruction pipeline and explain every cycle.",
    )
    parser.add_argument("--cycles", type=int, default=10, help="number of cycles to run (default: 10)")
    parser.add_argument("--seed", type=int, default=None, help="seed for reproducible runs")
    parser.add_argument("--batch-size", type=int, default=None, help="instructions per generated batch")
    parser.add_argument("--speed", type=float, default=None, help="cycles per second with --auto (0.5-5)")
    parser.add_argument("--config", default=None, help="JSON file with simulation settings")
    parser.add_argument("--auto", action="store_true", help="tick on a timer instead of as fast as possible")
    parser.add_argument("--chart", action="store_true", help="print the pipeline chart after the run")
    parser.add_argument("--describe", type=int, default=None, metavar="ID", help="print details of one instruction")
    parser.add_argument("--json", action="store_true", help="print the final state as JSON")
    parser.add_argument("--log-level", default="WARNING", choices=[lvl.name for lvl in LogLevel])
    parser.add_argument("--log-file", default=None, help="also log to this file at DEBUG level")
    return parser


def _make_config(args) -> SimulationConfig:
    config = load_config(args.config) if args.config else SimulationConfig()
    changes = {}
    if args.seed is not None:
        changes["seed"] = args.seed
    if args.batch_size is not None:
        changes["batch_size"] = args.batch_size
    if args.speed is not None:
        changes["speed"] = args.speed
    return config.with_updates(**changes) if changes else config


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = LogLevel[args.log_level]
    setup_logging(LogConfig(
        log_level=level,
        console_level=level,
        log_file=args.log_file or LogConfig.DEFAULT_LOG_FILE,
        enable_file_output=args.log_file is not None,
    ))

    try:
        config = _make_config(args)
    except ValueError as e:
        # pydantic.ValidationError is a ValueError
        parser.error(str(e))

    sim = Simulator(config)
    if args.auto:
        runner = AutoRunner(sim, max_cycles=args.cycles, on_cycle=lambda text: print(text + "\n"))
        runner.start()
        try:
            runner.join()
        except KeyboardInterrupt:
            runner.stop()
    else:
        for text in sim.run(args.cycles):
            print(text + "\n")

    if args.describe is not None:
        try:
            print(sim.select(args.describe) + "\n")
        except InstructionNotFound as e:
            print(f"error: {e.reason}", file=sys.stderr)
            return 1
    if args.chart:
        print(render_chart(sim.state) + "\n")
    if args.json:
        print(json.dumps(snapshot(sim.state), indent=2))
    return 0
