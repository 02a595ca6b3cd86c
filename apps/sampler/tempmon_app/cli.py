"""CLI entrypoints for the tempmon sampler."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict

from tempmon_core import Poller, Settings, configure_logging, get_logger, install_crash_hooks, load_settings
from tempmon_sensors import CpuTemperatureResolver, GpuTemperatureEnumerator, HardwareInfo
from tempmon_sensors.probes import run_command


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def build_poller(settings: Settings, logger: logging.Logger) -> Poller:
    hwinfo = HardwareInfo(logger, runner=run_command, command_timeout=settings.command_timeout_s)
    cpu = CpuTemperatureResolver(
        hwinfo,
        logger,
        lhm_json_path=settings.lhm_json_path,
        command_timeout=settings.command_timeout_s,
    )
    gpus = GpuTemperatureEnumerator(hwinfo, logger, command_timeout=settings.command_timeout_s)
    return Poller(cpu, gpus, logger, interval_ms=settings.interval_ms)


def cmd_run(poller: Poller, _args: argparse.Namespace) -> int:
    try:
        poller.run()
    except KeyboardInterrupt:
        get_logger().info("Stopped")
    return 0


def cmd_once(poller: Poller, _args: argparse.Namespace) -> int:
    try:
        sample = poller.tick()
    except Exception:
        get_logger().error("Sampling failed", exc_info=True)
        return 1
    _print_json(asdict(sample))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tempmon", description="Periodic CPU and GPU temperature sampler")
    sub = parser.add_subparsers(dest="command")
    parser.set_defaults(command="run", func=cmd_run)

    run_cmd = sub.add_parser("run", help="Sample temperatures on a fixed interval until stopped")
    run_cmd.set_defaults(func=cmd_run)

    once_cmd = sub.add_parser("once", help="Sample once and print the result as JSON")
    once_cmd.set_defaults(func=cmd_once)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logger = get_logger()
    try:
        settings = load_settings()
        logger = configure_logging(settings, console=(args.command == "run"))
        install_crash_hooks(settings)
        poller = build_poller(settings, logger)
    except Exception:
        logger.critical("Fatal startup error", exc_info=True)
        return 1
    return int(args.func(poller, args))


if __name__ == "__main__":
    raise SystemExit(main())
