from __future__ import annotations

import json
import logging
import runpy
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "apps" / "sampler"))
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "sensors"))

import tempmon_app.__main__ as sampler_main
import tempmon_app.cli as cli
from tempmon_core.config import Settings
from tempmon_sensors.models import GpuSource, GpuTemperatureInfo, Sample


class FakePoller:
    def __init__(self) -> None:
        self.runs = 0

    def tick(self) -> Sample:
        return Sample(cpu=51.5, gpus=[GpuTemperatureInfo("RTX X", 67.0, None, GpuSource.NVIDIA_SMI)])

    def run(self, max_ticks=None) -> int:
        self.runs += 1
        return 0


def _patch_startup(monkeypatch, tmp_path, poller_factory) -> None:
    logger = logging.getLogger("tempmon.tests.cli")
    monkeypatch.setattr(cli, "load_settings", lambda: Settings(log_dir=tmp_path))
    monkeypatch.setattr(cli, "configure_logging", lambda settings, console=True: logger)
    monkeypatch.setattr(cli, "install_crash_hooks", lambda settings: None)
    monkeypatch.setattr(cli, "build_poller", poller_factory)


def test_parser_defaults_to_run() -> None:
    args = cli.build_parser().parse_args([])
    assert args.command == "run"
    assert args.func is cli.cmd_run


def test_parser_once() -> None:
    args = cli.build_parser().parse_args(["once"])
    assert args.command == "once"
    assert args.func is cli.cmd_once


def test_once_prints_sample(monkeypatch, tmp_path, capsys) -> None:
    _patch_startup(monkeypatch, tmp_path, lambda settings, logger: FakePoller())

    assert cli.main(["once"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["cpu"] == 51.5
    assert payload["gpus"][0]["source"] == "nvidia-smi"


def test_run_invokes_loop(monkeypatch, tmp_path) -> None:
    poller = FakePoller()
    _patch_startup(monkeypatch, tmp_path, lambda settings, logger: poller)

    assert cli.main([]) == 0
    assert poller.runs == 1


def test_startup_failure_exits_non_zero(monkeypatch, tmp_path) -> None:
    def broken(settings, logger):
        raise RuntimeError("cannot build resolvers")

    _patch_startup(monkeypatch, tmp_path, broken)

    assert cli.main(["run"]) == 1


def test_build_poller_wires_settings(monkeypatch) -> None:
    monkeypatch.setattr(cli.HardwareInfo, "__init__", lambda self, logger, **kwargs: setattr(self, "_system", "Linux"))
    settings = Settings(interval_ms=5000, lhm_json_path=Path("lhm.json"))
    poller = cli.build_poller(settings, logging.getLogger("tempmon.tests.cli"))
    assert poller.interval_ms == 5000


def test_main_module_passes_args(monkeypatch) -> None:
    calls: list[list[str]] = []
    monkeypatch.setattr(sampler_main, "_cli_main", lambda argv=None: calls.append(list(argv or [])) or 0)

    assert sampler_main.main(["once"]) == 0
    assert calls == [["once"]]


def test_main_module_runpath_without_package_context() -> None:
    main_path = Path(__file__).resolve().parents[2] / "apps" / "sampler" / "tempmon_app" / "__main__.py"
    result = runpy.run_path(str(main_path))
    assert "main" in result


def test_once_tick_failure_logs_and_exits_non_zero(monkeypatch, capsys) -> None:
    errors: list[tuple[str, dict]] = []

    class RecordingLogger:
        def error(self, msg, **kwargs):
            errors.append((msg, kwargs))

    class BrokenPoller(FakePoller):
        def tick(self) -> Sample:
            raise RuntimeError("sensor bus exploded")

    monkeypatch.setattr(cli, "get_logger", lambda: RecordingLogger())

    assert cli.cmd_once(BrokenPoller(), cli.build_parser().parse_args(["once"])) == 1
    assert errors == [("Sampling failed", {"exc_info": True})]
    assert capsys.readouterr().out == ""
