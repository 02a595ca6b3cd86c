import json
import logging
import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "sensors"))
sys.path.insert(0, str(ROOT / "packages" / "core"))

from tempmon_core.config import Settings
from tempmon_core.logging_setup import JsonFormatter, configure_logging, get_logger


def _reset_logger() -> None:
    logger = get_logger()
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


class JsonFormatterTests(unittest.TestCase):
    def test_includes_meta_and_service(self):
        record = logging.LogRecord("tempmon", logging.WARNING, __file__, 1, "probe failed", None, None)
        record.meta = {"probe": "ohm-wmi", "error": RuntimeError("x")}
        payload = json.loads(JsonFormatter().format(record))
        self.assertEqual(payload["level"], "WARNING")
        self.assertEqual(payload["service"], "temp-mon")
        self.assertEqual(payload["msg"], "probe failed")
        self.assertEqual(payload["meta"]["probe"], "ohm-wmi")
        self.assertEqual(payload["meta"]["error"], "RuntimeError('x')")


class ConfigureLoggingTests(unittest.TestCase):
    def setUp(self):
        _reset_logger()

    def tearDown(self):
        _reset_logger()

    def test_writes_combined_and_error_logs(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_dir = Path(tmp) / "logs"
            logger = configure_logging(Settings(log_dir=log_dir), console=False)
            logger.info("CPU temperature: 50.0 °C", extra={"meta": {"cpu_c": 50.0}})
            logger.error("Tick failed")
            for handler in logger.handlers:
                handler.flush()

            combined = (log_dir / "combined.log").read_text(encoding="utf-8").splitlines()
            errors = (log_dir / "error.log").read_text(encoding="utf-8").splitlines()
            self.assertEqual([json.loads(line)["msg"] for line in combined], ["CPU temperature: 50.0 °C", "Tick failed"])
            self.assertEqual(json.loads(combined[0])["meta"], {"cpu_c": 50.0})
            self.assertEqual([json.loads(line)["msg"] for line in errors], ["Tick failed"])
            _reset_logger()

    def test_configure_is_idempotent(self):
        with tempfile.TemporaryDirectory() as tmp:
            settings = Settings(log_dir=Path(tmp))
            first = configure_logging(settings, console=False)
            count = len(first.handlers)
            second = configure_logging(settings, console=False)
            self.assertIs(first, second)
            self.assertEqual(len(second.handlers), count)
            _reset_logger()

    def test_unusable_log_dir_falls_back_to_console(self):
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "not-a-dir"
            blocker.write_text("", encoding="utf-8")
            logger = configure_logging(Settings(log_dir=blocker / "logs", log_level="warning"), console=False)
            self.assertEqual(len(logger.handlers), 1)
            self.assertIsInstance(logger.handlers[0], logging.StreamHandler)
            self.assertEqual(logger.level, logging.WARNING)


if __name__ == "__main__":
    unittest.main()
