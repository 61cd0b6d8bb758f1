# src/clientui/tests/test_logging/test_builder_setup.py
import json
import logging
from types import SimpleNamespace

from clientui.core.logging.builder import make_dict_config, setup_logging


def make_settings(tmp_path=None, **overrides):
    # duck-typed Settings: the builder only reads attributes
    s = SimpleNamespace(
        ENV="testing",
        LOG_LEVEL="INFO",
        LOG_FORMAT="json",
        LOG_TO_STDOUT=False,
        LOG_DIR=tmp_path,
        LOG_MAX_BYTES=100_000,
        LOG_BACKUP_COUNT=1,
        ENABLE_HTTP_LOGGING=False,
    )
    for key, value in overrides.items():
        setattr(s, key, value)
    return s


def test_file_handlers_when_not_logging_to_stdout(tmp_path):
    cfg = make_dict_config(make_settings(tmp_path))

    assert {"console", "file", "error_file"} <= set(cfg["handlers"])
    assert "error_console" not in cfg["handlers"]
    assert cfg["handlers"]["file"]["filename"].endswith("clientui.log")
    assert "json" in cfg["formatters"]


def test_console_only_when_logging_to_stdout(tmp_path):
    cfg = make_dict_config(make_settings(tmp_path, LOG_TO_STDOUT=True))

    assert set(cfg["handlers"]) == {"console", "error_console"}


def test_http_client_loggers_follow_flag(tmp_path):
    quiet = make_dict_config(make_settings(tmp_path))
    loud = make_dict_config(make_settings(tmp_path, ENABLE_HTTP_LOGGING=True))

    assert quiet["loggers"]["httpx"]["level"] == "WARNING"
    assert loud["loggers"]["httpx"]["level"] == "DEBUG"
    assert loud["loggers"]["httpcore"]["level"] == "DEBUG"


def test_text_format_uses_standard_formatter(tmp_path):
    cfg = make_dict_config(make_settings(tmp_path, LOG_FORMAT="text", LOG_TO_STDOUT=True))

    assert cfg["handlers"]["console"]["formatter"] == "standard"


def test_setup_logging_creates_log_dir_and_writes_errors(tmp_path):
    settings = make_settings(tmp_path / "logs")
    assert not settings.LOG_DIR.exists()

    setup_logging(settings)
    logging.getLogger("clientui.recovery.orchestrator").error(
        "recovery.escalated", extra={"error": {"kind": "service_unavailable"}}
    )

    assert settings.LOG_DIR.exists()
    lines = (settings.LOG_DIR / "errors.log").read_text(encoding="utf-8").splitlines()
    record = json.loads(lines[-1])
    assert record["message"] == "recovery.escalated"
    assert record["error"] == {"kind": "service_unavailable"}
    assert record["service"] == "clientui"
