from __future__ import annotations

import io
import json
import logging

import pytest

from imucal.errors import (
    ConfigurationError,
    ImucalError,
    SampleOrderError,
    SessionStateError,
    build_error_payload,
    log_error,
)
from imucal.logging import JsonFormatter, setup_logging


def test_json_formatter_keeps_extra_fields() -> None:
    record = logging.LogRecord("imucal.core", logging.INFO, __file__, 1, "hello %s", ("bench",), None)
    record.event = "generator.started"
    record.samples = 12

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "hello bench"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "imucal.core"
    assert payload["event"] == "generator.started"
    assert payload["samples"] == 12
    assert "args" not in payload


def test_setup_logging_uses_config_table() -> None:
    stream = io.StringIO()

    logger = setup_logging(stream=stream, config={"level": "debug", "format": "json"})
    logging.getLogger("imucal.core.generator").debug("ready", extra={"event": "test.ready"})

    assert logger.level == logging.DEBUG
    assert not logger.propagate
    line = json.loads(stream.getvalue().strip())
    assert line["event"] == "test.ready"


def test_setup_logging_arguments_win_over_config() -> None:
    stream = io.StringIO()

    setup_logging("warning", "text", stream=stream, config={"level": "debug", "format": "json"})
    logger = logging.getLogger("imucal")
    logger.info("hidden")
    logger.warning("shown")

    output = stream.getvalue()
    assert "hidden" not in output
    assert "WARNING imucal: shown" in output
    assert len(logger.handlers) == 1


def test_setup_logging_rejects_unknown_level() -> None:
    with pytest.raises(ValueError):
        setup_logging("chatty")


@pytest.mark.parametrize(
    ("error", "category", "status_code"),
    [
        (ImucalError("boom"), "runtime", 1),
        (SampleOrderError("late"), "usage", 2),
        (ImucalError("gone", category="not_found"), "not_found", 4),
        (ConfigurationError("bad"), "configuration", 5),
        (SessionStateError("busy"), "state", 6),
        (ConfigurationError("locked", category="state"), "state", 6),
    ],
)
def test_error_categories_map_to_status_codes(
    error: ImucalError, category: str, status_code: int
) -> None:
    assert error.category == category
    assert error.status_code == status_code
    assert error.payload.status_code == status_code


def test_error_payload_flattens_context() -> None:
    payload = build_error_payload(
        "failed", category="io", context={"path": "log.csv", "rows": [1, 2], "ok": None}
    )

    assert payload.status_code == 3
    assert payload.as_dict() == {
        "status_code": 3,
        "category": "io",
        "message": "failed",
        "context": {"path": "log.csv", "rows": "[1, 2]", "ok": None},
    }


def test_log_error_emits_structured_record(caplog: pytest.LogCaptureFixture) -> None:
    payload = ConfigurationError("window too small", context={"window_size": 1}).payload

    with caplog.at_level(logging.ERROR, logger="imucal"):
        log_error(payload)

    record = caplog.records[-1]
    assert record.getMessage() == "window too small"
    assert record.event == "imucal.error"
    assert record.status_code == 5
    assert record.context == {"window_size": 1}
