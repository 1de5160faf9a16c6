from __future__ import annotations

import json
import logging

import pytest

from pairing_core.logging_config import (
    JsonFormatter,
    LogContext,
    TextFormatter,
    clear_log_context,
    get_log_context,
    resolve_level,
    set_log_context,
)
from pairing_core.utils.logging import log_event, utc_now


def _record(msg: str, *args: object) -> logging.LogRecord:
    return logging.LogRecord(
        name="pairing_core.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=args,
        exc_info=None,
    )


def test_text_formatter_layout() -> None:
    output = TextFormatter().format(_record("Indexed %d records", 4))
    assert output.endswith(" | INFO | pairing_core.test | Indexed 4 records")


def test_text_formatter_appends_context() -> None:
    with LogContext(stream="left", path="l.fq"):
        output = TextFormatter().format(_record("Indexed %d records", 4))
    assert output.endswith(" | Indexed 4 records | stream=left path=l.fq")


def test_json_formatter_includes_context() -> None:
    set_log_context(stream="left", path="l.fq")
    try:
        payload = json.loads(JsonFormatter().format(_record("Indexed %d records", 4)))
    finally:
        clear_log_context()
    assert payload["message"] == "Indexed 4 records"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "pairing_core.test"
    assert payload["timestamp"].endswith("Z")
    assert payload["context"] == {"stream": "left", "path": "l.fq"}


def test_json_formatter_without_context() -> None:
    payload = json.loads(JsonFormatter().format(_record("plain")))
    assert "context" not in payload


def test_log_context_is_scoped() -> None:
    set_log_context(left="l.fq", right="r.fq")
    with LogContext(stream="right"):
        assert get_log_context() == {"left": "l.fq", "right": "r.fq", "stream": "right"}
    assert get_log_context() == {"left": "l.fq", "right": "r.fq"}
    set_log_context(left="other.fq")
    assert get_log_context() == {"left": "other.fq"}


@pytest.mark.parametrize(
    ("level", "verbose", "expected"),
    [
        (None, False, logging.INFO),
        ("warning", False, logging.WARNING),
        ("nonsense", False, logging.INFO),
        (logging.ERROR, False, logging.ERROR),
        ("INFO", True, logging.DEBUG),
        ("WARNING", True, logging.DEBUG),
        (5, True, 5),
    ],
)
def test_resolve_level(level, verbose: bool, expected: int) -> None:
    assert resolve_level(level, verbose=verbose) == expected


def test_log_event_appends_sorted_json(caplog) -> None:
    logger = logging.getLogger("pairing_core.test")
    with caplog.at_level(logging.INFO, logger="pairing_core.test"):
        log_event(logger, "Pairing finished", right_single=2, left_paired=1)
    assert caplog.records[-1].getMessage() == 'Pairing finished | {"left_paired": 1, "right_single": 2}'


def test_log_event_level(caplog) -> None:
    logger = logging.getLogger("pairing_core.test")
    with caplog.at_level(logging.DEBUG, logger="pairing_core.test"):
        log_event(logger, "failed", level=logging.ERROR)
    assert caplog.records[-1].levelno == logging.ERROR
    assert caplog.records[-1].getMessage() == "failed"


def test_utc_now_format() -> None:
    value = utc_now()
    assert value.endswith("Z")
    assert len(value) == 20
