"""Smoke tests for structured logging output shape.

Library modules log through child loggers of ``rivulet`` with extra fields
(stream, producer, kind, operator, strategy) that JSONFormatter lifts into
the JSON output.
"""

import json
import logging
import sys

import pytest

from rivulet import operators as ops
from rivulet.core.config import ObserverFailureMode, StreamConfig
from rivulet.core.logging import JSONFormatter, configure_logging, get_logger
from rivulet.core.producer import Producer
from rivulet.core.stream import create_stream
from rivulet.operators import FlattenStrategy


class LogCapture(logging.Handler):
    """Custom handler to capture log records for testing."""

    def __init__(self):
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    def messages(self) -> list[str]:
        return [r.getMessage() for r in self.records]


def _capture(name: str):
    logger = logging.getLogger(name)
    handler = LogCapture()
    handler.setLevel(logging.DEBUG)

    # Store original level
    original_level = logger.level

    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield handler

    # Restore original state
    logger.removeHandler(handler)
    logger.setLevel(original_level)


@pytest.fixture
def stream_logs():
    """Capture logs from the rivulet.stream logger."""
    yield from _capture("rivulet.stream")


@pytest.fixture
def producer_logs():
    """Capture logs from the rivulet.producer logger."""
    yield from _capture("rivulet.producer")


@pytest.fixture
def operator_logs():
    """Capture logs from the rivulet.operators logger."""
    yield from _capture("rivulet.operators")


def test_termination_log_contains_required_fields(stream_logs):
    stream, sender = create_stream(name="orders")
    stream.observe(lambda e: None)
    sender.send_completed()

    records = [r for r in stream_logs.records if "terminated" in r.getMessage()]
    assert len(records) == 1, "Expected one termination log record"

    record = records[0]
    assert record.levelno == logging.DEBUG
    assert record.stream == "orders"
    assert record.kind == "completed"


def test_auto_interrupt_is_logged(stream_logs):
    stream, _ = create_stream(name="clicks")
    stream.observe(lambda e: None).dispose()

    assert "Last observer disposed, interrupting stream" in stream_logs.messages()


def test_dropped_failure_is_logged(stream_logs):
    _, sender = create_stream(name="lonely")
    sender.send_failed("nobody")

    records = [r for r in stream_logs.records if "Failure dropped" in r.getMessage()]
    assert len(records) == 1
    assert records[0].error == "nobody"


def test_observer_exception_logged_in_log_mode(stream_logs):
    config = StreamConfig(observer_failure_mode=ObserverFailureMode.LOG)
    stream, sender = create_stream(name="fragile", config=config)

    def explode(event):
        raise RuntimeError("observer broke")

    stream.observe(explode)
    sender.send_next(1)

    errors = [r for r in stream_logs.records if r.levelno == logging.ERROR]
    assert len(errors) == 1
    assert errors[0].stream == "fragile"
    assert errors[0].kind == "next"
    assert errors[0].exc_info is not None


def test_start_routine_exception_logged(producer_logs):
    def start_routine(sender, token):
        raise RuntimeError("routine broke")

    with pytest.raises(RuntimeError):
        Producer(start_routine, name="broken").start()

    errors = [r for r in producer_logs.records if r.levelno == logging.ERROR]
    assert len(errors) == 1
    assert errors[0].producer == "broken"
    assert "routine broke" in errors[0].getMessage()


def test_latest_switch_is_logged(operator_logs):
    outer, sender = create_stream()
    outer.pipe(ops.flat_map(FlattenStrategy.LATEST, lambda _: Producer.never())).observe(
        lambda e: None
    )

    sender.send_next(1)
    assert operator_logs.records == []

    sender.send_next(2)
    records = [r for r in operator_logs.records if "Disposing previous" in r.getMessage()]
    assert len(records) == 1
    assert records[0].operator == "flat_map"
    assert records[0].strategy == "latest"


def test_json_format_output(stream_logs):
    stream, sender = create_stream(name="orders")
    stream.observe(lambda e: None)
    sender.send_interrupted()

    formatter = JSONFormatter()
    log_data = json.loads(formatter.format(stream_logs.records[-1]))

    assert "timestamp" in log_data, "JSON log missing 'timestamp'"
    assert "level" in log_data, "JSON log missing 'level'"
    assert log_data["level"] == "DEBUG"
    assert log_data["logger"] == "rivulet.stream"
    assert log_data["stream"] == "orders"
    assert log_data["kind"] == "interrupted"


def test_json_format_includes_exception():
    formatter = JSONFormatter()
    try:
        raise ValueError("boom")
    except ValueError:
        record = logging.LogRecord(
            "rivulet.test", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
        )

    log_data = json.loads(formatter.format(record))
    assert log_data["message"] == "failed"
    assert "ValueError: boom" in log_data["exc_info"]


def test_configure_logging_installs_json_handler():
    logger = configure_logging(logging.WARNING)
    try:
        assert logger.name == "rivulet"
        assert logger.level == logging.WARNING
        assert any(isinstance(h.formatter, JSONFormatter) for h in logger.handlers)
        assert logger.propagate is False
    finally:
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)
        logger.propagate = True


def test_get_logger_returns_child():
    assert get_logger("rivulet.apps.demo").name == "rivulet.apps.demo"
