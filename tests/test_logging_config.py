"""Tests for structured logging and request tracing."""

import asyncio
import json
import logging
import time

import pytest

from src.logging_config.config import LogFormat, LoggingConfig, LogLevel
from src.logging_config.context import (
    RequestContext,
    bind_context,
    generate_request_id,
    get_context_dict,
    get_correlation_id,
    get_request_id,
)
from src.logging_config.performance import PerformanceTimer, log_performance
from src.logging_config.setup import (
    ConsoleFormatter,
    StructuredFormatter,
    configure_logging,
    get_logger,
)


def _record(msg="test", level=logging.INFO, lineno=1, **extra):
    record = logging.LogRecord(
        name="test", level=level, pathname="test.py",
        lineno=lineno, msg=msg, args=(), exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestLoggingConfig:
    """Tests for logging configuration dataclasses."""

    def test_default_config_values(self):
        config = LoggingConfig()
        assert config.level == LogLevel.INFO
        assert config.format == LogFormat.CONSOLE
        assert config.include_caller is True
        assert config.slow_threshold_ms == 2000.0
        assert config.service_name == "socialscope"

    def test_custom_config(self):
        config = LoggingConfig(
            level=LogLevel.DEBUG,
            format=LogFormat.JSON,
            slow_threshold_ms=500.0,
            service_name="test",
        )
        assert config.level == LogLevel.DEBUG
        assert config.format == LogFormat.JSON
        assert config.slow_threshold_ms == 500.0

    def test_log_format_enum_values(self):
        assert LogFormat.JSON.value == "json"
        assert LogFormat.CONSOLE.value == "console"

    def test_exclude_paths_default(self):
        config = LoggingConfig()
        assert "/health" in config.exclude_paths

    def test_quiet_loggers_default(self):
        config = LoggingConfig()
        assert "httpx" in config.quiet_loggers


class TestRequestContext:
    """Tests for request context management."""

    def test_generate_request_id_unique(self):
        ids = {generate_request_id() for _ in range(100)}
        assert len(ids) == 100

    def test_context_sets_request_id(self):
        with RequestContext(request_id="test-123"):
            assert get_request_id() == "test-123"
        assert get_request_id() == ""

    def test_correlation_id_defaults_to_request_id(self):
        with RequestContext(request_id="req-777") as ctx:
            assert ctx.correlation_id == "req-777"
            assert get_correlation_id() == "req-777"

    def test_auto_generates_request_id(self):
        with RequestContext() as ctx:
            assert ctx.request_id != ""
            assert get_request_id() == ctx.request_id

    def test_context_dict_omits_duplicate_correlation_id(self):
        with RequestContext(request_id="r1"):
            assert get_context_dict() == {"request_id": "r1"}

    def test_context_dict_keeps_distinct_correlation_id(self):
        with RequestContext(request_id="r1", correlation_id="c1"):
            ctx = get_context_dict()
            assert ctx["correlation_id"] == "c1"

    def test_context_dict_empty_outside(self):
        assert get_context_dict() == {}

    def test_bind_extra_context(self):
        with RequestContext(request_id="r1") as ctx:
            ctx.bind(platform="instagram", query="travel")
            d = get_context_dict()
            assert d["platform"] == "instagram"
            assert d["query"] == "travel"
        assert get_context_dict() == {}

    def test_bind_context_function(self):
        with RequestContext(request_id="r2"):
            bind_context(handle="@alice")
            assert get_context_dict()["handle"] == "@alice"

    def test_elapsed_ms(self):
        with RequestContext() as ctx:
            time.sleep(0.01)
            assert ctx.elapsed_ms >= 10


class TestStructuredFormatter:
    """Tests for JSON structured log formatting."""

    def test_formats_as_json(self):
        parsed = json.loads(StructuredFormatter().format(_record("hello world")))
        assert parsed["message"] == "hello world"
        assert parsed["level"] == "INFO"
        assert parsed["logger"] == "test"
        assert "timestamp" in parsed

    def test_includes_service_name(self):
        parsed = json.loads(StructuredFormatter(service_name="my-service").format(_record()))
        assert parsed["service"] == "my-service"

    def test_caller_info_toggle(self):
        with_caller = json.loads(StructuredFormatter(include_caller=True).format(_record(lineno=42)))
        assert with_caller["line"] == 42
        without = json.loads(StructuredFormatter(include_caller=False).format(_record()))
        assert "line" not in without

    def test_includes_request_context(self):
        with RequestContext(request_id="ctx-1"):
            parsed = json.loads(StructuredFormatter().format(_record()))
        assert parsed["request_id"] == "ctx-1"

    def test_includes_extra_fields(self):
        record = _record(platform="youtube", duration_ms=12.5, unrelated="skip")
        parsed = json.loads(StructuredFormatter().format(record))
        assert parsed["platform"] == "youtube"
        assert parsed["duration_ms"] == 12.5
        assert "unrelated" not in parsed

    def test_formats_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            import sys
            record = logging.LogRecord(
                name="test", level=logging.ERROR, pathname="test.py",
                lineno=1, msg="failed", args=(), exc_info=sys.exc_info(),
            )
        parsed = json.loads(StructuredFormatter().format(record))
        assert parsed["exception"]["type"] == "ValueError"
        assert parsed["exception"]["message"] == "boom"


class TestConsoleFormatter:
    """Tests for the development console formatter."""

    def test_plain_line_without_color(self):
        line = ConsoleFormatter(use_color=False).format(_record("hello"))
        assert "INFO" in line
        assert "test: hello" in line
        assert "\033[" not in line

    def test_colored_line(self):
        line = ConsoleFormatter(use_color=True).format(_record("hello"))
        assert "\033[32m" in line

    def test_appends_context(self):
        with RequestContext(request_id="abc"):
            line = ConsoleFormatter(use_color=False).format(_record("hello"))
        assert "[request_id=abc]" in line


class TestConfigureLogging:
    """Tests for root logger configuration."""

    @pytest.fixture(autouse=True)
    def _restore_root(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_sets_level_and_single_handler(self):
        configure_logging(LoggingConfig(level=LogLevel.WARNING))
        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1

    def test_json_format_uses_structured_formatter(self):
        configure_logging(LoggingConfig(format=LogFormat.JSON))
        handler = logging.getLogger().handlers[0]
        assert isinstance(handler.formatter, StructuredFormatter)

    def test_quiets_noisy_loggers(self):
        configure_logging(LoggingConfig(quiet_loggers=["httpx"]))
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("SOCIAL_LOG_LEVEL", "debug")
        monkeypatch.setenv("SOCIAL_LOG_FORMAT", "json")
        effective = configure_logging(LoggingConfig())
        assert effective.level == LogLevel.DEBUG
        assert effective.format == LogFormat.JSON

    def test_get_logger(self):
        assert get_logger("src.test").name == "src.test"


class TestPerformanceTimer:
    """Tests for timing helpers."""

    def test_measures_duration(self):
        with PerformanceTimer("op", threshold_ms=10_000) as timer:
            time.sleep(0.01)
        assert timer.duration_ms >= 10

    def test_slow_operation_logs_warning(self, caplog):
        log = logging.getLogger("test.perf")
        with caplog.at_level(logging.DEBUG, logger="test.perf"):
            with PerformanceTimer("catalog_reload", threshold_ms=0, log=log):
                pass
        assert any("Slow operation: catalog_reload" in r.message for r in caplog.records)

    def test_failure_logs_error(self, caplog):
        log = logging.getLogger("test.perf")
        with caplog.at_level(logging.DEBUG, logger="test.perf"):
            with pytest.raises(RuntimeError):
                with PerformanceTimer("op", log=log):
                    raise RuntimeError("x")
        assert caplog.records[-1].levelno == logging.ERROR

    def test_decorator_sync(self):
        @log_performance(threshold_ms=10_000)
        def add(a, b):
            return a + b

        assert add(2, 3) == 5
        assert add.__name__ == "add"

    def test_decorator_async(self):
        @log_performance(threshold_ms=10_000)
        async def double(x):
            await asyncio.sleep(0)
            return x * 2

        assert asyncio.run(double(21)) == 42
