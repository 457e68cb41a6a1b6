"""Unit tests for structured logging configuration and the service mixin."""

from collections.abc import Iterator

import pytest
import structlog
from structlog.testing import capture_logs

from src.application.services.base import LoggingMixin
from src.infrastructure.observability.correlation import set_correlation_id
from src.infrastructure.observability.logging import (
    configure_structlog,
    get_logger_for_service,
)


@pytest.fixture(autouse=True)
def restore_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()
    set_correlation_id("")


def _renderer_types() -> list[type]:
    return [type(p) for p in structlog.get_config()["processors"]]


class TestConfigureStructlog:
    """Tests for configure_structlog function."""

    def test_production_renders_json(self) -> None:
        configure_structlog(environment="production")

        assert _renderer_types()[-1] is structlog.processors.JSONRenderer

    def test_development_renders_console(self) -> None:
        configure_structlog(environment="development")

        assert _renderer_types()[-1] is structlog.dev.ConsoleRenderer

    def test_defaults_to_production(self) -> None:
        configure_structlog()

        assert _renderer_types()[-1] is structlog.processors.JSONRenderer

    def test_log_level_from_environment(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        configure_structlog(environment="production")

        logger = structlog.get_logger()
        logger.info("update_created")
        logger.warning("subscriber_lagging")

        output = capsys.readouterr().out
        assert "update_created" not in output
        assert "subscriber_lagging" in output


class TestServiceLoggers:
    """Tests for service-bound loggers."""

    def test_get_logger_for_service_binds_names(self) -> None:
        with capture_logs() as logs:
            get_logger_for_service("UpdateIngestionService").info("update_created")

        assert logs[0]["service"] == "UpdateIngestionService"
        assert logs[0]["component"] == "updates"

    def test_logging_mixin_binds_operation_and_correlation(self) -> None:
        class ExampleService(LoggingMixin):
            def __init__(self) -> None:
                self._init_logger(component="updates")

        set_correlation_id("corr-42")
        service = ExampleService()

        with capture_logs() as logs:
            service._log_operation("create_update", commit="abc123").info(
                "update_created"
            )

        entry = logs[0]
        assert entry["event"] == "update_created"
        assert entry["service"] == "ExampleService"
        assert entry["operation"] == "create_update"
        assert entry["commit"] == "abc123"
        assert entry["correlation_id"] == "corr-42"
