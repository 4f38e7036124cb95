"""Unit tests for structlog configuration."""

from typing import Iterator

import pytest
import structlog
from structlog.testing import capture_logs

from identity_docstore.infrastructure.logging_config import configure_logging


@pytest.fixture(autouse=True)
def restore_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    """Test configure_logging()."""

    def test_explicit_level_filters_lower_levels(self) -> None:
        configure_logging("warning")

        logger = structlog.get_logger("test")
        with capture_logs() as logs:
            logger.info("hidden")
            logger.warning("shown")

        assert [entry["event"] for entry in logs] == ["shown"]

    def test_level_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "error")

        configure_logging()

        assert structlog.get_config()["wrapper_class"] is structlog.make_filtering_bound_logger(40)

    def test_unknown_level_falls_back_to_info(self) -> None:
        configure_logging("chatty")

        assert structlog.get_config()["wrapper_class"] is structlog.make_filtering_bound_logger(20)
