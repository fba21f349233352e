"""Tests for logging_config.py utility functions."""

import asyncio
import io
import logging
import os
from unittest.mock import patch

import pytest

from blossom_pipeline.core.logging_config import (
    NO_RUN,
    ROOT_LOGGER_NAME,
    RunContextFilter,
    bind_run,
    current_run_id,
    get_logger,
    logger,
    set_level,
    setup_logger,
)


@pytest.fixture
def captured_root():
    """Route the package root logger into a buffer for the duration of a test."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    handler = root.handlers[0]
    previous_stream = handler.setStream(io.StringIO())
    previous_level = root.level
    yield handler.stream
    handler.setStream(previous_stream)
    root.setLevel(previous_level)


class TestSetupLogger:
    """Tests for setup_logger function."""

    def test_setup_logger_default_parameters(self):
        """Test setup_logger with default parameters."""
        with patch.dict(os.environ, {"LOG_LEVEL": "INFO"}):
            test_logger = setup_logger()
        assert test_logger.name == ROOT_LOGGER_NAME
        assert test_logger.level == logging.INFO
        assert len(test_logger.handlers) == 1
        assert not test_logger.propagate

    def test_setup_logger_level_by_parameter(self):
        """Test level names and numbers are both accepted."""
        assert setup_logger(name="test-param-level", level="DEBUG").level == logging.DEBUG
        assert setup_logger(name="test-int-level", level=logging.WARNING).level == logging.WARNING

    def test_setup_logger_level_by_env_var(self):
        """Test setup_logger with custom level via environment variable."""
        with patch.dict(os.environ, {"LOG_LEVEL": "WARNING"}):
            assert setup_logger(name="test-env-level").level == logging.WARNING

    @pytest.mark.parametrize("level", ["INVALID_LEVEL", "BASIC_FORMAT"])
    def test_setup_logger_invalid_level_defaults_to_info(self, level):
        """Test that unknown level names fall back to INFO."""
        assert setup_logger(name=f"test-{level}", level=level).level == logging.INFO

    def test_structured_format_carries_run_id(self):
        """Test the structured format includes the run id and call site."""
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("LOG_FORMAT", None)
            test_logger = setup_logger(name="test-structured", format_type="structured")
        format_string = test_logger.handlers[0].formatter._fmt
        assert "run=%(run_id)s" in format_string
        assert "%(lineno)d" in format_string

    def test_env_format_override(self):
        """Test LOG_FORMAT overrides the requested format."""
        with patch.dict(os.environ, {"LOG_FORMAT": "simple"}):
            test_logger = setup_logger(name="test-env-format", format_type="structured")
        format_string = test_logger.handlers[0].formatter._fmt
        assert "%(filename)s" not in format_string
        assert "%(run_id)s" in format_string

    def test_handler_has_run_filter(self):
        """Test the handler stamps records with the run id."""
        test_logger = setup_logger(name="test-filter")
        assert any(isinstance(f, RunContextFilter) for f in test_logger.handlers[0].filters)

    def test_setup_logger_no_duplicate_handlers(self):
        """Test that repeated setup does not add handlers."""
        setup_logger(name="test-no-dupes")
        assert len(setup_logger(name="test-no-dupes").handlers) == 1


class TestGetLogger:
    """Tests for get_logger function."""

    def test_component_is_child_of_root(self):
        """Test that component loggers propagate to the root handler."""
        component = get_logger("sanitizer")
        assert component.name == f"{ROOT_LOGGER_NAME}.sanitizer"
        assert component.handlers == []
        assert component.propagate

    def test_qualified_name_unchanged(self):
        """Test that already-qualified names are unchanged."""
        assert get_logger(f"{ROOT_LOGGER_NAME}.preview").name == f"{ROOT_LOGGER_NAME}.preview"

    def test_same_instance(self):
        """Test that repeated calls return the same logger."""
        assert get_logger("session") is get_logger("session")

    def test_set_level_governs_components(self, captured_root):
        """Test that one level change reaches every component."""
        set_level("DEBUG")
        get_logger("sanitizer").debug("decoded pixels")
        assert "decoded pixels" in captured_root.getvalue()

        set_level("WARNING")
        get_logger("sanitizer").info("hidden")
        assert "hidden" not in captured_root.getvalue()

    def test_default_logger(self):
        """Test the module-level default logger."""
        assert logger.name == ROOT_LOGGER_NAME
        assert not logger.propagate


class TestRunContext:
    """Tests for per-run log attribution."""

    def test_no_run_by_default(self):
        """Test records outside a run carry the placeholder id."""
        assert current_run_id() == NO_RUN

    def test_bind_run_restores_previous(self):
        """Test nesting and restoring run ids."""
        with bind_run("outer"):
            with bind_run("inner"):
                assert current_run_id() == "inner"
            assert current_run_id() == "outer"
        assert current_run_id() == NO_RUN

    def test_run_id_reaches_worker_threads(self, captured_root):
        """Test that records from threads started by a run carry its id."""
        set_level("INFO")

        async def run():
            with bind_run("run-42"):
                await asyncio.to_thread(get_logger("sanitizer").info, "in a thread")

        asyncio.run(run())

        assert "run-42" in captured_root.getvalue()
        assert "in a thread" in captured_root.getvalue()
