"""Factory classes for creating configured service instances."""

import logging
from typing import Any, Optional

from .config import PipelineConfig
from .image_utils import PillowImageCodec
from .observability import LogContext, MetricsCollector, StructuredLogger
from .protocols import (
    BlossomUploaderProtocol,
    FailureNotifierProtocol,
    ImageCodecProtocol,
    LoggerProtocol,
)
from .services import UploadOrchestrator


class LoggerAdapter:
    """Adapter to make a standard logger compatible with LoggerProtocol."""

    def __init__(self, logger: logging.Logger):
        self._structured = StructuredLogger(logger)

    def debug(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self._structured.debug(message, context, **kwargs)

    def info(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self._structured.info(message, context, **kwargs)

    def warning(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self._structured.warning(message, context, **kwargs)

    def error(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self._structured.error(message, context, **kwargs)


class LoggerFactory:
    """Factory for creating logger instances."""

    @staticmethod
    def create_logger(name: str, level: int = logging.INFO) -> LoggerProtocol:
        """Create a configured logger instance."""
        logger = logging.getLogger(name)
        logger.setLevel(level)

        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return LoggerAdapter(logger)


class PipelineFactory:
    """Factory for creating the complete upload pipeline."""

    @staticmethod
    def create_orchestrator(
        uploader: BlossomUploaderProtocol,
        config: Optional[PipelineConfig] = None,
        codec: Optional[ImageCodecProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
        metrics_collector: Optional[MetricsCollector] = None,
        notifier: Optional[FailureNotifierProtocol] = None,
    ) -> UploadOrchestrator:
        """Create a fully configured upload orchestrator."""
        if config is None:
            config = PipelineConfig.from_env()

        if logger is None:
            logger = LoggerFactory.create_logger("blossom_pipeline")

        return UploadOrchestrator(
            uploader=uploader,
            codec=codec or PillowImageCodec(),
            logger=logger,
            config=config,
            metrics_collector=metrics_collector,
            notifier=notifier,
        )
