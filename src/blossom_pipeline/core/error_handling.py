# src/blossom_pipeline/core/error_handling.py

import functools
import logging
from typing import Any, Callable, Dict, List, Type, TypeVar

from .exceptions import BlossomPipelineError

F = TypeVar("F", bound=Callable[..., Any])


def with_error_handling(error_cls: Type[BlossomPipelineError]) -> Callable[[F], F]:
    """
    A decorator translating library failures into the pipeline taxonomy.

    Pipeline errors raised inside the wrapped function pass through unchanged;
    anything else is logged and re-raised as ``error_cls``.
    """
    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            logger = logging.getLogger(func.__module__ + '.' + func.__name__)
            try:
                return func(*args, **kwargs)
            except BlossomPipelineError:
                raise
            except Exception as e:
                logger.error(f"Error in '{func.__name__}': {e}", exc_info=True)
                raise error_cls(f"{error_cls.__name__} in {func.__name__}: {e}") from e
        return wrapper  # type: ignore[return-value]
    return decorator


class BatchOperationContextManager:
    """
    Context manager for pipeline stages to collect and summarize per-item errors.
    """
    def __init__(self, operation_name: str = "Batch Operation"):
        self.operation_name = operation_name
        self.errors: List[Dict[str, str]] = []
        self.logger = logging.getLogger(self.__class__.__module__ + '.' + self.__class__.__name__)

    def __enter__(self) -> "BatchOperationContextManager":
        self.logger.debug(f"Starting {self.operation_name}.")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if self.errors:
            self.logger.warning(
                f"{self.operation_name} completed with {len(self.errors)} error(s)."
            )
            for i, error_detail in enumerate(self.errors):
                self.logger.error(
                    f"  Error {i+1}/{len(self.errors)} for item "
                    f"'{error_detail['item']}': {error_detail['error']}"
                )
        elif exc_type:
            self.logger.error(
                f"{self.operation_name} failed due to an unhandled exception: {exc_val}",
                exc_info=(exc_type, exc_val, exc_tb)
            )
        else:
            self.logger.debug(f"{self.operation_name} completed successfully.")

        # Unreported exceptions propagate
        return False

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def add_error(self, error_message: str, item_identifier: str = "Unknown item") -> None:
        """
        Report an error for a specific item within the 'with' block.

        Args:
            error_message: The error message or exception string.
            item_identifier: A string identifying the item that failed (e.g. file name).
        """
        self.errors.append({"item": item_identifier, "error": str(error_message)})
        self.logger.debug(f"Error added for item '{item_identifier}' in {self.operation_name}: {error_message}")
