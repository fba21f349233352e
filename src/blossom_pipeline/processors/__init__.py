"""Concurrent stage processors."""

from .asyncio_processor import ItemResult, process_batch, process_batch_async

__all__ = [
    "ItemResult",
    "process_batch",
    "process_batch_async",
]
