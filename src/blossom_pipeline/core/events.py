"""Caller-facing upload session and the events it emits.

Callers receive one :data:`UploadEvent` per observable action instead of the
overloaded single-string callback where ``""`` meant "remove". Code still
written against that convention can be plugged in through
:func:`url_callback_adapter`.
"""

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Union

from .logging_config import get_logger
from .models import ImageInput
from .progress import PipelineState
from .services import UploadOrchestrator

REMOVAL_SENTINEL = ""


@dataclass(frozen=True)
class Added:
    """An image was uploaded and resolved to ``url``."""

    url: str


@dataclass(frozen=True)
class RemovedAt:
    """The preview at ``index`` was removed by the user."""

    index: int


@dataclass(frozen=True)
class ClearedAll:
    """Every preview was cleared by the user."""


UploadEvent = Union[Added, RemovedAt, ClearedAll]
EventCallback = Callable[[UploadEvent], None]


def url_callback_adapter(callback: Callable[[str], None]) -> EventCallback:
    """Translate events onto a legacy ``callback(url)`` where ``""`` means removal."""

    def handle(event: UploadEvent) -> None:
        if isinstance(event, Added):
            callback(event.url)
        else:
            callback(REMOVAL_SENTINEL)

    return handle


class UploadSession:
    """One upload surface: runs batches and reports what the user did.

    A batch submitted while another is still running is ignored, as the
    upload control is disabled while loading.
    """

    def __init__(
        self,
        orchestrator: UploadOrchestrator,
        on_event: EventCallback,
        endpoints: Optional[Sequence[str]] = None,
    ):
        self._orchestrator = orchestrator
        self._on_event = on_event
        self._endpoints = list(endpoints) if endpoints is not None else None
        self._logger = get_logger("session")
        self.state = PipelineState()
        self.loading = False

    async def handle_files(
        self, files: Sequence[ImageInput], is_authenticated: bool, signer: Any
    ) -> List[str]:
        """Upload a selected or dropped batch and emit ``Added`` per URL."""
        if self.loading:
            self._logger.warning("Upload already in progress, ignoring new batch")
            return []
        if not files:
            return []

        self.loading = True
        try:
            urls = await self._orchestrator.upload(
                files, is_authenticated, signer, self._endpoints, self.state
            )
        finally:
            self.loading = False

        for url in urls:
            self._on_event(Added(url))
        return urls

    def remove_preview(self, index: int) -> None:
        self.state.remove_preview(index)
        self._on_event(RemovedAt(index))

    def clear_all(self) -> None:
        self.state.clear_previews()
        self._on_event(ClearedAll())
