"""Per-invocation pipeline state: stage, progress, previews and failure.

Valid stage transitions::

    IDLE        -> VALIDATING
    VALIDATING  -> PREVIEWING | IDLE        (validation failure)
    PREVIEWING  -> SANITIZING | FINALIZING
    SANITIZING  -> UPLOADING  | FINALIZING  (unauthenticated or failure)
    UPLOADING   -> FINALIZING
    FINALIZING  -> IDLE
"""

import asyncio
import math
from enum import Enum
from typing import Callable, Dict, List, Optional, Set

from .models import FailureNotice, PreviewItem

SANITIZE_SHARE = 30
UPLOAD_SHARE = 70


class PipelineStage(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    PREVIEWING = "previewing"
    SANITIZING = "sanitizing"
    UPLOADING = "uploading"
    FINALIZING = "finalizing"


VALID_TRANSITIONS: Dict[PipelineStage, Set[PipelineStage]] = {
    PipelineStage.IDLE: {PipelineStage.VALIDATING},
    PipelineStage.VALIDATING: {PipelineStage.PREVIEWING, PipelineStage.IDLE},
    PipelineStage.PREVIEWING: {PipelineStage.SANITIZING, PipelineStage.FINALIZING},
    PipelineStage.SANITIZING: {PipelineStage.UPLOADING, PipelineStage.FINALIZING},
    PipelineStage.UPLOADING: {PipelineStage.FINALIZING},
    PipelineStage.FINALIZING: {PipelineStage.IDLE},
}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def sanitize_progress(completed: int, total: int) -> int:
    """Progress after ``completed`` of ``total`` images are sanitized."""
    return round_half_up(completed / total * SANITIZE_SHARE)


def upload_progress(completed: int, total: int) -> int:
    """Progress after ``completed`` of ``total`` images are uploaded."""
    return SANITIZE_SHARE + round_half_up(completed / total * UPLOAD_SHARE)


StateListener = Callable[["PipelineState"], None]


class PipelineState:
    """Mutable state handle owned by one pipeline invocation.

    ``progress`` is None while no upload is active. Within a run it only
    moves forward, except for the terminal reset to None.
    """

    def __init__(self) -> None:
        self.stage: PipelineStage = PipelineStage.IDLE
        self.progress: Optional[int] = None
        self.previews: List[PreviewItem] = []
        self.failure: Optional[FailureNotice] = None
        self._listeners: List[StateListener] = []
        self._reset_handle: Optional[asyncio.TimerHandle] = None

    def subscribe(self, listener: StateListener) -> None:
        """Call ``listener`` with the state after every change."""
        self._listeners.append(listener)

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def transition(self, new_stage: PipelineStage) -> None:
        """Move to ``new_stage``.

        Raises:
            ValueError: If the transition is not allowed from the current stage
        """
        allowed = VALID_TRANSITIONS[self.stage]
        if new_stage not in allowed:
            raise ValueError(
                f"Invalid stage transition: {self.stage.value} -> {new_stage.value}. "
                f"Allowed transitions from {self.stage.value}: "
                f"{{{', '.join(sorted(s.value for s in allowed))}}}"
            )
        self.stage = new_stage
        self._changed()

    @property
    def is_active(self) -> bool:
        return self.progress is not None

    def start_progress(self) -> None:
        self.cancel_pending_reset()
        self.progress = 0
        self._changed()

    def advance(self, value: int) -> None:
        """Raise progress to ``value``, capped at 100; never moves backwards."""
        value = min(value, 100)
        if self.progress is not None and value <= self.progress:
            return
        self.progress = value
        self._changed()

    def reset_progress(self) -> None:
        self.cancel_pending_reset()
        if self.progress is None:
            return
        self.progress = None
        self._changed()

    def schedule_reset(self, delay: float) -> None:
        """Reset progress after ``delay`` seconds on the running event loop.

        Only the latest schedule is kept. Starting progress cancels it.
        """
        self.cancel_pending_reset()
        if delay <= 0:
            self.reset_progress()
            return
        loop = asyncio.get_running_loop()
        self._reset_handle = loop.call_later(delay, self._fire_reset)

    def cancel_pending_reset(self) -> bool:
        """Cancel a scheduled reset. Returns True if one was pending."""
        if self._reset_handle is None:
            return False
        self._reset_handle.cancel()
        self._reset_handle = None
        return True

    @property
    def reset_pending(self) -> bool:
        return self._reset_handle is not None

    def _fire_reset(self) -> None:
        self._reset_handle = None
        self.reset_progress()

    def set_previews(self, previews: List[PreviewItem]) -> None:
        self.previews = list(previews)
        self._changed()

    def remove_preview(self, index: int) -> PreviewItem:
        preview = self.previews.pop(index)
        self._changed()
        return preview

    def clear_previews(self) -> None:
        self.previews = []
        self._changed()

    def set_failure(self, notice: FailureNotice) -> bool:
        """Record the run's failure notice. Returns False if one is already shown."""
        if self.failure is not None:
            return False
        self.failure = notice
        self._changed()
        return True

    def dismiss_failure(self) -> None:
        self.failure = None
        self._changed()
