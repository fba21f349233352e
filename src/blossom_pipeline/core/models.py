"""Shared data models for the blossom pipeline."""

import hashlib
import io
from datetime import datetime, timezone
from typing import Any, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

MAX_FILE_SIZE = 5 * 1024 * 1024
ALLOWED_TYPES: FrozenSet[str] = frozenset({"image/jpeg", "image/png", "image/webp"})
DEFAULT_SERVER = "https://cdn.nostrcheck.me"


def format_file_size(size: int) -> str:
    """Render a byte count the way the preview grid shows it."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


class ImageInput(BaseModel):
    """A raw file handle selected or dropped by the user."""

    model_config = ConfigDict(frozen=True)

    name: str
    content_type: str
    data: bytes = Field(repr=False)
    size: int

    @model_validator(mode="before")
    @classmethod
    def _default_size(cls, values: Any) -> Any:
        # Declared size falls back to the actual byte count.
        if isinstance(values, dict) and values.get("size") is None:
            data = values.get("data")
            if isinstance(data, (bytes, bytearray)):
                values = {**values, "size": len(data)}
        return values


class ValidationPolicy(BaseModel):
    """Allow-set of media types and a maximum byte size."""

    model_config = ConfigDict(frozen=True)

    allowed_types: FrozenSet[str] = ALLOWED_TYPES
    max_file_size: int = MAX_FILE_SIZE


class SanitizedImage(BaseModel):
    """Re-encoded image bytes with all non-pixel metadata removed."""

    model_config = ConfigDict(frozen=True)

    name: str
    content_type: str
    data: bytes = Field(repr=False)
    last_modified: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def sha256(self) -> str:
        """Content address of the sanitized bytes."""
        return hashlib.sha256(self.data).hexdigest()

    def as_stream(self) -> io.BytesIO:
        """Return a fresh file-like object over the sanitized bytes."""
        return io.BytesIO(self.data)


class PreviewItem(BaseModel):
    """Display preview for one selected file."""

    src: str = Field(repr=False)
    name: str
    size: int

    @property
    def display_size(self) -> str:
        return format_file_size(self.size)


class UploadOutcome(BaseModel):
    """Result of uploading a single image."""

    name: str
    url: Optional[str] = None
    raw_response: Any = None
    error: str = ""

    @property
    def success(self) -> bool:
        return self.url is not None


class FailureNotice(BaseModel):
    """The single user-visible failure of a pipeline run."""

    message: str
    code: str = "PIPELINE_ERROR"


class PipelineResult(BaseModel):
    """Everything one pipeline run produced."""

    urls: List[str] = Field(default_factory=list)
    outcomes: List[UploadOutcome] = Field(default_factory=list)
    failure: Optional[FailureNotice] = None
