"""Protocol definitions for dependency injection and testability."""

from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence, Tuple

from .models import FailureNotice, SanitizedImage


@dataclass(frozen=True)
class PixelBuffer:
    """Decoded pixel data with no metadata attached."""

    mode: str
    size: Tuple[int, int]
    pixels: bytes = field(repr=False)


class ImageCodecProtocol(Protocol):
    """Protocol for decoding images to pixels and back."""

    def decode(self, data: bytes, declared_type: str) -> PixelBuffer:
        """Decode image bytes into a pixel buffer."""
        ...

    def encode(self, buffer: PixelBuffer, declared_type: str) -> bytes:
        """Encode a pixel buffer into the declared media type."""
        ...


class BlossomUploaderProtocol(Protocol):
    """Protocol for the Blossom upload collaborator.

    The raw response is expected to be a list of ``[key, value, ...]`` tags;
    transport or protocol failures are raised.
    """

    async def upload(
        self, image: SanitizedImage, signer: Any, endpoints: Sequence[str]
    ) -> Any:
        """Upload one sanitized image, trying the endpoints in order."""
        ...


class FailureNotifierProtocol(Protocol):
    """Protocol for the surface showing a run's failure notice."""

    def notify(self, notice: FailureNotice) -> None:
        """Show the failure notice."""
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log error message."""
        ...
