"""Custom exceptions for the blossom upload pipeline."""

from __future__ import annotations

from typing import Any, Dict, Optional

GENERIC_FAILURE_MESSAGE = (
    "Failed to upload image! Change your Blossom media server in settings."
)
RESOLUTION_EMPTY_MESSAGE = (
    "Image upload failed to yield a URL! "
    "Change your Blossom media server in settings or try again."
)


class BlossomPipelineError(Exception):
    """Base exception for all blossom pipeline errors."""

    code = "PIPELINE_ERROR"

    def __init__(self, message: str = "", context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context or {}


class ValidationError(BlossomPipelineError):
    """Raised when a batch violates the upload policy.

    Always aggregate: a single offending file rejects the whole batch.
    """

    code = "VALIDATION_ERROR"


class ConfigurationError(BlossomPipelineError):
    """Error raised for invalid configuration options."""

    code = "CONFIGURATION_ERROR"


class ImageProcessingError(BlossomPipelineError):
    """Error raised when sanitizing a single image fails."""

    code = "IMAGE_PROCESSING_ERROR"


class DecodeError(ImageProcessingError):
    """The image bytes could not be decoded into pixels."""

    code = "DECODE_ERROR"


class EncodeError(ImageProcessingError):
    """Re-encoding the pixel buffer produced no output."""

    code = "ENCODE_ERROR"


class UploadError(BlossomPipelineError):
    """Error raised when the upload collaborator rejects a file."""

    code = "UPLOAD_ERROR"


class ResolutionEmptyError(BlossomPipelineError):
    """The pipeline ran but no response yielded a URL."""

    code = "RESOLUTION_EMPTY"

    def __init__(self, message: str = RESOLUTION_EMPTY_MESSAGE, context=None):
        super().__init__(message, context)
