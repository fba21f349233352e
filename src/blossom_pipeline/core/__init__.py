"""Core utilities and shared components for the blossom pipeline."""

from .config import PipelineConfig, resolve_endpoints
from .events import (
    Added,
    ClearedAll,
    RemovedAt,
    UploadEvent,
    UploadSession,
    url_callback_adapter,
)
from .exceptions import (
    BlossomPipelineError,
    ConfigurationError,
    DecodeError,
    EncodeError,
    ImageProcessingError,
    ResolutionEmptyError,
    UploadError,
    ValidationError,
)
from .factories import PipelineFactory
from .image_utils import PillowImageCodec, read_image_file, to_data_url
from .logging_config import bind_run, get_logger, set_level, setup_logger
from .models import (
    FailureNotice,
    ImageInput,
    PipelineResult,
    PreviewItem,
    SanitizedImage,
    UploadOutcome,
    ValidationPolicy,
    format_file_size,
)
from .preview import build_preview, generate_previews
from .progress import PipelineStage, PipelineState
from .resolver import Malformed, Tags, parse_response, resolve_url
from .sanitizer import sanitize_image
from .services import UploadOrchestrator
from .validation import validate_batch

__all__ = [
    "Added",
    "BlossomPipelineError",
    "ClearedAll",
    "ConfigurationError",
    "DecodeError",
    "EncodeError",
    "FailureNotice",
    "ImageInput",
    "ImageProcessingError",
    "Malformed",
    "PillowImageCodec",
    "PipelineConfig",
    "PipelineFactory",
    "PipelineResult",
    "PipelineStage",
    "PipelineState",
    "PreviewItem",
    "RemovedAt",
    "ResolutionEmptyError",
    "SanitizedImage",
    "Tags",
    "UploadError",
    "UploadEvent",
    "UploadOrchestrator",
    "UploadOutcome",
    "UploadSession",
    "ValidationError",
    "ValidationPolicy",
    "bind_run",
    "build_preview",
    "format_file_size",
    "generate_previews",
    "get_logger",
    "parse_response",
    "read_image_file",
    "resolve_endpoints",
    "resolve_url",
    "sanitize_image",
    "set_level",
    "setup_logger",
    "to_data_url",
    "url_callback_adapter",
    "validate_batch",
]
