"""Upload policy validation."""

from typing import Sequence

from .exceptions import ValidationError
from .models import ImageInput, ValidationPolicy

UNSUPPORTED_TYPE_MESSAGE = "Only JPEG, PNG, or WebP images are supported!"
EMPTY_BATCH_MESSAGE = "No images were selected"


def is_allowed_type(content_type: str, policy: ValidationPolicy) -> bool:
    return content_type.startswith("image/") and content_type in policy.allowed_types


def validate_batch(files: Sequence[ImageInput], policy: ValidationPolicy) -> None:
    """
    Check every file of a batch against the policy.

    The whole batch is rejected if any single file fails. The type check runs
    over every file before the size check.

    Raises:
        ValidationError: naming the violated constraint
    """
    if not files:
        raise ValidationError(EMPTY_BATCH_MESSAGE)

    rejected = [f.name for f in files if not is_allowed_type(f.content_type, policy)]
    if rejected:
        raise ValidationError(
            UNSUPPORTED_TYPE_MESSAGE,
            context={"constraint": "type", "files": rejected},
        )

    oversized = [f.name for f in files if f.size > policy.max_file_size]
    if oversized:
        limit_mb = policy.max_file_size / (1024 * 1024)
        raise ValidationError(
            f"Each image must be smaller than {limit_mb:g} MB",
            context={
                "constraint": "size",
                "files": oversized,
                "max_bytes": policy.max_file_size,
            },
        )
