"""Tests for upload policy validation."""

import pytest

from blossom_pipeline.core.exceptions import ValidationError
from blossom_pipeline.core.models import ImageInput, ValidationPolicy
from blossom_pipeline.core.validation import (
    EMPTY_BATCH_MESSAGE,
    UNSUPPORTED_TYPE_MESSAGE,
    is_allowed_type,
    validate_batch,
)


def _file(name: str, content_type: str = "image/jpeg", size: int = 100) -> ImageInput:
    return ImageInput(name=name, content_type=content_type, data=b"x", size=size)


class TestIsAllowedType:
    """Tests for is_allowed_type."""

    @pytest.mark.parametrize("content_type", ["image/jpeg", "image/png", "image/webp"])
    def test_allowed(self, content_type):
        """Test the allowed image types."""
        assert is_allowed_type(content_type, ValidationPolicy())

    @pytest.mark.parametrize(
        "content_type", ["image/gif", "image/svg+xml", "application/pdf", "", "jpeg"]
    )
    def test_rejected(self, content_type):
        """Test that everything else is rejected."""
        assert not is_allowed_type(content_type, ValidationPolicy())


class TestValidateBatch:
    """Tests for validate_batch."""

    def test_valid_batch_passes(self):
        """Test that a conforming batch raises nothing."""
        validate_batch(
            [_file("a.jpg"), _file("b.png", "image/png"), _file("c.webp", "image/webp")],
            ValidationPolicy(),
        )

    def test_empty_batch_rejected(self):
        """Test that an empty batch is rejected."""
        with pytest.raises(ValidationError, match=EMPTY_BATCH_MESSAGE):
            validate_batch([], ValidationPolicy())

    def test_single_bad_type_rejects_whole_batch(self):
        """Test that one unsupported file rejects the batch."""
        with pytest.raises(ValidationError) as exc_info:
            validate_batch([_file("a.jpg"), _file("b.gif", "image/gif")], ValidationPolicy())

        assert exc_info.value.message == UNSUPPORTED_TYPE_MESSAGE
        assert exc_info.value.context["constraint"] == "type"
        assert exc_info.value.context["files"] == ["b.gif"]

    def test_oversized_file_rejected(self):
        """Test that a file over the limit rejects the batch."""
        policy = ValidationPolicy()
        with pytest.raises(ValidationError) as exc_info:
            validate_batch(
                [_file("a.jpg"), _file("big.jpg", size=policy.max_file_size + 1)], policy
            )

        assert exc_info.value.message == "Each image must be smaller than 5 MB"
        assert exc_info.value.context["constraint"] == "size"
        assert exc_info.value.context["files"] == ["big.jpg"]

    def test_file_at_limit_accepted(self):
        """Test that a file exactly at the limit passes."""
        policy = ValidationPolicy()
        validate_batch([_file("a.jpg", size=policy.max_file_size)], policy)

    def test_type_checked_before_size(self):
        """Test that a type violation is reported even when a size violation exists."""
        policy = ValidationPolicy()
        files = [
            _file("big.jpg", size=policy.max_file_size + 1),
            _file("doc.pdf", "application/pdf"),
        ]
        with pytest.raises(ValidationError, match="Only JPEG, PNG, or WebP"):
            validate_batch(files, policy)

    def test_custom_limit_in_message(self):
        """Test that the message reflects a custom limit."""
        policy = ValidationPolicy(max_file_size=2 * 1024 * 1024)
        with pytest.raises(ValidationError, match="smaller than 2 MB"):
            validate_batch([_file("a.jpg", size=3 * 1024 * 1024)], policy)
