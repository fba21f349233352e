"""Testing utilities and fakes for the blossom pipeline."""

from .fakes import (
    FakeBlossomServer,
    FakeBlossomUploader,
    FakeFailureNotifier,
    FakeLogger,
    UploadCall,
    create_image_input,
    create_test_image,
)

__all__ = [
    "FakeBlossomServer",
    "FakeBlossomUploader",
    "FakeFailureNotifier",
    "FakeLogger",
    "UploadCall",
    "create_image_input",
    "create_test_image",
]
