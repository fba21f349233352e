"""Display previews for selected images."""

import asyncio
from typing import List, Sequence

from .image_utils import to_data_url
from .logging_config import get_logger
from .models import ImageInput, PreviewItem


def build_preview(image: ImageInput) -> PreviewItem:
    """Build a data-URL preview of the original file."""
    return PreviewItem(
        src=to_data_url(image.data, image.content_type),
        name=image.name,
        size=image.size,
    )


async def generate_previews(images: Sequence[ImageInput]) -> List[PreviewItem]:
    """
    Build previews for every image concurrently.

    A preview that cannot be built is logged and left out; it never blocks
    the upload.
    """
    logger = get_logger("preview")
    results = await asyncio.gather(
        *(asyncio.to_thread(build_preview, image) for image in images),
        return_exceptions=True,
    )

    previews: List[PreviewItem] = []
    for image, result in zip(images, results):
        if isinstance(result, BaseException):
            logger.warning(f"[{image.name}] Preview failed: {result}")
            continue
        previews.append(result)
    return previews
