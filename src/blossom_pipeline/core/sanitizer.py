"""Metadata stripping by pixel re-encode."""

import asyncio
from datetime import datetime, timezone

from .logging_config import get_logger
from .models import ImageInput, SanitizedImage
from .protocols import ImageCodecProtocol


async def sanitize_image(image: ImageInput, codec: ImageCodecProtocol) -> SanitizedImage:
    """
    Strip embedded metadata from an image by decoding and re-encoding its pixels.

    Codec work runs in a worker thread, so decode and encode completion are
    suspension points for the event loop.

    Args:
        image: Validated input image
        codec: Codec performing the decode/encode

    Returns:
        SanitizedImage with the same declared type and a new timestamp

    Raises:
        DecodeError: If the bytes are not a decodable image
        EncodeError: If re-encoding yields no bytes
    """
    logger = get_logger("sanitizer")

    buffer = await asyncio.to_thread(codec.decode, image.data, image.content_type)
    logger.debug(f"[{image.name}] Decoded {buffer.size[0]}x{buffer.size[1]} {buffer.mode}")

    encoded = await asyncio.to_thread(codec.encode, buffer, image.content_type)

    logger.debug(f"[{image.name}] Re-encoded {image.size} -> {len(encoded)} bytes")
    return SanitizedImage(
        name=image.name,
        content_type=image.content_type,
        data=encoded,
        last_modified=datetime.now(timezone.utc),
    )
