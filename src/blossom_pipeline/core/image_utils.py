"""Image utilities for the blossom pipeline."""

import base64
import io
import mimetypes
from pathlib import Path
from typing import Any, Dict, Union

from PIL import Image, ImageOps

from .error_handling import with_error_handling
from .exceptions import DecodeError, EncodeError
from .models import ImageInput
from .protocols import PixelBuffer

# Media type -> Pillow format name
PIL_FORMATS: Dict[str, str] = {
    "image/jpeg": "JPEG",
    "image/png": "PNG",
    "image/webp": "WEBP",
}

# Encoder options mirror what a browser canvas produces by default.
SAVE_OPTIONS: Dict[str, Dict[str, Any]] = {
    "JPEG": {"quality": 92},
    "PNG": {},
    "WEBP": {"quality": 80},
}

_EXTENSION_TYPES: Dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
}

_ALPHA_MODES = frozenset({"RGBA", "RGBa", "LA", "La", "PA"})


def _has_alpha(img: "Image.Image") -> bool:
    return img.mode in _ALPHA_MODES or "transparency" in img.info


class PillowImageCodec:
    """Image codec backed by Pillow.

    Decoding keeps nothing but the pixels: EXIF orientation is applied first,
    then the image is flattened to RGB or RGBA raw bytes. Encoding builds a
    fresh image from those bytes, so no metadata can survive the round trip.
    """

    @with_error_handling(DecodeError)
    def decode(self, data: bytes, declared_type: str) -> PixelBuffer:
        with Image.open(io.BytesIO(data)) as source:
            source.load()
            upright = ImageOps.exif_transpose(source)
            try:
                mode = "RGBA" if _has_alpha(upright) else "RGB"
                if upright.mode == mode:
                    pixels = upright.tobytes()
                else:
                    with upright.convert(mode) as converted:
                        pixels = converted.tobytes()
                return PixelBuffer(mode=mode, size=upright.size, pixels=pixels)
            finally:
                if upright is not source:
                    upright.close()

    @with_error_handling(EncodeError)
    def encode(self, buffer: PixelBuffer, declared_type: str) -> bytes:
        format_type = PIL_FORMATS.get(declared_type)
        if format_type is None:
            raise EncodeError(f"Unsupported media type for encoding: {declared_type}")

        image = Image.frombytes(buffer.mode, buffer.size, buffer.pixels)
        try:
            if format_type == "JPEG" and image.mode != "RGB":
                # JPEG has no alpha channel
                rgb = image.convert("RGB")
                image.close()
                image = rgb
            output_stream = io.BytesIO()
            image.save(output_stream, format=format_type, **SAVE_OPTIONS[format_type])
        finally:
            image.close()

        encoded = output_stream.getvalue()
        if not encoded:
            raise EncodeError(f"Encoding to {declared_type} produced no output")
        return encoded


def to_data_url(data: bytes, content_type: str) -> str:
    """Encode bytes as a base64 data URL."""
    return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"


def guess_content_type(path: Union[str, Path]) -> str:
    """Guess the declared media type of a file from its extension."""
    suffix = Path(path).suffix.lower()
    if suffix in _EXTENSION_TYPES:
        return _EXTENSION_TYPES[suffix]
    mime_type, _ = mimetypes.guess_type(str(path))
    return mime_type or "application/octet-stream"


def read_image_file(path: Union[str, Path]) -> ImageInput:
    """
    Read a local file into an ImageInput.

    Args:
        path: File to read

    Returns:
        ImageInput with the declared type guessed from the extension
    """
    file_path = Path(path)
    data = file_path.read_bytes()
    return ImageInput(
        name=file_path.name,
        content_type=guess_content_type(file_path),
        data=data,
        size=len(data),
    )
