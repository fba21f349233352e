"""Tests for image_utils.py utility functions."""

import base64
import io

import pytest
from PIL import Image

from blossom_pipeline.core.exceptions import DecodeError, EncodeError
from blossom_pipeline.core.image_utils import (
    PillowImageCodec,
    guess_content_type,
    read_image_file,
    to_data_url,
)
from blossom_pipeline.core.protocols import PixelBuffer
from blossom_pipeline.testing.fakes import create_test_image


def _open(data: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


class TestPillowImageCodecDecode:
    """Tests for PillowImageCodec.decode."""

    def test_decode_rgb_jpeg(self):
        """Test decoding a JPEG yields an RGB buffer of the right size."""
        buffer = PillowImageCodec().decode(create_test_image(40, 30), "image/jpeg")
        assert buffer.mode == "RGB"
        assert buffer.size == (40, 30)
        assert len(buffer.pixels) == 40 * 30 * 3

    def test_decode_keeps_alpha(self):
        """Test that PNG transparency survives decoding."""
        data = create_test_image(20, 20, content_type="image/png", mode="RGBA")
        buffer = PillowImageCodec().decode(data, "image/png")
        assert buffer.mode == "RGBA"

    def test_decode_applies_exif_orientation(self):
        """Test that orientation 6 (rotate 90 CW) is applied to the pixels."""
        data = create_test_image(40, 20, orientation=6)
        buffer = PillowImageCodec().decode(data, "image/jpeg")
        assert buffer.size == (20, 40)

    def test_decode_invalid_bytes(self):
        """Test that garbage bytes raise DecodeError."""
        with pytest.raises(DecodeError):
            PillowImageCodec().decode(b"not an image", "image/jpeg")


class TestPillowImageCodecEncode:
    """Tests for PillowImageCodec.encode."""

    @pytest.mark.parametrize(
        "content_type, pil_format",
        [("image/jpeg", "JPEG"), ("image/png", "PNG"), ("image/webp", "WEBP")],
    )
    def test_encode_keeps_declared_type(self, content_type, pil_format):
        """Test that the output format matches the declared type."""
        codec = PillowImageCodec()
        buffer = codec.decode(create_test_image(16, 16, content_type=content_type), content_type)
        encoded = codec.encode(buffer, content_type)
        assert _open(encoded).format == pil_format

    def test_encode_flattens_alpha_for_jpeg(self):
        """Test that an RGBA buffer encodes to an RGB JPEG."""
        buffer = PixelBuffer(mode="RGBA", size=(2, 2), pixels=b"\x00\x00\xff\x80" * 4)
        encoded = PillowImageCodec().encode(buffer, "image/jpeg")
        assert _open(encoded).mode == "RGB"

    def test_encode_unsupported_type(self):
        """Test that an unknown media type raises EncodeError."""
        buffer = PixelBuffer(mode="RGB", size=(1, 1), pixels=b"\x00\x00\x00")
        with pytest.raises(EncodeError, match="Unsupported media type"):
            PillowImageCodec().encode(buffer, "image/gif")

    def test_encode_bad_buffer(self):
        """Test that a truncated pixel buffer raises EncodeError."""
        buffer = PixelBuffer(mode="RGB", size=(10, 10), pixels=b"\x00")
        with pytest.raises(EncodeError):
            PillowImageCodec().encode(buffer, "image/png")


class TestMetadataStripping:
    """Tests that a decode/encode round trip removes metadata."""

    def test_exif_removed_from_jpeg(self):
        """Test that camera and GPS EXIF do not survive."""
        data = create_test_image(32, 32, with_exif=True)
        assert len(_open(data).getexif()) > 0

        codec = PillowImageCodec()
        cleaned = codec.encode(codec.decode(data, "image/jpeg"), "image/jpeg")

        result = _open(cleaned)
        assert len(result.getexif()) == 0
        assert "exif" not in result.info

    def test_exif_removed_from_webp(self):
        """Test that WebP EXIF does not survive."""
        data = create_test_image(32, 32, content_type="image/webp", with_exif=True)
        codec = PillowImageCodec()
        cleaned = codec.encode(codec.decode(data, "image/webp"), "image/webp")
        assert "exif" not in _open(cleaned).info


class TestHelpers:
    """Tests for the small helper functions."""

    def test_to_data_url(self):
        """Test data URL encoding."""
        url = to_data_url(b"abc", "image/png")
        assert url == "data:image/png;base64," + base64.b64encode(b"abc").decode("ascii")

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("photo.jpg", "image/jpeg"),
            ("PHOTO.JPEG", "image/jpeg"),
            ("diagram.png", "image/png"),
            ("clip.webp", "image/webp"),
            ("anim.gif", "image/gif"),
            ("noext", "application/octet-stream"),
        ],
    )
    def test_guess_content_type(self, path, expected):
        """Test media type guessing from the extension."""
        assert guess_content_type(path) == expected

    def test_read_image_file(self, tmp_path):
        """Test reading a file into an ImageInput."""
        data = create_test_image(10, 10, content_type="image/png")
        path = tmp_path / "tiny.png"
        path.write_bytes(data)

        image = read_image_file(path)

        assert image.name == "tiny.png"
        assert image.content_type == "image/png"
        assert image.data == data
        assert image.size == len(data)
