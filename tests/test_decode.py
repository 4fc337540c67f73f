"""Tests for image decoding into RGBA buffers."""

import base64

import cv2
import numpy as np
import pytest

from conftest import portrait
from roster_scanner.capture.decode import (
    decode_image,
    encode_png,
    from_cv2,
    load_image,
    strip_data_url,
    to_data_url,
)
from roster_scanner.core.types import ImageBuffer
from roster_scanner.utils.error_handler import DecodeError


class TestStripDataUrl:

    def test_strips_prefix(self):
        assert strip_data_url("data:image/png;base64,AAAA") == "AAAA"

    def test_bare_payload_unchanged(self):
        assert strip_data_url("AAAA") == "AAAA"


class TestDecodeImage:

    def test_data_url_preserves_pixels(self):
        image = portrait(9)

        decoded = decode_image(to_data_url(image))

        assert to_data_url(image).startswith("data:image/png;base64,")
        assert np.array_equal(decoded.pixels, image.pixels)

    def test_bare_base64(self):
        payload = base64.b64encode(encode_png(portrait(9))).decode("ascii")

        assert decode_image(payload).width == 64

    def test_raw_bytes(self):
        assert decode_image(encode_png(portrait(9))).height == 64

    def test_bgr_is_reordered(self):
        bgr = np.zeros((4, 4, 3), dtype=np.uint8)
        bgr[:, :] = (255, 0, 0)
        ok, encoded = cv2.imencode(".png", bgr)
        assert ok

        decoded = decode_image(encoded.tobytes())

        assert tuple(decoded.pixels[0, 0]) == (0, 0, 255, 255)

    @pytest.mark.parametrize("payload", [
        "data:image/png;base64,!!!not-base64!!!",
        base64.b64encode(b"definitely not an image").decode("ascii"),
        b"",
        b"\x89PNG truncated",
    ])
    def test_invalid_payloads(self, payload):
        with pytest.raises(DecodeError):
            decode_image(payload)

    def test_mime_wrapped_base64(self):
        wrapped = base64.encodebytes(encode_png(portrait(9))).decode("ascii")

        assert "\n" in wrapped.strip()
        assert decode_image("data:image/png;base64," + wrapped).width == 64

    def test_decoded_buffer_is_read_only(self):
        decoded = decode_image(encode_png(portrait(9)))

        with pytest.raises(ValueError):
            decoded.pixels[0, 0, 0] = 1


class TestFromCv2:

    def test_grayscale(self):
        gray = np.full((3, 5), 77, dtype=np.uint8)

        image = from_cv2(gray)

        assert (image.width, image.height) == (5, 3)
        assert tuple(image.pixels[1, 1]) == (77, 77, 77, 255)

    def test_sixteen_bit(self):
        deep = np.full((2, 2, 3), 65535, dtype=np.uint16)

        assert tuple(from_cv2(deep).pixels[0, 0]) == (255, 255, 255, 255)

    def test_unsupported_channels(self):
        with pytest.raises(DecodeError):
            from_cv2(np.zeros((2, 2, 2), dtype=np.uint8))


class TestLoadImage:

    def test_load_image(self, tmp_path):
        path = tmp_path / "card.png"
        path.write_bytes(encode_png(portrait(9)))

        assert isinstance(load_image(path), ImageBuffer)

    def test_missing_file(self, tmp_path):
        with pytest.raises(DecodeError):
            load_image(tmp_path / "missing.png")


class TestImageBuffer:

    def test_source_array_is_copied(self):
        source = np.zeros((10, 10, 4), dtype=np.uint8)
        image = ImageBuffer(source)

        source[0, 0, 0] = 255

        assert image.pixels[0, 0, 0] == 0
        assert not np.shares_memory(image.pixels, source)

    def test_crop_is_independent(self):
        image = portrait(9)

        card = image.crop(8, 8, 16, 16)

        assert (card.width, card.height) == (16, 16)
        assert not card.pixels.flags.writeable
        assert np.array_equal(card.pixels, image.pixels[8:24, 8:24])
