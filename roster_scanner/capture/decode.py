"""Image acquisition: data URLs, raw bytes and files to RGBA buffers."""

import base64
import binascii
from pathlib import Path
from typing import Union

import cv2
import numpy as np

from ..core.types import ImageBuffer
from ..utils.error_handler import DecodeError


def strip_data_url(payload: str) -> str:
    """Drop a ``data:image/<fmt>;base64,`` prefix, up to and including the first comma."""
    comma = payload.find(",")
    return payload[comma + 1:] if comma >= 0 else payload


def from_cv2(image: np.ndarray) -> ImageBuffer:
    """Convert an OpenCV image (gray, BGR or BGRA) into an RGBA buffer."""
    if image.dtype == np.uint16:
        image = (image // 257).astype(np.uint8)
    elif image.dtype != np.uint8:
        image = cv2.convertScaleAbs(image)

    if image.ndim == 2:
        rgba = cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    elif image.shape[2] == 3:
        rgba = cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    elif image.shape[2] == 4:
        rgba = cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    else:
        raise DecodeError(
            "Unsupported channel count",
            details={"shape": list(image.shape)}
        )
    return ImageBuffer(rgba)


def to_bgr(image: ImageBuffer) -> np.ndarray:
    """Return an OpenCV-ordered BGR copy of the buffer."""
    return cv2.cvtColor(image.pixels, cv2.COLOR_RGBA2BGR)


def decode_image(payload: Union[str, bytes, bytearray, memoryview]) -> ImageBuffer:
    """
    Decode a base64 data URL (or bare base64 string) or raw encoded bytes.

    Raises:
        DecodeError: If the payload is not valid base64 or not a decodable image
    """
    if isinstance(payload, str):
        try:
            # MIME-wrapped base64 carries line breaks
            data = base64.b64decode("".join(strip_data_url(payload).split()), validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError("Invalid base64 image payload", details={"error": str(e)})
    else:
        data = bytes(payload)

    if not data:
        raise DecodeError("Empty image payload")

    image = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise DecodeError("Could not decode image", details={"size_bytes": len(data)})

    return from_cv2(image)


def load_image(path: Union[str, Path]) -> ImageBuffer:
    """Read and decode an image file."""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise DecodeError(f"Could not read image at: {path}", details={"error": str(e)})
    return decode_image(data)


def encode_png(image: ImageBuffer) -> bytes:
    ok, encoded = cv2.imencode(".png", cv2.cvtColor(image.pixels, cv2.COLOR_RGBA2BGRA))
    if not ok:
        raise DecodeError("PNG encoding failed", details={"size": [image.width, image.height]})
    return encoded.tobytes()


def to_data_url(image: ImageBuffer) -> str:
    """Encode a buffer as a ``data:image/png;base64,`` URL."""
    return "data:image/png;base64," + base64.b64encode(encode_png(image)).decode("ascii")
