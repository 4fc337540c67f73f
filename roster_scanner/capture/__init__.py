"""Capture package for image decoding and roster slicing."""

from .decode import decode_image, encode_png, load_image, to_data_url
from .slicer import RosterSlicer, roster_slicer

__all__ = [
    "decode_image",
    "load_image",
    "encode_png",
    "to_data_url",
    "RosterSlicer",
    "roster_slicer",
]
