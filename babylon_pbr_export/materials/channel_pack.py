"""Merge channels of several source images into one packed RGBA image."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
from PIL import Image

from ..core.errors import ChannelPackError
from ..core.logging import ExportLogger
from .texture_source import image_extension

CHANNEL_COUNT = 4  # R, G, B, A

_LOSSY_FORMATS = frozenset({"jpg", "jpeg"})


@dataclass
class ChannelPackRequest:
    """
    Describes one N-source -> 1-destination channel merge.

    mapping[c] = (slot, channel) reads destination channel c from channel
    `channel` of sources[slot]; when that source is None the channel is
    filled with defaults[c] (0..1, scaled to 0..255).
    """
    sources: Sequence[Optional[str]]
    defaults: Sequence[float]
    mapping: Sequence[Tuple[int, int]]
    destination: str = ""
    label: str = "Channel"

    def __post_init__(self):
        if len(self.sources) > CHANNEL_COUNT:
            raise ValueError(f"At most {CHANNEL_COUNT} source images can be merged")
        if len(self.defaults) != CHANNEL_COUNT or len(self.mapping) != CHANNEL_COUNT:
            raise ValueError(f"Expected {CHANNEL_COUNT} defaults and channel mappings")
        for slot, channel in self.mapping:
            if not 0 <= slot < CHANNEL_COUNT or not 0 <= channel < CHANNEL_COUNT:
                raise ValueError(f"Invalid channel mapping ({slot}, {channel})")

    @property
    def slots(self) -> List[Optional[str]]:
        return list(self.sources) + [None] * (CHANNEL_COUNT - len(self.sources))


def default_channel_value(value: float) -> int:
    return int(round(min(max(value, 0.0), 1.0) * 255))


def load_image(path: str) -> np.ndarray:
    """Decode an image file into a (height, width, 4) uint8 array."""
    try:
        with Image.open(path) as img:
            return np.array(img.convert("RGBA"), dtype=np.uint8)
    except (OSError, ValueError, Image.DecompressionBombError, MemoryError) as e:
        raise ChannelPackError(f"Failed to load '{path}' for merging: {e}") from e


def resolve_size(images: Sequence[Optional[np.ndarray]]) -> Tuple[int, int]:
    """Common (width, height) of the loaded images; all must be square and equal."""
    size = None
    for pixels in images:
        if pixels is None:
            continue
        height, width = pixels.shape[:2]
        if width != height:
            raise ChannelPackError(f"Image of {width}x{height} is not square and cannot be merged")
        if size is None:
            size = (width, height)
        elif size != (width, height):
            raise ChannelPackError(
                f"Image dimensions {width}x{height} and {size[0]}x{size[1]} are not equal "
                f"and cannot be merged")
    if size is None or size[0] == 0:
        raise ChannelPackError("No source image to merge")
    return size


def merge_channels(request: ChannelPackRequest) -> np.ndarray:
    """Build the packed pixels of a request. Raises ChannelPackError."""
    images = [load_image(path) if path else None for path in request.slots]
    width, height = resolve_size(images)

    merged = np.empty((height, width, CHANNEL_COUNT), dtype=np.uint8)
    for dst, (slot, channel) in enumerate(request.mapping):
        source = images[slot]
        if source is not None:
            merged[..., dst] = source[..., channel]
        else:
            merged[..., dst] = default_channel_value(request.defaults[dst])
    return merged


def save_packed_image(pixels: np.ndarray, path: str, quality: int) -> None:
    """Encode packed pixels to `path`; the format follows the extension."""
    image = Image.fromarray(pixels)
    try:
        if image_extension(path).lower() in _LOSSY_FORMATS:
            image.convert("RGB").save(path, quality=quality)
        else:
            image.save(path)
    except (OSError, ValueError) as e:
        raise ChannelPackError(f"Failed to encode and save merged image to '{path}': {e}") from e


def pack(request: ChannelPackRequest, quality: int, log: ExportLogger) -> Optional[np.ndarray]:
    """
    Merge, then persist the result at request.destination.

    Returns the packed pixels, or None after reporting an error. Nothing is
    written unless every source loaded and validated.
    """
    log.verbose(f"{request.label} merge -> {os.path.basename(request.destination)}", 3)
    try:
        pixels = merge_channels(request)
        save_packed_image(pixels, request.destination, quality)
    except ChannelPackError as e:
        log.error(str(e), 3)
        return None

    log.message(f"Write merged image '{request.destination}'", 3)
    return pixels
