"""Find the bounding box of non-transparent content in an RGBA buffer and crop to it.

Typical use is stripping the transparent safe zone around product shots:

    result = extract(PixelBuffer.from_array(rgba), stride=5)
    if result.cropped:
        save(result.buffer)

The scan only looks at every Nth pixel (the "inaccuracy"), so for N > 1 the box can
miss content that only lies on skipped pixels. Before scanning, the first and last pixel
are checked: if both are non-transparent the image is assumed to have no
padding and is returned as-is.
"""
import logging
import math
import operator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import reduce

import numpy as np

from .errors import InvalidImageError

logger = logging.getLogger(__name__)

# Default amount of skipped pixels while scanning the image
DEFAULT_INACCURACY_PX = 5

# Channels of each pixel: red, green, blue, alpha
AMOUNT_OF_CHANNELS = 4
ALPHA_CHANNEL = AMOUNT_OF_CHANNELS - 1

# Added to (max - min) to get the crop size. 0 reproduces the reference
# behaviour, which is one pixel short of the inclusive span; 1 would fix it.
CROP_SIZE_OFFSET = 0


def _as_uint8(channels):
    if isinstance(channels, (bytes, bytearray, memoryview)):
        return np.frombuffer(channels, dtype=np.uint8)
    return np.asarray(channels, dtype=np.uint8).reshape(-1)


@dataclass
class PixelBuffer:
    """Flat RGBA samples, row-major: [r0, g0, b0, a0, r1, g1, b1, a1, ...]."""
    width: int
    height: int
    channels: np.ndarray

    @classmethod
    def from_array(cls, rgba):
        """Wrap an (height, width, 4) array."""
        arr = np.ascontiguousarray(rgba, dtype=np.uint8)
        if arr.ndim != 3 or arr.shape[2] != AMOUNT_OF_CHANNELS:
            raise InvalidImageError(f'expected an (h, w, 4) RGBA array, got shape {arr.shape}')
        h, w = arr.shape[:2]
        return cls(w, h, arr.reshape(-1))

    def as_array(self):
        return _as_uint8(self.channels).reshape(self.height, self.width, AMOUNT_OF_CHANNELS)

    @property
    def alpha(self):
        return _as_uint8(self.channels)[ALPHA_CHANNEL::AMOUNT_OF_CHANNELS]


@dataclass
class ContentBounds:
    min_x: float = math.inf
    min_y: float = math.inf
    max_x: int = -1
    max_y: int = -1
    has_content: bool = False

    def merge(self, other):
        return ContentBounds(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
            self.has_content or other.has_content,
        )


@dataclass
class CropResult:
    buffer: PixelBuffer
    x: int
    y: int
    width: int
    height: int
    bounds: ContentBounds = None
    short_circuited: bool = False

    @property
    def cropped(self):
        return self.bounds is not None and self.bounds.has_content

    @property
    def has_content(self):
        return self.short_circuited or self.cropped

    @property
    def rect(self):
        return self.x, self.y, self.width, self.height


def validate_buffer(buffer):
    """Raise InvalidImageError unless buffer is a non-empty, consistent RGBA buffer."""
    if buffer is None:
        raise InvalidImageError('no image given')
    try:
        width = operator.index(getattr(buffer, 'width', None))
        height = operator.index(getattr(buffer, 'height', None))
    except TypeError:
        raise InvalidImageError('image width and height must be integers') from None
    if width <= 0 or height <= 0:
        raise InvalidImageError(f'image has no area: {width}x{height}')

    channels = getattr(buffer, 'channels', None)
    if channels is None:
        raise InvalidImageError('image has no pixel data')
    if isinstance(channels, (bytes, bytearray, memoryview)):
        samples = len(np.frombuffer(channels, dtype=np.uint8))
    else:
        try:
            values = np.asarray(channels)
        except ValueError:
            raise InvalidImageError('pixel data is not a flat sequence of samples') from None
        if values.dtype != np.uint8:
            if values.dtype.kind not in 'iu':
                raise InvalidImageError(f'pixel samples must be integers, got {values.dtype}')
            if values.size and (values.min() < 0 or values.max() > 255):
                raise InvalidImageError('pixel samples must be in the range 0-255')
        samples = values.size

    expected = width * height * AMOUNT_OF_CHANNELS
    if samples != expected:
        raise InvalidImageError(
            f'pixel data has {samples} samples, expected {expected} for {width}x{height} RGBA')


def clamp_stride(stride, total=None):
    # someone could try to mess with it
    stride = max(1, int(stride))
    # beyond the pixel count only pixel 0 is sampled either way
    if total is not None:
        stride = min(stride, max(1, total))
    return stride


def is_edge_opaque(buffer):
    """True if both the first and the last pixel have non-zero alpha."""
    alpha = buffer.alpha
    return bool(alpha[0] != 0 and alpha[-1] != 0)


def _scan_range(alpha, width, start, stop, stride):
    indices = np.arange(start, stop, stride)
    hits = indices[alpha[indices] != 0]
    if hits.size == 0:
        return ContentBounds()
    xs = hits % width
    ys = hits // width
    return ContentBounds(int(xs.min()), int(ys.min()), int(xs.max()), int(ys.max()), True)


def _partition(total, stride, workers):
    # Ranges start on the stride grid so the sampled pixels match a single pass.
    samples = -(-total // stride)
    per_worker = -(-samples // workers)
    step = per_worker * stride
    return [(start, min(start + step, total)) for start in range(0, total, step)]


def scan_bounds(buffer, stride=DEFAULT_INACCURACY_PX, workers=1):
    """Scan every `stride`-th pixel in raster order and collect the bounds of non-zero alpha.

    With workers > 1 the pixel range is split into stride-aligned chunks that
    are scanned in a thread pool and merged; the result is the same.
    """
    validate_buffer(buffer)
    total = buffer.width * buffer.height
    stride = clamp_stride(stride, total)
    alpha = buffer.alpha

    if workers <= 1:
        return _scan_range(alpha, buffer.width, 0, total, stride)

    ranges = _partition(total, stride, workers)
    with ThreadPoolExecutor(max_workers=workers) as executor:
        parts = executor.map(
            lambda r: _scan_range(alpha, buffer.width, r[0], r[1], stride), ranges)
        return reduce(ContentBounds.merge, parts, ContentBounds())


def crop_buffer(buffer, x, y, width, height):
    """New buffer of width x height holding the source translated by (-x, -y)."""
    out = np.zeros((height, width, AMOUNT_OF_CHANNELS), dtype=np.uint8)
    region = buffer.as_array()[y:y + height, x:x + width]
    out[:region.shape[0], :region.shape[1]] = region
    return PixelBuffer(width, height, out.reshape(-1))


def extract(buffer, stride=DEFAULT_INACCURACY_PX, workers=1):
    """Crop buffer to its non-transparent content.

    Returns a CropResult. Its buffer is the input object itself when both
    edge pixels are opaque or no sampled pixel has content, otherwise a new
    buffer. The input is never modified.

    Raises InvalidImageError for a missing or malformed buffer.
    """
    validate_buffer(buffer)
    w, h = buffer.width, buffer.height
    stride = clamp_stride(stride, w * h)

    if is_edge_opaque(buffer):
        logger.debug('Edge pixels opaque, nothing to crop (%dx%d)', w, h)
        return CropResult(buffer, 0, 0, w, h, short_circuited=True)

    bounds = scan_bounds(buffer, stride, workers)
    if not bounds.has_content:
        logger.debug('No content found at stride %d, keeping %dx%d', stride, w, h)
        return CropResult(buffer, 0, 0, w, h, bounds=bounds)

    crop_w = bounds.max_x - bounds.min_x + CROP_SIZE_OFFSET
    crop_h = bounds.max_y - bounds.min_y + CROP_SIZE_OFFSET
    cropped = crop_buffer(buffer, bounds.min_x, bounds.min_y, crop_w, crop_h)
    logger.debug('Cropped %dx%d -> %dx%d at (%d,%d)', w, h, crop_w, crop_h, bounds.min_x, bounds.min_y)
    return CropResult(cropped, bounds.min_x, bounds.min_y, crop_w, crop_h, bounds=bounds)
