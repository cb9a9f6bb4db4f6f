"""Read images into RGBA pixel buffers and write buffers back out.

Sources: local path, http(s) URL, data: URL or raw encoded bytes.
Sinks: image file, PNG bytes, PNG data: URL.
"""
import base64
import io
import urllib.error
import urllib.request

import cv2
import numpy as np
from PIL import Image

from .bounds import PixelBuffer
from .config import get_timeout
from .errors import ImageLoadError, ImageWriteError, InvalidImageError

EMPTY_DATA_URL = 'data:,'


def _to_rgba(img):
    if img.dtype == np.uint16:
        img = (img >> 8).astype(np.uint8)
    elif img.dtype != np.uint8:
        raise ImageLoadError(f'unsupported sample type {img.dtype}')

    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    channels = img.shape[2]
    if channels == 1:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    if channels == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)
    if channels == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    raise ImageLoadError(f'unsupported channel count {channels}')


def decode_rgba(data):
    """Decode encoded image bytes (PNG, WebP, ...) into a PixelBuffer."""
    arr = np.frombuffer(data, dtype=np.uint8)
    img = cv2.imdecode(arr, cv2.IMREAD_UNCHANGED) if arr.size else None
    if img is None:
        raise ImageLoadError('Cannot decode image data')
    return PixelBuffer.from_array(_to_rgba(img))


def load_rgba(input_path):
    img = cv2.imread(str(input_path), cv2.IMREAD_UNCHANGED)
    if img is None:
        raise ImageLoadError(f'Cannot read image {input_path}')
    return PixelBuffer.from_array(_to_rgba(img))


def load_rgba_url(url, timeout=None):
    """Fetch an http(s) or data: URL and decode it."""
    if url.startswith('data:'):
        try:
            header, payload = url.split(',', 1)
            data = base64.b64decode(payload) if header.endswith(';base64') else payload.encode('latin-1')
        except ValueError as e:
            raise ImageLoadError(f'Malformed data URL: {e}') from e
        return decode_rgba(data)

    if timeout is None:
        timeout = get_timeout()
    try:
        with urllib.request.urlopen(url, timeout=timeout) as resp:
            data = resp.read()
    except (urllib.error.URLError, OSError, ValueError) as e:
        raise ImageLoadError(f'could not load given image {url}: {e}') from e
    return decode_rgba(data)


def load_image(source):
    """Load from a URL (http, https, data) or a local path."""
    source = str(source)
    if source.startswith(('http://', 'https://', 'data:')):
        return load_rgba_url(source)
    return load_rgba(source)


def _check_encodable(buffer):
    if buffer.width <= 0 or buffer.height <= 0:
        raise InvalidImageError(f'cannot encode an empty {buffer.width}x{buffer.height} image')


def save_rgba(buffer, output_path):
    _check_encodable(buffer)
    bgra = cv2.cvtColor(buffer.as_array(), cv2.COLOR_RGBA2BGRA)
    try:
        ok = cv2.imwrite(str(output_path), bgra)
    except cv2.error as e:
        raise ImageWriteError(f'Cannot write image {output_path}: {e}') from e
    if not ok:
        raise ImageWriteError(f'Cannot write image {output_path}')


def encode_png(buffer):
    _check_encodable(buffer)
    out = io.BytesIO()
    Image.fromarray(buffer.as_array()).save(out, format='PNG')
    return out.getvalue()


def to_data_url(buffer):
    """PNG data: URL, or the empty data URL `data:,` for a zero-area buffer."""
    if buffer.width <= 0 or buffer.height <= 0:
        return EMPTY_DATA_URL
    b64 = base64.standard_b64encode(encode_png(buffer)).decode('utf-8')
    return f'data:image/png;base64,{b64}'
