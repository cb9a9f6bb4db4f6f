import base64
import io
import urllib.error
import urllib.request

import cv2
import numpy as np
import pytest

from alpha_crop.bounds import PixelBuffer
from alpha_crop.errors import ImageLoadError, ImageWriteError, InvalidImageError
from alpha_crop.image_io import (
    decode_rgba,
    encode_png,
    load_image,
    load_rgba,
    load_rgba_url,
    save_rgba,
    to_data_url,
)
from conftest import quadrant_image


class FakeResponse(io.BytesIO):
    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def test_png_file_keeps_rgba_order(tmp_path, make_buffer):
    img = quadrant_image()
    img[0, 0] = (200, 10, 20, 0)
    path = tmp_path / 'car.png'
    save_rgba(make_buffer(img), path)

    loaded = load_rgba(path)
    assert (loaded.width, loaded.height) == (20, 20)
    np.testing.assert_array_equal(loaded.as_array(), img)


def test_missing_file(tmp_path):
    with pytest.raises(ImageLoadError):
        load_rgba(tmp_path / 'nope.png')


def test_decode_garbage():
    with pytest.raises(ImageLoadError):
        decode_rgba(b'not an image')
    with pytest.raises(ImageLoadError):
        decode_rgba(b'')


def test_decode_bgr_gets_opaque_alpha():
    bgr = np.zeros((3, 5, 3), dtype=np.uint8)
    bgr[..., 0] = 255
    ok, data = cv2.imencode('.png', bgr)
    assert ok
    buf = decode_rgba(data.tobytes())
    arr = buf.as_array()
    assert arr.shape == (3, 5, 4)
    assert arr[0, 0].tolist() == [0, 0, 255, 255]


def test_decode_grayscale():
    gray = np.full((4, 2), 77, dtype=np.uint8)
    ok, data = cv2.imencode('.png', gray)
    assert ok
    arr = decode_rgba(data.tobytes()).as_array()
    assert arr[1, 1].tolist() == [77, 77, 77, 255]


def test_data_url_round_trip(make_buffer):
    img = quadrant_image()
    url = to_data_url(make_buffer(img))
    assert url.startswith('data:image/png;base64,')
    np.testing.assert_array_equal(load_rgba_url(url).as_array(), img)
    np.testing.assert_array_equal(load_image(url).as_array(), img)


def test_encode_png_signature(make_buffer):
    data = encode_png(make_buffer(quadrant_image()))
    assert data[:8] == b'\x89PNG\r\n\x1a\n'


def test_empty_buffer_cannot_be_encoded(tmp_path):
    empty = PixelBuffer(0, 0, np.zeros(0, dtype=np.uint8))
    with pytest.raises(InvalidImageError):
        encode_png(empty)
    with pytest.raises(InvalidImageError):
        save_rgba(empty, tmp_path / 'empty.png')


def test_unwritable_path(tmp_path, make_buffer):
    with pytest.raises(ImageWriteError):
        save_rgba(make_buffer(quadrant_image()), tmp_path / 'out.unknownext')


def test_http_url(monkeypatch, make_buffer):
    img = quadrant_image()
    png = encode_png(make_buffer(img))
    calls = []

    def fake_urlopen(url, timeout):
        calls.append((url, timeout))
        return FakeResponse(png)

    monkeypatch.setenv('ALPHA_CROP_TIMEOUT', '4')
    monkeypatch.setattr(urllib.request, 'urlopen', fake_urlopen)
    buf = load_image('https://cdn.example.com/car.png')
    np.testing.assert_array_equal(buf.as_array(), img)
    assert calls == [('https://cdn.example.com/car.png', 4.0)]


def test_http_failure(monkeypatch):
    def fake_urlopen(url, timeout):
        raise urllib.error.URLError('connection refused')

    monkeypatch.setattr(urllib.request, 'urlopen', fake_urlopen)
    with pytest.raises(ImageLoadError):
        load_rgba_url('http://cdn.example.com/car.png')


def test_malformed_data_url():
    with pytest.raises(ImageLoadError):
        load_rgba_url('data:image/png;base64')
    bad = 'data:image/png;base64,' + base64.b64encode(b'junk').decode()
    with pytest.raises(ImageLoadError):
        load_rgba_url(bad)


@pytest.mark.parametrize('width, height', [(0, 0), (5, 0), (0, 3)])
def test_zero_area_data_url_is_empty(width, height):
    empty = PixelBuffer(width, height, np.zeros(0, dtype=np.uint8))
    assert to_data_url(empty) == 'data:,'
