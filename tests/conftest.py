import logging

import numpy as np
import pytest

from alpha_crop.bounds import PixelBuffer


def transparent(width, height):
    return np.zeros((height, width, 4), dtype=np.uint8)


def opaque(width, height):
    img = np.zeros((height, width, 4), dtype=np.uint8)
    img[..., :3] = 128
    img[..., 3] = 255
    return img


def quadrant_image():
    """20x20, opaque where x >= 10 and y >= 10, each pixel coloured by its position."""
    img = transparent(20, 20)
    ys, xs = np.mgrid[0:20, 0:20]
    img[..., 0] = xs * 10
    img[..., 1] = ys * 10
    img[10:, 10:, 3] = 255
    return img


@pytest.fixture
def make_buffer():
    return PixelBuffer.from_array


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger = logging.getLogger('alpha_crop')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
