"""Crop an image fetched from a URL (or a local path) and print it as a PNG data: URL.

Usage: python -m alpha_crop.crop_url https://example.com/car.png [inaccuracy]

If the image cannot be cropped (edges already opaque, or fully transparent)
the data URL of the unchanged image is printed. Content on a single row or
column crops to nothing and prints the empty data URL `data:,`.
"""
import logging
import sys

from .bounds import extract
from .config import get_inaccuracy
from .errors import AlphaCropError
from .image_io import load_image, to_data_url
from .logs import setup_logging

logger = logging.getLogger(__name__)


def get_cropped_image_url(url, inaccuracy=None):
    buffer = load_image(url)
    result = extract(buffer, get_inaccuracy(inaccuracy))
    logger.debug('Crop of %s: %s (cropped=%s)', url, result.rect, result.cropped)
    return to_data_url(result.buffer)


def main(url, inaccuracy=None):
    setup_logging('crop_url')
    try:
        data_url = get_cropped_image_url(url, inaccuracy)
    except AlphaCropError as e:
        logger.error('ERROR: %s', e)
        sys.exit(1)
    print(data_url)


def cli():
    if len(sys.argv) < 2:
        print('Usage: python -m alpha_crop.crop_url <url> [inaccuracy]', file=sys.stderr)
        sys.exit(1)
    inaccuracy = sys.argv[2] if len(sys.argv) > 2 else None
    main(sys.argv[1], inaccuracy)


if __name__ == '__main__':
    cli()
