"""Detect the bounds of non-transparent content in an RGBA image.

Usage: python -m alpha_crop.detect_alpha_bounds input.png [inaccuracy]
  Outputs JSON: {"x":0,"y":0,"w":100,"h":100} (pixel coordinates)
"""
import json
import logging
import sys

from .bounds import extract
from .config import get_inaccuracy
from .errors import AlphaCropError
from .image_io import load_image
from .logs import setup_logging

logger = logging.getLogger(__name__)


def detect_bounds(input_path, inaccuracy=None):
    buffer = load_image(input_path)
    result = extract(buffer, get_inaccuracy(inaccuracy))
    return {'x': result.x, 'y': result.y, 'w': result.width, 'h': result.height}


def main(input_path, inaccuracy=None):
    setup_logging('detect_alpha_bounds')
    try:
        bounds = detect_bounds(input_path, inaccuracy)
    except AlphaCropError as e:
        logger.error('ERROR: %s', e)
        sys.exit(1)
    print(json.dumps(bounds))


def cli():
    if len(sys.argv) < 2:
        print('Usage: python -m alpha_crop.detect_alpha_bounds <input> [inaccuracy]', file=sys.stderr)
        sys.exit(1)
    inaccuracy = sys.argv[2] if len(sys.argv) > 2 else None
    main(sys.argv[1], inaccuracy)


if __name__ == '__main__':
    cli()
