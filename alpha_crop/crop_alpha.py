"""Crop an RGBA image to its non-transparent content (removes transparent safe zones).

Usage: python -m alpha_crop.crop_alpha input.png output.png [inaccuracy]
  inaccuracy: scan every Nth pixel (default: 5, or ALPHA_CROP_INACCURACY).
              1 = exact, higher = faster but may miss thin edges.
"""
import logging
import sys

from .bounds import extract
from .config import get_inaccuracy
from .errors import AlphaCropError
from .image_io import load_image, save_rgba
from .logs import setup_logging

logger = logging.getLogger(__name__)


def crop_image_file(input_path, output_path, inaccuracy=None):
    """Load input_path, crop it and write the result to output_path. Returns the CropResult.

    A crop with no area (content on a single row or column) writes the input unchanged.
    """
    inaccuracy = get_inaccuracy(inaccuracy)
    buffer = load_image(input_path)
    logger.info('Image: %dx%d | Inaccuracy: %d', buffer.width, buffer.height, inaccuracy)

    result = extract(buffer, inaccuracy)
    if result.short_circuited:
        logger.info('Edges not transparent, nothing to crop')
    elif not result.has_content:
        logger.info('No visible content found, copying input')
    elif result.width <= 0 or result.height <= 0:
        # a one-row or one-column crop has no area, keep the input instead
        logger.info('Content is a single row or column (%dx%d at (%d,%d)), copying input',
                    result.width, result.height, result.x, result.y)
        save_rgba(buffer, output_path)
        return result
    else:
        logger.info('Cropped to %dx%d at (%d,%d)', result.width, result.height, result.x, result.y)

    save_rgba(result.buffer, output_path)
    return result


def main(input_path, output_path, inaccuracy=None):
    setup_logging('crop_alpha')
    try:
        crop_image_file(input_path, output_path, inaccuracy)
    except AlphaCropError as e:
        logger.error('ERROR: %s', e)
        sys.exit(1)
    print(f'OK {output_path}')


def cli():
    if len(sys.argv) < 3:
        print('Usage: python -m alpha_crop.crop_alpha <input> <output> [inaccuracy]', file=sys.stderr)
        sys.exit(1)
    inaccuracy = sys.argv[3] if len(sys.argv) > 3 else None
    main(sys.argv[1], sys.argv[2], inaccuracy)


if __name__ == '__main__':
    cli()
