"""Settings read from the environment."""
import os
from pathlib import Path

from .bounds import DEFAULT_INACCURACY_PX

DEFAULT_TIMEOUT = 30


def get_inaccuracy(value=None):
    """Stride from the command line, else ALPHA_CROP_INACCURACY, else the default."""
    if value is None:
        value = os.environ.get('ALPHA_CROP_INACCURACY', DEFAULT_INACCURACY_PX)
    return int(value)


def get_timeout():
    return float(os.environ.get('ALPHA_CROP_TIMEOUT', DEFAULT_TIMEOUT))


def get_log_dir():
    log_dir = os.environ.get('ALPHA_CROP_LOG_DIR')
    return Path(log_dir) if log_dir else None
