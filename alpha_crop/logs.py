"""Logger setup shared by the command-line scripts.

INFO and above go to stderr. If ALPHA_CROP_LOG_DIR is set, everything from
DEBUG up is also written to a timestamped file in that directory.
"""
import logging
import sys
from datetime import datetime
from pathlib import Path

from .config import get_log_dir


def setup_logging(name, log_dir=None):
    """Attach handlers to the `alpha_crop` logger; returns the log file path or None."""
    logger = logging.getLogger('alpha_crop')
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(logging.INFO)
    sh.setFormatter(logging.Formatter('%(message)s'))
    logger.addHandler(sh)

    if log_dir is None:
        log_dir = get_log_dir()
    if log_dir is None:
        return None

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / datetime.now().strftime(f'{name}_%Y%m%d_%H%M%S.log')
    fh = logging.FileHandler(log_path, encoding='utf-8')
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter('%(asctime)s [%(levelname)s] %(message)s'))
    logger.addHandler(fh)
    return log_path
